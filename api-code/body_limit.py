from __future__ import annotations

import logging

from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send


logger = logging.getLogger("lm-relay.http")


class RequestBodyTooLarge(Exception):
    """Raised from the wrapped ``receive`` once the body passes the limit."""


class BodySizeLimitMiddleware:
    """Answer 413 for request bodies larger than ``max_body_bytes``.

    A declared Content-Length is checked up front. Chunked bodies are counted
    as they are received; once the limit is passed, whatever response the app
    produces for the aborted read is replaced by the 413, provided no response
    has been started yet.
    """

    def __init__(self, app: ASGIApp, max_body_bytes: int) -> None:
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = _content_length(scope)
        if declared is not None and declared > self.max_body_bytes:
            self._log_rejection(scope, declared)
            await self._reject(scope, receive, send)
            return

        received = 0
        exceeded = False
        response_started = False

        async def limited_receive() -> Message:
            nonlocal received, exceeded
            message = await receive()
            if message["type"] == "http.request" and not response_started:
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    exceeded = True
                    raise RequestBodyTooLarge()
            return message

        async def guarded_send(message: Message) -> None:
            nonlocal response_started
            if exceeded and not response_started:
                return
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, guarded_send)
        except Exception:
            if not exceeded or response_started:
                raise

        if exceeded and not response_started:
            self._log_rejection(scope, received)
            await self._reject(scope, receive, send)

    def _log_rejection(self, scope: Scope, size: int) -> None:
        logger.warning(
            "Rejected %s %s: body of at least %d bytes exceeds limit of %d",
            scope.get("method"),
            scope.get("path"),
            size,
            self.max_body_bytes,
        )

    async def _reject(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = JSONResponse(
            status_code=413,
            content={"message": f"Request body exceeds {self.max_body_bytes} bytes."},
        )
        await response(scope, receive, send)


def _content_length(scope: Scope) -> int | None:
    for name, value in scope.get("headers", []):
        if name == b"content-length":
            try:
                return int(value)
            except ValueError:
                return None
    return None
