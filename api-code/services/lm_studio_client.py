from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import httpx


logger = logging.getLogger("lm-relay.upstream")

MODELS_PATH = "/v1/models"
CHAT_COMPLETIONS_PATH = "/v1/chat/completions"


class UpstreamError(RuntimeError):
    """Raised when LM Studio is unreachable or answers with a non-success status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        body: str = "",
    ) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)

    @classmethod
    def from_status(cls, status_code: int, body: str) -> "UpstreamError":
        return cls(f"LM Studio responded with {status_code}", status_code=status_code, body=body)

    def describe(self) -> str:
        if self.status_code is None:
            return f"{self} ({self.body})" if self.body else str(self)
        return f"{self}: {self.body}"


class LMStudioClient:
    """Async client for the OpenAI-compatible LM Studio REST API."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
            timeout=None,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def list_models(self) -> Dict[str, Any]:
        return await self._request_json("GET", MODELS_PATH)

    async def create_chat_completion(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request_json("POST", CHAT_COMPLETIONS_PATH, payload)

    @asynccontextmanager
    async def stream_chat_completion(
        self, payload: Dict[str, Any]
    ) -> AsyncIterator[httpx.Response]:
        """Open a streamed chat completion; the response is closed on exit, not drained."""
        request = self._client.build_request(
            "POST", CHAT_COMPLETIONS_PATH, json={**payload, "stream": True}
        )
        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise self._unreachable(exc) from exc

        try:
            if response.is_error:
                body = (await response.aread()).decode("utf-8", errors="replace")
                raise UpstreamError.from_status(response.status_code, body)
            yield response
        finally:
            await response.aclose()

    async def _request_json(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        try:
            if method == "POST":
                response = await self._client.request(method, path, json=payload)
            else:
                response = await self._client.request(method, path)
        except httpx.HTTPError as exc:
            raise self._unreachable(exc) from exc

        if response.is_error:
            raise UpstreamError.from_status(response.status_code, response.text)

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(
                "LM Studio returned an invalid JSON body",
                status_code=response.status_code,
                body=response.text[:500],
            ) from exc

    def _unreachable(self, exc: httpx.HTTPError) -> UpstreamError:
        logger.debug("LM Studio request to %s failed: %r", self.base_url, exc)
        return UpstreamError("LM Studio is unreachable", body=str(exc) or exc.__class__.__name__)
