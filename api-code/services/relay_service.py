from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional

import httpx

from schemas import ChatRequest, ScriptGenerationRequest, StyleAnalysisRequest

from .lm_studio_client import LMStudioClient, UpstreamError
from .prompt_builder import (
    SCRIPT_TEMPERATURE,
    STYLE_ANALYSIS_MAX_TOKENS,
    STYLE_ANALYSIS_TEMPERATURE,
    build_script_messages,
    build_style_messages,
    script_token_budget,
)


logger = logging.getLogger("lm-relay.relay")

CancellationProbe = Callable[[], Awaitable[bool]]

# Blank line that dispatches an SSE event, in each permitted line ending.
FRAME_TERMINATORS = (b"\n\n", b"\r\n\r\n", b"\r\r")

SSE_HEADERS: Dict[str, str] = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


class RelayValidationError(ValueError):
    """Raised when a request is missing a required field."""


def format_error_event(message: str) -> bytes:
    data = json.dumps({"message": message}, ensure_ascii=False)
    return f"event: error\ndata: {data}\n\n".encode("utf-8")


async def _never_cancelled() -> bool:
    return False


class RelayService:
    """Builds LM Studio payloads and relays their responses back to the UI."""

    def __init__(self, client: LMStudioClient):
        self.client = client

    async def list_models(self) -> Dict[str, Any]:
        return await self.client.list_models()

    async def chat(self, request: ChatRequest) -> Dict[str, Any]:
        return await self.client.create_chat_completion(self.build_chat_payload(request))

    async def analyze_style(self, request: StyleAnalysisRequest) -> Dict[str, Any]:
        return await self.client.create_chat_completion(self.build_style_payload(request))

    async def generate_script(self, request: ScriptGenerationRequest) -> Dict[str, Any]:
        return await self.client.create_chat_completion(self.build_script_payload(request))

    @staticmethod
    def build_chat_payload(request: ChatRequest) -> Dict[str, Any]:
        if not request.model:
            raise RelayValidationError("Model is required")

        payload: Dict[str, Any] = {"model": request.model}
        if request.messages is not None:
            payload["messages"] = [message.model_dump() for message in request.messages]
        payload["max_tokens"] = request.max_tokens
        payload["temperature"] = request.temperature
        return payload

    @staticmethod
    def build_style_payload(request: StyleAnalysisRequest) -> Dict[str, Any]:
        if not request.model or not request.samples:
            raise RelayValidationError("Model and at least one text sample are required.")

        return {
            "model": request.model,
            "messages": build_style_messages(request.samples),
            "max_tokens": STYLE_ANALYSIS_MAX_TOKENS,
            "temperature": STYLE_ANALYSIS_TEMPERATURE,
        }

    @staticmethod
    def build_script_payload(request: ScriptGenerationRequest) -> Dict[str, Any]:
        if not request.model or not request.style_summary:
            raise RelayValidationError("Model and a style summary are required.")

        return {
            "model": request.model,
            "messages": build_script_messages(
                request.style_summary,
                length=request.length,
                intensity=request.intensity,
                theme=request.theme,
            ),
            "max_tokens": script_token_budget(request.length),
            "temperature": SCRIPT_TEMPERATURE,
        }

    async def relay_stream(
        self,
        payload: Dict[str, Any],
        is_cancelled: Optional[CancellationProbe] = None,
    ) -> AsyncIterator[bytes]:
        """Forward upstream event-stream chunks verbatim and in arrival order.

        The upstream response is closed as soon as ``is_cancelled`` reports a
        client disconnect. Failures are reported as a single SSE ``error`` event
        because the response headers have already been sent; a half-relayed
        upstream frame is terminated first so the error event stays separate.
        """
        probe = is_cancelled or _never_cancelled
        inside_frame = False
        try:
            async with self.client.stream_chat_completion(payload) as upstream:
                async for chunk in upstream.aiter_bytes():
                    if await probe():
                        logger.info("Client disconnected; aborting upstream stream.")
                        return
                    yield chunk
                    inside_frame = not chunk.endswith(FRAME_TERMINATORS)
            return
        except UpstreamError as exc:
            logger.error("LM Studio stream failed: %s", exc.describe())
            message = str(exc)
        except httpx.HTTPError as exc:
            logger.error("LM Studio stream interrupted: %r", exc)
            message = "LM Studio stream interrupted"
        except Exception:  # pylint: disable=broad-except
            logger.exception("Unexpected error while relaying LM Studio stream")
            message = "Unexpected error"

        if inside_frame:
            yield b"\n\n"
        yield format_error_event(message)
