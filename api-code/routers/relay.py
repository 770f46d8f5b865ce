from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, StreamingResponse

from schemas import ChatRequest, ErrorResponse, ScriptGenerationRequest, StyleAnalysisRequest
from services import RelayService, RelayValidationError, UpstreamError
from services.relay_service import SSE_HEADERS


logger = logging.getLogger("lm-relay.api")

ERROR_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


async def _relay_json(operation: Callable[[], Awaitable[Dict[str, Any]]]) -> Any:
    try:
        return await operation()
    except RelayValidationError as exc:
        return error_response(status.HTTP_400_BAD_REQUEST, str(exc))
    except UpstreamError as exc:
        logger.error("LM Studio request failed: %s", exc.describe())
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
    except Exception:  # pylint: disable=broad-except
        logger.exception("Unexpected error while relaying to LM Studio")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Unexpected error")


def build_relay_router(relay_service: RelayService) -> APIRouter:
    """Create the /api router wired to the provided relay service."""
    router = APIRouter(prefix="/api", tags=["relay"], responses=ERROR_RESPONSES)

    def stream_response(request: Request, build_payload: Callable[[], Dict[str, Any]]) -> Any:
        try:
            payload = build_payload()
        except RelayValidationError as exc:
            return error_response(status.HTTP_400_BAD_REQUEST, str(exc))

        return StreamingResponse(
            relay_service.relay_stream(payload, is_cancelled=request.is_disconnected),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    @router.get("/models", summary="List models loaded in LM Studio")
    async def list_models() -> Any:
        return await _relay_json(relay_service.list_models)

    @router.post("/chat", summary="Buffered chat completion")
    async def chat(payload: ChatRequest) -> Any:
        return await _relay_json(lambda: relay_service.chat(payload))

    @router.post("/analyze-style", summary="Distil writing samples into a master style")
    async def analyze_style(payload: StyleAnalysisRequest) -> Any:
        return await _relay_json(lambda: relay_service.analyze_style(payload))

    @router.post("/analyze-style/stream", summary="Streamed style analysis (text/event-stream)")
    async def analyze_style_stream(payload: StyleAnalysisRequest, request: Request) -> Any:
        return stream_response(request, lambda: relay_service.build_style_payload(payload))

    @router.post("/generate-script", summary="Generate a script in the given master style")
    async def generate_script(payload: ScriptGenerationRequest) -> Any:
        return await _relay_json(lambda: relay_service.generate_script(payload))

    @router.post("/generate-script/stream", summary="Streamed script generation (text/event-stream)")
    async def generate_script_stream(payload: ScriptGenerationRequest, request: Request) -> Any:
        return stream_response(request, lambda: relay_service.build_script_payload(payload))

    return router
