from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse


PROJECT_ROOT = Path(__file__).resolve().parent
API_CODE_PATH = PROJECT_ROOT / "api-code"
if str(API_CODE_PATH) not in sys.path:
    sys.path.insert(0, str(API_CODE_PATH))

from body_limit import BodySizeLimitMiddleware  # noqa: E402
from env_loader import load_local_env  # noqa: E402
from routers import build_health_router, build_relay_router, build_ui_router  # noqa: E402
from services import LMStudioClient, RelayService  # noqa: E402
from settings import Settings, get_settings  # noqa: E402


load_local_env()
settings = get_settings()

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger("lm-relay")


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body."
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = first.get("msg", "invalid value")
    return f"Invalid request: {location}: {detail}" if location else f"Invalid request: {detail}"


def create_app(
    app_settings: Optional[Settings] = None,
    lm_client: Optional[LMStudioClient] = None,
) -> FastAPI:
    """Build the relay application from immutable settings."""
    config = app_settings or get_settings()
    client = lm_client or LMStudioClient(config.lm_studio_base_url, config.lm_studio_api_key)
    relay_service = RelayService(client)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info("UI server running on http://localhost:%s", config.port)
        logger.info("Proxying requests to LM Studio at %s", client.base_url)
        try:
            yield
        finally:
            await client.aclose()

    application = FastAPI(
        title="LM Relay",
        version="0.1.0",
        description="Relay between the script studio UI and a local LM Studio server.",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(BodySizeLimitMiddleware, max_body_bytes=config.max_body_bytes)

    @application.exception_handler(RequestValidationError)
    async def on_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": _describe_validation_error(exc)},
        )

    application.include_router(build_relay_router(relay_service))
    application.include_router(build_health_router(relay_service))
    application.include_router(build_ui_router(config.public_dir))
    return application


app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app_main:app", host="0.0.0.0", port=settings.port)
