from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import FileResponse, JSONResponse


logger = logging.getLogger("lm-relay.ui")

ENTRY_DOCUMENT = "index.html"


def build_ui_router(public_dir: Path | str) -> APIRouter:
    """Serve static assets from ``public_dir`` and fall back to the UI entry document.

    Must be included last: its catch-all route shadows every later GET route.
    """
    router = APIRouter(tags=["ui"])
    root = Path(public_dir).resolve()

    @router.get("/{full_path:path}", include_in_schema=False)
    async def serve_ui(full_path: str) -> Any:
        asset = _resolve_asset(root, full_path)
        if asset is not None:
            return FileResponse(asset)

        entry = root / ENTRY_DOCUMENT
        if not entry.is_file():
            logger.error("UI entry document missing at %s", entry)
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content={"message": "UI entry document not found"},
            )
        return FileResponse(entry, media_type="text/html")

    return router


def _resolve_asset(root: Path, relative: str) -> Path | None:
    if not relative:
        return None
    candidate = (root / relative).resolve()
    if not candidate.is_relative_to(root) or not candidate.is_file():
        return None
    return candidate
