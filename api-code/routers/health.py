from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter

from services import RelayService, UpstreamError


logger = logging.getLogger("lm-relay.health")


def build_health_router(relay_service: RelayService) -> APIRouter:
    router = APIRouter()

    @router.get("/healthz")
    async def healthcheck() -> Dict[str, Any]:
        try:
            await relay_service.list_models()
            upstream_ok = True
        except UpstreamError as exc:
            logger.warning("LM Studio health probe failed: %s", exc.describe())
            upstream_ok = False

        return {
            "status": "healthy" if upstream_ok else "degraded",
            "upstream": "ok" if upstream_ok else "unreachable",
            "base_url": relay_service.client.base_url,
        }

    return router
