from .health import build_health_router
from .relay import build_relay_router
from .ui import build_ui_router

__all__ = ["build_health_router", "build_relay_router", "build_ui_router"]
