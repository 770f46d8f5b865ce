from .lm_studio_client import LMStudioClient, UpstreamError
from .relay_service import RelayService, RelayValidationError

__all__ = ["LMStudioClient", "UpstreamError", "RelayService", "RelayValidationError"]
