from .relay import (
    ChatMessage,
    ChatRequest,
    ErrorResponse,
    ScriptGenerationRequest,
    StyleAnalysisRequest,
)

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ErrorResponse",
    "ScriptGenerationRequest",
    "StyleAnalysisRequest",
]
