from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    role: str = Field(..., description="Speaker role: system, user or assistant.")
    content: Any = Field(..., description="Message text or structured content parts.")

    model_config = {"extra": "allow"}


class ChatRequest(BaseModel):
    model: Optional[str] = Field(default=None, description="LM Studio model identifier.")
    messages: Optional[List[ChatMessage]] = Field(
        default=None, description="Conversation history in order."
    )
    temperature: float = Field(default=0.7, description="Sampling temperature.")
    max_tokens: int = Field(
        default=512, alias="maxTokens", description="Upper bound on generated tokens."
    )

    model_config = {"populate_by_name": True}


class StyleAnalysisRequest(BaseModel):
    model: Optional[str] = Field(default=None, description="LM Studio model identifier.")
    samples: Optional[List[str]] = Field(
        default=None, description="Writing samples to distil into a master style."
    )


class ScriptGenerationRequest(BaseModel):
    model: Optional[str] = Field(default=None, description="LM Studio model identifier.")
    style_summary: Optional[str] = Field(
        default=None,
        alias="styleSummary",
        description="Master style produced by the style analysis step.",
    )
    length: int = Field(default=400, description="Approximate script length in words.")
    intensity: int = Field(
        default=6,
        ge=1,
        le=10,
        description="1 = light relaxation, 10 = profound trance.",
    )
    theme: Optional[str] = Field(default=None, description="Optional theme or focus.")

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    message: str = Field(..., description="Human-readable error description.")
