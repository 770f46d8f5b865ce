from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field


PROJECT_ROOT = Path(__file__).resolve().parent.parent

DEFAULT_MAX_BODY_BYTES = 2 * 1024 * 1024


class Settings(BaseModel):
    """Runtime configuration resolved from environment variables."""

    port: int = Field(default=3000, alias="PORT", description="HTTP listen port.")
    lm_studio_base_url: str = Field(
        default="http://localhost:1234",
        alias="LM_STUDIO_BASE_URL",
        description="Base URL of the OpenAI-compatible LM Studio server.",
    )
    lm_studio_api_key: str = Field(
        default="lm-studio",
        alias="LM_STUDIO_API_KEY",
        description="Bearer token sent to LM Studio.",
    )
    public_dir: str = Field(
        default=str(PROJECT_ROOT / "public"),
        alias="PUBLIC_DIR",
        description="Directory holding the UI entry document and static assets.",
    )
    max_body_bytes: int = Field(
        default=DEFAULT_MAX_BODY_BYTES,
        alias="MAX_BODY_BYTES",
        description="Largest accepted request body, in bytes.",
    )
    cors_allow_origins: str = Field(
        default="*",
        alias="CORS_ALLOW_ORIGINS",
        description="Comma-separated list of origins allowed by CORS.",
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Root log level.")

    model_config = {"populate_by_name": True, "frozen": True}

    @classmethod
    def from_env(cls) -> "Settings":
        return cls.model_validate(os.environ)

    @property
    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance built from environment variables."""
    return Settings.from_env()
