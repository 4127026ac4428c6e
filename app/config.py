"""Application configuration management."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralised application settings derived from environment variables."""

    ai_provider: Literal["anthropic", "toolkit"] = Field(
        default="anthropic",
        description="Which generative text provider backs the analysis services.",
    )
    anthropic_api_key: str | None = None
    anthropic_model: str = Field(default="claude-sonnet-4-5-20250929")
    anthropic_max_tokens: int = Field(default=4096, ge=256, le=64000)
    anthropic_temperature: float = Field(default=0.3, ge=0.0, le=1.0)

    toolkit_url: str = Field(
        default="https://toolkit.rork.com/text/llm/",
        description="Endpoint of the hosted text toolkit provider.",
    )
    provider_timeout_seconds: float = Field(default=60.0, gt=0)

    prompt_config_path: Path = Field(default=Path("app/prompts.yaml"))
    diagnostic_prefix_chars: int = Field(
        default=300,
        ge=1,
        le=5000,
        description="How much of a raw provider response an error may carry.",
    )

    app_host: str = Field(default="0.0.0.0")
    app_port: int = Field(default=8000, ge=1, le=65535)
    debug: bool = Field(default=False)

    log_level: str = Field(default="INFO")
    recovery_log_level: str = Field(
        default="INFO",
        description="Level for the locate/repair/normalize loggers; DEBUG traces each ladder step.",
    )
    log_dir: Path = Field(default=Path("logs"))

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level", "recovery_log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        valid = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
        upper = value.upper()
        if upper not in valid:
            raise ValueError(f"Log levels must be one of {', '.join(sorted(valid))}")
        return upper

    @model_validator(mode="after")
    def require_provider_credentials(self) -> "Settings":
        """Ensure the selected provider can actually be reached."""

        if self.ai_provider == "anthropic":
            key = (self.anthropic_api_key or "").strip()
            if key.lower() in {"", "change-me", "changeme"}:
                raise ValueError(
                    "ANTHROPIC_API_KEY is required when AI_PROVIDER=anthropic. "
                    "Update your .env file or switch AI_PROVIDER to toolkit."
                )
        return self


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance so it can be reused across the app."""

    settings = Settings()
    settings.log_dir.mkdir(parents=True, exist_ok=True)
    return settings
