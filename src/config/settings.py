"""Application-wide configuration loading and validation."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    log_level: str = Field(default="INFO")

    # HTTP server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, description="Inbound listening port for the webhook receiver.")

    # Call timing
    max_call_duration_seconds: float = Field(
        default=15,
        gt=0,
        description="Seconds after tracking starts before a call is forcibly ended.",
    )
    cleanup_grace_seconds: float = Field(
        default=30,
        ge=0,
        description="Delay between ending a call and dropping its record.",
    )

    # Remote control endpoint
    control_request_timeout_seconds: float = Field(default=10, gt=0)
    closing_message: str | None = Field(
        default=None,
        description="Optional text spoken to the caller right before the call is ended.",
    )
    closing_message_delay_seconds: float = Field(default=3, ge=0)

    # Upstream webhook contract
    control_url_paths: list[str] = Field(
        default_factory=lambda: ["monitor.controlUrl", "controlUrl"],
        description="Dotted paths under message.call searched in order for the control URL.",
    )
    start_event_types: list[str] = Field(
        default_factory=lambda: [
            "assistant.started",
            "assistant-started",
            "call-start",
            "call.started",
        ]
    )
    end_event_types: list[str] = Field(
        default_factory=lambda: [
            "end-of-call-report",
            "call.ended",
            "call-ended",
        ]
    )
    start_status_updates: list[str] = Field(
        default_factory=lambda: ["in-progress"],
        description="call.status values that make a status-update event start tracking.",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
