"""Orchestrator configuration.

Values are read from ``ASSET_ORCHESTRATOR_*`` environment variables. The API
key itself is not a setting: it is resolved by the credential provider from
the variable named by ``api_key_env`` (``GEMINI_API_KEY`` by default) or from
``api_key_file``, so that it can be rotated without rebuilding the config.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OrchestratorConfig(BaseSettings):
    """Pydantic settings container for the orchestrator and its backend."""

    model_config = SettingsConfigDict(env_prefix="ASSET_ORCHESTRATOR_")

    backend: str = Field(
        default="gemini",
        description="Identifier of the generation backend to instantiate.",
    )
    api_url_base: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Base URL of the Generative Language REST API.",
    )
    image_model: str = Field(
        default="gemini-3.1-flash-image-preview",
        description="Model used for synchronous image generation.",
    )
    video_model: str = Field(
        default="veo-3.1-fast-generate-preview",
        description="Model used for long-running video generation.",
    )
    api_key_env: str = Field(
        default="GEMINI_API_KEY",
        min_length=1,
        description="Environment variable holding the generation API key.",
    )
    api_key_file: Path | None = Field(
        default=None,
        description="Optional file holding the API key (re-read on selection).",
    )
    poll_interval_seconds: float = Field(
        default=10.0,
        ge=0.0,
        description="Delay between two polls of a long-running operation.",
    )
    max_poll_seconds: float = Field(
        default=600.0,
        gt=0.0,
        description="Wall-clock budget for polling one video operation, counted from the polling transition.",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        ge=0.1,
        description="Timeout applied to submit and poll requests in seconds.",
    )
    download_timeout_seconds: float = Field(
        default=120.0,
        ge=0.1,
        description="Timeout applied to artifact downloads in seconds.",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level.",
    )
    log_json: bool = Field(
        default=True,
        description="Render structlog events as JSON.",
    )

    @classmethod
    def build_default(cls) -> "OrchestratorConfig":
        """Construct configuration from the environment with defaults."""

        return cls()


__all__ = ["OrchestratorConfig"]
