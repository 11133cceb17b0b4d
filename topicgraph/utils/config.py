"""Engine configuration.

Layout constants and boundary limits, overridable through .env or the environment.
"""
from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from .env and environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    node_width: float = 150.0
    node_height: float = 90.0  # fixed; rendered heights vary with content rows
    rank_sep: float = 100.0
    node_sep: float = 50.0
    crossing_sweeps: int = 8
    max_label_length: int = 200
    max_notes_length: int = 10000
    history_limit: int = 100
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("TOPICGRAPH_LOG_LEVEL", "LOG_LEVEL"),
    )


settings = Settings()
