"""
Configuration management for the person hints engine.

This module centralizes environment-driven configuration using Pydantic's
`BaseSettings`. Every component accepts an explicit `Settings` instance and
falls back to the shared `settings` object when none is given.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, List, Optional

from pydantic import AnyUrl, Field, PositiveInt, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

RDF_TYPE = "http://www.w3.org/1999/02/22-rdf-syntax-ns#type"


class Settings(BaseSettings):
    """Engine configuration sourced from `PERSON_HINTS_*` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PERSON_HINTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    SERVICE_NAME: str = "person-hints"
    SERVICE_VERSION: str = "0.1.0"
    LOG_LEVEL: str = Field("INFO", pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    # Tokenizer
    MIN_TOKEN_LENGTH: PositiveInt = 3
    MAX_GROUP_SIZE: PositiveInt = 5

    # Pipeline
    DEBOUNCE_SECONDS: float = Field(0.3, ge=0)
    OWNER_TAG: str = "editor-plugins/personen-card"
    PERSON_CLASS_URI: str = "http://www.w3.org/ns/person#Person"
    CLASS_ASSERTION_PREDICATES: Annotated[List[str], NoDecode] = Field(default_factory=lambda: ["a", RDF_TYPE])
    REQUIRE_CLASS_ASSERTION: bool = True

    # Tracing
    TRACING_ENABLED: bool = False
    OTEL_EXPORTER_OTLP_ENDPOINT: Optional[AnyUrl] = None

    @field_validator("LOG_LEVEL", mode="before")
    def _upper_level(cls, value: str) -> str:
        return value.upper() if isinstance(value, str) else value

    @field_validator("CLASS_ASSERTION_PREDICATES", mode="before")
    def _split_list(cls, value: str | List[str]) -> List[str]:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value or []


@lru_cache()
def get_settings() -> Settings:
    """Return a cached `Settings` instance."""

    return Settings()


# Singleton-style settings instance for modules that prefer direct access.
settings = get_settings()
