"""
Pydantic models for lingora configuration.

Defines all configuration schemas using Pydantic v2 for validation,
defaults, and serialization.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from ..formatting.lru import DEFAULT_CACHE_SIZE
from ..sources.cached import DEFAULT_TTL_MS
from ..sources.storage import DEFAULT_CACHE_DIR, DEFAULT_PREFIX


class LoggingConfig(BaseModel):
    """Logging system configuration."""

    level: Literal["debug", "info", "warn", "error"] = "warn"
    file: Path | None = None
    verbose: int = 0

    model_config = {"extra": "forbid"}


class RemoteSourceConfig(BaseModel):
    """HTTP source: GET {base_url}/{locale}{extension}."""

    base_url: str = Field(description="Base URL or path prefix of the locale files")
    extension: str = ".json"
    headers: dict[str, str] = Field(default_factory=dict)
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    retries: int = Field(
        default=0,
        ge=0,
        le=10,
        description="Retries for transient transport errors (exponential backoff)",
    )

    model_config = {"extra": "forbid"}


class NamespaceSourceConfig(BaseModel):
    """HTTP namespace source: GET {base_url}/{locale}/{namespace}{extension}."""

    base_url: str
    extension: str = ".json"
    headers: dict[str, str] = Field(default_factory=dict)
    timeout: float = Field(default=30.0, gt=0)
    retries: int = Field(default=0, ge=0, le=10)

    model_config = {"extra": "forbid"}


class CacheConfig(BaseModel):
    """Offline-first persistent cache in front of the message source."""

    enabled: bool = False
    ttl_ms: int = Field(
        default=DEFAULT_TTL_MS,
        ge=0,
        description="Entry time-to-live in milliseconds (default 24h)",
    )
    prefix: str = DEFAULT_PREFIX
    directory: Path = DEFAULT_CACHE_DIR

    model_config = {"extra": "forbid"}


class AppConfig(BaseModel):
    """Complete configuration.

    This is the root of the configuration tree. It combines all sections
    and is the entry point for validation.
    """

    locale: str = Field(default="en", min_length=1)
    fallback: str = Field(default="en", min_length=1)
    cache_size: int = Field(default=DEFAULT_CACHE_SIZE, ge=1, description="Compiled-template cache capacity")
    messages_dir: Path | None = None
    remote: RemoteSourceConfig | None = None
    namespaces: NamespaceSourceConfig | None = None
    cache: CacheConfig = Field(default_factory=CacheConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def _single_source(self) -> "AppConfig":
        if self.messages_dir is not None and self.remote is not None:
            raise ValueError("messages_dir and remote are mutually exclusive")
        return self
