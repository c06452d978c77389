"""Resolver configuration and package defaults."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from model_router.errors import ConfigurationError

DEFAULT_CACHE_TTL_MS = 3_600_000
DEFAULT_TIMEOUT_S = 60.0
CACHE_DIR_ENV = "MODEL_ROUTER_CACHE_DIR"


def default_cache_dir() -> Path:
    """Directory for durable catalog files when none is configured."""
    override = os.environ.get(CACHE_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".cache" / "model_router"


class ResolverConfig(BaseModel):
    """Immutable per-resolver options, validated once at construction."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    cache: bool = False
    cache_ttl_ms: int = Field(default=DEFAULT_CACHE_TTL_MS, ge=0)
    cache_dir: Path | None = None
    api_key: str | None = None
    models: tuple[str, ...] | None = None
    mount: str | None = None
    expose: tuple[str, ...] | None = None
    alias: dict[str, str] = Field(default_factory=dict)
    default: str | None = None
    timeout_s: float = Field(default=DEFAULT_TIMEOUT_S, gt=0)

    @field_validator("mount")
    @classmethod
    def _check_mount(cls, value: str | None) -> str | None:
        if value is None:
            return value
        if not value or value.startswith("/") or value.endswith("/"):
            raise ValueError("mount must be a non-empty prefix without leading or trailing '/'")
        return value

    @classmethod
    def from_options(cls, **options: object) -> ResolverConfig:
        """Build a config from keyword options, failing fast on bad input."""
        try:
            return cls(**options)
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc

    def resolved_cache_dir(self) -> Path:
        return self.cache_dir if self.cache_dir is not None else default_cache_dir()
