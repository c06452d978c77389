"""Package specific exception hierarchy."""

from __future__ import annotations

from pathlib import Path


class ModelRouterError(Exception):
    """Base exception for model_router package."""


class ConfigurationError(ModelRouterError):
    """Raised at construction time when resolver options are invalid."""


class FetchError(ModelRouterError):
    """Upstream catalog call failed.

    ``str(exc)`` is the upstream's own message when the response body carried
    one, otherwise a status-line message such as ``"401 Unauthorized"``.
    """

    def __init__(self, provider: str, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.provider = provider
        self.message = message
        self.status_code = status_code


class CacheReadError(ModelRouterError):
    """Durable catalog cache could not be read or decoded."""

    def __init__(self, provider: str, path: Path, reason: str) -> None:
        super().__init__(f"{provider}: unreadable model cache {path}: {reason}")
        self.provider = provider
        self.path = path
