"""Key-lookup collaborator used to obtain provider credentials."""

from __future__ import annotations

import inspect
import os
from collections.abc import Awaitable, Mapping
from typing import Protocol


class KeyReader(Protocol):
    """Anything able to look up a credential by environment-variable name."""

    def read(self, name: str) -> str | None | Awaitable[str | None]: ...


class EnvironmentKeys:
    """Reads credentials from an explicit mapping, then from ``os.environ``."""

    def __init__(self, values: Mapping[str, str] | None = None, *, use_environ: bool = True) -> None:
        self._values = dict(values or {})
        self._use_environ = use_environ

    def read(self, name: str) -> str | None:
        value = self._values.get(name)
        if value:
            return value
        if self._use_environ:
            return os.environ.get(name) or None
        return None


async def read_key(context: KeyReader | None, name: str) -> str | None:
    """Call ``context.read`` whether it is sync or async."""
    if context is None:
        return None
    value = context.read(name)
    if inspect.isawaitable(value):
        value = await value
    return value or None
