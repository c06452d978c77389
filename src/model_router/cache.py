"""Per-provider model catalog cache with memory and durable tiers."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, replace
from pathlib import Path

from pydantic import ValidationError

from model_router.config import DEFAULT_CACHE_TTL_MS
from model_router.errors import CacheReadError
from model_router.types import ModelRecord

CatalogFetcher = Callable[[str], Awaitable[Sequence[ModelRecord]]]


@dataclass(frozen=True)
class CacheEntry:
    """Catalog snapshot for one provider."""

    provider_name: str
    ttl_ms: int
    models: tuple[ModelRecord, ...]
    fetched_at: float

    def age_ms(self, now: float | None = None) -> float:
        current = time.time() if now is None else now
        return (current - self.fetched_at) * 1000.0

    def is_expired(self, now: float | None = None) -> bool:
        return self.age_ms(now) >= self.ttl_ms


class ModelCache:
    """Caches one provider's catalog.

    With ``durable=False`` the catalog is fetched once and kept in memory for
    the lifetime of the cache. With ``durable=True`` a JSON file named after
    the provider is consulted first and reused while its mtime is younger than
    ``ttl_ms``; otherwise the catalog is fetched and the file rewritten.

    Either way the first successful load is kept in memory, and concurrent
    callers that miss before it completes all await the same fetch.
    """

    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        provider_name: str,
        fetch: CatalogFetcher,
        *,
        durable: bool = False,
        ttl_ms: int = DEFAULT_CACHE_TTL_MS,
        cache_dir: Path | None = None,
    ) -> None:
        if durable and cache_dir is None:
            raise ValueError("durable cache requires a cache_dir")
        self.provider_name = provider_name
        self.durable = durable
        self.ttl_ms = ttl_ms
        self.cache_dir = cache_dir
        self._fetch = fetch
        self._entry: CacheEntry | None = None
        self._inflight: asyncio.Future[CacheEntry] | None = None

    @property
    def path(self) -> Path | None:
        if self.cache_dir is None:
            return None
        return self.cache_dir / f"{self.provider_name}_models.json"

    @property
    def entry(self) -> CacheEntry | None:
        return self._entry

    def invalidate(self) -> None:
        """Forget the in-memory snapshot; the next call reloads."""
        self._entry = None

    async def get_models(self, credential: str) -> tuple[ModelRecord, ...]:
        if self._entry is not None:
            return self._entry.models

        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._load(credential))
            self._inflight.add_done_callback(self._clear_inflight)

        # shield: a cancelled waiter must not cancel the shared fetch
        entry = await asyncio.shield(self._inflight)
        return entry.models

    def _clear_inflight(self, future: asyncio.Future[CacheEntry]) -> None:
        if self._inflight is future:
            self._inflight = None
        if not future.cancelled():
            # mark retrieved; waiters get the exception through their own await
            future.exception()

    async def _load(self, credential: str) -> CacheEntry:
        if self.durable:
            entry = await asyncio.to_thread(self._read_store_or_miss)
            if entry is not None:
                self._entry = entry
                return entry

        self._logger.debug("Fetching model catalog for %s", self.provider_name)
        models = tuple(await self._fetch(credential))
        entry = CacheEntry(
            provider_name=self.provider_name,
            ttl_ms=self.ttl_ms,
            models=models,
            fetched_at=time.time(),
        )
        self._entry = entry

        if self.durable:
            await asyncio.to_thread(self._write_store, models)
        return entry

    def _read_store_or_miss(self) -> CacheEntry | None:
        try:
            return self._read_store()
        except CacheReadError as exc:
            self._logger.warning("%s; refetching", exc)
            return None

    def _read_store(self) -> CacheEntry | None:
        path = self.path
        assert path is not None
        try:
            mtime = path.stat().st_mtime
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise CacheReadError(self.provider_name, path, str(exc)) from exc

        stamp = CacheEntry(
            provider_name=self.provider_name,
            ttl_ms=self.ttl_ms,
            models=(),
            fetched_at=mtime,
        )
        if stamp.is_expired():
            self._logger.debug("Model cache for %s is stale", self.provider_name)
            return None

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(raw, list):
                raise CacheReadError(self.provider_name, path, "expected a JSON array")
            models = tuple(ModelRecord.model_validate(item) for item in raw)
        except (OSError, ValueError, ValidationError) as exc:
            raise CacheReadError(self.provider_name, path, str(exc)) from exc

        return replace(stamp, models=models)

    def _write_store(self, models: tuple[ModelRecord, ...]) -> None:
        path = self.path
        assert path is not None
        data = [m.model_dump(mode="json", exclude_unset=True) for m in models]
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            self._logger.warning("Could not write model cache %s: %s", path, exc)
