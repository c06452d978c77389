"""Name resolution for a single provider."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

import httpx

from model_router.adapter import ProviderAdapter, coerce_payload
from model_router.cache import ModelCache
from model_router.config import ResolverConfig
from model_router.context import KeyReader, read_key
from model_router.errors import ConfigurationError
from model_router.types import (
    ChatPayload,
    Listing,
    ListingEntry,
    ModelRecord,
    RequestDescriptor,
    ResolveArgs,
    Resolution,
    ResolvedHandle,
)

# names shaped like environment variables are never model names
_ENV_NAME = re.compile(r"[A-Z_0-9]+")
_HANDLED_TYPES = ("any", "llm")


def coerce_args(args: ResolveArgs | Mapping[str, Any] | None) -> ResolveArgs:
    if args is None:
        return ResolveArgs()
    if isinstance(args, ResolveArgs):
        return args
    return ResolveArgs.model_validate(dict(args))


class ProviderResolver:
    """Resolves logical model names against one provider's catalog.

    ``resolve`` returns ``None`` whenever this provider does not apply to the
    request (wrong type, wrong mount, no credential, no matching model, ...),
    so an aggregator can move on to the next resolver. The only failure that
    propagates is a ``FetchError`` from the catalog call.
    """

    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        adapter: ProviderAdapter,
        config: ResolverConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        model_cache: ModelCache | None = None,
        **options: Any,
    ) -> None:
        if config is not None and options:
            raise ConfigurationError("pass either a ResolverConfig or keyword options, not both")
        self.adapter = adapter
        self.config = config if config is not None else ResolverConfig.from_options(**options)

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.config.timeout_s, transport=transport)
        self.cache = model_cache or ModelCache(
            adapter.name,
            self._fetch_catalog,
            durable=self.config.cache,
            ttl_ms=self.config.cache_ttl_ms,
            cache_dir=self.config.resolved_cache_dir() if self.config.cache else None,
        )

    @property
    def name(self) -> str:
        return self.adapter.name

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this resolver created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> ProviderResolver:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _fetch_catalog(self, credential: str) -> list[ModelRecord]:
        return await self.adapter.fetch_catalog(self._client, credential)

    async def _credential(self, context: KeyReader | None) -> str | None:
        if self.config.api_key:
            return self.config.api_key
        return await read_key(context, self.adapter.api_key_env)

    def _decline(self, name: str, reason: str) -> None:
        self._logger.debug("%s declines %r: %s", self.name, name, reason)
        return None

    def _qualify(self, model: ModelRecord) -> str:
        model_name = model.id or model.name or ""
        return f"{self.config.mount}/{model_name}" if self.config.mount else model_name

    async def resolve(
        self,
        name: str,
        args: ResolveArgs | Mapping[str, Any] | None = None,
        context: KeyReader | None = None,
    ) -> Resolution:
        """Resolve ``name`` to a handle, a listing (``output="all"``) or ``None``."""
        args = coerce_args(args)
        config = self.config

        if args.type not in _HANDLED_TYPES:
            return self._decline(name, f"type {args.type!r}")
        if _ENV_NAME.fullmatch(name):
            return self._decline(name, "environment-style name")

        actual = name
        if config.mount:
            prefix = config.mount + "/"
            if not name.startswith(prefix):
                return self._decline(name, f"outside mount {config.mount!r}")
            actual = name[len(prefix) :]

        if actual == "default" and args.type == "llm" and config.default:
            actual = config.default

        actual = config.alias.get(actual) or actual

        if self.adapter.match_name is not None and not self.adapter.match_name(actual):
            return self._decline(name, "rejected by provider name filter")
        if config.expose is not None and actual not in config.expose:
            return self._decline(name, "not exposed")

        credential = await self._credential(context)
        if not credential:
            return self._decline(name, f"no credential ({self.adapter.api_key_env})")

        models = await self.cache.get_models(credential)

        if config.models:
            allowed = set(config.models)
            models = tuple(m for m in models if m.id in allowed or (m.name is not None and m.name in allowed))

        matched = self.adapter.select(models, actual, args)
        if not matched:
            return self._decline(name, "no matching model")

        if args.output == "all":
            return Listing(tuple(ListingEntry(source=self.name, name=self._qualify(m)) for m in matched))

        model = matched[0]

        async def exec_request(payload: ChatPayload | Mapping[str, Any]) -> RequestDescriptor:
            # re-read the key so a rotated credential is picked up
            key = await self._credential(context) or credential
            return self.adapter.request(model, coerce_payload(payload), key)

        return ResolvedHandle(
            source=self.name,
            model=model,
            exec=exec_request,
            hook_msg=self.adapter.hook_msg,
        )
