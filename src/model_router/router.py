"""First-match aggregation over an ordered list of provider resolvers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol

import httpx

from model_router.config import DEFAULT_CACHE_TTL_MS
from model_router.context import KeyReader
from model_router.errors import ConfigurationError
from model_router.providers import (
    anthropic_provider,
    gemini_provider,
    groq_provider,
    mistral_provider,
    openai_provider,
    openrouter_provider,
)
from model_router.resolver import ProviderResolver, coerce_args
from model_router.types import ResolveArgs, Resolution

_DEFAULT_PROVIDERS = {
    "openai": openai_provider,
    "openrouter": openrouter_provider,
    "anthropic": anthropic_provider,
    "gemini": gemini_provider,
    "mistral": mistral_provider,
    "groq": groq_provider,
}


class Resolver(Protocol):
    """Anything the router can offer a ``(name, args)`` request to."""

    async def resolve(
        self,
        name: str,
        args: ResolveArgs | Mapping[str, Any] | None = None,
        context: KeyReader | None = None,
    ) -> Resolution: ...


class ModelRouter:
    """Offers each request to its resolvers in order; the first answer wins."""

    def __init__(
        self,
        resolvers: Iterable[Resolver],
        *,
        default: str | None = None,
        alias: Mapping[str, str] | None = None,
        expose: Sequence[str] | None = None,
    ) -> None:
        self._resolvers: list[Resolver] = list(resolvers)
        self._default = default
        self._alias = dict(alias or {})
        self._expose = tuple(expose) if expose is not None else None

    @classmethod
    def with_default_providers(
        cls,
        *,
        cache: bool = True,
        cache_ttl_ms: int = DEFAULT_CACHE_TTL_MS,
        cache_dir: Path | None = None,
        default: str | None = None,
        api_keys: Mapping[str, str] | None = None,
        expose: Sequence[str] | None = None,
        alias: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> ModelRouter:
        """Router over the hosted providers, durable cache on by default."""
        api_keys = dict(api_keys or {})
        unknown = sorted(set(api_keys) - set(_DEFAULT_PROVIDERS))
        if unknown:
            raise ConfigurationError(f"api_keys for unknown provider(s): {', '.join(unknown)}")

        resolvers = [
            factory(
                cache=cache,
                cache_ttl_ms=cache_ttl_ms,
                cache_dir=cache_dir,
                api_key=api_keys.get(provider),
                transport=transport,
            )
            for provider, factory in _DEFAULT_PROVIDERS.items()
        ]
        return cls(resolvers, default=default, alias=alias, expose=expose)

    @property
    def resolvers(self) -> list[Resolver]:
        return list(self._resolvers)

    async def resolve(
        self,
        name: str,
        args: ResolveArgs | Mapping[str, Any] | None = None,
        context: KeyReader | None = None,
    ) -> Resolution:
        args = coerce_args(args)

        if name == "default" and args.type == "llm" and self._default:
            return await self._first_match(self._default, args, context)

        resolved = self._alias.get(name) or name
        if self._expose is not None and resolved not in self._expose:
            return None
        return await self._first_match(resolved, args, context)

    async def _first_match(self, name: str, args: ResolveArgs, context: KeyReader | None) -> Resolution:
        for resolver in self._resolvers:
            outcome = await resolver.resolve(name, args, context)
            if outcome is not None:
                return outcome
        return None

    async def aclose(self) -> None:
        for resolver in self._resolvers:
            if isinstance(resolver, ProviderResolver):
                await resolver.aclose()
