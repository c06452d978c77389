import asyncio
import tempfile
import unittest
from pathlib import Path

from model_router.context import EnvironmentKeys
from model_router.errors import ConfigurationError, FetchError
from model_router.providers import anthropic_provider, openai_provider
from model_router.resolver import ProviderResolver
from model_router.router import ModelRouter
from model_router.types import Listing, ResolvedHandle
from support import CatalogServer


class RecordingResolver:
    """Resolver double that remembers what it was offered."""

    def __init__(self, outcome=None) -> None:
        self.outcome = outcome
        self.seen: list[str] = []

    async def resolve(self, name, args=None, context=None):
        self.seen.append(name)
        return self.outcome


def resolve(router: ModelRouter, name: str, args=None, context=None):
    return asyncio.run(router.resolve(name, args, context))


class ModelRouterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.openai = CatalogServer(["gpt-4.1-mini", "gpt-4.1", "shared"])
        self.anthropic = CatalogServer(["claude-sonnet-4-5", "shared"])
        self.keys = EnvironmentKeys({"OPENAI_KEY": "sk", "ANTHROPIC_KEY": "ak"}, use_environ=False)

    def _router(self, **options) -> ModelRouter:
        return ModelRouter(
            [
                openai_provider(transport=self.openai.transport()),
                anthropic_provider(transport=self.anthropic.transport()),
            ],
            **options,
        )

    def test_first_resolver_that_answers_wins(self) -> None:
        handle = resolve(self._router(), "shared", None, self.keys)
        self.assertEqual(handle.source, "openai")
        handle = resolve(self._router(), "claude-sonnet-4-5", None, self.keys)
        self.assertEqual(handle.source, "anthropic")

    def test_unknown_name_declines(self) -> None:
        self.assertIsNone(resolve(self._router(), "not_found", None, self.keys))

    def test_resolvers_without_keys_are_skipped(self) -> None:
        keys = EnvironmentKeys({"ANTHROPIC_KEY": "ak"}, use_environ=False)
        handle = resolve(self._router(), "shared", None, keys)
        self.assertEqual(handle.source, "anthropic")
        self.assertEqual(self.openai.calls, 0)

    def test_unmounted_resolver_claims_unprefixed_name(self) -> None:
        router = ModelRouter([
            openai_provider(mount="oa", transport=self.openai.transport()),
            anthropic_provider(transport=self.anthropic.transport()),
        ])
        handle = resolve(router, "shared", None, self.keys)
        self.assertEqual(handle.source, "anthropic")
        handle = resolve(router, "oa/shared", None, self.keys)
        self.assertEqual(handle.source, "openai")

    def test_router_default(self) -> None:
        self.assertIsNone(resolve(self._router(), "default", {"type": "llm"}, self.keys))
        handle = resolve(self._router(default="claude-sonnet-4-5"), "default", {"type": "llm"}, self.keys)
        self.assertIsInstance(handle, ResolvedHandle)
        self.assertEqual(handle.model.id, "claude-sonnet-4-5")

    def test_router_alias_and_expose(self) -> None:
        router = self._router(alias={"fast": "gpt-4.1-mini"}, expose=["gpt-4.1-mini"])
        self.assertEqual(resolve(router, "fast", None, self.keys).model.id, "gpt-4.1-mini")
        self.assertIsNone(resolve(router, "gpt-4.1", None, self.keys))

    def test_listing_comes_from_first_match(self) -> None:
        listing = resolve(self._router(), "gpt.*", {"type": "llm", "match": "regex", "output": "all"}, self.keys)
        self.assertIsInstance(listing, Listing)
        self.assertEqual(listing.names, ["gpt-4.1-mini", "gpt-4.1"])

    def test_image_requests_decline(self) -> None:
        self.assertIsNone(resolve(self._router(), "gpt-4.1-mini", {"type": "image"}, self.keys))

    def test_fetch_error_stops_the_search(self) -> None:
        failing = CatalogServer(status_code=500, body={"error": {"message": "upstream down"}})
        later = RecordingResolver()
        router = ModelRouter([openai_provider(api_key="sk", transport=failing.transport()), later])
        with self.assertRaises(FetchError):
            resolve(router, "gpt-4.1")
        self.assertEqual(later.seen, [])

    def test_resolvers_are_tried_in_order(self) -> None:
        first, second, third = RecordingResolver(), RecordingResolver(outcome="answer"), RecordingResolver()
        router = ModelRouter([first, second, third])
        self.assertEqual(resolve(router, "x"), "answer")
        self.assertEqual((first.seen, second.seen, third.seen), (["x"], ["x"], []))


class DefaultProvidersTests(unittest.TestCase):
    def test_builds_hosted_providers_in_order(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            router = ModelRouter.with_default_providers(cache_dir=Path(tmp), api_keys={"openai": "sk"})
            names = [r.name for r in router.resolvers]
            self.assertEqual(names, ["openai", "openrouter", "anthropic", "gemini", "mistral", "groq"])
            first = router.resolvers[0]
            self.assertIsInstance(first, ProviderResolver)
            self.assertTrue(first.config.cache)
            self.assertEqual(first.config.api_key, "sk")
            self.assertIsNone(router.resolvers[1].config.api_key)
            asyncio.run(router.aclose())

    def test_unknown_api_key_provider_fails_fast(self) -> None:
        with self.assertRaises(ConfigurationError):
            ModelRouter.with_default_providers(api_keys={"acme": "x"})

    def test_explicit_key_resolves_without_context(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            server = CatalogServer(["claude-sonnet-4-5"])
            router = ModelRouter.with_default_providers(
                cache=False,
                cache_dir=Path(tmp),
                api_keys={"anthropic": "ak"},
                transport=server.transport(),
            )
            handle = resolve(router, "claude-sonnet-4-5", None, EnvironmentKeys(use_environ=False))
            self.assertEqual(handle.source, "anthropic")
            self.assertEqual(server.calls, 1)
            asyncio.run(router.aclose())


if __name__ == "__main__":
    unittest.main()
