"""Hosted upstreams that speak the OpenAI API unchanged."""

from __future__ import annotations

from model_router.providers.openai import openai_compatible_adapter
from model_router.resolver import ProviderResolver

OPENROUTER = openai_compatible_adapter(
    "openrouter",
    api_key_env="OPENROUTER_KEY",
    models_url="https://openrouter.ai/api/v1/models",
    chat_url="https://openrouter.ai/api/v1/chat/completions",
)

MISTRAL = openai_compatible_adapter(
    "mistral",
    api_key_env="MISTRAL_KEY",
    models_url="https://api.mistral.ai/v1/models",
    chat_url="https://api.mistral.ai/v1/chat/completions",
)

GROQ = openai_compatible_adapter(
    "groq",
    api_key_env="GROQ_KEY",
    models_url="https://api.groq.com/openai/v1/models",
    chat_url="https://api.groq.com/openai/v1/chat/completions",
)


def openrouter_provider(**options) -> ProviderResolver:
    return ProviderResolver(OPENROUTER, **options)


def mistral_provider(**options) -> ProviderResolver:
    return ProviderResolver(MISTRAL, **options)


def groq_provider(**options) -> ProviderResolver:
    return ProviderResolver(GROQ, **options)
