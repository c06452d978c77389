"""OpenAI provider and the generic OpenAI-compatible adapter builder."""

from __future__ import annotations

import httpx

from model_router.adapter import ProviderAdapter
from model_router.providers.base import (
    chat_completions_request,
    fetch_json,
    records,
)
from model_router.resolver import ProviderResolver
from model_router.types import ChatPayload, ModelRecord, RequestDescriptor

_DEFAULT_BASE_URL = "https://api.openai.com"
_MODELS_PATH = "/v1/models"
_CHAT_PATH = "/v1/chat/completions"


def openai_compatible_adapter(
    name: str,
    *,
    api_key_env: str,
    models_url: str,
    chat_url: str,
) -> ProviderAdapter:
    """Adapter for any upstream speaking the OpenAI models/chat-completions API
    with bearer authentication."""

    async def fetch_catalog(client: httpx.AsyncClient, api_key: str) -> list[ModelRecord]:
        data = await fetch_json(
            client,
            models_url,
            name,
            headers={"Authorization": f"Bearer {api_key}"},
        )
        return records(data.get("data") if isinstance(data, dict) else None, name)

    def build_request(model: ModelRecord, payload: ChatPayload, api_key: str) -> RequestDescriptor:
        return chat_completions_request(
            chat_url,
            {
                "content-type": "application/json",
                "authorization": f"Bearer {api_key}",
            },
            model.id,
            payload,
        )

    return ProviderAdapter(
        name=name,
        api_key_env=api_key_env,
        fetch_catalog=fetch_catalog,
        build_request=build_request,
    )


OPENAI = openai_compatible_adapter(
    "openai",
    api_key_env="OPENAI_KEY",
    models_url=_DEFAULT_BASE_URL + _MODELS_PATH,
    chat_url=_DEFAULT_BASE_URL + _CHAT_PATH,
)


def openai_provider(**options) -> ProviderResolver:
    """Resolver for models served by api.openai.com."""
    return ProviderResolver(OPENAI, **options)
