"""Anthropic provider, addressed through its OpenAI-compatible endpoint."""

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

_DEFAULT_BASE_URL = "https://api.anthropic.com"
_MODELS_PATH = "/v1/models"
_CHAT_PATH = "/v1/chat/completions"
_API_VERSION = "2023-06-01"
_PAGE_LIMIT = 1000


async def fetch_anthropic_models(client: httpx.AsyncClient, api_key: str) -> list[ModelRecord]:
    data = await fetch_json(
        client,
        _DEFAULT_BASE_URL + _MODELS_PATH,
        "anthropic",
        headers={
            "x-api-key": api_key,
            "anthropic-version": _API_VERSION,
        },
        params={"limit": _PAGE_LIMIT},
    )
    return records(data.get("data") if isinstance(data, dict) else None, "anthropic")


def build_anthropic_request(model: ModelRecord, payload: ChatPayload, api_key: str) -> RequestDescriptor:
    return chat_completions_request(
        _DEFAULT_BASE_URL + _CHAT_PATH,
        {
            "content-type": "application/json",
            "authorization": f"Bearer {api_key}",
        },
        model.id,
        payload,
    )


ANTHROPIC = ProviderAdapter(
    name="anthropic",
    api_key_env="ANTHROPIC_KEY",
    fetch_catalog=fetch_anthropic_models,
    build_request=build_anthropic_request,
)


def anthropic_provider(**options) -> ProviderResolver:
    return ProviderResolver(ANTHROPIC, **options)
