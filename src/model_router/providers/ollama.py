"""Ollama (or any local OpenAI-compatible server).

The "credential" for this provider is the server's base URL, read from
``OLLAMA_URL``. No authentication header is sent and the history is only
stripped of comments, not repaired.
"""

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


async def fetch_ollama_models(client: httpx.AsyncClient, base_url: str) -> list[ModelRecord]:
    data = await fetch_json(
        client,
        f"{base_url.rstrip('/')}/v1/models",
        "ollama",
        use_error_body=False,
    )
    return records(data.get("data") if isinstance(data, dict) else None, "ollama")


def build_ollama_request(model: ModelRecord, payload: ChatPayload, base_url: str) -> RequestDescriptor:
    return chat_completions_request(
        f"{base_url.rstrip('/')}/v1/chat/completions",
        {"content-type": "application/json"},
        model.id,
        payload,
        repair=False,
        stream_usage=False,
    )


OLLAMA = ProviderAdapter(
    name="ollama",
    api_key_env="OLLAMA_URL",
    fetch_catalog=fetch_ollama_models,
    build_request=build_ollama_request,
)


def ollama_provider(**options) -> ProviderResolver:
    return ProviderResolver(OLLAMA, **options)
