"""Google Gemini provider via the OpenAI-compatible endpoint.

Two quirks are handled here:

- ``content: null`` is rejected upstream, so it is sent as an empty list.
- Tool calls returned by Gemini carry an opaque thought signature in
  ``extra_content.google.thought_signature`` that must be sent back on later
  turns. The canonical history keeps it inside the call's arguments as
  ``google_thought_signature``; ``hook_msg`` moves it there when a response
  is recorded and request building moves it back out.
"""

from __future__ import annotations

from typing import Any

import httpx

from model_router.adapter import ProviderAdapter
from model_router.errors import FetchError
from model_router.providers.base import (
    chat_completions_request,
    fetch_json,
    null_content_to_list,
    records,
)
from model_router.resolver import ProviderResolver
from model_router.tool_args import SideChannelField
from model_router.types import ChatPayload, ModelRecord, RequestDescriptor

_DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
_MODELS_PATH = "/models"
_CHAT_PATH = "/openai/chat/completions"
_PAGE_SIZE = 200

THOUGHT_SIGNATURE = SideChannelField("google_thought_signature", ("google", "thought_signature"))


def _with_short_id(item: Any) -> dict[str, Any]:
    if not isinstance(item, dict) or not isinstance(item.get("name"), str):
        raise FetchError("gemini", "invalid catalog response: model without a name")
    # "models/gemini-2.0-flash" -> "gemini-2.0-flash"
    _, _, short = item["name"].partition("/")
    return {**item, "id": short or item["name"]}


async def fetch_gemini_models(client: httpx.AsyncClient, api_key: str) -> list[ModelRecord]:
    models: list[ModelRecord] = []
    page_token: str | None = None
    while True:
        params: dict[str, Any] = {"key": api_key, "pageSize": _PAGE_SIZE}
        if page_token:
            params["pageToken"] = page_token
        data = await fetch_json(client, _DEFAULT_BASE_URL + _MODELS_PATH, "gemini", params=params)
        if not isinstance(data, dict) or not isinstance(data.get("models", []), list):
            raise FetchError("gemini", "invalid catalog response: expected a list of models")
        models.extend(records([_with_short_id(m) for m in data.get("models", [])], "gemini"))
        page_token = data.get("nextPageToken")
        if not page_token:
            return models


def build_gemini_request(model: ModelRecord, payload: ChatPayload, api_key: str) -> RequestDescriptor:
    payload = payload.model_copy(
        update={"messages": [null_content_to_list(m) for m in payload.messages]}
    )
    return chat_completions_request(
        _DEFAULT_BASE_URL + _CHAT_PATH,
        {
            "content-type": "application/json",
            "authorization": f"Bearer {api_key}",
        },
        model.id,
        payload,
    )


GEMINI = ProviderAdapter(
    name="gemini",
    api_key_env="GEMINI_KEY",
    fetch_catalog=fetch_gemini_models,
    build_request=build_gemini_request,
    transform_outgoing_message=THOUGHT_SIGNATURE.outgoing,
    transform_incoming_message=THOUGHT_SIGNATURE.incoming,
)


def gemini_provider(**options) -> ProviderResolver:
    return ProviderResolver(GEMINI, **options)
