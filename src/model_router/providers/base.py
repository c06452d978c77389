"""Helpers shared by the provider adapters: catalog fetch and request building."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import ValidationError

from model_router.errors import FetchError
from model_router.messages import prepare_messages
from model_router.types import ChatPayload, Message, ModelRecord, RequestDescriptor


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    provider: str,
    *,
    headers: Mapping[str, str] | None = None,
    params: Mapping[str, Any] | None = None,
    use_error_body: bool = True,
) -> Any:
    """GET ``url`` and decode JSON, turning every failure into ``FetchError``."""
    try:
        response = await client.get(url, headers=dict(headers or {}), params=params)
    except httpx.HTTPError as exc:
        raise FetchError(provider, str(exc) or type(exc).__name__) from exc

    if response.status_code >= 400:
        raise FetchError(
            provider,
            _error_message(response, use_error_body),
            status_code=response.status_code,
        )
    try:
        return response.json()
    except ValueError as exc:
        raise FetchError(provider, f"invalid catalog response: {exc}", response.status_code) from exc


def _error_message(response: httpx.Response, use_error_body: bool) -> str:
    status_line = f"{response.status_code} {response.reason_phrase}".strip()
    if not use_error_body:
        return f"Error: {status_line}"
    try:
        data = response.json()
    except ValueError:
        return status_line
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and isinstance(error.get("message"), str) and error["message"]:
        return error["message"]
    return status_line


def records(items: Any, provider: str) -> list[ModelRecord]:
    if not isinstance(items, list):
        raise FetchError(provider, "invalid catalog response: expected a list of models")
    try:
        return [ModelRecord.model_validate(item) for item in items]
    except ValidationError as exc:
        raise FetchError(provider, f"invalid catalog response: {exc}") from exc


def chat_completions_request(
    url: str,
    headers: Mapping[str, str],
    model_id: str,
    payload: ChatPayload,
    *,
    repair: bool = True,
    stream_usage: bool = True,
) -> RequestDescriptor:
    """Build an OpenAI chat-completions style request.

    Payload fields other than ``messages`` are copied into the body after
    ``model``, so a caller-supplied ``model`` wins.
    """
    messages = prepare_messages(payload.messages, repair=repair)

    fields = payload.model_dump(mode="json", exclude={"messages"})
    if "stream" not in payload.model_fields_set:
        fields.pop("stream", None)
    if stream_usage and payload.stream:
        fields["stream_options"] = {"include_usage": True}

    body: dict[str, Any] = {"model": model_id, **fields}
    body["messages"] = [m.model_dump(mode="json", exclude_unset=True) for m in messages]

    return RequestDescriptor(
        url=url,
        method="POST",
        headers=dict(headers),
        body=json.dumps(body, ensure_ascii=False),
    )


def null_content_to_list(message: Message) -> Message:
    """Some upstreams reject ``content: null``; send an empty list instead."""
    if message.content is None:
        return message.model_copy(update={"content": []})
    return message
