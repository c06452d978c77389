"""Data-driven description of one upstream API."""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from model_router.messages import MessageTransform
from model_router.types import ChatPayload, Message, ModelRecord, RequestDescriptor, ResolveArgs

_logger = logging.getLogger(__name__)

CatalogFetch = Callable[[httpx.AsyncClient, str], Awaitable[list[ModelRecord]]]
RequestBuilder = Callable[[ModelRecord, ChatPayload, str], RequestDescriptor]
NameMatcher = Callable[[str], bool]
CatalogFilter = Callable[[Sequence[ModelRecord], str, ResolveArgs], Sequence[ModelRecord]]


@dataclass(frozen=True)
class ProviderAdapter:
    """Everything the generic resolver needs to know about one upstream API.

    New providers are added by constructing another value of this type.
    """

    name: str
    api_key_env: str
    fetch_catalog: CatalogFetch
    build_request: RequestBuilder
    # provider-level pre-filter on the requested name, before any catalog fetch
    match_name: NameMatcher | None = None
    # replaces the default exact/regex catalog matching
    filter_catalog: CatalogFilter | None = None
    transform_outgoing_message: MessageTransform | None = None
    transform_incoming_message: MessageTransform | None = None

    def select(self, models: Sequence[ModelRecord], name: str, args: ResolveArgs) -> list[ModelRecord]:
        if self.filter_catalog is not None:
            return list(self.filter_catalog(models, name, args))
        return match_catalog(models, name, args.match)

    def request(self, model: ModelRecord, payload: ChatPayload, credential: str) -> RequestDescriptor:
        """Apply the outgoing message hook, then build the upstream request."""
        if self.transform_outgoing_message is not None:
            payload = payload.model_copy(
                update={"messages": [self.transform_outgoing_message(m) for m in payload.messages]}
            )
        return self.build_request(model, payload, credential)

    def hook_msg(self, message: Message) -> Message:
        if self.transform_incoming_message is None:
            return message
        return self.transform_incoming_message(message)


def match_catalog(models: Sequence[ModelRecord], name: str, mode: str | None) -> list[ModelRecord]:
    """Default catalog matching.

    ``exact`` compares ids, ``regex`` searches ids with ``name`` as a pattern.
    Any other mode, including none, matches nothing.
    """
    if mode == "exact":
        return [m for m in models if m.id == name]
    if mode == "regex":
        try:
            pattern = re.compile(name)
        except re.error as exc:
            _logger.debug("Invalid model pattern %r: %s", name, exc)
            return []
        return [m for m in models if pattern.search(m.id)]
    return []


def coerce_payload(payload: ChatPayload | Mapping[str, Any]) -> ChatPayload:
    """Return a private copy so request building never mutates the caller's data."""
    if isinstance(payload, ChatPayload):
        return payload.model_copy(deep=True)
    return ChatPayload.model_validate(dict(payload))
