"""Provider-agnostic request, catalog and resolution models."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["system", "user", "assistant", "tool", "comment"]


class ToolFunction(BaseModel):
    """Function half of a tool call; ``arguments`` is normally a JSON string."""

    model_config = ConfigDict(extra="allow")

    name: str
    arguments: str | dict[str, Any] = "{}"


class ToolCall(BaseModel):
    """Tool call emitted by an assistant message."""

    model_config = ConfigDict(extra="allow")

    id: str
    type: str | None = None
    function: ToolFunction
    # provider side channel, e.g. {"google": {"thought_signature": ...}}
    extra_content: dict[str, Any] | None = None


class Message(BaseModel):
    """Single chat message in canonical (chat-completions) form."""

    model_config = ConfigDict(extra="allow")

    role: Role
    content: Any = None
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None
    name: str | None = None


class ChatPayload(BaseModel):
    """Canonical request handed to a resolved handle; unknown fields pass through."""

    model_config = ConfigDict(extra="allow")

    messages: list[Message] = Field(default_factory=list)
    stream: bool | None = None


class ModelRecord(BaseModel):
    """Catalog entry as reported by a provider."""

    model_config = ConfigDict(extra="allow", frozen=True)

    id: str
    name: str | None = None


class ResolveArgs(BaseModel):
    """Arguments accompanying a resolution request.

    ``match`` defaults to ``"exact"`` the way the hosting framework fills it
    in; pass ``None`` (or any other mode) to match nothing.
    """

    model_config = ConfigDict(extra="allow")

    type: str = "any"
    match: str | None = "exact"
    output: str | None = None


class RequestDescriptor(BaseModel):
    """Fully formed, transport-agnostic HTTP request."""

    url: str
    method: str = "POST"
    headers: dict[str, str] = Field(default_factory=dict)
    body: str


@dataclass(frozen=True)
class ResolvedHandle:
    """Single-model resolution result."""

    source: str
    model: ModelRecord
    exec: Callable[[ChatPayload | Mapping[str, Any]], Awaitable[RequestDescriptor]]
    hook_msg: Callable[[Message], Message]
    kind: str = "llm"


@dataclass(frozen=True)
class ListingEntry:
    """One model reported in listing mode (``output="all"``)."""

    source: str
    name: str
    kind: str = "llm"


@dataclass(frozen=True)
class Listing:
    """Ordered, non-empty set of listing entries from one resolver."""

    entries: tuple[ListingEntry, ...]

    def __iter__(self) -> Iterator[ListingEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index: int) -> ListingEntry:
        return self.entries[index]

    @property
    def names(self) -> list[str]:
        return [entry.name for entry in self.entries]


# None is the decline outcome: "this resolver has no opinion".
Resolution = Union[ResolvedHandle, Listing, None]
