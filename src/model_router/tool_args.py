"""Structured access to JSON-encoded tool-call arguments.

Some providers attach opaque per-call data to tool calls that must survive
a multi-turn conversation. The canonical history keeps such data inside the
call's arguments document; on the wire it travels in ``extra_content``.
``SideChannelField`` moves one such value between the two places.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from model_router.types import Message, ToolCall


def decode_arguments(raw: str | dict[str, Any]) -> dict[str, Any] | None:
    """Return the arguments as a dict, or None when they are not a JSON object."""
    if isinstance(raw, dict):
        return dict(raw)
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return None
    return value if isinstance(value, dict) else None


def encode_arguments(args: dict[str, Any]) -> str:
    """Compact JSON, the same shape chat-completions APIs emit."""
    return json.dumps(args, separators=(",", ":"), ensure_ascii=False)


class SideChannelField:
    """One value that lives in the arguments in canonical form and in
    ``extra_content`` (at ``path``) in wire form."""

    def __init__(self, argument_key: str, path: Sequence[str]) -> None:
        if not path:
            raise ValueError("path must not be empty")
        self.argument_key = argument_key
        self.path = tuple(path)

    def to_side_channel(self, call: ToolCall) -> ToolCall:
        """Outgoing: pull the value out of the arguments into ``extra_content``."""
        args = decode_arguments(call.function.arguments)
        if args is None or not args.get(self.argument_key):
            return call
        value = args.pop(self.argument_key)

        extra = _deep_copy_dict(call.extra_content)
        node = extra
        for key in self.path[:-1]:
            child = node.get(key)
            if not isinstance(child, dict):
                child = {}
                node[key] = child
            node = child
        node[self.path[-1]] = value

        function = call.function.model_copy(update={"arguments": encode_arguments(args)})
        return call.model_copy(update={"function": function, "extra_content": extra})

    def to_arguments(self, call: ToolCall) -> ToolCall:
        """Incoming: move the value from ``extra_content`` back into the arguments."""
        value = self._lookup(call.extra_content)
        if not value:
            return call
        args = decode_arguments(call.function.arguments)
        if args is None:
            return call
        args[self.argument_key] = value

        extra = _deep_copy_dict(call.extra_content)
        _prune(extra, self.path)

        function = call.function.model_copy(update={"arguments": encode_arguments(args)})
        return call.model_copy(update={"function": function, "extra_content": extra or None})

    def outgoing(self, message: Message) -> Message:
        return self._map_calls(message, self.to_side_channel)

    def incoming(self, message: Message) -> Message:
        return self._map_calls(message, self.to_arguments)

    def _lookup(self, extra: dict[str, Any] | None) -> Any:
        node: Any = extra
        for key in self.path:
            if not isinstance(node, dict):
                return None
            node = node.get(key)
        return node

    @staticmethod
    def _map_calls(message: Message, convert) -> Message:
        if not message.tool_calls:
            return message
        calls = [convert(call) for call in message.tool_calls]
        if all(new is old for new, old in zip(calls, message.tool_calls)):
            return message
        return message.model_copy(update={"tool_calls": calls})


def _deep_copy_dict(value: dict[str, Any] | None) -> dict[str, Any]:
    if not value:
        return {}
    return {k: _deep_copy_dict(v) if isinstance(v, dict) else v for k, v in value.items()}


def _prune(node: dict[str, Any], path: tuple[str, ...]) -> None:
    """Delete the leaf at ``path`` and any containers it leaves empty."""
    head, rest = path[0], path[1:]
    if not rest:
        node.pop(head, None)
        return
    child = node.get(head)
    if isinstance(child, dict):
        _prune(child, rest)
        if not child:
            node.pop(head)
