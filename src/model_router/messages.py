"""Structural repair of a chat history before it is sent upstream."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from model_router.types import Message

CONTINUE_PROMPT = "go on"
CANCELLED_TOOL_RESULT = "tool call cancelled"

MessageTransform = Callable[[Message], Message]


def as_messages(items: Iterable[Message | Mapping[str, Any]]) -> list[Message]:
    return [m if isinstance(m, Message) else Message.model_validate(m) for m in items]


def auto_fix_messages(messages: Sequence[Message]) -> list[Message]:
    """Return a repaired copy of ``messages``.

    - A leading system message must be followed by a user turn; a
      ``"go on"`` user message is inserted when it is not.
    - Every tool call must be answered by a ``tool`` message within the next
      ``len(tool_calls)`` messages. The answers found there are moved up to
      sit directly after the calling message, and unanswered calls get a
      placeholder result appended to that run. A real result that shows up
      later for a cancelled call is dropped, unless a later assistant turn
      issues the same id again.

    The input is not modified, and repairing a repaired history is a no-op.
    """
    fixed: list[Message] = []
    claimed: set[int] = set()
    cancelled: set[str] = set()

    for index, msg in enumerate(messages):
        if index in claimed:
            continue
        if msg.role == "tool" and msg.tool_call_id in cancelled:
            continue
        fixed.append(msg)

        if index == 0 and msg.role == "system":
            following = messages[1] if len(messages) > 1 else None
            if following is None or following.role != "user":
                fixed.append(Message(role="user", content=CONTINUE_PROMPT))

        if not msg.tool_calls:
            continue

        # keyed by id so duplicate ids are only closed once
        calls = {call.id: call for call in msg.tool_calls}
        cancelled.difference_update(calls)

        start = index + 1
        answered: set[str] = set()
        for offset, candidate in enumerate(messages[start : start + len(msg.tool_calls)]):
            call_id = candidate.tool_call_id
            if candidate.role != "tool" or call_id not in calls or call_id in answered:
                continue
            if start + offset in claimed:
                continue
            answered.add(call_id)
            claimed.add(start + offset)
            fixed.append(candidate)

        for call_id, call in calls.items():
            if call_id in answered:
                continue
            cancelled.add(call_id)
            fixed.append(
                Message(
                    role="tool",
                    tool_call_id=call_id,
                    content=CANCELLED_TOOL_RESULT,
                    name=call.function.name,
                )
            )

    return fixed


def strip_comments(messages: Iterable[Message]) -> list[Message]:
    """Drop metadata-only ``comment`` messages."""
    return [m for m in messages if m.role != "comment"]


def prepare_messages(
    messages: Sequence[Message],
    *,
    repair: bool = True,
    transform: MessageTransform | None = None,
) -> list[Message]:
    """Repair (optionally), strip comments, then apply a per-message transform."""
    result = auto_fix_messages(messages) if repair else list(messages)
    result = strip_comments(result)
    if transform is not None:
        result = [transform(m) for m in result]
    return result
