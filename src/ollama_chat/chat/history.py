"""Bounded history window over a conversation's messages."""

from typing import Sequence, TypeVar

HISTORY_LIMIT = 10

T = TypeVar("T")


def build_history_window(messages: Sequence[T], limit: int = HISTORY_LIMIT) -> list[T]:
    """Return the last `limit` messages in their original order."""
    if limit <= 0:
        return []
    return list(messages[-limit:])
