"""Chat command classification."""

from __future__ import annotations

from enum import Enum


class UserAction(Enum):
    """What a single chat message asks the state store to do."""

    LURK = "lurk"
    LIKE = "like"
    DISLIKE = "dislike"
    REFUND_LIKE = "refund_like"
    NONE = "none"


# Exact, case-sensitive literals. No trimming.
COMMANDS: dict[str, UserAction] = {
    "!like": UserAction.LIKE,
    "!dislike": UserAction.DISLIKE,
    "!lurk": UserAction.LURK,
    "!refundlike": UserAction.REFUND_LIKE,
}


def parse_command(text: str) -> UserAction:
    """Classify a raw chat message. Anything unrecognised is ``NONE``."""
    return COMMANDS.get(text, UserAction.NONE)
