"""
Per-user chat state and the reducer that mutates it.

Each user maps to a small set of flags. ``Like`` and ``Dislike`` never
coexist in one set, and ``HasLurked`` is never removed once added. A user
with no entry is treated exactly like a user with an empty set.

One writer (the stream consumer) and any number of readers (HTTP handlers)
share a single :class:`UserStateStore`. Every read and write takes the same
lock for one whole operation, so readers always see the state between two
complete ``apply`` calls.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass
from enum import Enum

from chat_pulse.commands import UserAction

log = logging.getLogger(__name__)


class UserState(Enum):
    LIKE = "like"
    DISLIKE = "dislike"
    HAS_LURKED = "has_lurked"


@dataclass(frozen=True)
class Data:
    """Aggregate counts served to clients. ``like_count`` may be negative."""

    lurk_count: int = 0
    like_count: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


def apply_action(flags: set[UserState], action: UserAction) -> None:
    """Apply one action to a single user's flag set, in place."""
    if action is UserAction.LURK:
        flags.add(UserState.HAS_LURKED)

    elif action is UserAction.LIKE:
        if UserState.LIKE in flags:
            return
        flags.discard(UserState.DISLIKE)
        flags.add(UserState.LIKE)

    elif action is UserAction.DISLIKE:
        if UserState.DISLIKE in flags:
            return
        flags.discard(UserState.LIKE)
        flags.add(UserState.DISLIKE)

    elif action is UserAction.REFUND_LIKE:
        # Clears whichever sentiment is held, not only the one given.
        flags.discard(UserState.LIKE)
        flags.discard(UserState.DISLIKE)


class UserStateStore:
    """Lock-guarded mapping of user identity to that user's flags."""

    def __init__(self) -> None:
        self._users: dict[str, set[UserState]] = {}
        self._lock = threading.Lock()

    def apply(self, user_id: str, action: UserAction) -> None:
        """Apply ``action`` to ``user_id``, creating the entry if needed.

        ``NONE`` returns before the lock is taken so irrelevant chatter never
        creates empty entries.
        """
        if action is UserAction.NONE:
            return
        with self._lock:
            flags = self._users.setdefault(user_id, set())
            apply_action(flags, action)
        log.debug("Applied %s for %s", action.value, user_id)

    def snapshot(self) -> Data:
        """Compute the current aggregate counts."""
        like_count = 0
        lurk_count = 0
        with self._lock:
            for flags in self._users.values():
                if UserState.LIKE in flags:
                    like_count += 1
                if UserState.DISLIKE in flags:
                    like_count -= 1
                if UserState.HAS_LURKED in flags:
                    lurk_count += 1
        return Data(lurk_count=lurk_count, like_count=like_count)

    def flags_for(self, user_id: str) -> frozenset[UserState]:
        """Return a copy of one user's flags. Never creates an entry."""
        with self._lock:
            return frozenset(self._users.get(user_id, ()))

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)
