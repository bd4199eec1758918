"""
Stream consumer: the only writer to the user state store.

Events are handled strictly in arrival order. Anything that is not a chat
line for the configured channel is dropped without complaint; that is
ordinary filtering, not an error.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable

from chat_pulse.commands import parse_command
from chat_pulse.state import UserStateStore

log = logging.getLogger(__name__)

CHANNEL_MARKER = "#"


def extract_command(message, channel: str | None = None) -> tuple[str, str] | None:
    """Return ``(user_id, text)`` for an actionable event, else None.

    ``message`` needs a ``params`` sequence; the first param is the channel
    designator and the second the message text. The key is the sender nick
    when the event carries one, otherwise the bare channel name. Keying by
    nick is deliberate: it keeps one entry per chatter rather than one per
    channel.
    """
    params = getattr(message, "params", None) or ()
    target = params[0] if len(params) > 0 else None
    text = params[1] if len(params) > 1 else None

    if target is None or not target.startswith(CHANNEL_MARKER) or text is None:
        return None

    name = target[len(CHANNEL_MARKER):]
    if channel is not None and name != channel:
        return None

    user_id = getattr(message, "nick", None) or name
    return user_id, text


def consume(events: Iterable, store: UserStateStore, channel: str | None = None) -> int:
    """Drain ``events`` into ``store``. Returns the number of events applied."""
    applied = 0
    for message in events:
        extracted = extract_command(message, channel)
        if extracted is None:
            log.debug("Dropped event %r", getattr(message, "command", message))
            continue
        user_id, text = extracted
        store.apply(user_id, parse_command(text))
        applied += 1
    return applied


def _run(events: Iterable, store: UserStateStore, channel: str | None) -> None:
    applied = consume(events, store, channel)
    log.info("Chat stream ended after %d events", applied)


def start_consumer(events: Iterable, store: UserStateStore, channel: str | None = None) -> threading.Thread:
    """Run :func:`consume` on a daemon thread and return the thread."""
    worker = threading.Thread(
        target=_run,
        args=(events, store, channel),
        name="chat-consumer",
        daemon=True,
    )
    worker.start()
    return worker
