"""Runtime configuration: the channel file plus environment overrides."""

from __future__ import annotations

import logging
import os
from pathlib import Path

log = logging.getLogger(__name__)

CHANNEL_FILE = Path(os.environ.get("CHAT_PULSE_CHANNEL_FILE", "channel.txt"))
CHANNEL_PLACEHOLDER = "<Channel Name Here (The Name in the URL)>"

HOST = "0.0.0.0"
PORT = int(os.environ.get("CHAT_PULSE_PORT", "35395"))
LOG_LEVEL = os.environ.get("CHAT_PULSE_LOG_LEVEL", "INFO").upper()


def load_channel(path: str | Path = CHANNEL_FILE) -> str | None:
    """Read the channel name from ``path``.

    On first run the file does not exist yet: write the placeholder so the
    operator knows what to fill in, and return None.
    """
    path = Path(path)
    if not path.exists():
        path.write_text(CHANNEL_PLACEHOLDER)
        log.info("Wrote %s; put the channel name in it and restart", path)
        return None
    return path.read_text().strip()
