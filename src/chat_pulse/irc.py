"""
Anonymous Twitch IRC reader.

Connects to Twitch chat over TLS with a read-only ``justinfan`` login,
joins a single channel and yields parsed IRC messages until the server
closes the connection. PINGs are answered inside :meth:`messages` so the
caller only sees chat traffic.
"""

from __future__ import annotations

import logging
import random
import re
import socket
import ssl
import threading
from dataclasses import dataclass, field

log = logging.getLogger(__name__)

DEFAULT_HOST = "irc.chat.twitch.tv"
DEFAULT_PORT = 6697

_LOGIN_RE = re.compile(r"^[a-z0-9_]{1,25}$")

_TAG_ESCAPES = {":": ";", "s": " ", "\\": "\\", "r": "\r", "n": "\n"}


@dataclass
class IrcMessage:
    command: str
    params: list[str] = field(default_factory=list)
    prefix: str | None = None
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def nick(self) -> str | None:
        """Sender nick from a ``nick!user@host`` prefix, if any."""
        if not self.prefix or "!" not in self.prefix:
            return None
        return self.prefix.split("!", 1)[0] or None


def _unescape_tag(value: str) -> str:
    out = []
    chars = iter(value)
    for ch in chars:
        if ch == "\\":
            nxt = next(chars, "")
            out.append(_TAG_ESCAPES.get(nxt, nxt))
        else:
            out.append(ch)
    return "".join(out)


def parse_line(line: str) -> IrcMessage:
    """Parse one raw IRC line (without the CRLF terminator)."""
    rest = line.rstrip("\r\n")
    if not rest:
        raise ValueError("empty IRC line")

    tags: dict[str, str] = {}
    if rest.startswith("@"):
        raw_tags, _, rest = rest[1:].partition(" ")
        for item in raw_tags.split(";"):
            if not item:
                continue
            key, _, value = item.partition("=")
            tags[key] = _unescape_tag(value)
        rest = rest.lstrip(" ")

    prefix = None
    if rest.startswith(":"):
        prefix, _, rest = rest[1:].partition(" ")
        rest = rest.lstrip(" ")

    trailing = None
    if " :" in rest:
        rest, trailing = rest.split(" :", 1)
    elif rest.startswith(":"):
        rest, trailing = "", rest[1:]

    parts = rest.split()
    if not parts:
        raise ValueError(f"IRC line has no command: {line!r}")

    params = parts[1:]
    if trailing is not None:
        params.append(trailing)
    return IrcMessage(command=parts[0].upper(), params=params, prefix=prefix, tags=tags)


def validate_channel_login(name: str) -> str:
    """Return ``name`` if it is a valid Twitch login, else raise ValueError."""
    if not _LOGIN_RE.match(name):
        raise ValueError(
            f"invalid channel login {name!r}: expected 1-25 characters of a-z, 0-9 or _"
        )
    return name


def anonymous_nick() -> str:
    return f"justinfan{random.randint(10000, 99999)}"


def _open_tls_socket(host: str, port: int) -> socket.socket:
    ctx = ssl.create_default_context()
    raw = socket.create_connection((host, port))
    return ctx.wrap_socket(raw, server_hostname=host)


class TwitchChatClient:
    """Read-only chat connection for one channel."""

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        nick: str | None = None,
        *,
        socket_factory=_open_tls_socket,
    ) -> None:
        self.host = host
        self.port = port
        self.nick = nick or anonymous_nick()
        self._socket_factory = socket_factory
        self._sock: socket.socket | None = None
        # Handshake and JOIN happen before messages() starts; PONGs come from the reading thread.
        self._send_lock = threading.Lock()

    def connect(self) -> None:
        self._sock = self._socket_factory(self.host, self.port)
        self.send("CAP REQ :twitch.tv/tags twitch.tv/commands")
        self.send(f"NICK {self.nick}")
        log.info("Connected to %s:%d as %s", self.host, self.port, self.nick)

    def send(self, line: str) -> None:
        if self._sock is None:
            raise RuntimeError("not connected")
        with self._send_lock:
            self._sock.sendall(f"{line}\r\n".encode("utf-8"))

    def join(self, channel: str) -> None:
        """Join ``channel``. Raises ValueError for a malformed login."""
        login = validate_channel_login(channel)
        self.send(f"JOIN #{login}")
        log.info("Joined #%s", login)

    def messages(self):
        """Yield parsed messages until the connection closes."""
        if self._sock is None:
            raise RuntimeError("not connected")
        buf = b""
        while True:
            chunk = self._sock.recv(4096)
            if not chunk:
                log.info("Chat connection closed by server")
                return
            buf += chunk
            while b"\n" in buf:
                raw, buf = buf.split(b"\n", 1)
                line = raw.decode("utf-8", errors="replace").rstrip("\r")
                if not line:
                    continue
                try:
                    msg = parse_line(line)
                except ValueError as e:
                    log.warning("Skipping unparseable IRC line: %s", e)
                    continue
                if msg.command == "PING":
                    token = msg.params[-1] if msg.params else "tmi.twitch.tv"
                    self.send(f"PONG :{token}")
                    continue
                yield msg

    def close(self) -> None:
        if self._sock is not None:
            try:
                self._sock.close()
            finally:
                self._sock = None
