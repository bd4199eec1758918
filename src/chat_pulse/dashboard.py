"""Terminal dashboard for chat-pulse.

The same ``build_dashboard()`` renderable backs two surfaces: the
``/rpc/dashboard/tui`` route (ANSI text rendered server-side) and the
``chat-pulse-tui`` live watcher, which polls ``/data`` over HTTP.
"""

from __future__ import annotations

import argparse
import logging
import time
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from flask import Flask

    from chat_pulse.state import UserStateStore

import httpx
from rich.console import Console, Group, RenderableType
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from chat_pulse import config

log = logging.getLogger(__name__)


def _sentiment_style(like_count: int) -> str:
    if like_count > 0:
        return "bold green"
    if like_count < 0:
        return "bold red"
    return "dim"


def build_dashboard(data: dict, channel: str | None = None, error: str | None = None) -> RenderableType:
    """Render aggregate counts as a Rich group."""
    like_count = int(data.get("like_count", 0))
    lurk_count = int(data.get("lurk_count", 0))

    header_text = Text()
    header_text.append("Chat Pulse", style="bold cyan")
    if channel:
        header_text.append("  |  ", style="dim")
        header_text.append(f"#{channel}", style="yellow")
    header_text.append("  |  ", style="dim")
    header_text.append("net likes ", style="dim")
    header_text.append(f"{like_count:+d}", style=_sentiment_style(like_count))
    header_text.append("  |  ", style="dim")
    header_text.append("lurkers ", style="dim")
    header_text.append(str(lurk_count), style="bold green")

    header = Panel(header_text, border_style="bright_blue", padding=(0, 1))

    table = Table(
        show_header=True,
        header_style="bold bright_blue",
        border_style="bright_black",
        expand=True,
        pad_edge=True,
    )
    table.add_column("Metric", style="cyan", ratio=2)
    table.add_column("Value", style="white", ratio=1)
    style = _sentiment_style(like_count)
    table.add_row("Net likes (!like - !dislike)", f"[{style}]{like_count}[/{style}]")
    table.add_row("Lurkers (!lurk)", str(lurk_count))

    parts: list[RenderableType] = [header, table]
    if error:
        parts.append(Text(f"  ⚠ {error}", style="bold yellow"))
    parts.append(Text("  Ctrl+C: exit", style="dim"))
    return Group(*parts)


def render_ansi(renderable: RenderableType, width: int = 80, height: int = 20) -> str:
    console = Console(record=True, width=width, height=height, force_terminal=True)
    console.print(renderable)
    return console.export_text(styles=True)


def register_dashboard(flask_app: Flask, store: UserStateStore, channel: str | None = None) -> None:
    """Add ``GET /rpc/dashboard/tui`` serving the dashboard as ANSI text."""
    from flask import Response, request

    @flask_app.route("/rpc/dashboard/tui", methods=["GET"])
    def _dashboard_tui():
        width = request.args.get("width", 80, type=int)
        height = request.args.get("height", 20, type=int)
        renderable = build_dashboard(store.snapshot().to_dict(), channel)
        ansi = render_ansi(renderable, width, height)
        return Response(ansi, content_type="text/plain; charset=utf-8")


class PulseDashboard:
    """Polls a running chat-pulse service and redraws the counts."""

    def __init__(self, service_url: str, channel: str | None = None) -> None:
        self.service_url = service_url.rstrip("/")
        self.channel = channel

    def fetch(self) -> dict[str, Any]:
        resp = httpx.get(f"{self.service_url}/data", timeout=5)
        resp.raise_for_status()
        return resp.json()

    def render(self) -> RenderableType:
        try:
            return build_dashboard(self.fetch(), self.channel)
        except httpx.HTTPError as e:
            log.warning("Dashboard fetch failed: %s", e)
            return build_dashboard({}, self.channel, error=f"cannot reach {self.service_url}: {e}")

    def watch(self, interval: float = 2.0) -> None:
        with Live(self.render(), refresh_per_second=4, screen=False) as live:
            try:
                while True:
                    time.sleep(interval)
                    live.update(self.render())
            except KeyboardInterrupt:
                pass


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Live terminal view of chat-pulse counts")
    parser.add_argument("--url", default=f"http://127.0.0.1:{config.PORT}", help="chat-pulse base URL")
    parser.add_argument("--interval", type=float, default=2.0, help="seconds between refreshes")
    parser.add_argument("--channel", default=None, help="channel name shown in the header")
    args = parser.parse_args(argv)

    PulseDashboard(args.url, args.channel).watch(args.interval)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
