"""
chat-pulse service: counts !like / !dislike / !lurk commands from one
Twitch channel's chat and serves the totals.

HTTP endpoints:
  GET  /                   → bundled HTML overlay page
  GET  /data               → {"lurk_count": n, "like_count": n}
  GET  /rpc/status         → service health
  GET  /rpc/dashboard/tui  → ANSI dashboard

Launch with:  chat-pulse   (reads channel.txt from the working directory)
"""

import logging
import os
import time

from flask import Flask, Response

from chat_pulse import config
from chat_pulse.consumer import start_consumer
from chat_pulse.dashboard import register_dashboard
from chat_pulse.irc import TwitchChatClient
from chat_pulse.responses import MODULE_NAME, data_response, error, status_response
from chat_pulse.state import UserStateStore

log = logging.getLogger(__name__)

INDEX_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "static", "index.html")

with open(INDEX_PATH, "rb") as _f:
    INDEX_HTML = _f.read()


# ---------------------------------------------------------------------------
# Flask app
# ---------------------------------------------------------------------------

def create_service(store: UserStateStore, channel: str | None = None) -> Flask:
    """Build the HTTP facade over ``store``."""
    app = Flask(MODULE_NAME)
    start_time = time.time()

    @app.route("/")
    def index():
        return Response(INDEX_HTML, content_type="text/html; charset=utf-8")

    @app.route("/data")
    def data():
        return data_response(store.snapshot())

    @app.route("/rpc/status")
    def rpc_status():
        return status_response(store, channel=channel, start_time=start_time)

    @app.errorhandler(404)
    def _not_found(e):
        return error("Not found", 404)

    @app.errorhandler(500)
    def _internal_error(e):
        return error("Internal server error", 500)

    register_dashboard(app, store, channel)
    return app


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> int:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    channel = config.load_channel(config.CHANNEL_FILE)
    if channel is None:
        print(f"[chat_pulse] Edit {config.CHANNEL_FILE} with your channel name and run again", flush=True)
        return 0

    store = UserStateStore()

    client = TwitchChatClient()
    client.connect()

    # A malformed name is an operator error; let it abort startup.
    # JOIN goes out before the reader thread owns the TLS socket.
    client.join(channel)

    start_consumer(client.messages(), store, channel)

    app = create_service(store, channel)
    print(f"running server on {config.HOST}:{config.PORT}", flush=True)
    app.run(host=config.HOST, port=config.PORT, threaded=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
