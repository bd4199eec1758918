"""JSON bodies served by chat-pulse.

``/data`` is the bare aggregate object the overlay page polls. The
``/rpc/*`` routes wrap their payloads in an envelope:
    {"success": true, "data": ...}
    {"success": false, "error": "..."}
"""

import time

from flask import jsonify

from chat_pulse.state import Data, UserStateStore

MODULE_NAME = "chat_pulse"


def data_response(data: Data):
    """Serve aggregate counts without an envelope."""
    return jsonify(data.to_dict())


def error(msg, status=400):
    """Return an error envelope with the given HTTP status code."""
    return jsonify({"success": False, "error": msg}), status


def status_body(store: UserStateStore, *, channel=None, start_time=None) -> dict:
    """Health payload: uptime, tracked users and the current counts."""
    body = {"status": "running", "module": MODULE_NAME, "channel": channel, "users": len(store)}
    if start_time is not None:
        body["uptime_secs"] = int(time.time() - start_time)
    body.update(store.snapshot().to_dict())
    return body


def status_response(store: UserStateStore, *, channel=None, start_time=None):
    return jsonify({"success": True, "data": status_body(store, channel=channel, start_time=start_time)})
