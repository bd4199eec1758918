"""
Tests for the HTTP facade and startup sequence.

See chat_pulse/service.py for implementation.
"""

import pytest

from chat_pulse import config, service
from chat_pulse.commands import UserAction
from chat_pulse.irc import validate_channel_login


def test_index_serves_bundled_page(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.content_type.startswith("text/html")
    assert resp.data == service.INDEX_HTML
    assert b"/data" in resp.data


def test_data_empty(client):
    resp = client.get("/data")
    assert resp.status_code == 200
    assert resp.get_json() == {"lurk_count": 0, "like_count": 0}


def test_data_reflects_store(client, store):
    store.apply("alice", UserAction.DISLIKE)
    store.apply("bob", UserAction.LURK)
    assert client.get("/data").get_json() == {"lurk_count": 1, "like_count": -1}


def test_status(client, store):
    store.apply("alice", UserAction.LIKE)
    store.apply("bob", UserAction.LURK)
    body = client.get("/rpc/status").get_json()
    assert body["success"] is True
    assert body["data"]["status"] == "running"
    assert body["data"]["module"] == "chat_pulse"
    assert body["data"]["users"] == 2
    assert body["data"]["channel"] == "somechannel"
    assert body["data"]["like_count"] == 1
    assert body["data"]["lurk_count"] == 1
    assert "uptime_secs" in body["data"]


def test_unknown_route_uses_error_envelope(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.get_json() == {"success": False, "error": "Not found"}


def test_unhandled_error_uses_error_envelope(store):
    app = service.create_service(store)
    app.config["PROPAGATE_EXCEPTIONS"] = False

    @app.route("/boom")
    def boom():
        raise RuntimeError("boom")

    resp = app.test_client().get("/boom")
    assert resp.status_code == 500
    assert resp.get_json() == {"success": False, "error": "Internal server error"}


def test_tui_route_renders_counts(client, store):
    store.apply("alice", UserAction.LIKE)
    resp = client.get("/rpc/dashboard/tui?width=100")
    assert resp.status_code == 200
    assert resp.content_type.startswith("text/plain")
    assert "Chat Pulse" in resp.get_data(as_text=True)


# =============================================================================
# STARTUP
# =============================================================================

def test_main_bootstraps_missing_channel_file(tmp_path, monkeypatch):
    path = tmp_path / "channel.txt"
    monkeypatch.setattr(config, "CHANNEL_FILE", path)

    def fail(*args, **kwargs):
        raise AssertionError("no connection expected on first run")

    monkeypatch.setattr(service, "TwitchChatClient", fail)

    assert service.main() == 0
    assert path.read_text() == config.CHANNEL_PLACEHOLDER


class FakeClient:
    instances = []

    def __init__(self):
        self.joined = None
        self.calls = []
        FakeClient.instances.append(self)

    def connect(self):
        self.calls.append("connect")

    def messages(self):
        self.calls.append("messages")
        return iter([])

    def join(self, channel):
        self.calls.append("join")
        self.joined = validate_channel_login(channel)


def test_main_aborts_on_malformed_channel(tmp_path, monkeypatch):
    path = tmp_path / "channel.txt"
    path.write_text(config.CHANNEL_PLACEHOLDER)
    monkeypatch.setattr(config, "CHANNEL_FILE", path)
    monkeypatch.setattr(service, "TwitchChatClient", FakeClient)

    with pytest.raises(ValueError, match="invalid channel login"):
        service.main()
    # Nothing starts reading from a connection that failed to join.
    assert "messages" not in FakeClient.instances[-1].calls


def test_main_joins_and_serves(tmp_path, monkeypatch, capsys):
    path = tmp_path / "channel.txt"
    path.write_text("somechannel\n")
    monkeypatch.setattr(config, "CHANNEL_FILE", path)
    monkeypatch.setattr(service, "TwitchChatClient", FakeClient)

    served = {}

    def fake_run(self, host=None, port=None, **kwargs):
        served["host"] = host
        served["port"] = port

    monkeypatch.setattr(service.Flask, "run", fake_run)

    assert service.main() == 0
    fake = FakeClient.instances[-1]
    assert fake.joined == "somechannel"
    # JOIN is written before the reader thread takes over the socket.
    assert fake.calls == ["connect", "join", "messages"]
    assert served == {"host": "0.0.0.0", "port": config.PORT}
    assert f"running server on 0.0.0.0:{config.PORT}" in capsys.readouterr().out
