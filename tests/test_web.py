"""Tests for the Slack webhook endpoints."""

import hashlib
import hmac
import json
import time
from urllib.parse import urlencode

import pytest
from fastapi import Request
from fastapi.testclient import TestClient

from connect_bot.config import Settings
from connect_bot.core.models import Channel
from connect_bot.service import ConnectService
from connect_bot.web import create_app


def make_client(storage, slack, **overrides) -> TestClient:
    settings = Settings(token="xoxb-test", **overrides)
    service = ConnectService(settings, storage=storage, adapter=slack)
    # no ``with`` block: the lifespan (auth + refresh loop) is not started
    return TestClient(create_app(service))


def command_body(text: str, command: str = "/connect", **extra: str) -> str:
    fields = {"command": command, "text": text, "channel_id": "C1", "channel_name": "general"}
    fields.update(extra)
    return urlencode(fields)


FORM = {"Content-Type": "application/x-www-form-urlencoded"}


def test_url_verification_echoes_challenge(storage, slack):
    client = make_client(storage, slack)
    resp = client.post("/slack/events", json={"type": "url_verification", "challenge": "abc123"})
    assert resp.status_code == 200
    assert resp.text == "abc123"
    assert resp.headers["content-type"].startswith("text/plain")


def test_other_events_are_ignored(storage, slack):
    client = make_client(storage, slack)
    resp = client.post("/slack/events", json={"type": "event_callback", "event": {"type": "message"}})
    assert resp.status_code == 200
    assert resp.content == b""


def test_bad_event_json_is_500(storage, slack):
    client = make_client(storage, slack)
    resp = client.post("/slack/events", content=b"{nope", headers={"Content-Type": "application/json"})
    assert resp.status_code == 500
    assert resp.content == b""


def test_command_returns_json_text(storage, slack):
    client = make_client(storage, slack)
    resp = client.post("/slack/command", content=command_body("create-team eng"), headers=FORM)
    assert resp.status_code == 200
    assert resp.json() == {"text": "Team 'eng' has been created."}

    # business failures are still HTTP 200
    resp = client.post("/slack/command", content=command_body("create-team eng"), headers=FORM)
    assert resp.status_code == 200
    assert resp.json() == {"text": "Team 'eng' already exists."}


def test_command_scenario(storage, slack):
    slack.add_profile("U123", display_name="Ada")
    client = make_client(storage, slack)
    for text, expected in [
        ("create-team eng", "Team 'eng' has been created."),
        ("add eng U123", "Added user Ada (U123) to team 'eng'."),
        ("print members eng", "Members of team 'eng': Ada (U123)"),
        ("remove-channel name", "Channel #name is not being tracked."),
    ]:
        resp = client.post("/slack/command", content=command_body(text), headers=FORM)
        assert resp.json() == {"text": expected}


def test_command_passes_channel_context(storage, slack):
    storage.save_channels({"C1": Channel(id="C1", name="general")})
    client = make_client(storage, slack)
    resp = client.post("/slack/command", content=command_body("add-channel"), headers=FORM)
    assert resp.json() == {"text": "Channel #general is already being tracked."}


def test_unknown_slash_command_is_500(storage, slack):
    client = make_client(storage, slack)
    resp = client.post("/slack/command", content=command_body("help", command="/other"), headers=FORM)
    assert resp.status_code == 500
    assert resp.content == b""


def test_custom_trigger(storage, slack):
    client = make_client(storage, slack, command="/teams")
    resp = client.post("/slack/command", content=command_body("help", command="/teams"), headers=FORM)
    assert resp.status_code == 200
    assert "/teams create-team <team>" in resp.json()["text"]


@pytest.mark.parametrize("body", [b"\xff\xfe", b"command"])
def test_body_without_command_is_500(storage, slack, body):
    client = make_client(storage, slack)
    resp = client.post("/slack/command", content=body, headers=FORM)
    assert resp.status_code == 500


def test_trailing_ampersand_is_accepted(storage, slack):
    client = make_client(storage, slack)
    resp = client.post(
        "/slack/command", content="command=%2Fconnect&text=print+teams&", headers=FORM
    )
    assert resp.status_code == 200
    assert resp.json() == {"text": "No teams found."}


def test_form_parse_failure_is_500(storage, slack, monkeypatch):
    async def broken_form(self, **kwargs):
        raise ValueError("malformed form")

    monkeypatch.setattr(Request, "form", broken_form)
    client = make_client(storage, slack)
    resp = client.post("/slack/command", content=command_body("print teams"), headers=FORM)
    assert resp.status_code == 500
    assert resp.content == b""


def _signed_headers(secret: str, body: bytes, ts: str | None = None) -> dict[str, str]:
    ts = ts or str(int(time.time()))
    base = b"v0:" + ts.encode() + b":" + body
    sig = "v0=" + hmac.new(secret.encode(), base, hashlib.sha256).hexdigest()
    return {**FORM, "X-Slack-Request-Timestamp": ts, "X-Slack-Signature": sig}


def test_signature_enforced_when_secret_configured(storage, slack):
    client = make_client(storage, slack, signing_secret="shh")
    body = command_body("print teams").encode()

    unsigned = client.post("/slack/command", content=body, headers=FORM)
    assert unsigned.status_code == 401

    signed = client.post("/slack/command", content=body, headers=_signed_headers("shh", body))
    assert signed.status_code == 200
    assert signed.json() == {"text": "No teams found."}

    event = json.dumps({"type": "url_verification", "challenge": "c"}).encode()
    assert client.post("/slack/events", content=event).status_code == 401
    resp = client.post("/slack/events", content=event, headers=_signed_headers("shh", event))
    assert resp.text == "c"


def test_health(storage, slack):
    assert make_client(storage, slack).get("/health").json() == {"status": "ok"}
