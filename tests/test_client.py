"""Tests for the dashboard session talking to /api/agent."""

import json
from datetime import datetime, timezone

import httpx
import pytest
from fastapi.testclient import TestClient

from callflow.board_store import BoardStore
from callflow.client import TRANSPORT_ERROR_TEXT, UNPARSEABLE_REPLY_TEXT, DashboardSession
from callflow.main import app

UTC = timezone.utc


@pytest.fixture
def store():
    return BoardStore.with_sample_data(now=datetime(2024, 1, 1, 9, 0, tzinfo=UTC), tz=UTC)


def _mock_session(store, handler):
    http = httpx.Client(base_url="http://callflow.test", transport=httpx.MockTransport(handler))
    return DashboardSession(store, http)


def test_send_message_round_trip(store, fake_openai):
    session = DashboardSession(store, TestClient(app))

    reply = session.send_message("  Who is next?  ")

    assert reply.role == "assistant"
    assert reply.content == "Call Jordan first; the SLA renewal is at risk."
    assert [m.role for m in store.messages] == ["assistant", "user", "assistant"]
    assert store.messages[1].content == "Who is next?"
    assert not session.thinking

    sent = fake_openai.chat.completions.create.call_args.kwargs["messages"]
    assert [m["role"] for m in sent] == ["system", "assistant", "user"]
    assert "Focus on Jordan Smith (Acme Logistics)." in sent[0]["content"]


def test_send_message_serializes_snapshot(store):
    seen = {}

    def handler(request):
        seen.update(json.loads(request.content))
        return httpx.Response(200, json={"reply": "ok"})

    session = _mock_session(store, handler)
    session.send_message("hello")

    assert seen["state"]["selectedCallId"] == "call-1"
    assert seen["state"]["calls"][1]["nextAction"].startswith("Compile engagement")
    assert "sentiment" not in seen["state"]["calls"][0]
    assert seen["messages"][-1] == {"role": "user", "content": "hello"}
    assert all(set(m) == {"role", "content"} for m in seen["messages"])


def test_blank_message_is_not_sent(store):
    def handler(request):
        raise AssertionError("no request expected")

    session = _mock_session(store, handler)

    assert session.send_message("   ") is None
    assert len(store.messages) == 1


def test_transport_failure_appends_error_message(store):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    session = _mock_session(store, handler)
    before = store.snapshot()

    reply = session.send_message("hello")

    assert reply.content == TRANSPORT_ERROR_TEXT
    assert reply.id.startswith("assistant-error-")
    assert store.snapshot() == before
    assert not session.thinking


def test_error_status_appends_error_message(store):
    session = _mock_session(store, lambda request: httpx.Response(502, json={"error": "Try again shortly."}))

    assert session.send_message("hello").content == TRANSPORT_ERROR_TEXT


def test_missing_reply_field(store):
    session = _mock_session(store, lambda request: httpx.Response(200, json={}))

    assert session.send_message("hello").content == UNPARSEABLE_REPLY_TEXT


def test_send_while_in_flight_is_skipped(store):
    def handler(request):
        raise AssertionError("no request expected")

    session = _mock_session(store, handler)
    session._in_flight.acquire()
    try:
        assert session.thinking
        assert session.send_message("hello") is None
    finally:
        session._in_flight.release()
    assert len(store.messages) == 1


def test_refresh_call_brief_writes_notes(store):
    seen = {}

    def handler(request):
        seen.update(json.loads(request.content))
        return httpx.Response(200, json={"reply": "Brief: renewal at risk."})

    session = _mock_session(store, handler)

    assert session.refresh_call_brief() == "Brief: renewal at risk."
    assert store.get_call("call-1").notes == "Brief: renewal at risk."
    assert [call["id"] for call in seen["state"]["calls"]] == ["call-1"]
    assert len(seen["state"]["tasks"]) == 3
    assert seen["messages"][0]["content"].startswith("Generate a high-impact call brief for Jordan Smith")
    assert len(store.messages) == 1


def test_refresh_call_brief_failure_keeps_notes(store):
    session = _mock_session(store, lambda request: httpx.Response(500, json={"error": "missing key"}))
    notes = store.get_call("call-1").notes

    assert session.refresh_call_brief() is None
    assert store.get_call("call-1").notes == notes


def test_refresh_call_brief_without_selection(store):
    store.select_call(None)
    session = _mock_session(store, lambda request: httpx.Response(200, json={"reply": "x"}))

    assert session.refresh_call_brief() is None
