import types

import pytest
import requests
from fastapi.testclient import TestClient

from webneva import providers
from webneva.main import app


client = TestClient(app)


@pytest.fixture(autouse=True)
def _providers_unset(monkeypatch):
    monkeypatch.setattr(providers, "DEEPSITE_API_URL", "")
    monkeypatch.setattr(providers, "DEEPSITE_API_KEY", "")
    monkeypatch.setattr(providers, "OPENAI_API_KEY", "sk-test")


class FakeResp:
    def __init__(self, status, payload):
        self.status_code = status
        self._payload = payload
        self.text = str(payload)

    def json(self):
        return self._payload


def _fake_openai(monkeypatch, outcome):
    captured = []

    def fake_post(url, headers=None, json=None, timeout=None, **kwargs):
        captured.append(json)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(providers, "requests", types.SimpleNamespace(post=fake_post))
    return captured


def test_explain_returns_reply(monkeypatch):
    captured = _fake_openai(monkeypatch, FakeResp(200, {"choices": [{"message": {"content": "- A nav bar"}}]}))
    r = client.post("/api/assist", json={"operationKind": "explain", "text": "<nav></nav>"})
    assert r.status_code == 200
    assert r.json() == {"reply": "- A nav bar"}
    assert captured[0]["messages"][0]["role"] == "system"
    assert captured[0]["messages"][1]["content"] == "<nav></nav>"


def test_refine_reply_is_not_html_validated(monkeypatch):
    _fake_openai(monkeypatch, FakeResp(200, {"choices": [{"message": {"content": "Audience: families"}}]}))
    r = client.post("/api/assist", json={"operationKind": "refine", "text": "cafe website"})
    assert r.status_code == 200
    assert r.json()["reply"] == "Audience: families"


def test_refine_accepts_brief_text(monkeypatch):
    captured = _fake_openai(monkeypatch, FakeResp(200, {"choices": [{"message": {"content": "Audience: families"}}]}))
    r = client.post("/api/assist", json={"operationKind": "refine", "briefText": "cafe website"})
    assert r.status_code == 200
    assert r.json()["reply"] == "Audience: families"
    assert captured[0]["messages"][-1]["content"] == "cafe website"


def test_explain_ignores_brief_text(monkeypatch):
    captured = _fake_openai(monkeypatch, FakeResp(200, {}))
    r = client.post("/api/assist", json={"operationKind": "explain", "briefText": "<p>x</p>"})
    assert r.status_code == 400
    assert r.json()["error"] == "MissingField"
    assert captured == []


def test_refine_without_text_is_missing_field(monkeypatch):
    captured = _fake_openai(monkeypatch, FakeResp(200, {}))
    r = client.post("/api/assist", json={"operationKind": "refine", "text": ""})
    assert r.status_code == 400
    assert r.json()["error"] == "MissingField"
    assert captured == []


def test_generate_kind_is_rejected_here():
    r = client.post("/api/assist", json={"operationKind": "generate", "text": "x"})
    assert r.status_code == 400
    assert r.json()["error"] == "InvalidOperation"


def test_upstream_error_is_surfaced(monkeypatch):
    _fake_openai(monkeypatch, FakeResp(500, {"error": "server"}))
    r = client.post("/api/assist", json={"operationKind": "explain", "text": "<p>x</p>"})
    assert r.status_code == 502
    assert r.json()["error"] == "ProviderTransportError"


def test_timeout_is_surfaced(monkeypatch):
    _fake_openai(monkeypatch, requests.Timeout("slow"))
    r = client.post("/api/assist", json={"operationKind": "explain", "text": "<p>x</p>"})
    assert r.status_code == 504
    assert r.json()["error"] == "ProviderTimeout"


def test_empty_reply_is_surfaced(monkeypatch):
    _fake_openai(monkeypatch, FakeResp(200, {"choices": [{"message": {"content": ""}}]}))
    r = client.post("/api/assist", json={"operationKind": "explain", "text": "<p>x</p>"})
    assert r.status_code == 502
    assert r.json()["error"] == "ProviderResponseInvalid"


def test_needs_chat_provider(monkeypatch):
    monkeypatch.setattr(providers, "OPENAI_API_KEY", "")
    monkeypatch.setattr(providers, "DEEPSITE_API_URL", "https://ds.example")
    monkeypatch.setattr(providers, "DEEPSITE_API_KEY", "ds")
    r = client.post("/api/assist", json={"operationKind": "explain", "text": "<p>x</p>"})
    assert r.status_code == 503
    assert r.json()["error"] == "NotConfigured"


def test_preflight_on_assist():
    r = client.options("/api/assist")
    assert r.status_code == 200
    assert r.content == b""
