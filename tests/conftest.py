"""Pytest shared fixtures for the Salesforce proxy tests."""
import json
import pathlib
import sys
from types import SimpleNamespace
from typing import Any, Optional

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from sf_proxy.api import EXTENSION_KEY
from sf_proxy.config.settings import AppConfig
from sf_proxy.flask_app import create_app


class StubResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(self, payload: Any = None, status_code: int = 200, text: Optional[str] = None):
        self._payload = payload
        self.status_code = status_code
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text
        self.content = text.encode("utf-8")

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """
    Prevent unit tests from reaching Salesforce.

    Integration tests are explicitly marked with @pytest.mark.integration and
    are allowed to perform real HTTP calls by skipping this fixture.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _stub_post(url, *args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP POST in unit test: {url}")

    def _stub_get(url, *args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP GET in unit test: {url}")

    def _stub_request(method, url, *args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP {method} in unit test: {url}")

    monkeypatch.setattr(requests, "post", _stub_post)
    monkeypatch.setattr(requests, "get", _stub_get)
    monkeypatch.setattr(requests, "request", _stub_request)


class FakeSalesforce:
    """Replays queued responses for token POSTs and REST requests, recording every call."""

    def __init__(self):
        self.calls: list[SimpleNamespace] = []
        self._token_responses: list = []
        self._api_responses: list = []

    def queue_token(self, payload: Any = None, status_code: int = 200, text: Optional[str] = None):
        self._token_responses.append(StubResponse(payload, status_code, text))

    def queue_api(self, payload: Any = None, status_code: int = 200, text: Optional[str] = None):
        self._api_responses.append(StubResponse(payload, status_code, text))

    def fail_token(self, exc: Exception):
        self._token_responses.append(exc)

    def fail_api(self, exc: Exception):
        self._api_responses.append(exc)

    @property
    def token_calls(self) -> list[SimpleNamespace]:
        return [call for call in self.calls if call.kind == "token"]

    @property
    def api_calls(self) -> list[SimpleNamespace]:
        return [call for call in self.calls if call.kind == "api"]

    def post(self, url, **kwargs):
        self.calls.append(SimpleNamespace(kind="token", method="POST", url=url, **kwargs))
        return self._next(self._token_responses, url)

    def request(self, method, url, **kwargs):
        self.calls.append(SimpleNamespace(kind="api", method=method, url=url, **kwargs))
        return self._next(self._api_responses, url)

    @staticmethod
    def _next(queue: list, url: str):
        if not queue:
            raise RuntimeError(f"No stubbed response left for {url}")
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture()
def fake_salesforce(monkeypatch):
    """Route ``requests.post`` / ``requests.request`` to a scripted fake."""
    fake = FakeSalesforce()
    monkeypatch.setattr(requests, "post", fake.post)
    monkeypatch.setattr(requests, "request", fake.request)
    return fake


# ─────────────────────────────────────────────────────────────────────────────
# Configuration
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def make_config():
    """Factory for ``AppConfig`` with web-flow defaults."""

    def _make(**overrides) -> AppConfig:
        base = dict(
            salesforce_client_id="test-client-id",
            salesforce_client_secret="test-client-secret",
            salesforce_auth_flow="web",
            salesforce_redirect_uri="http://localhost:5000/oauth/callback",
            salesforce_login_url="https://login.example.com",
            salesforce_api_version="60.0",
            salesforce_oauth_scope="api refresh_token",
        )
        base.update(overrides)
        return AppConfig(**base)

    return _make


@pytest.fixture()
def app_config(make_config):
    return make_config()


# ─────────────────────────────────────────────────────────────────────────────
# Flask Test Client
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def app(app_config):
    flask_app = create_app(app_config)
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture()
def services(app):
    """Salesforce services registered on the test app."""
    return app.extensions[EXTENSION_KEY]


@pytest.fixture()
def client(app):
    """Flask test client; outbound HTTP is blocked unless a test scripts it."""
    with app.test_client() as client:
        yield client
