"""Pytest shared fixtures for the OSIAM client tests."""
import json
import pathlib
import sys
from datetime import datetime, timedelta, timezone
from typing import Optional

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from osiam_client import transport as transport_module
from osiam_client.token import AccessToken


class _StubResponse:
    def __init__(self, payload=None, status_code: int = 200, text: Optional[str] = None, reason: Optional[str] = None):
        self._payload = payload
        self.status_code = status_code
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text
        self.reason = reason

    def json(self):
        return json.loads(self.text)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(response=self)


class FakeTransport:
    """Records requests and answers them from a queue of stub responses."""

    def __init__(self):
        self.calls = []
        self.responses = []

    def queue(self, payload=None, status_code: int = 200, text: Optional[str] = None, reason: Optional[str] = None):
        self.responses.append(_StubResponse(payload, status_code, text, reason))
        return self

    def fail_with(self, exc: Exception):
        self.responses.append(exc)
        return self

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.responses:
            raise AssertionError(f"Unexpected HTTP {method} in unit test: {url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last_call(self):
        return self.calls[-1]


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _no_network(monkeypatch):
    """Prevent unit tests from opening real connections and reset the shared transport."""

    def _blocked(self, method, url, *args, **kwargs):
        raise RuntimeError(f"Unexpected network access in tests: {method} {url}")

    monkeypatch.setattr(requests.Session, "request", _blocked)
    transport_module.set_transport(None)
    yield
    transport_module.set_transport(None)


@pytest.fixture()
def fake_transport():
    return FakeTransport()


@pytest.fixture()
def access_token():
    return AccessToken(
        token="2cf7924f-b725-43b8-8d2d-09bc384cf9e0",
        expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        scopes=frozenset({"GET", "POST"}),
    )
