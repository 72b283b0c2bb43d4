"""
Shared test fixtures for iris-cli tests.
Patches config module to avoid loading a real .env and making API calls.
"""

import pytest

from iris_cli.client import IrisClient
from iris_cli.credentials import Credentials


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch):
    """Ensure every test starts with a clean config state.
    Prevents tests from reading the real .env or logging to stderr."""
    from iris_cli import config

    monkeypatch.setattr(config, "env", {})
    monkeypatch.setattr(config, "IRIS_ENV", "production")
    monkeypatch.setattr(config, "API_KEY", "fake-api-key-123456")
    monkeypatch.setattr(config, "USER_ID", 193)
    monkeypatch.setattr(config, "BASE_URL", "https://api.test")
    monkeypatch.setattr(config, "IRIS_URL", "https://iris.test")
    monkeypatch.setattr(config, "FL_API_URL", "https://fl.test")
    monkeypatch.setattr(config, "HTTP_LOG_ENABLED", False)
    monkeypatch.setattr(config, "HTTP_MAX_RETRIES", 2)
    monkeypatch.setattr(config, "HTTP_RETRY_BASE_SECONDS", 0.0)
    monkeypatch.setattr(config, "RUNTIME_STRICT", False)
    monkeypatch.setattr(config, "RUNTIME_QUIET", False)
    monkeypatch.setattr(config, "RUNTIME_VERBOSE", False)


class FakeTransport:
    """Records every request and answers from a (method, path) table."""

    def __init__(self, credentials=None, responses=None):
        self.credentials = credentials
        self.responses = dict(responses or {})
        self.calls = []

    def _respond(self, method, path, payload):
        self.calls.append((method, path, payload))
        return self.responses.get((method, path), {"success": True})

    def get(self, path, params=None):
        return self._respond("GET", path, params)

    def post(self, path, data=None):
        return self._respond("POST", path, data)

    def put(self, path, data=None):
        return self._respond("PUT", path, data)

    def patch(self, path, data=None):
        return self._respond("PATCH", path, data)

    def delete(self, path):
        return self._respond("DELETE", path, None)

    @property
    def last(self):
        return self.calls[-1]


@pytest.fixture
def credentials():
    return Credentials(api_key="fake-api-key-123456", user_id=193)


@pytest.fixture
def transport(credentials):
    return FakeTransport(credentials)


@pytest.fixture
def client(credentials, transport):
    return IrisClient(credentials, transport=transport)
