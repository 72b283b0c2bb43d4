"""Tests for credentials.py — credential resolution and the user-id contract."""

import pytest

from iris_cli import config
from iris_cli.credentials import Credentials, resolve_credentials
from iris_cli.exceptions import CliError, SetupError


class TestResolveCredentials:
    def test_defaults_from_config(self):
        creds = resolve_credentials()
        assert creds.api_key == "fake-api-key-123456"
        assert creds.user_id == 193

    def test_flags_win(self):
        creds = resolve_credentials(api_key="flag-key", user_id="7")
        assert creds.api_key == "flag-key"
        assert creds.user_id == 7

    def test_empty_user_flag_falls_back(self):
        assert resolve_credentials(user_id="").user_id == 193

    def test_invalid_user_id(self):
        with pytest.raises(CliError) as exc_info:
            resolve_credentials(user_id="abc")
        assert str(exc_info.value) == "[ERROR] Invalid user id 'abc'. Expected an integer."

    def test_nothing_configured(self, monkeypatch):
        monkeypatch.setattr(config, "API_KEY", "")
        monkeypatch.setattr(config, "USER_ID", None)
        creds = resolve_credentials()
        assert creds.current_api_key() is None
        assert creds.current_user_id() is None


class TestCredentials:
    def test_require_user_id(self):
        assert Credentials("k", 5).require_user_id() == 5

    def test_require_user_id_missing(self):
        with pytest.raises(SetupError) as exc_info:
            Credentials("k").require_user_id()
        assert str(exc_info.value).startswith("[SETUP_NEEDED] user_id is required")

    def test_require_user_id_zero(self):
        with pytest.raises(SetupError):
            Credentials("k", 0).require_user_id()

    def test_require_api_key_missing(self):
        with pytest.raises(SetupError) as exc_info:
            Credentials("").require_api_key()
        assert "Missing API credentials" in str(exc_info.value)

    def test_with_user_returns_new_value(self):
        creds = Credentials("k", 1)
        other = creds.with_user(2)
        assert other == Credentials("k", 2)
        assert creds.user_id == 1

    def test_describe_masks_key(self):
        assert Credentials("secret-key-value", 3).describe() == {
            "api_key": "secret...",
            "user_id": 3,
        }

    def test_frozen(self):
        creds = Credentials("k", 1)
        with pytest.raises(AttributeError):
            creds.user_id = 2
