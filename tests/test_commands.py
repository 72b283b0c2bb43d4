"""Tests for commands.py — cmd_* wrappers around the dispatcher and formatters."""

import argparse
import json
from unittest.mock import patch

import pytest

from iris_cli import config
from iris_cli.commands import (
    _output_mode,
    _split_call_options,
    cmd_call,
    cmd_config,
    cmd_endpoints,
)
from iris_cli.exceptions import CliError, SetupError


def _ns(**kwargs):
    defaults = {
        "endpoint": "leads.list",
        "params": [],
        "json": False,
        "raw": False,
        "api_key": None,
        "user_id": None,
        "format": None,
        "resource": None,
    }
    defaults.update(kwargs)
    return argparse.Namespace(**defaults)


class TestSplitCallOptions:
    def test_flags_and_params(self):
        options, params = _split_call_options(["412", "--json", "content=Hi"])
        assert options == {"json": True}
        assert params == ["412", "content=Hi"]

    def test_value_options(self):
        options, params = _split_call_options(["--api-key", "k", "--user-id=7", "x=1"])
        assert options == {"api_key": "k", "user_id": "7"}
        assert params == ["x=1"]

    def test_value_option_missing_value(self):
        with pytest.raises(CliError) as exc_info:
            _split_call_options(["--user-id"])
        assert "--user-id requires a value" in str(exc_info.value)

    def test_unknown_dashed_tokens_are_params(self):
        options, params = _split_call_options(["--limit", "-5"])
        assert options == {}
        assert params == ["--limit", "-5"]


class TestOutputMode:
    def test_default_table(self):
        assert _output_mode(_ns(), {}) == "table"

    def test_json_from_option_or_format(self):
        assert _output_mode(_ns(), {"json": True}) == "json"
        assert _output_mode(_ns(format="json"), {}) == "json"

    def test_raw_wins_with_warning(self, capsys):
        assert _output_mode(_ns(json=True), {"raw": True}) == "raw"
        assert "[WARN] --raw and --json both given" in capsys.readouterr().err

    def test_quiet_suppresses_warning(self, capsys, monkeypatch):
        monkeypatch.setattr(config, "RUNTIME_QUIET", True)
        _output_mode(_ns(json=True, raw=True), {})
        assert capsys.readouterr().err == ""


class TestCmdCall:
    @patch("iris_cli.commands.IrisClient")
    def test_dispatches_params(self, mock_client_cls, capsys):
        dispatcher = mock_client_cls.return_value.dispatcher.return_value
        dispatcher.dispatch.return_value = [{"id": 1, "name": "Tha Juan"}]
        cmd_call(_ns(endpoint="leads.list", params=["search=Tha Juan", "--json"]))
        dispatcher.dispatch.assert_called_once_with("leads.list", ["search=Tha Juan"])
        assert json.loads(capsys.readouterr().out) == [{"id": 1, "name": "Tha Juan"}]

    @patch("iris_cli.commands.IrisClient")
    def test_table_output(self, mock_client_cls, capsys):
        mock_client_cls.return_value.dispatcher.return_value.dispatch.return_value = []
        cmd_call(_ns())
        assert capsys.readouterr().out.strip() == "No results found"

    @patch("iris_cli.commands.IrisClient")
    def test_credential_overrides(self, mock_client_cls):
        mock_client_cls.return_value.dispatcher.return_value.dispatch.return_value = None
        cmd_call(_ns(api_key="flag-key", params=["--user-id", "7"]))
        credentials = mock_client_cls.call_args[0][0]
        assert credentials.api_key == "flag-key"
        assert credentials.user_id == 7

    @patch("iris_cli.commands.IrisClient")
    def test_invalid_endpoint(self, mock_client_cls):
        with pytest.raises(CliError) as exc_info:
            cmd_call(_ns(endpoint="leads."))
        assert "Invalid endpoint format" in str(exc_info.value)
        mock_client_cls.assert_not_called()

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.setattr(config, "API_KEY", "")
        with pytest.raises(SetupError):
            cmd_call(_ns())

    def test_invalid_user_id(self):
        with pytest.raises(CliError) as exc_info:
            cmd_call(_ns(user_id="abc"))
        assert "Invalid user id 'abc'" in str(exc_info.value)


class TestCmdEndpoints:
    def test_table(self, capsys):
        cmd_endpoints(_ns(resource="bloqs"))
        out = capsys.readouterr().out
        assert "bloqs.create" in out
        assert "leads.list" not in out
        assert "Total:" in out

    def test_json(self, capsys):
        cmd_endpoints(_ns(resource="agents", format="json"))
        rows = json.loads(capsys.readouterr().out)
        assert {"endpoint", "signature", "doc"} <= set(rows[0])


class TestCmdConfig:
    def test_masks_api_key(self, capsys):
        cmd_config(_ns(format="json"))
        info = json.loads(capsys.readouterr().out)
        assert info["api_key"] == "fake-a..."
        assert info["user_id"] == 193
        assert info["environment"] == "production"
        assert info["base_url"] == "https://api.test"

    def test_missing_key_shows_null(self, capsys, monkeypatch):
        monkeypatch.setattr(config, "API_KEY", "")
        cmd_config(_ns(format="json"))
        assert json.loads(capsys.readouterr().out)["api_key"] is None

    def test_table(self, capsys):
        cmd_config(_ns())
        out = capsys.readouterr().out
        assert out.split("\n")[0].split() == ["Setting", "Value"]
        assert "fake-api-key-123456" not in out


class TestCmdConfigSet:
    def test_saves_known_key(self, tmp_path, monkeypatch, capsys):
        env_file = tmp_path / ".env"
        monkeypatch.setattr(config, "ENV_PATH", str(env_file))
        cmd_config(_ns(action="set", key="IRIS_USER_ID", value="193"))
        assert env_file.read_text() == "IRIS_USER_ID=193\n"
        assert "Saved IRIS_USER_ID=193" in capsys.readouterr().out

    def test_masks_api_key_in_output(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(config, "ENV_PATH", str(tmp_path / ".env"))
        cmd_config(_ns(action="set", key="IRIS_API_KEY", value="secret-value-123"))
        out = capsys.readouterr().out
        assert "secret-value-123" not in out
        assert "IRIS_API_KEY=secret..." in out

    def test_unknown_key(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config, "ENV_PATH", str(tmp_path / ".env"))
        with pytest.raises(CliError) as exc_info:
            cmd_config(_ns(action="set", key="CODECKS_TOKEN", value="x"))
        assert "Unknown setting 'CODECKS_TOKEN'" in str(exc_info.value)
        assert not (tmp_path / ".env").exists()

    def test_missing_value(self):
        with pytest.raises(CliError) as exc_info:
            cmd_config(_ns(action="set", key="IRIS_ENV", value=None))
        assert "Usage: iris config set" in str(exc_info.value)
