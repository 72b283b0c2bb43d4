"""Tests for typed models used by the dispatcher and the agents resource."""

import pytest

from iris_cli.exceptions import CliError
from iris_cli.models import AgentConfig, ObjectPayload, ParsedOrLiteral, RawArguments


class TestRawArguments:
    def test_empty(self):
        assert RawArguments().is_empty()
        assert RawArguments().total() == 0

    def test_total(self):
        args = RawArguments(positional=[1, 2], named={"a": 1})
        assert not args.is_empty()
        assert args.total() == 3

    def test_instances_do_not_share_state(self):
        a, b = RawArguments(), RawArguments()
        a.named["x"] = 1
        assert b.named == {}


class TestParsedOrLiteral:
    def test_parsed(self):
        assert ParsedOrLiteral.parsed([1]) == ParsedOrLiteral(ok=True, value=[1])

    def test_literal(self):
        assert ParsedOrLiteral.literal("{x") == ParsedOrLiteral(ok=False, value="{x")


class TestObjectPayload:
    def test_accepts_object(self):
        assert ObjectPayload.from_value({"a": 1}, "query").data == {"a": 1}

    def test_rejects_non_object(self):
        with pytest.raises(CliError) as exc_info:
            ObjectPayload.from_value([1, 2, 3], "agent config")
        assert "expected object, got list" in str(exc_info.value)


class TestAgentConfig:
    def test_from_dict_minimal(self):
        config = AgentConfig.from_dict({"name": "Concierge", "prompt": "Be kind"})
        assert config == AgentConfig(name="Concierge", prompt="Be kind")
        assert config.type == "ai_bloq"

    def test_initial_prompt_alias(self):
        config = AgentConfig.from_dict({"name": "A", "initial_prompt": "Hello"})
        assert config.prompt == "Hello"

    def test_extra_keys_go_to_settings(self):
        config = AgentConfig.from_dict(
            {"name": "A", "tone": "warm", "settings": {"temperature": 0.2}}
        )
        assert config.settings == {"tone": "warm", "temperature": 0.2}

    @pytest.mark.parametrize("data", [{}, {"name": "  "}, {"name": 5}])
    def test_name_required(self, data):
        with pytest.raises(CliError) as exc_info:
            AgentConfig.from_dict(data)
        assert "non-empty 'name'" in str(exc_info.value)

    def test_prompt_must_be_string(self):
        with pytest.raises(CliError):
            AgentConfig.from_dict({"name": "A", "prompt": ["x"]})

    def test_settings_must_be_object(self):
        with pytest.raises(CliError):
            AgentConfig.from_dict({"name": "A", "settings": "fast"})

    def test_to_dict_omits_unset(self):
        assert AgentConfig(name="A", prompt="p").to_dict() == {
            "name": "A",
            "initial_prompt": "p",
            "type": "ai_bloq",
        }

    def test_to_dict_full(self):
        config = AgentConfig(
            name="A", prompt="p", model="gpt-4o", description="d", settings={"k": 1}
        )
        assert config.to_dict() == {
            "name": "A",
            "initial_prompt": "p",
            "type": "ai_bloq",
            "model": "gpt-4o",
            "description": "d",
            "settings": {"k": 1},
        }
