"""Tests for environment configuration."""

import pytest

from rulebot.config import load_config


class TestLoadConfig:
    def test_empty_environment_uses_defaults(self):
        config = load_config({})
        assert config.initial_level == "0"
        assert config.definition_path is None
        assert config.weather_base_url == "https://wttr.in"

    def test_reads_environment(self):
        config = load_config({
            "RULEBOT_DEFINITION": "/tmp/states.xml",
            "RULEBOT_INVALID_POLICY": "random",
            "RULEBOT_ECHO_PROMPT": "0",
            "RULEBOT_WEATHER_TIMEOUT": "2.5",
            "RULEBOT_LOG_LEVEL": "debug",
        })
        assert config.definition_path == "/tmp/states.xml"
        assert config.invalid_answer_policy == "random"
        assert config.echo_successor_prompt is False
        assert config.weather_timeout_seconds == 2.5
        assert config.log_level == "DEBUG"

    def test_blank_values_are_ignored(self):
        assert load_config({"RULEBOT_INITIAL_LEVEL": "  "}).initial_level == "0"

    def test_overrides_win(self):
        config = load_config({"RULEBOT_INITIAL_LEVEL": "5"}, initial_level="7", log_level=None)
        assert config.initial_level == "7"
        assert config.log_level == "WARNING"

    def test_invalid_value(self):
        with pytest.raises(Exception):
            load_config({"RULEBOT_WEATHER_TIMEOUT": "soon"})
