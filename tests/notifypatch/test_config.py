"""
Tests for environment-driven configuration.
"""

from pathlib import Path

import pytest

from src.notifypatch.config import (
    DEFAULT_API_BASE,
    REQUEST_TIMEOUT,
    USER_AGENT,
    NotifyPatchConfig,
    load_config,
)

ENV_VARS = [
    "DISCORD_TOKEN", "CHANNEL_ID", "CLIENT_ID", "GUILD_ID", "PORT", "DATA_FILE",
    "LOG_DIR", "LOG_LEVEL", "PAPER_API_BASE", "PAPER_PROJECT", "DISPLAY_TIMEZONE",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestLoadConfig:

    def test_defaults(self, clean_env):
        config = load_config()
        assert config.discord_token == ""
        assert config.channel_id == 0
        assert config.port == 3000
        assert config.data_file == Path("data.json")
        assert config.api_base == DEFAULT_API_BASE
        assert config.project == "paper"
        assert config.user_agent == USER_AGENT
        assert config.request_timeout == REQUEST_TIMEOUT == 10
        assert config.log_level == "INFO"

    def test_reads_environment(self, clean_env):
        clean_env.setenv("DISCORD_TOKEN", "abc.def.ghi")
        clean_env.setenv("CHANNEL_ID", "123")
        clean_env.setenv("CLIENT_ID", "456")
        clean_env.setenv("GUILD_ID", "789")
        clean_env.setenv("PORT", "8080")
        clean_env.setenv("DATA_FILE", "/var/lib/notifypatch/state.json")
        clean_env.setenv("PAPER_API_BASE", "https://mirror.example/v2/")
        clean_env.setenv("LOG_LEVEL", "debug")

        config = load_config()
        assert config.discord_token == "abc.def.ghi"
        assert config.channel_id == 123
        assert config.application_id == 456
        assert config.guild_id == 789
        assert config.port == 8080
        assert config.data_file == Path("/var/lib/notifypatch/state.json")
        assert config.api_base == "https://mirror.example/v2"
        assert config.log_level == "DEBUG"

    def test_non_numeric_ids_fall_back_to_zero(self, clean_env):
        clean_env.setenv("CHANNEL_ID", "general")
        clean_env.setenv("PORT", "http")
        config = load_config()
        assert config.channel_id == 0
        assert config.port == 3000


class TestValidate:

    def test_valid(self, mock_config):
        assert mock_config.validate() == (True, "Configuration valid")

    @pytest.mark.parametrize(
        "field_name, value, expected",
        [
            ("discord_token", "", "DISCORD_TOKEN"),
            ("channel_id", 0, "CHANNEL_ID"),
            ("application_id", 0, "CLIENT_ID"),
            ("guild_id", 0, "GUILD_ID"),
            ("port", 70000, "PORT"),
        ],
    )
    def test_missing_values(self, mock_config, field_name, value, expected):
        setattr(mock_config, field_name, value)
        ok, message = mock_config.validate()
        assert ok is False
        assert expected in message

    def test_string_paths_are_normalized(self):
        config = NotifyPatchConfig(data_file="state.json", log_dir="out/logs")
        assert config.data_file == Path("state.json")
        assert config.log_dir == Path("out/logs")
