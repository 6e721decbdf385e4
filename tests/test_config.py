"""
Tests for configuration loading.
"""

import json

import pytest

from shaperelay.config import Config, ConfigError, load_config, validate_required


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep SHAPERELAY_* variables from the host out of the tests."""
    import os
    for key in list(os.environ):
        if key.startswith("SHAPERELAY_"):
            monkeypatch.delenv(key)


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_file(self, tmp_path):
        config = load_config(tmp_path / "missing.json")
        assert config.filter.window_seconds == 30.0
        assert config.filter.max_messages == 5
        assert config.media.signed_link_ttl_seconds == 240.0
        assert config.relay.include_author_name is True

    def test_camel_case_keys(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "shapes": {"apiKey": "k", "username": "mira"},
            "filter": {"allowList": ["alice"], "maxMessages": 3},
        }))
        config = load_config(path)
        assert config.shapes.api_key == "k"
        assert config.filter.allow_list == ["alice"]
        assert config.filter.max_messages == 3

    def test_env_fills_missing_values(self, tmp_path, monkeypatch):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"shapes": {"username": "mira"}}))
        monkeypatch.setenv("SHAPERELAY_SHAPES__API_KEY", "from-env")

        config = load_config(path)
        assert config.shapes.api_key == "from-env"
        assert config.shapes.username == "mira"

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"filter": {"maxMessages": "many"}}))
        with pytest.raises(ConfigError):
            load_config(path)


class TestValidateRequired:
    """Tests for validate_required."""

    def test_reports_missing_settings(self):
        with pytest.raises(ConfigError) as exc_info:
            validate_required(Config(shapes={"username": "mira"}))
        message = str(exc_info.value)
        assert "discord.token" in message
        assert "shapes.api_key" in message
        assert "shapes.username" not in message

    def test_complete_config(self):
        config = Config(
            discord={"token": "t"},
            shapes={"api_key": "k", "username": "mira"},
        )
        assert validate_required(config) is config
