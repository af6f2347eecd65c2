"""Tests for ConfigLoader and GatewaySettings"""

import json

import pytest
import yaml

from ussd_gateway.config.loader import ConfigLoader
from ussd_gateway.config.settings import GatewaySettings
from ussd_gateway.core.errors import ConfigError


class TestConfigLoader:
    def test_load_json(self, tmp_path, mini_definition):
        # Arrange
        path = tmp_path / "automaton.json"
        path.write_text(json.dumps(mini_definition), encoding="utf-8")

        # Act
        config = ConfigLoader.load(path)

        # Assert
        assert config.automaton_id == "mini"
        assert config.states[1].context_storage_key == "name"
        assert config.transitions[2].requires_validation is True

    def test_load_yaml(self, tmp_path, mini_definition):
        path = tmp_path / "automaton.yaml"
        path.write_text(yaml.safe_dump(mini_definition), encoding="utf-8")

        config = ConfigLoader.load(path)

        assert config.initial_state_id == "MENU"
        assert len(config.transitions) == 4

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="not found"):
            ConfigLoader.load(tmp_path / "nope.json")

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Cannot parse"):
            ConfigLoader.load(path)

    def test_top_level_must_be_object(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="must contain an object"):
            ConfigLoader.load(path)

    def test_load_default(self):
        config = ConfigLoader.load_default()
        assert config.automaton_id == "package-delivery"
        assert config.initial_state_id == "WELCOME"


class TestGatewaySettings:
    def test_defaults(self):
        settings = GatewaySettings()
        assert settings.session_timeout_seconds == 600
        assert settings.max_retries == 3
        assert settings.persistence.backend == "memory"
        assert settings.automaton_path is None

    def test_from_env(self):
        # Arrange
        environ = {
            "USSD_AUTOMATON_PATH": "/etc/ussd/automaton.yaml",
            "USSD_SESSION_TIMEOUT_SECONDS": "120",
            "USSD_MAX_RETRIES": "5",
            "USSD_PERSISTENCE_BACKEND": "SQLite",
            "USSD_PERSISTENCE_PATH": "/var/lib/ussd/sessions.db",
            "USSD_STRICT_VALIDATION_TAGS": "true",
            "USSD_LOG_LEVEL": "",
        }

        # Act
        settings = GatewaySettings.from_env(environ)

        # Assert
        assert settings.automaton_path == "/etc/ussd/automaton.yaml"
        assert settings.session_timeout_seconds == 120
        assert settings.max_retries == 5
        assert settings.persistence.backend == "sqlite"
        assert settings.persistence.path == "/var/lib/ussd/sessions.db"
        assert settings.strict_validation_tags is True
        assert settings.log_level == "INFO"

    def test_invalid_env_value(self):
        with pytest.raises(ConfigError, match="Invalid gateway settings"):
            GatewaySettings.from_env({"USSD_SESSION_TIMEOUT_SECONDS": "-1"})

    def test_unknown_backend(self):
        with pytest.raises(ConfigError):
            GatewaySettings.from_env({"USSD_PERSISTENCE_BACKEND": "redis"})
