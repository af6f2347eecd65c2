"""Config loader for automaton definition files."""

import json
from collections.abc import Mapping
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ussd_gateway.config.models import AutomatonConfig
from ussd_gateway.core.errors import ConfigError

DEFAULT_AUTOMATON_RESOURCE = "automaton.json"


class ConfigLoader:
    """Load AutomatonConfig from JSON or YAML files."""

    @staticmethod
    def load(path: Path | str) -> AutomatonConfig:
        """Load an automaton definition from disk.

        Args:
            path: Path to a ``.json``, ``.yaml`` or ``.yml`` file

        Returns:
            Parsed AutomatonConfig instance

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigError: If the file cannot be parsed or does not match the schema
        """
        config_path = Path(path)
        if not config_path.is_file():
            raise FileNotFoundError(f"Automaton config file not found: {config_path}")

        with open(config_path, encoding="utf-8") as f:
            text = f.read()

        return ConfigLoader.parse(ConfigLoader._decode(text, config_path.suffix.lower(), str(config_path)))

    @staticmethod
    def load_default() -> AutomatonConfig:
        """Load the package-delivery dialog shipped with the gateway."""
        text = (
            resources.files("ussd_gateway.resources")
            .joinpath(DEFAULT_AUTOMATON_RESOURCE)
            .read_text(encoding="utf-8")
        )
        return ConfigLoader.parse(ConfigLoader._decode(text, ".json", DEFAULT_AUTOMATON_RESOURCE))

    @staticmethod
    def parse(data: Mapping[str, Any] | AutomatonConfig) -> AutomatonConfig:
        """Validate an already-decoded definition.

        Raises:
            ConfigError: If the mapping does not match the schema
        """
        if isinstance(data, AutomatonConfig):
            return data
        try:
            return AutomatonConfig.model_validate(dict(data))
        except ValidationError as e:
            raise ConfigError(f"Invalid automaton definition: {e}") from e

    @staticmethod
    def _decode(text: str, suffix: str, source: str) -> dict[str, Any]:
        try:
            if suffix == ".json":
                data = json.loads(text)
            else:
                data = yaml.safe_load(text) or {}
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot parse automaton config {source}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Automaton config {source} must contain an object at the top level")
        return data
