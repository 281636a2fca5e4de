"""Configuration management for the CLI."""

import os
from pathlib import Path
from typing import Any

import yaml

from imgshelf.search.similarity import SimilarityConfig


class Config:
    """Configuration management for the CLI application."""

    @staticmethod
    def from_file(path: Path) -> dict[str, Any]:
        """Load configuration from a YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file: {e}") from e
        except OSError as e:
            raise ValueError(f"Error reading config file: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return data

    @staticmethod
    def get_config_paths() -> list[Path]:
        """Get the default configuration file paths to check."""
        paths = []

        # User config
        xdg_config_home = Path(
            os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        )
        paths.append(xdg_config_home / "imgshelf" / "config.yaml")

        # Project config
        paths.append(Path(".imgshelf.yaml"))
        paths.append(Path("imgshelf.yaml"))

        return paths

    @staticmethod
    def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
        """Merge multiple configuration dictionaries."""
        result: dict[str, Any] = {}
        for config in configs:
            result = _deep_merge(result, config)
        return result


def load_config(explicit: Path | None = None) -> dict[str, Any]:
    """Load configuration from files and environment variables.

    Default locations are merged in order (last one wins for conflicting
    keys), then the explicit file if given, then environment overrides.
    An unreadable default file is skipped; an unreadable explicit file
    raises ValueError.
    """
    config: dict[str, Any] = {}

    for path in Config.get_config_paths():
        if path.exists():
            try:
                config = Config.merge_configs(config, Config.from_file(path))
            except ValueError:
                continue

    if explicit is not None:
        config = Config.merge_configs(config, Config.from_file(explicit))

    env_overrides = {}
    if db_path := os.environ.get("IMGSHELF_DB_PATH"):
        env_overrides["db_path"] = db_path

    return Config.merge_configs(config, env_overrides)


def get_similarity_config(config: dict[str, Any]) -> SimilarityConfig:
    """Build matcher thresholds from the ``similarity`` section."""
    section = config.get("similarity")
    if section is not None and not isinstance(section, dict):
        raise ValueError("'similarity' config section must be a mapping")
    return SimilarityConfig.from_dict(section)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
