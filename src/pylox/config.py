"""Interpreter configuration loading from YAML files.

Settings are read from the first configuration file found:
- An explicit path passed to load_config() (or the CLI's --config option)
- The file named by the PYLOX_CONFIG environment variable
- The user config file (~/.config/pylox/config.yaml)

When no file is found the built-in defaults are used.

Example config.yaml:
    show_source: false
    max_errors: 5
    prompt: "lox> "
    log_level: DEBUG
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

__all__ = [
    "PYLOX_CONFIG",
    "LoxConfig",
    "ConfigError",
    "find_config_file",
    "load_config",
]

logger = logging.getLogger(__name__)

# Environment variable naming a config file
PYLOX_CONFIG = "PYLOX_CONFIG"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(ValueError):
    """A configuration file is missing, malformed or holds an invalid setting."""
    pass


@dataclass
class LoxConfig:
    """Interpreter settings."""
    show_source: bool = True        # quote the offending source line in syntax errors
    max_errors: int = 20            # stop recording syntax errors after this many
    prompt: str = "> "
    log_level: str = "WARNING"
    echo_tokens: bool = False       # REPL prints the token stream before running

    @classmethod
    def from_dict(cls, data: Dict[str, Any], origin: str = "<dict>") -> "LoxConfig":
        """Build a config from a mapping, rejecting unknown keys and bad types."""
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ConfigError(f"Unknown setting(s) in {origin}: {', '.join(unknown)}")

        for name, value in data.items():
            expected = type(getattr(cls, name))
            # bool is a subclass of int, so check the exact type
            if type(value) is not expected:
                raise ConfigError(
                    f"Setting '{name}' in {origin} must be {expected.__name__}, "
                    f"got {type(value).__name__}"
                )

        config = cls(**data)
        config.log_level = config.log_level.upper()
        if config.log_level not in LOG_LEVELS:
            raise ConfigError(
                f"Setting 'log_level' in {origin} must be one of {', '.join(LOG_LEVELS)}"
            )
        if config.max_errors < 1:
            raise ConfigError(f"Setting 'max_errors' in {origin} must be at least 1")
        return config


def _user_config_path() -> Path:
    if sys.platform == "win32":
        config_base = Path(os.environ.get("APPDATA", "~")).expanduser()
    else:
        config_base = Path.home() / ".config"
    return config_base / "pylox" / "config.yaml"


def find_config_file(path: Optional[Path] = None) -> Optional[Path]:
    """Return the config file to read, in priority order, or None.

    Search order:
        1. The explicit path (which must exist)
        2. The file named by PYLOX_CONFIG (which must exist)
        3. ~/.config/pylox/config.yaml, if present
    """
    if path is not None:
        path = Path(path).expanduser()
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        return path

    env_path = os.environ.get(PYLOX_CONFIG)
    if env_path:
        path = Path(env_path).expanduser()
        if not path.exists():
            raise ConfigError(f"Config file named by {PYLOX_CONFIG} not found: {path}")
        return path

    user_config = _user_config_path()
    if user_config.is_file():
        return user_config
    return None


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML config file; an empty file is an empty mapping."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config format in {path}: expected mapping at root")
    return data


def load_config(path: Optional[Path] = None) -> LoxConfig:
    """Load interpreter settings.

    Args:
        path: Explicit config file; overrides the environment and user config

    Returns:
        LoxConfig with file settings applied over the defaults

    Raises:
        ConfigError: If a named file is missing, or the file holds unknown
            keys or values of the wrong type
    """
    config_path = find_config_file(path)
    if config_path is None:
        logger.debug("no config file found, using defaults")
        return LoxConfig()

    logger.debug("loading config from %s", config_path)
    return LoxConfig.from_dict(_load_yaml(config_path), origin=str(config_path))
