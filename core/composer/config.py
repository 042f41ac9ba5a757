"""Shared composer configuration utilities.

Centralises reading of ~/.composer/configuration.json so that the CLI,
the profile resolver and every task share one implementation.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_PROFILE_KEY = "DEFAULT"

# ---------------------------------------------------------------------------
# Low-level config file access
# ---------------------------------------------------------------------------

COMPOSER_CONFIG_FILE = Path.home() / ".composer" / "configuration.json"


def get_config_path() -> Path:
    """Return the configuration path, honouring COMPOSER_CONFIG_FILE."""
    override = os.environ.get("COMPOSER_CONFIG_FILE")
    if override:
        return Path(override)
    return COMPOSER_CONFIG_FILE


def get_composer_config() -> dict[str, Any]:
    """Load composer configuration from ~/.composer/configuration.json."""
    config_path = get_config_path()
    if not config_path.exists():
        return {}
    try:
        with open(config_path, encoding="utf-8-sig") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


# ---------------------------------------------------------------------------
# Derived helpers
# ---------------------------------------------------------------------------


def _section(name: str) -> dict[str, Any]:
    section = get_composer_config().get(name)
    return section if isinstance(section, dict) else {}


def get_default_profile_name() -> str:
    """Return the profile name used when an instruction declares none."""
    name = _section("profiles").get("default_name")
    if isinstance(name, str) and name:
        return name
    return DEFAULT_PROFILE_KEY


def get_log_level() -> str:
    """Return the configured log level, falling back to INFO."""
    return str(_section("logging").get("level", "INFO")).upper()


def get_log_format() -> str:
    """Return the configured log format ("json", "human" or "auto")."""
    return str(_section("logging").get("format", "auto")).lower()


# ---------------------------------------------------------------------------
# ComposerConfig – shared across tasks and the CLI
# ---------------------------------------------------------------------------


@dataclass
class ComposerConfig:
    """Composer configuration loaded from ~/.composer/configuration.json."""

    default_profile_name: str = field(default_factory=get_default_profile_name)
    log_level: str = field(default_factory=get_log_level)
    log_format: str = field(default_factory=get_log_format)
