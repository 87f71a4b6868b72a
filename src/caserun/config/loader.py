#
# config/loader.py
#
"""
Loads caserun configuration from TOML into the attrs models.

Precedence: environment variables > config file > defaults.
"""

import importlib
import os
import tomllib
from pathlib import Path
from typing import Any

import attrs
import structlog

from caserun.config.models import (
    CaserunConfig,
    DiscoveryConfig,
    ExecutionConfig,
    GlobalConfig,
    IdentifierConfig,
)
from caserun.exceptions import ConfigurationError

log = structlog.get_logger("config.loader")

ENV_LOG_LEVEL = "CASERUN_LOG_LEVEL"

_SECTIONS: dict[str, type] = {
    "global": GlobalConfig,
    "identifier": IdentifierConfig,
    "execution": ExecutionConfig,
    "discovery": DiscoveryConfig,
}
_SECTION_FIELDS = {
    "global": "global_config",
    "identifier": "identifier",
    "execution": "execution",
    "discovery": "discovery",
}


def _build_section(name: str, raw: Any, config_path: Path | None) -> Any:
    model = _SECTIONS[name]
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Section [{name}] must be a table in '{config_path}'")
    allowed = {a.name for a in attrs.fields(model)}
    unknown = set(raw) - allowed
    if unknown:
        raise ConfigurationError(
            f"Unknown key(s) {sorted(unknown)} in section [{name}] of '{config_path}'"
        )
    try:
        return model(**raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid value in section [{name}]: {e}") from e


def load_config(config_path: Path | None = None) -> CaserunConfig:
    """
    Loads the configuration file, falling back to defaults when the path is
    None or does not exist, and applies environment overrides.
    """
    load_log = log.bind(config_path=str(config_path) if config_path else None)
    data: dict[str, Any] = {}

    if config_path is not None and config_path.is_file():
        try:
            with config_path.open("rb") as fh:
                data = tomllib.load(fh)
        except tomllib.TOMLDecodeError as e:
            load_log.error("Failed to parse configuration file", error=str(e))
            raise ConfigurationError(f"Invalid TOML in '{config_path}': {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file '{config_path}': {e}") from e
        load_log.debug("Configuration file parsed", sections=list(data.keys()))
    elif config_path is not None:
        load_log.debug("Configuration file not found, using defaults")

    unknown_sections = set(data) - set(_SECTIONS)
    if unknown_sections:
        raise ConfigurationError(f"Unknown section(s) {sorted(unknown_sections)} in '{config_path}'")

    env_level = os.environ.get(ENV_LOG_LEVEL)
    if env_level:
        data.setdefault("global", {})
        data["global"] = {**data["global"], "log_level": env_level}
        load_log.debug("Applied log level from environment", log_level=env_level)

    kwargs = {
        _SECTION_FIELDS[name]: _build_section(name, raw, config_path)
        for name, raw in data.items()
    }
    config = CaserunConfig(**kwargs)
    load_log.info("Configuration loaded", log_level=config.global_config.log_level)
    return config


def import_object(path: str) -> Any:
    """Resolves "package.module:Name" (or "package.module.Name") to an object."""
    module_name, sep, attr_path = path.partition(":")
    if not sep:
        module_name, _, attr_path = path.rpartition(".")
    if not module_name or not attr_path:
        raise ConfigurationError(f"Invalid import path '{path}'. Expected 'package.module:Name'.")
    try:
        target: Any = importlib.import_module(module_name)
        for part in attr_path.split("."):
            target = getattr(target, part)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Cannot import '{path}': {e}") from e
    return target


# 🔼⚙️
