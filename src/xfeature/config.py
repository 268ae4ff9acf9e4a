"""
XFeature configuration.

Settings come from ``xfeature.toml`` with environment overrides on top::

    [api]
    base_url = "http://localhost:8080/api/v1"
    timeout = 30.0

    [specs]
    directory = "specs/xfeature"
    strict = false

    [logging]
    level = "INFO"
    directory = ".xfeature/logs"

Environment variables: XFEATURE_API_URL, XFEATURE_API_TIMEOUT,
XFEATURE_SPEC_DIR, XFEATURE_LOG_LEVEL.
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from xfeature.core.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE = "xfeature.toml"

DEFAULT_API_URL = "http://localhost:8080/api/v1"
DEFAULT_TIMEOUT = 30.0
DEFAULT_SPEC_DIR = "specs/xfeature"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ApiConfig:
    """Backend API connection."""

    base_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT


@dataclass
class SpecsConfig:
    """Where feature files live and how they are compiled."""

    directory: Path = field(default_factory=lambda: Path(DEFAULT_SPEC_DIR))
    strict: bool = False


@dataclass
class LoggingConfig:
    level: str = "INFO"
    directory: Path | None = None


@dataclass
class XFeatureConfig:
    api: ApiConfig = field(default_factory=ApiConfig)
    specs: SpecsConfig = field(default_factory=SpecsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    source: Path | None = None


def _get(section: Mapping[str, Any], key: str, kind: type | tuple[type, ...], default: Any) -> Any:
    value = section.get(key, default)
    kinds = kind if isinstance(kind, tuple) else (kind,)
    # bool is an int subclass
    if isinstance(value, bool) and bool not in kinds:
        raise ConfigError(f"Invalid value for '{key}': {value!r}")
    if not isinstance(value, kinds):
        raise ConfigError(f"Invalid value for '{key}': {value!r}")
    return value


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{name}] must be a table")
    return section


def _parse(data: Mapping[str, Any], source: Path | None) -> XFeatureConfig:
    api = _section(data, "api")
    specs = _section(data, "specs")
    log = _section(data, "logging")

    log_dir = _get(log, "directory", (str, type(None)), None)
    return XFeatureConfig(
        api=ApiConfig(
            base_url=_get(api, "base_url", str, DEFAULT_API_URL),
            timeout=float(_get(api, "timeout", (int, float), DEFAULT_TIMEOUT)),
        ),
        specs=SpecsConfig(
            directory=Path(_get(specs, "directory", str, DEFAULT_SPEC_DIR)),
            strict=_get(specs, "strict", bool, False),
        ),
        logging=LoggingConfig(
            level=_validate_level(_get(log, "level", str, "INFO")),
            directory=Path(log_dir) if log_dir else None,
        ),
        source=source,
    )


def _validate_level(level: str) -> str:
    if level.upper() not in LOG_LEVELS:
        raise ConfigError(f"Invalid log level '{level}'; expected one of {', '.join(LOG_LEVELS)}")
    return level.upper()


def _apply_env(config: XFeatureConfig, env: Mapping[str, str]) -> XFeatureConfig:
    if env.get("XFEATURE_API_URL"):
        config.api.base_url = env["XFEATURE_API_URL"]
    if env.get("XFEATURE_API_TIMEOUT"):
        try:
            config.api.timeout = float(env["XFEATURE_API_TIMEOUT"])
        except ValueError as e:
            raise ConfigError(
                f"Invalid XFEATURE_API_TIMEOUT: {env['XFEATURE_API_TIMEOUT']!r}"
            ) from e
    if env.get("XFEATURE_SPEC_DIR"):
        config.specs.directory = Path(env["XFEATURE_SPEC_DIR"])
    if env.get("XFEATURE_LOG_LEVEL"):
        config.logging.level = _validate_level(env["XFEATURE_LOG_LEVEL"])
    return config


def load_config(
    path: Path | str | None = None,
    env: Mapping[str, str] | None = None,
) -> XFeatureConfig:
    """
    Load configuration.

    Args:
        path: Config file; defaults to ./xfeature.toml. A missing file
            yields the defaults.
        env: Environment mapping, os.environ when None

    Raises:
        ConfigError: If the file is not valid TOML or holds wrongly typed values
    """
    config_path = Path(path) if path is not None else Path.cwd() / CONFIG_FILE
    env = os.environ if env is None else env

    if config_path.is_file():
        try:
            data = tomllib.loads(config_path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e
        config = _parse(data, config_path)
        logger.debug("Loaded configuration from %s", config_path)
    else:
        config = XFeatureConfig()

    return _apply_env(config, env)
