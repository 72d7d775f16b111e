"""Settings loading for environment scopes."""

from __future__ import annotations

import logging
import math
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from omegaconf import OmegaConf
from omegaconf.errors import InterpolationResolutionError

from temp_env_vars.constants import (
    BLOCKING_ENV_VAR,
    CONFIG_PATH_ENV_VAR,
    CONFIG_SECTION,
    DEFAULT_BLOCKING,
    DEFAULT_CONFIG_PATH,
    DEFAULT_TIMEOUT_SECONDS,
    FALSE_VALUES,
    NONE_VALUES,
    TIMEOUT_ENV_VAR,
    TRUE_VALUES,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScopeSettings:
    """Resolved settings applied to scopes that do not override them.

    Attributes
    ----------
    blocking : bool
        Whether scope construction waits for the process-wide token
    timeout : float | None
        Maximum seconds to wait for the token, or None to wait forever
    """

    blocking: bool = DEFAULT_BLOCKING
    timeout: float | None = DEFAULT_TIMEOUT_SECONDS


class SettingsLoader:
    """Load settings from built-in defaults, a YAML file and the environment."""

    def __init__(self) -> None:
        self.BUILT_IN_DEFAULTS: dict[str, Any] = {
            "blocking": DEFAULT_BLOCKING,
            "timeout": DEFAULT_TIMEOUT_SECONDS,
        }

    def load_file(self, config_path: str | None = None) -> dict[str, Any]:
        """Load settings from a YAML file.

        Parameters
        ----------
        config_path : str | None
            Path to YAML settings file. If None, checks TEMP_ENV_VARS_CONFIG
            env var, then falls back to temp_env_vars.yaml

        Returns
        -------
        dict[str, Any]
            Settings found in the file with interpolations resolved, or an
            empty dict if the file does not exist

        Raises
        ------
        ValueError
            If the file is not valid YAML or interpolation fails
        RuntimeError
            If the file exists but cannot be read
        """
        if config_path is None:
            config_path = os.environ.get(CONFIG_PATH_ENV_VAR, DEFAULT_CONFIG_PATH)

        config_file = Path(config_path)

        if not config_file.exists():
            return {}

        try:
            cfg = OmegaConf.load(config_file)
        except yaml.YAMLError as e:
            logger.error("Failed to parse YAML settings file %s: %s", config_file, e)
            raise ValueError(f"Invalid YAML in {config_file}: {e}") from e
        except OSError as e:
            logger.error("Failed to read settings file %s: %s", config_file, e)
            raise RuntimeError(f"Failed to read settings file {config_file}: {e}") from e

        if cfg is None:
            return {}

        try:
            config = OmegaConf.to_container(cfg, resolve=True, throw_on_missing=True)
        except InterpolationResolutionError as e:
            logger.error("Failed to resolve settings variables: %s", e)
            raise ValueError(f"Settings variable resolution error: {e}") from e

        if not isinstance(config, dict):
            raise ValueError(f"Settings file {config_file} must contain a mapping")

        section = config.get(CONFIG_SECTION)
        if isinstance(section, dict):
            return section

        return config

    def load_env_overrides(self) -> dict[str, Any]:
        """Read setting overrides from environment variables.

        Returns
        -------
        dict[str, Any]
            Overrides for every recognised variable that is set

        Raises
        ------
        ValueError
            If an override cannot be parsed
        """
        overrides: dict[str, Any] = {}

        blocking = os.environ.get(BLOCKING_ENV_VAR)
        if blocking is not None:
            overrides["blocking"] = parse_bool(blocking, BLOCKING_ENV_VAR)

        timeout = os.environ.get(TIMEOUT_ENV_VAR)
        if timeout is not None:
            overrides["timeout"] = parse_timeout(timeout, TIMEOUT_ENV_VAR)

        return overrides

    def load_settings(self, config_path: str | None = None) -> ScopeSettings:
        """Merge defaults, file settings and environment overrides.

        Parameters
        ----------
        config_path : str | None
            Path to YAML settings file, see load_file()

        Returns
        -------
        ScopeSettings
            Validated settings
        """
        merged = dict(self.BUILT_IN_DEFAULTS)

        for key, value in self.load_file(config_path).items():
            if key in merged:
                merged[key] = value
            else:
                logger.warning("Ignoring unknown setting '%s'", key)

        merged.update(self.load_env_overrides())
        self.validate_settings(merged)

        timeout = merged["timeout"]
        return ScopeSettings(
            blocking=merged["blocking"],
            timeout=float(timeout) if timeout is not None else None,
        )

    def validate_settings(self, settings: dict[str, Any]) -> None:
        """Validate merged settings.

        Parameters
        ----------
        settings : dict[str, Any]
            Settings to validate

        Raises
        ------
        ValueError
            If a setting has the wrong type or range
        """
        if not isinstance(settings["blocking"], bool):
            raise ValueError("blocking must be a boolean")

        timeout = settings["timeout"]
        if timeout is None:
            return

        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
            raise ValueError("timeout must be a number or null")

        if not math.isfinite(timeout) or timeout <= 0:
            raise ValueError("timeout must be a finite number greater than 0")


def parse_bool(value: str, source: str) -> bool:
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ValueError(f"{source} must be a boolean, got '{value}'")


def parse_timeout(value: str, source: str) -> float | None:
    normalized = value.strip().lower()
    if normalized in NONE_VALUES:
        return None
    try:
        timeout = float(normalized)
    except ValueError as e:
        raise ValueError(f"{source} must be a number of seconds, got '{value}'") from e

    if not math.isfinite(timeout):
        raise ValueError(f"{source} must be a finite number of seconds, got '{value}'")
    return timeout


_settings_lock = threading.Lock()
_settings: ScopeSettings | None = None


def get_settings() -> ScopeSettings:
    """Return the process settings, loading them on first use."""
    global _settings
    with _settings_lock:
        if _settings is None:
            _settings = SettingsLoader().load_settings()
            logger.debug("Loaded scope settings: %s", _settings)
        return _settings


def reset_settings() -> None:
    """Drop cached settings so the next get_settings() reloads them."""
    global _settings
    with _settings_lock:
        _settings = None
