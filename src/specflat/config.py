"""Configuration management with XDG paths and precedence resolution.

This module handles all persistent configuration for specflat:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specflat/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~specflat.models.GlobalConfig`
  JSON file storing defaults (strict loading, log level, output format).
* **Project config** -- An optional ``./specflat.json`` whose keys override
  the global file for one repository.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project config, and global config into the final
  effective configuration.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specflat.exceptions import ConfigError
from specflat.models import GlobalConfig

_APP_NAME = "specflat"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "specflat.json"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True on platforms that follow the XDG Base Directory spec (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from *env_var*, else ``$HOME/<segments>``."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    return Path.home().joinpath(*default_segments)


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/specflat/`` (default ``~/.config/specflat/``).
    On macOS/Windows: ``~/.specflat/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specflat/`` (default ``~/.local/share/specflat/``).
    On macOS/Windows: ``~/.specflat/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def _read_json(path: Path, what: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid {what} at {path}: {exc}") from exc


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The stored :class:`~specflat.models.GlobalConfig`, or a default
        instance when the file does not exist.

    Raises:
        ConfigError: If the file exists but is not valid JSON or does not
            match the model.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    data = _read_json(path, "global config")
    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load ``./specflat.json`` from the working directory.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    data = _read_json(path, "project config")
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def _env_bool(name: str) -> Optional[bool]:
    value = os.environ.get(name)
    if value is None or value == "":
        return None
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"Environment variable {name} must be a boolean, got '{value}'")


def resolve_config(
    cli_strict: Optional[bool] = None,
    cli_format: Optional[str] = None,
    cli_log_level: Optional[str] = None,
    cli_fail_on_diagnostics: Optional[bool] = None,
) -> GlobalConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. CLI flags (``cli_*`` arguments that are not ``None``)
        2. Environment variables (``SPECFLAT_STRICT``, ``SPECFLAT_FORMAT``,
           ``SPECFLAT_LOG_LEVEL``, ``SPECFLAT_FAIL_ON_DIAGNOSTICS``)
        3. Project config (``./specflat.json``)
        4. User config (``~/.config/specflat/config.json``)
        5. Defaults

    Raises:
        ConfigError: If any layer holds an invalid value.
    """
    merged = load_global_config().model_dump()

    project = load_project_config()
    if project is not None:
        project_output = project.get("output", {})
        if not isinstance(project_output, dict):
            raise ConfigError("Invalid project config: 'output' must be an object")
        output = {**merged["output"], **project_output}
        merged.update(project)
        merged["output"] = output

    env_strict = _env_bool("SPECFLAT_STRICT")
    if env_strict is not None:
        merged["strict"] = env_strict
    env_fail = _env_bool("SPECFLAT_FAIL_ON_DIAGNOSTICS")
    if env_fail is not None:
        merged["fail_on_diagnostics"] = env_fail
    if os.environ.get("SPECFLAT_LOG_LEVEL"):
        merged["log_level"] = os.environ["SPECFLAT_LOG_LEVEL"]
    if os.environ.get("SPECFLAT_FORMAT"):
        merged["output"]["format"] = os.environ["SPECFLAT_FORMAT"]

    if cli_strict is not None:
        merged["strict"] = cli_strict
    if cli_fail_on_diagnostics is not None:
        merged["fail_on_diagnostics"] = cli_fail_on_diagnostics
    if cli_log_level is not None:
        merged["log_level"] = cli_log_level
    if cli_format is not None:
        merged["output"]["format"] = cli_format

    try:
        return GlobalConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
