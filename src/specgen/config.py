"""Configuration management with XDG paths and precedence resolution.

This module handles everything specgen reads from outside its arguments:

* **Data directory** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specgen/`` on macOS and Windows.  Crash logs are written there.
  See :func:`get_data_dir`.
* **Project config** -- an optional ``./specgen.json`` holding
  :class:`~specgen.models.GenerationOptions` fields, so a repository can
  pin how its client is generated.  See :func:`load_project_config`.
* **Precedence resolution** -- :func:`resolve_options` merges CLI flags,
  environment variables, project config, and defaults into the effective
  :class:`~specgen.models.GenerationOptions`.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import ValidationError

from specgen.exceptions import ConfigError
from specgen.models import GenerationOptions

_APP_NAME = "specgen"
_PROJECT_CONFIG_FILENAME = "specgen.json"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specgen/`` (default ``~/.local/share/specgen/``).
    On macOS/Windows: ``~/.specgen/logs/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}" / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Project-local config ---


def load_project_config(directory: Optional[Path] = None) -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``specgen.json``.

    Args:
        directory: Directory to look in; the current working directory
            when ``None``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a valid JSON object.
    """
    path = (directory or Path.cwd()) / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Environment ---


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"Invalid boolean for {name}: {value!r}")


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigError(f"Invalid integer for {name}: {value!r}") from exc


_ENV_VARS: dict[str, tuple[str, Callable[[str, str], Any]]] = {
    "SPECGEN_STRICT": ("strict_interfaces", _parse_bool),
    "SPECGEN_CAMEL_CASED": ("camel_cased_props", _parse_bool),
    "SPECGEN_DEFAULT_SUCCESS_TYPE": ("default_success_type", lambda _, v: v),
    "SPECGEN_DEFAULT_ERROR_TYPE": ("default_error_type", lambda _, v: v),
    "SPECGEN_CONCURRENCY": ("concurrency", _parse_int),
}


def load_env_config() -> dict[str, Any]:
    """Read the ``SPECGEN_*`` environment variables that are set.

    Returns:
        A mapping of :class:`~specgen.models.GenerationOptions` field names
        to parsed values.  Unset and empty variables are skipped.

    Raises:
        ConfigError: If a variable holds a value of the wrong kind.
    """
    values: dict[str, Any] = {}
    for env_var, (field, parse) in _ENV_VARS.items():
        raw = os.environ.get(env_var)
        if raw:
            values[field] = parse(env_var, raw)
    return values


# --- Precedence resolution ---


def resolve_options(
    cli_overrides: Optional[dict[str, Any]] = None,
    project_dir: Optional[Path] = None,
) -> GenerationOptions:
    """Resolve generation options with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_overrides``; ``None`` values mean "not given")
        2. Environment variables (``SPECGEN_STRICT``, ``SPECGEN_CAMEL_CASED``,
           ``SPECGEN_DEFAULT_SUCCESS_TYPE``, ``SPECGEN_DEFAULT_ERROR_TYPE``,
           ``SPECGEN_CONCURRENCY``)
        3. Project config (``./specgen.json``)
        4. Defaults

    Args:
        cli_overrides: Field values given on the command line.
        project_dir: Where to look for ``specgen.json``.

    Returns:
        The validated :class:`~specgen.models.GenerationOptions`.

    Raises:
        ConfigError: If any layer holds an unknown field or invalid value.
    """
    merged: dict[str, Any] = {}

    # 3. Project-local config
    project = load_project_config(project_dir)
    if project is not None:
        merged.update(project)

    # 2. Environment variables
    merged.update(load_env_config())

    # 1. CLI flags (highest precedence)
    if cli_overrides:
        merged.update({key: value for key, value in cli_overrides.items() if value is not None})

    try:
        return GenerationOptions.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid generation options: {exc}") from exc
