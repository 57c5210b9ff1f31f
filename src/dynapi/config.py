"""Client configuration resolution for the CLI.

:func:`resolve_config` merges CLI flags, environment variables and the
project-local ``./dynapi.json`` into one :class:`~dynapi.models.ClientConfig`.
Configuration is read-only: nothing is written to disk.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from dynapi.exceptions import ConfigError
from dynapi.models import ClientConfig

_PROJECT_CONFIG_FILENAME = "dynapi.json"

ENV_BASE_URL = "DYNAPI_BASE_URL"
ENV_TIMEOUT = "DYNAPI_TIMEOUT"
ENV_RETRIES = "DYNAPI_RETRIES"


# --- Project-local config ---


def load_project_config(directory: Optional[Path] = None) -> Optional[dict[str, Any]]:
    """Load ``dynapi.json`` from *directory* (default: the working directory).

    The file holds :class:`~dynapi.models.ClientConfig` fields, e.g.::

        {"base_url": "https://api.example.com", "method_rules": {"search*": "GET"}}

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file is not valid JSON or not a JSON object.
    """
    path = (directory or Path.cwd()) / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Environment ---


def _env_number(name: str, cast: type) -> Optional[Any]:
    raw = os.environ.get(name)
    if not raw:
        return None
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigError(f"Environment variable {name} must be a number, got {raw!r}") from exc


# --- Precedence resolution ---


def resolve_config(
    cli_base_url: Optional[str] = None,
    cli_timeout: Optional[float] = None,
    cli_retries: Optional[int] = None,
    project_dir: Optional[Path] = None,
) -> ClientConfig:
    """Resolve the client config with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_base_url``, ``cli_timeout``, ``cli_retries``)
        2. Environment variables (``DYNAPI_BASE_URL``, ``DYNAPI_TIMEOUT``,
           ``DYNAPI_RETRIES``)
        3. Project config (``./dynapi.json``)
        4. :class:`~dynapi.models.ClientConfig` defaults

    Raises:
        ConfigError: If no base URL is configured anywhere, a value is
            malformed, or the merged settings fail validation.
    """
    # 3. Project-local config
    settings: dict[str, Any] = dict(load_project_config(project_dir) or {})

    # 2. Environment variables
    env_base_url = os.environ.get(ENV_BASE_URL)
    if env_base_url:
        settings["base_url"] = env_base_url
    env_timeout = _env_number(ENV_TIMEOUT, float)
    if env_timeout is not None:
        settings["timeout"] = env_timeout
    env_retries = _env_number(ENV_RETRIES, int)
    if env_retries is not None:
        settings["retries"] = env_retries

    # 1. CLI flags
    if cli_base_url is not None:
        settings["base_url"] = cli_base_url
    if cli_timeout is not None:
        settings["timeout"] = cli_timeout
    if cli_retries is not None:
        settings["retries"] = cli_retries

    if not settings.get("base_url"):
        raise ConfigError(
            f"No base URL configured. Pass --base-url, set {ENV_BASE_URL}, "
            f"or add base_url to {_PROJECT_CONFIG_FILENAME}."
        )
    try:
        return ClientConfig.model_validate(settings)
    except ValidationError as exc:
        raise ConfigError(f"Invalid client configuration: {exc}") from exc
