"""Session configuration loading with fail-fast behavior."""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from rpcwire.config.schema import SessionConfig
from rpcwire.core.constants import get_default_config_path
from rpcwire.core.errors import ConfigError, LoadError

logger = logging.getLogger(__name__)


def _read_config_file(path: Path, required: bool) -> dict[str, Any] | None:
    """Read the JSON object stored in a config file.

    Returns None when an optional file is absent. An empty file counts as an
    empty object so a placeholder config.json does not break loading.

    Raises:
        LoadError: If a required file is missing, or the file is unreadable,
            not JSON, or not a JSON object.
    """
    if not path.is_file():
        if required:
            raise LoadError(f"config: File not found: {path}")
        logger.debug("No config file at %s", path)
        return None

    try:
        content = path.read_text(encoding="utf-8-sig").strip()
    except OSError as e:
        raise LoadError(f"config: Failed to read file {path}: {e}") from e

    if not content:
        return {}

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise LoadError(f"config: Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise LoadError(f"config: Expected object in {path}, got {type(data).__name__}")
    return data


def load_config(path: Path | None = None, **overrides: Any) -> SessionConfig:
    """Load and validate a session configuration file.

    Args:
        path: Explicit config file path. Defaults to ~/.rpcwire/config.json.
        **overrides: Values that replace (or supply) keys from the file,
            e.g. ``url=`` from a command line.

    Returns:
        Validated SessionConfig.

    Raises:
        ConfigError: If an explicit file is missing, any file contains invalid
            JSON, or the merged values fail validation.
    """
    config_path = path if path is not None else get_default_config_path()
    try:
        data = _read_config_file(config_path, required=path is not None)
    except LoadError as e:
        raise ConfigError(e.message) from e

    source = str(config_path) if data is not None else "defaults"
    merged = {**(data or {}), **{k: v for k, v in overrides.items() if v is not None}}
    logger.debug("Session config loaded from: %s", source)

    try:
        return SessionConfig.model_validate(merged)
    except ValidationError as e:
        raise ConfigError(f"Config validation failed for {source}: {e}") from e
