"""Core constants and paths for rpcwire.

Single source of truth for global paths. Modules import from here instead of
hardcoding paths like `Path.home() / ".rpcwire"`.
"""

from pathlib import Path

RPCWIRE_DIR_NAME = ".rpcwire"

# Environment variable checked first during token discovery
TOKEN_ENV_VAR = "RPCWIRE_TOKEN"

# Default httpx timeouts (seconds)
DEFAULT_TIMEOUT = 60.0
DEFAULT_CONNECT_TIMEOUT = 10.0


def get_rpcwire_dir() -> Path:
    """Get ~/.rpcwire (global config directory)."""
    return Path.home() / RPCWIRE_DIR_NAME


def get_default_config_path() -> Path:
    """Get default config file path."""
    return get_rpcwire_dir() / "config.json"


def get_token_path() -> Path:
    """Get the bearer token file path."""
    return get_rpcwire_dir() / "rpc.token"
