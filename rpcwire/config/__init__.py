"""Configuration loading and validation."""

from rpcwire.config.loader import load_config
from rpcwire.config.schema import SessionConfig

__all__ = [
    "SessionConfig",
    "load_config",
]
