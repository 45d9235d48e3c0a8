"""Core errors and constants."""

from rpcwire.core.errors import (
    ConfigError,
    LoadError,
    NonceMismatchError,
    RpcError,
    RpcWireError,
    SerializationError,
    TransportError,
    VersionMismatchError,
)

__all__ = [
    "ConfigError",
    "LoadError",
    "NonceMismatchError",
    "RpcError",
    "RpcWireError",
    "SerializationError",
    "TransportError",
    "VersionMismatchError",
]
