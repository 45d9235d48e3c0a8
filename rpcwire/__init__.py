"""rpcwire: a JSON-RPC 2.0 client over HTTP.

Example usage:
    from rpcwire import RpcSession

    with RpcSession("http://127.0.0.1:8332", token="s3cret") as session:
        result = session.call("echo", {"x": 1})
"""

from rpcwire.client import AsyncRpcSession, RpcSession
from rpcwire.config import SessionConfig, load_config
from rpcwire.core.errors import (
    ConfigError,
    NonceMismatchError,
    RpcError,
    RpcWireError,
    SerializationError,
    TransportError,
    VersionMismatchError,
)
from rpcwire.rpc.nonce import RequestBuilder
from rpcwire.rpc.types import Request, Response

__version__ = "0.1.0"

__all__ = [
    "AsyncRpcSession",
    "ConfigError",
    "NonceMismatchError",
    "Request",
    "RequestBuilder",
    "Response",
    "RpcError",
    "RpcSession",
    "RpcWireError",
    "SerializationError",
    "SessionConfig",
    "TransportError",
    "VersionMismatchError",
    "load_config",
]
