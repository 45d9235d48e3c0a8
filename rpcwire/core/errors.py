"""Typed exception hierarchy for rpcwire."""

from __future__ import annotations

from typing import Any


class RpcWireError(Exception):
    """Base class for all rpcwire errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class LoadError(RpcWireError):
    """Raised when a JSON file cannot be read or parsed."""


class ConfigError(RpcWireError):
    """Raised for configuration issues (missing file, invalid JSON, validation failure)."""


class TransportError(RpcWireError):
    """Raised when the HTTP exchange itself fails.

    Covers every send/receive failure except a stale pooled connection on the
    first attempt, which is retried once before this is raised.
    """


class SerializationError(RpcWireError):
    """Raised when a request cannot be encoded or a response cannot be decoded."""


class VersionMismatchError(RpcWireError):
    """Raised when a response declares a protocol version other than 2.0."""

    def __init__(self, version: Any) -> None:
        self.version = version
        super().__init__(f"Unsupported JSON-RPC version in response: {version!r}")


class NonceMismatchError(RpcWireError):
    """Raised when a response id does not match the id of the request sent."""

    def __init__(self, expected: int, received: Any) -> None:
        self.expected = expected
        self.received = received
        super().__init__(
            f"Response id {received!r} does not match request id {expected!r}"
        )


class RpcError(RpcWireError):
    """The server answered with a JSON-RPC error object.

    Attributes:
        payload: The error value exactly as the server sent it.
        code: The error code, if the payload is a well-formed error object.
        data: The optional ``data`` member of the error object.
    """

    def __init__(self, payload: Any) -> None:
        self.payload = payload
        self.code: int | None = None
        self.data: Any = None
        message = "Unknown error"
        if isinstance(payload, dict):
            code = payload.get("code")
            if isinstance(code, int) and not isinstance(code, bool):
                self.code = code
            if isinstance(payload.get("message"), str):
                message = payload["message"]
            self.data = payload.get("data")
        elif isinstance(payload, str):
            message = payload
        super().__init__(message)

    def __str__(self) -> str:
        if self.code is None:
            return f"RPC error: {self.message}"
        return f"RPC error {self.code}: {self.message}"
