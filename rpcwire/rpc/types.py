"""JSON-RPC 2.0 envelope types."""

from dataclasses import dataclass
from typing import Any

from rpcwire.core.errors import RpcError

JSONRPC_VERSION = "2.0"


@dataclass(frozen=True)
class Request:
    """JSON-RPC 2.0 request.

    Attributes:
        method: Name of the method to invoke.
        params: Parameters for the method, passed through untouched.
        id: Request identifier, drawn from the session nonce.
        jsonrpc: Protocol version, always "2.0".
    """

    method: str
    params: Any
    id: int
    jsonrpc: str = JSONRPC_VERSION


@dataclass(frozen=True)
class Response:
    """JSON-RPC 2.0 response.

    Attributes:
        id: Request identifier echoed by the server (may be null).
        jsonrpc: Protocol version declared by the server, if any.
        result: Result of the method call.
        error: Error payload if the method failed, verbatim.
    """

    id: int | str | None
    jsonrpc: str | None = None
    result: Any = None
    error: Any = None

    @property
    def is_error(self) -> bool:
        """Check if this is an error response."""
        return self.error is not None

    def into_result(self) -> Any:
        """Return the result, or raise RpcError if the server reported an error."""
        if self.error is not None:
            raise RpcError(self.error)
        return self.result
