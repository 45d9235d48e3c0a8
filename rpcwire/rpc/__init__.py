"""JSON-RPC 2.0 envelopes, id allocation and transport error classification.

Example usage:
    builder = RequestBuilder()
    request = builder.build("getblockcount")
    body = serialize_request(request)
    # ... POST body, read response bytes ...
    response = validate_response(request, parse_response(raw))
    count = response.into_result()
"""

from rpcwire.rpc.auth import (
    InsecureTokenFileError,
    check_token_file_permissions,
    discover_token,
)
from rpcwire.rpc.nonce import RequestBuilder
from rpcwire.rpc.protocol import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    SERVER_ERROR,
    parse_response,
    serialize_request,
    validate_response,
)
from rpcwire.rpc.retry import (
    TransportFailure,
    classify_transport_error,
    is_stale_connection_error,
)
from rpcwire.rpc.types import JSONRPC_VERSION, Request, Response

__all__ = [
    # Auth
    "InsecureTokenFileError",
    "check_token_file_permissions",
    "discover_token",
    # Ids
    "RequestBuilder",
    # Protocol
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "PARSE_ERROR",
    "SERVER_ERROR",
    "parse_response",
    "serialize_request",
    "validate_response",
    # Retry
    "TransportFailure",
    "classify_transport_error",
    "is_stale_connection_error",
    # Types
    "JSONRPC_VERSION",
    "Request",
    "Response",
]
