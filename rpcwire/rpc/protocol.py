"""JSON-RPC 2.0 envelope serialization, parsing and validation."""

import json
from typing import Any

from rpcwire.core.errors import NonceMismatchError, SerializationError, VersionMismatchError
from rpcwire.rpc.types import JSONRPC_VERSION, Request, Response

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
SERVER_ERROR = -32000  # Server error range: -32000 to -32099


def serialize_request(request: Request) -> bytes:
    """Serialize a Request to UTF-8 encoded JSON.

    Args:
        request: The Request object to serialize.

    Returns:
        The request body, ready to POST.

    Raises:
        SerializationError: If params contain values JSON cannot represent
            (arbitrary objects, NaN, infinities, non-string keys).
    """
    data: dict[str, Any] = {
        "jsonrpc": request.jsonrpc,
        "method": request.method,
    }

    if request.params is not None:
        data["params"] = request.params

    data["id"] = request.id

    try:
        text = json.dumps(data, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(
            f"Cannot serialize request {request.method!r} (id={request.id}): {e}"
        ) from e
    return text.encode("utf-8")


def parse_response(body: bytes | str) -> Response:
    """Parse a response body into a Response envelope.

    Parsing is deliberately lenient about the envelope members: the version
    marker is optional and the id is kept exactly as received, so that
    validate_response() can report version and id problems precisely.

    Args:
        body: Raw response body.

    Returns:
        A parsed Response object.

    Raises:
        SerializationError: If the body is not JSON or not a JSON object.
    """
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise SerializationError(f"Invalid JSON in response: {e}") from e

    if not isinstance(data, dict):
        raise SerializationError(
            f"Response must be a JSON object, got: {type(data).__name__}"
        )

    version = data.get("jsonrpc")
    if version is not None and not isinstance(version, str):
        raise SerializationError(
            f"Response jsonrpc member must be a string, got: {type(version).__name__}"
        )

    return Response(
        id=data.get("id"),
        jsonrpc=version,
        result=data.get("result"),
        error=data.get("error"),
    )


def validate_response(request: Request, response: Response) -> Response:
    """Check a response against the request it answers.

    The version marker is checked before the id, so a response that is wrong
    on both counts always reports VersionMismatchError.

    Args:
        request: The request that was sent.
        response: The parsed response.

    Returns:
        The same response, for chaining.

    Raises:
        VersionMismatchError: If the response declares a version other than "2.0".
        NonceMismatchError: If the response id is not exactly the request id.
    """
    if response.jsonrpc is not None and response.jsonrpc != JSONRPC_VERSION:
        raise VersionMismatchError(response.jsonrpc)

    # bool is an int subclass and 1.0 == 1, so compare the type as well
    if type(response.id) is not int or response.id != request.id:
        raise NonceMismatchError(request.id, response.id)

    return response
