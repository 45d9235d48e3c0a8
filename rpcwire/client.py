"""HTTP sessions for calling a JSON-RPC 2.0 endpoint.

Two front-ends share the protocol logic:

- RpcSession: blocking, backed by httpx.Client. Safe to share across threads.
- AsyncRpcSession: asyncio, backed by httpx.AsyncClient. Safe to share
  across tasks on one event loop.

Every call draws a fresh id from the session nonce, POSTs the request, retries
once if the pooled connection turned out to be dead, then validates the
response version and id before unwrapping the result. The HTTP status code is
ignored; the JSON body alone decides success or failure.
"""

import functools
import json
import logging
from typing import Any
from urllib.parse import urlparse

import httpx
from pydantic import TypeAdapter, ValidationError

from rpcwire.config.schema import SessionConfig, is_loopback_url
from rpcwire.core.constants import DEFAULT_CONNECT_TIMEOUT, DEFAULT_TIMEOUT
from rpcwire.core.errors import RpcError, SerializationError, TransportError
from rpcwire.rpc.auth import discover_token
from rpcwire.rpc.nonce import RequestBuilder
from rpcwire.rpc.protocol import parse_response, serialize_request, validate_response
from rpcwire.rpc.retry import TransportFailure, classify_transport_error
from rpcwire.rpc.types import Request, Response

logger = logging.getLogger(__name__)

# Failures raised while sending; anything else propagates untouched
_SEND_ERRORS = (httpx.RequestError, OSError)


@functools.lru_cache(maxsize=128)
def _adapter_for(result_type: Any) -> TypeAdapter:
    return TypeAdapter(result_type)


def _coerce_result(value: Any, result_type: Any) -> Any:
    """Validate a decoded result against the type the caller asked for.

    Validation is strict and runs on the JSON form of the value, so "42" is not
    an int and 1 is not a bool, while arrays still fill tuples and ISO strings
    still fill datetimes.
    """
    if result_type is Any:
        return value
    try:
        return _adapter_for(result_type).validate_json(json.dumps(value), strict=True)
    except ValidationError as e:
        raise SerializationError(f"Result does not match {result_type!r}: {e}") from e


class _BaseSession:
    """Endpoint settings, id allocation and response checks shared by both sessions."""

    def __init__(
        self,
        url: str,
        token: str | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        verify_ssl: bool = True,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._url = url
        self._token = token
        self._timeout = httpx.Timeout(timeout, connect=connect_timeout)
        self._verify_ssl = verify_ssl
        self._extra_headers = dict(headers or {})
        self._builder = RequestBuilder()

    @classmethod
    def from_config(cls, config: SessionConfig, **kwargs: Any):
        """Create a session from a validated SessionConfig."""
        return cls(
            config.url,
            config.token,
            timeout=config.timeout,
            connect_timeout=config.connect_timeout,
            verify_ssl=config.verify_ssl,
            headers=config.extra_headers,
            **kwargs,
        )

    @classmethod
    def with_auto_auth(cls, url: str, **kwargs: Any):
        """Create a session with an auto-discovered bearer token.

        Discovery (RPCWIRE_TOKEN, then ~/.rpcwire/rpc.token) only runs for
        loopback URLs, so a local token is never sent to a remote host.
        """
        token: str | None = None
        if is_loopback_url(url):
            token = discover_token()
            if token:
                logger.debug("Auto-discovered token for %s", url)
            else:
                logger.debug("No token found for %s", url)
        else:
            logger.warning(
                "Auto-auth disabled for non-loopback host '%s'. "
                "Pass token explicitly for remote endpoints.",
                urlparse(url).hostname,
            )
        return cls(url, token, **kwargs)

    @property
    def url(self) -> str:
        """Endpoint URL."""
        return self._url

    def last_nonce(self) -> int:
        """Return the id of the most recently built request (0 if none)."""
        return self._builder.last_issued()

    def build_request(self, method: str, params: Any = None) -> Request:
        """Build a request with the next id from this session's nonce."""
        return self._builder.build(method, params)

    def _request_headers(self) -> dict[str, str]:
        headers = {**self._extra_headers, "Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _stale_or_raise(self, request: Request, exc: BaseException) -> None:
        """Log a retryable send failure, or raise TransportError for any other."""
        if classify_transport_error(exc) is TransportFailure.FATAL:
            logger.warning(
                "Request failed: method=%s, id=%s, url=%s: %s",
                request.method, request.id, self._url, exc,
            )
            raise TransportError(f"Request to {self._url} failed: {exc}") from exc
        logger.debug(
            "Stale pooled connection for id=%s (%s), retrying once", request.id, exc
        )

    def _retry_failed(self, request: Request, exc: BaseException) -> TransportError:
        logger.warning(
            "Retry failed: method=%s, id=%s, url=%s: %s",
            request.method, request.id, self._url, exc,
        )
        return TransportError(f"Request to {self._url} failed after retry: {exc}")

    def _read_failed(self, request: Request, exc: BaseException) -> TransportError:
        logger.warning(
            "Failed reading response: method=%s, id=%s: %s", request.method, request.id, exc
        )
        return TransportError(f"Failed to read response from {self._url}: {exc}")

    def _check_response(self, request: Request, raw: bytes, status_code: int) -> Response:
        """Parse and validate a response body.

        Raises:
            SerializationError: If the body is not a JSON object.
            VersionMismatchError: If the version marker is not "2.0".
            NonceMismatchError: If the id does not match the request id.
        """
        try:
            response = parse_response(raw)
        except SerializationError as e:
            raise SerializationError(f"HTTP {status_code}: {e.message}") from e
        return validate_response(request, response)

    @staticmethod
    def _unwrap(request: Request, response: Response, result_type: Any) -> Any:
        try:
            result = response.into_result()
        except RpcError as e:
            logger.debug("RPC error for method=%s, id=%s: %s", request.method, request.id, e)
            raise
        return _coerce_result(result, result_type)


class RpcSession(_BaseSession):
    """Blocking JSON-RPC 2.0 session over HTTP.

    Usage:
        with RpcSession("http://127.0.0.1:8332", token="s3cret") as session:
            height = session.call("getblockcount", result_type=int)

    An injected http_client is used as-is and left open on close(); the
    caller owns its lifecycle.
    """

    def __init__(
        self,
        url: str,
        token: str | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        verify_ssl: bool = True,
        headers: dict[str, str] | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        super().__init__(
            url,
            token,
            timeout=timeout,
            connect_timeout=connect_timeout,
            verify_ssl=verify_ssl,
            headers=headers,
        )
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            timeout=self._timeout,
            verify=self._verify_ssl,
            follow_redirects=False,
        )
        logger.debug("RpcSession initialized: url=%s", url)

    def __enter__(self) -> "RpcSession":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the connection pool if this session created it."""
        if self._owns_client:
            self._client.close()

    def call(self, method: str, params: Any = None, result_type: Any = Any) -> Any:
        """Call a remote method and return its result.

        Args:
            method: The RPC method name.
            params: JSON-serializable params, sent verbatim (omitted if None).
            result_type: Type the result is validated into. Any returns the
                decoded JSON unchanged.

        Returns:
            The result, validated as result_type.

        Raises:
            TransportError: On a send/receive failure that is not retried.
            SerializationError: On encoding, decoding or result type failures.
            VersionMismatchError: If the server speaks another protocol version.
            NonceMismatchError: If the response answers a different request.
            RpcError: If the server returned an error object.
        """
        request = self.build_request(method, params)
        response = self.send_request(request)
        return self._unwrap(request, response, result_type)

    def send_request(self, request: Request) -> Response:
        """Send a built request and return its validated response envelope.

        The result is not unwrapped, so an error response is returned rather
        than raised.
        """
        body = serialize_request(request)
        headers = self._request_headers()

        logger.debug("RPC call: method=%s, id=%s", request.method, request.id)
        http_response = self._send(request, body, headers)
        try:
            raw = self._read_body(request, http_response)
        finally:
            self._release(http_response)

        return self._check_response(request, raw, http_response.status_code)

    def _post(self, body: bytes, headers: dict[str, str]) -> httpx.Response:
        http_request = self._client.build_request("POST", self._url, content=body, headers=headers)
        return self._client.send(http_request, stream=True)

    def _send(self, request: Request, body: bytes, headers: dict[str, str]) -> httpx.Response:
        """POST the body, resending once if the pooled connection was stale."""
        try:
            return self._post(body, headers)
        except _SEND_ERRORS as e:
            self._stale_or_raise(request, e)

        try:
            return self._post(body, headers)
        except _SEND_ERRORS as e:
            raise self._retry_failed(request, e) from e

    def _read_body(self, request: Request, http_response: httpx.Response) -> bytes:
        """Read the whole body.

        httpx closes the response once the last chunk is consumed. A failure
        from that close (is_closed already set) comes after a complete body and
        is logged instead of raised.
        """
        chunks: list[bytes] = []
        try:
            for chunk in http_response.iter_bytes():
                chunks.append(chunk)
        except _SEND_ERRORS as e:
            if not http_response.is_closed:
                raise self._read_failed(request, e) from e
            logger.debug("Error releasing connection: %s", e)
        return b"".join(chunks)

    @staticmethod
    def _release(http_response: httpx.Response) -> None:
        """Return the connection to the pool; problems here are not the caller's."""
        try:
            http_response.close()
        except _SEND_ERRORS as e:
            logger.debug("Error releasing connection: %s", e)


class AsyncRpcSession(_BaseSession):
    """Async JSON-RPC 2.0 session over HTTP.

    Usage:
        async with AsyncRpcSession("http://127.0.0.1:8332") as session:
            info = await session.call("getinfo")
    """

    def __init__(
        self,
        url: str,
        token: str | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        verify_ssl: bool = True,
        headers: dict[str, str] | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(
            url,
            token,
            timeout=timeout,
            connect_timeout=connect_timeout,
            verify_ssl=verify_ssl,
            headers=headers,
        )
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=self._timeout,
            verify=self._verify_ssl,
            follow_redirects=False,
        )
        logger.debug("AsyncRpcSession initialized: url=%s", url)

    async def __aenter__(self) -> "AsyncRpcSession":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the connection pool if this session created it."""
        if self._owns_client:
            await self._client.aclose()

    async def call(self, method: str, params: Any = None, result_type: Any = Any) -> Any:
        """Call a remote method and return its result.

        Same contract as RpcSession.call().
        """
        request = self.build_request(method, params)
        response = await self.send_request(request)
        return self._unwrap(request, response, result_type)

    async def send_request(self, request: Request) -> Response:
        """Send a built request and return its validated response envelope."""
        body = serialize_request(request)
        headers = self._request_headers()

        logger.debug("RPC call: method=%s, id=%s", request.method, request.id)
        http_response = await self._send(request, body, headers)
        try:
            raw = await self._read_body(request, http_response)
        finally:
            await self._release(http_response)

        return self._check_response(request, raw, http_response.status_code)

    async def _post(self, body: bytes, headers: dict[str, str]) -> httpx.Response:
        http_request = self._client.build_request("POST", self._url, content=body, headers=headers)
        return await self._client.send(http_request, stream=True)

    async def _send(
        self, request: Request, body: bytes, headers: dict[str, str]
    ) -> httpx.Response:
        """POST the body, resending once if the pooled connection was stale."""
        try:
            return await self._post(body, headers)
        except _SEND_ERRORS as e:
            self._stale_or_raise(request, e)

        try:
            return await self._post(body, headers)
        except _SEND_ERRORS as e:
            raise self._retry_failed(request, e) from e

    async def _read_body(self, request: Request, http_response: httpx.Response) -> bytes:
        chunks: list[bytes] = []
        try:
            async for chunk in http_response.aiter_bytes():
                chunks.append(chunk)
        except _SEND_ERRORS as e:
            if not http_response.is_closed:
                raise self._read_failed(request, e) from e
            logger.debug("Error releasing connection: %s", e)
        return b"".join(chunks)

    @staticmethod
    async def _release(http_response: httpx.Response) -> None:
        try:
            await http_response.aclose()
        except _SEND_ERRORS as e:
            logger.debug("Error releasing connection: %s", e)
