"""Unit tests for rpcwire.rpc.retry (transport failure classification)."""

import errno

import httpx
import pytest

from rpcwire.rpc.retry import (
    TransportFailure,
    classify_transport_error,
    is_stale_connection_error,
)


def _raised_from(outer: Exception, inner: BaseException) -> Exception:
    """Return outer with inner as its __cause__, the way httpx maps OSErrors."""
    try:
        raise outer from inner
    except Exception as e:
        return e


def _raised_during(outer: Exception, inner: BaseException) -> Exception:
    """Return outer with inner as its implicit __context__."""
    try:
        try:
            raise inner
        except BaseException:
            raise outer
    except Exception as e:
        return e


class TestIsStaleConnectionError:
    """Tests for is_stale_connection_error."""

    def test_broken_pipe(self):
        assert is_stale_connection_error(BrokenPipeError(errno.EPIPE, "Broken pipe"))

    def test_connection_aborted(self):
        assert is_stale_connection_error(ConnectionAbortedError(errno.ECONNABORTED, "aborted"))

    def test_oserror_with_epipe_errno(self):
        """A plain OSError is recognised by errno."""
        err = OSError()
        err.errno = errno.EPIPE
        assert is_stale_connection_error(err)

    def test_httpx_error_caused_by_broken_pipe(self):
        """httpx wraps the socket error; the cause is still found."""
        exc = _raised_from(httpx.WriteError("write failed"), BrokenPipeError(errno.EPIPE, "x"))
        assert is_stale_connection_error(exc)

    def test_httpx_error_with_aborted_context(self):
        """Implicit chaining is followed too."""
        exc = _raised_during(httpx.ReadError("read failed"), ConnectionAbortedError())
        assert is_stale_connection_error(exc)

    def test_deeply_chained(self):
        """The cause may be several levels down."""
        inner = _raised_from(httpx.WriteError("inner"), BrokenPipeError())
        outer = _raised_from(RuntimeError("outer"), inner)
        assert is_stale_connection_error(outer)

    @pytest.mark.parametrize(
        "exc",
        [
            ConnectionResetError(errno.ECONNRESET, "reset"),
            ConnectionRefusedError(errno.ECONNREFUSED, "refused"),
            httpx.ConnectError("Connection refused"),
            httpx.ReadTimeout("timed out"),
            httpx.RemoteProtocolError("Server disconnected without sending a response."),
            TimeoutError(),
        ],
    )
    def test_genuine_failures_are_not_stale(self, exc):
        assert not is_stale_connection_error(exc)

    def test_message_text_is_ignored(self):
        """Classification never relies on the error message."""
        assert not is_stale_connection_error(httpx.WriteError("[Errno 32] Broken pipe"))

    def test_cyclic_chain_terminates(self):
        """A cause cycle does not loop forever."""
        a = ValueError("a")
        b = ValueError("b")
        a.__cause__ = b
        b.__cause__ = a
        assert not is_stale_connection_error(a)


class TestClassifyTransportError:
    """Tests for classify_transport_error."""

    def test_transient(self):
        exc = _raised_from(httpx.WriteError("write failed"), BrokenPipeError())
        assert classify_transport_error(exc) is TransportFailure.TRANSIENT

    def test_fatal(self):
        assert classify_transport_error(httpx.ConnectError("refused")) is TransportFailure.FATAL
