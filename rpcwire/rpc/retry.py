"""Classification of transport failures for the one-shot retry.

httpx keeps a pool of keep-alive connections and cannot tell that the peer
closed one until it tries to write to it. That surfaces as a broken pipe or an
aborted connection on send, and the right response is to send again on a fresh
connection. Every other failure is treated as genuine and is not retried, since
the server may already have received the request.

httpx wraps the low-level OSError in its own exception types, so the
classification walks the ``__cause__``/``__context__`` chain and looks at the
exception types and errno values, never at messages.
"""

import errno
from enum import Enum

STALE_CONNECTION_ERRNOS: frozenset[int] = frozenset({errno.EPIPE, errno.ECONNABORTED})


class TransportFailure(Enum):
    """Outcome of classifying a failed send."""

    TRANSIENT = "transient"
    FATAL = "fatal"


def _iter_chain(exc: BaseException):
    """Yield exc and every exception it was raised from, without looping."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def is_stale_connection_error(exc: BaseException) -> bool:
    """Check whether a send failed because the pooled connection was dead.

    Args:
        exc: The exception raised by the transport.

    Returns:
        True for broken pipe / connection aborted anywhere in the chain.
    """
    for err in _iter_chain(exc):
        if isinstance(err, (BrokenPipeError, ConnectionAbortedError)):
            return True
        if isinstance(err, OSError) and err.errno in STALE_CONNECTION_ERRNOS:
            return True
    return False


def classify_transport_error(exc: BaseException) -> TransportFailure:
    """Map a raw transport exception to TRANSIENT (retry once) or FATAL."""
    if is_stale_connection_error(exc):
        return TransportFailure.TRANSIENT
    return TransportFailure.FATAL
