"""Request id allocation."""

import threading
from typing import Any

from rpcwire.rpc.types import Request


class RequestBuilder:
    """Builds request envelopes with ids from a monotonically increasing nonce.

    The nonce starts at 0 and the first id issued is 1. Increment-and-read is
    done under a lock, so concurrent callers (threads, or tasks on one event
    loop) always receive distinct consecutive ids.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._nonce = 0

    def build(self, method: str, params: Any = None) -> Request:
        """Allocate the next id and build a request for it."""
        with self._lock:
            self._nonce += 1
            request_id = self._nonce
        return Request(method=method, params=params, id=request_id)

    def last_issued(self) -> int:
        """Return the most recently issued id (0 if none)."""
        with self._lock:
            return self._nonce
