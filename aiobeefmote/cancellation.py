"""Cooperative cancellation shared by the worker and the shutdown path."""

from __future__ import annotations

import threading


class CancellationToken:
    """Stop flag guarded by a lock, polled by the worker at every wait boundary."""

    def __init__(self) -> None:
        """Initialize a token that is not cancelled."""
        self._lock = threading.Lock()
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        """Return True once cancellation has been requested."""
        with self._lock:
            return self._cancelled

    def cancel(self) -> bool:
        """Request cancellation, return False if it was already requested."""
        with self._lock:
            if self._cancelled:
                return False
            self._cancelled = True
            return True
