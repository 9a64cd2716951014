"""
Request context threaded through every node read.

A context carries an optional deadline and a cancellation flag. Reads call
:meth:`RequestContext.check` before touching the network and cap their
HTTP timeout with :meth:`RequestContext.timeout`.
"""

from __future__ import annotations
import threading
import time
from typing import Optional

from .errors import DeadlineExceededError, RequestCancelledError


class RequestContext:
    """Cooperative cancellation and deadline for one logical request."""

    def __init__(self, deadline: Optional[float] = None):
        """
        Args:
            deadline: Absolute ``time.monotonic()`` value after which reads fail
        """
        self.deadline = deadline
        self._cancelled = threading.Event()

    @classmethod
    def background(cls) -> RequestContext:
        """Context that never expires."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> RequestContext:
        """Context expiring ``seconds`` from now."""
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None without one."""
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()

    def check(self, stage: str = "") -> None:
        """
        Raise if the request can no longer proceed.

        Args:
            stage: Name of the read about to happen, for error attribution

        Raises:
            RequestCancelledError: If cancel() was called
            DeadlineExceededError: If the deadline has passed
        """
        details = {"stage": stage} if stage else None
        if self._cancelled.is_set():
            raise RequestCancelledError(details=details)
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise DeadlineExceededError(details=details)

    def timeout(self, default: float) -> float:
        """HTTP timeout for the next read, never beyond the deadline."""
        remaining = self.remaining()
        if remaining is None:
            return default
        return max(min(default, remaining), 0.001)
