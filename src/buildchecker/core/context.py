"""Cancellation and deadline token passed to external calls."""

from __future__ import annotations

import threading
import time

from buildchecker.core.errors import CheckCancelled


class Context:
    """Cancellation token with an optional monotonic deadline.

    A Context is handed to every collaborator that may block (build
    provider, branch locker, teammate resolver). Children created with
    with_timeout() are done when their parent is done.

    Usage:
        ctx = Context.background().with_timeout(30)
        ...
        ctx.raise_if_done()
    """

    def __init__(
        self,
        deadline: float | None = None,
        parent: Context | None = None,
    ):
        """Create a context.

        Args:
            deadline: time.monotonic() value after which the context
                is done, or None for no deadline
            parent: Context whose cancellation propagates to this one
        """
        self._deadline = deadline
        self._parent = parent
        self._cancelled = threading.Event()

    @classmethod
    def background(cls) -> Context:
        """Return a context that is never done unless cancelled."""
        return cls()

    def with_timeout(self, seconds: float) -> Context:
        """Derive a child context that expires after `seconds`."""
        deadline = time.monotonic() + seconds
        if self._deadline is not None:
            deadline = min(deadline, self._deadline)
        return Context(deadline=deadline, parent=self)

    def cancel(self) -> None:
        """Mark this context (and its children) as done."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        if self._cancelled.is_set():
            return True
        return self._parent is not None and self._parent.cancelled

    @property
    def expired(self) -> bool:
        return (
            self._deadline is not None
            and time.monotonic() >= self._deadline
        )

    @property
    def done(self) -> bool:
        """True once cancelled or past the deadline."""
        return self.cancelled or self.expired

    def remaining(self) -> float | None:
        """Seconds left before the deadline (None when unbounded)."""
        if self._deadline is None:
            return None
        return max(self._deadline - time.monotonic(), 0.0)

    def reason(self) -> str:
        if self.cancelled:
            return "context cancelled"
        if self.expired:
            return "context deadline exceeded"
        return ""

    def raise_if_done(self) -> None:
        """Raise CheckCancelled if the context is done."""
        if self.done:
            raise CheckCancelled(self.reason())
