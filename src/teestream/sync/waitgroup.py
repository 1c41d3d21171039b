"""
WaitGroup barrier.

Releases waiters only after every registered task has signalled
completion exactly once.
"""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING, Any

from teestream.errors import CoordinationError

if TYPE_CHECKING:
    from collections.abc import Callable


class WaitGroup:
    """Counts outstanding tasks and blocks waiters until the count is zero.

    Signalling more ``done`` calls than registered tasks is a caller error
    and raises CoordinationError; so does a bounded ``wait`` that times out
    while tasks are still pending.

    Example:
        >>> wg = WaitGroup()
        >>> for sink in sinks:
        ...     wg.go(write_chunk, sink)
        >>> wg.wait()
    """

    def __init__(self) -> None:
        self._count = 0
        self._cond = threading.Condition()

    @property
    def pending(self) -> int:
        """Number of tasks that have not signalled completion."""
        with self._cond:
            return self._count

    def add(self, delta: int = 1) -> None:
        """Register ``delta`` more tasks (negative values signal completion).

        Raises:
            CoordinationError: If the counter would drop below zero
        """
        with self._cond:
            if self._count + delta < 0:
                raise CoordinationError(
                    "negative WaitGroup counter", pending=self._count
                )
            self._count += delta
            if self._count == 0:
                self._cond.notify_all()

    def done(self) -> None:
        """Signal that one registered task finished."""
        self.add(-1)

    def wait(self, timeout: float | None = None) -> None:
        """Block until every registered task has called ``done``.

        Args:
            timeout: Maximum seconds to wait (None = wait forever)

        Raises:
            CoordinationError: If the timeout elapses with tasks pending
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while self._count > 0:
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    raise CoordinationError(
                        f"WaitGroup wait timed out with {self._count} task(s) pending",
                        pending=self._count,
                    )
                self._cond.wait(remaining)

    def go(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> threading.Thread:
        """Run ``fn`` on a new thread registered with this group.

        Returns:
            The started thread
        """
        self.add(1)

        def run() -> None:
            try:
                fn(*args, **kwargs)
            finally:
                self.done()

        thread = threading.Thread(target=run, daemon=True)
        thread.start()
        return thread
