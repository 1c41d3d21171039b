"""
Run-once guard.

Executes an action for exactly one caller, however many call concurrently.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable


class Once:
    """Guard that fires a single time in its lifetime.

    The first ``do`` call runs its function; concurrent callers block until
    that run finishes. Every later call returns immediately without running
    anything, even when given a different function. If the function raises,
    the guard is still spent and only that first caller sees the exception.

    Example:
        >>> once = Once()
        >>> once.do(increment)
        >>> once.do(decrement)  # never runs
    """

    def __init__(self) -> None:
        self._done = False
        self._lock = threading.Lock()

    @property
    def done(self) -> bool:
        """Whether the guard has fired."""
        return self._done

    def do(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> bool:
        """Run ``fn`` if this guard has never fired.

        Returns:
            True if this call ran ``fn``
        """
        if self._done:
            return False
        with self._lock:
            if self._done:
                return False
            try:
                fn(*args, **kwargs)
            finally:
                self._done = True
        return True
