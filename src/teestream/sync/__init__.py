"""
Coordination primitives for running pipeline stages concurrently.

- WaitGroup: barrier released when every registered task is done
- Once: run-once guard
"""

from teestream.sync.once import Once
from teestream.sync.waitgroup import WaitGroup

__all__ = ["Once", "WaitGroup"]
