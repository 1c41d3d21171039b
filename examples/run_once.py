#!/usr/bin/env python3
"""
Run-once guard and WaitGroup barrier.

One hundred threads each try to increment and then decrement a counter
through the same Once guard. Only the first increment runs.
"""

from teestream import Once, WaitGroup


def main() -> None:
    count = 0

    def increment() -> None:
        nonlocal count
        count += 1

    def decrement() -> None:
        nonlocal count
        count -= 1

    once = Once()
    wg = WaitGroup()

    def worker() -> None:
        once.do(increment)
        once.do(decrement)

    for _ in range(100):
        wg.go(worker)
    wg.wait()

    print(f"Count is {count}")


if __name__ == "__main__":
    main()
