"""
Throttle

Fixed-delay rate limiting for sequential loops over external APIs.
"""

import time
from typing import Callable, Iterable, Iterator, TypeVar

T = TypeVar("T")


class Throttle:
    """Enforce a fixed delay between consecutive iterations.

    The sleep function is injectable so callers (and tests) can run the
    same loop without real delays.
    """

    def __init__(self, delay: float = 1.0, sleep: Callable[[float], None] = time.sleep):
        self.delay = max(float(delay or 0), 0.0)
        self.sleep = sleep

    def wait(self):
        """Sleep for the configured delay."""
        if self.delay > 0:
            self.sleep(self.delay)

    def iterate(self, items: Iterable[T]) -> Iterator[T]:
        """Yield items, waiting between them (not before the first or after the last)."""
        first = True
        for item in items:
            if not first:
                self.wait()
            first = False
            yield item


def no_sleep(_seconds: float) -> None:
    """Sleep replacement that returns immediately."""
    return None
