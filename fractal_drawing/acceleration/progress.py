"""
Pixel progress tracking shared by the single-tile and tiled render paths.
"""

import threading
from typing import Callable, List
import logging

logger = logging.getLogger(__name__)


class ProgressTracker:
    """
    Thread-safe count of evaluated pixels.

    Increments arrive in batches (one per rendered column) so the lock is
    taken once per batch rather than once per pixel. Listeners are called with
    each new whole percentage, in increasing order and without repeats.
    """

    def __init__(self, total: int):
        if total <= 0:
            raise ValueError("total must be positive")
        self.total = total
        self._completed = 0
        self._percent = 0
        self._lock = threading.Lock()
        self._listeners: List[Callable[[int], None]] = []

    def add_listener(self, callback: Callable[[int], None]) -> None:
        """Register a callback receiving integer percentages 1-100."""
        self._listeners.append(callback)

    @property
    def completed(self) -> int:
        return self._completed

    @property
    def percent(self) -> int:
        return self._percent

    @property
    def fraction(self) -> float:
        return self._completed / self.total

    def advance(self, count: int = 1) -> None:
        """
        Record ``count`` more finished pixels.

        Raises:
            ValueError: if count is negative or the total would be exceeded
        """
        if count < 0:
            raise ValueError("Progress cannot move backwards")

        with self._lock:
            completed = self._completed + count
            if completed > self.total:
                raise ValueError(f"Progress overflow: {completed} of {self.total} pixels")
            self._completed = completed
            percent = completed * 100 // self.total
            previous = self._percent
            if percent > previous:
                self._percent = percent
                # listeners run under the lock so percentages arrive in order
                for step in range(previous + 1, percent + 1):
                    logger.info(f"Percent Complete: {step}%")
                    for callback in self._listeners:
                        callback(step)

    def is_complete(self) -> bool:
        return self._completed == self.total
