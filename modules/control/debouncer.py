"""
Fire-once latch for sustained conditions.

A condition must hold continuously for `hold_s` to fire. After firing the
latch locks, and it only re-arms once the condition has been continuously
false for `release_s`. Holding the condition indefinitely therefore fires
exactly once.

Lifecycle (called once per animation frame):
    update(active, dt)  - returns True on the frame the latch fires
"""

import logging

logger = logging.getLogger(__name__)


class HoldLatch:
    """Two-state (armed / locked) debouncer driven by elapsed time."""

    def __init__(self, hold_s: float, release_s: float, name: str = "latch"):
        self._hold_s = hold_s
        self._release_s = release_s
        self._name = name

        self._locked = False
        self._active_time = 0.0
        self._inactive_time = 0.0
        self._fire_count = 0

    def update(self, active: bool, dt: float) -> bool:
        """Advance the latch by `dt` seconds with the current condition."""
        if active:
            self._inactive_time = 0.0
            if self._locked:
                return False
            self._active_time += dt
            if self._active_time >= self._hold_s:
                self._locked = True
                self._active_time = 0.0
                self._fire_count += 1
                logger.debug("%s fired, locked until released for %.1fs",
                             self._name, self._release_s)
                return True
            return False

        self._active_time = 0.0
        if self._locked:
            self._inactive_time += dt
            if self._inactive_time >= self._release_s:
                self._locked = False
                self._inactive_time = 0.0
                logger.debug("%s re-armed", self._name)
        return False

    @property
    def locked(self) -> bool:
        return self._locked

    @property
    def active_time(self) -> float:
        return self._active_time

    @property
    def fire_count(self) -> int:
        return self._fire_count

    def reset(self):
        """Clear all state."""
        self._locked = False
        self._active_time = 0.0
        self._inactive_time = 0.0
