"""
Touchless dwell selection for on-screen elements.

An element is activated by holding an open palm over it for a fixed
time instead of clicking:

    IDLE ──(hand over element)──> DETECTED ──(open palm)──> SELECTED
      ^                                                        │
      └──── activation fired / hand left / palm closed ────────┘

Each selector owns its state; nothing is shared between elements. State
transitions happen in `update()` once per hand frame, while `advance()`
is driven by the render loop and fires the activation when the progress
reaches 1.
"""

import time
import logging
from typing import Callable, Optional

from core.types import DwellStatus, GestureType
from core.events import Events

logger = logging.getLogger(__name__)


class Rect:
    """Axis-aligned screen rectangle in pixels."""

    __slots__ = ("left", "top", "width", "height")

    def __init__(self, left: float, top: float, width: float, height: float):
        self.left = left
        self.top = top
        self.width = width
        self.height = height

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def contains(self, x: float, y: float, padding: float = 0.0) -> bool:
        """Inclusive hit test against the rectangle grown by `padding`."""
        return (self.left - padding <= x <= self.right + padding
                and self.top - padding <= y <= self.bottom + padding)

    def __repr__(self):
        return f"Rect({self.left}, {self.top}, {self.width}x{self.height})"


class DwellSelector:
    """Dwell-to-activate state machine for one interactive element."""

    def __init__(self, name: str, bounds: Rect,
                 on_activate: Optional[Callable] = None,
                 config: dict = None,
                 viewport: tuple = (1280, 720),
                 mirror: bool = True,
                 event_bus=None):
        config = config or {}
        self.name = name
        self.bounds = bounds
        self._on_activate = on_activate
        self._dwell_time_ms = config.get("dwell_time_ms", 1000)
        self._near_padding = config.get("near_padding_px", 40)
        self._viewport = viewport
        self._mirror = mirror
        self._bus = event_bus

        self._status = DwellStatus.IDLE
        self._selection_start = None
        self._progress = 0.0
        self._hover = {"near": False, "x": 0.0, "y": 0.0}
        self._activation_count = 0

    # =========================================================================
    # Projection
    # =========================================================================

    def set_viewport(self, width: int, height: int):
        self._viewport = (width, height)

    def to_screen(self, x: float, y: float) -> tuple:
        """Normalized camera coords -> screen pixels (mirrored feed)."""
        width, height = self._viewport
        sx = (1.0 - x) * width if self._mirror else x * width
        return sx, y * height

    # =========================================================================
    # State machine
    # =========================================================================

    def update(self, hands: list, now_ms: float = None) -> DwellStatus:
        """Apply one frame of hand data.

        Args:
            hands: ProcessedHand list for the frame
            now_ms: timestamp in milliseconds (defaults to wall clock)
        """
        now_ms = time.time() * 1000 if now_ms is None else now_ms

        covered = False
        hand_open = False
        near = False
        hover_x = hover_y = 0.0

        for hand in hands:
            sx, sy = self.to_screen(hand.x, hand.y)
            if self.bounds.contains(sx, sy):
                covered = True
                if hand.gesture == GestureType.OPEN_PALM:
                    hand_open = True
            if self.bounds.contains(sx, sy, self._near_padding):
                near = True
                hover_x = sx - self.bounds.left
                hover_y = sy - self.bounds.top

        self._hover = {"near": near, "x": hover_x, "y": hover_y}

        if not covered:
            self._set_status(DwellStatus.IDLE)
            self._clear_timer()
        elif not hand_open:
            self._set_status(DwellStatus.DETECTED)
            self._clear_timer()
        elif self._status != DwellStatus.SELECTED:
            self._set_status(DwellStatus.SELECTED)
            self._selection_start = now_ms
            self._progress = 0.0

        return self._status

    def advance(self, now_ms: float = None) -> float:
        """Recompute dwell progress and fire the activation when complete.

        Returns:
            progress in [0, 1] after this step (0 once activation fired)
        """
        if self._status != DwellStatus.SELECTED or self._selection_start is None:
            self._progress = 0.0
            return self._progress

        now_ms = time.time() * 1000 if now_ms is None else now_ms
        elapsed = now_ms - self._selection_start
        self._progress = max(0.0, min(1.0, elapsed / max(self._dwell_time_ms, 1e-9)))

        if self._progress >= 1.0:
            self._activate(elapsed)
        return self._progress

    def _activate(self, elapsed_ms: float):
        self._activation_count += 1
        logger.info("Dwell activation: %s (%.0fms)", self.name, elapsed_ms)
        try:
            if self._on_activate is not None:
                self._on_activate()
        except Exception:
            logger.warning("Activation callback for '%s' failed", self.name)
            raise
        finally:
            self._set_status(DwellStatus.IDLE)
            self._clear_timer()
            if self._bus is not None:
                self._bus.emit(Events.DWELL_ACTIVATED, name=self.name,
                               dwell_ms=elapsed_ms)

    def _set_status(self, status: DwellStatus):
        if status != self._status:
            logger.debug("Selector %s: %s -> %s", self.name,
                         self._status.value, status.value)
            old = self._status
            self._status = status
            if self._bus is not None:
                self._bus.emit(Events.DWELL_STATUS_CHANGED, name=self.name,
                               old=old, new=status)

    def _clear_timer(self):
        self._selection_start = None
        self._progress = 0.0

    def reset(self):
        """Return to IDLE without firing."""
        self._set_status(DwellStatus.IDLE)
        self._clear_timer()
        self._hover = {"near": False, "x": 0.0, "y": 0.0}

    # =========================================================================
    # Read access
    # =========================================================================

    @property
    def status(self) -> DwellStatus:
        return self._status

    @property
    def selection_start_time(self):
        return self._selection_start

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def hover(self) -> dict:
        return dict(self._hover)

    @property
    def is_near(self) -> bool:
        return self._hover["near"]

    @property
    def activation_count(self) -> int:
        return self._activation_count

    @property
    def dwell_time_ms(self) -> float:
        return self._dwell_time_ms

    def to_dict(self) -> dict:
        return {
            "status": self._status.value,
            "progress": self._progress,
            "selectionStartTime": self._selection_start,
            "near": self._hover["near"],
        }
