"""
Cross-hand aggregate signals: mean wrist height, two-hand span and tilt.
"""

import logging
import math

from core.types import HandStats
from modules.detection.landmark_extractor import WRIST
from modules.utils.geometry import signed_angle

logger = logging.getLogger(__name__)


class HandStatsAggregator:
    """Derives HandStats fresh for each frame. Holds no state."""

    def compute(self, hands: list) -> HandStats:
        """Aggregate wrist positions of all hands in the frame.

        Span and tilt are only defined for exactly two hands; any other
        count leaves them at 0. No hands gives the default stats.
        """
        if not hands:
            return HandStats()

        wrists = [hand[WRIST] for hand in hands]
        height = sum(float(w[1]) for w in wrists) / len(wrists)

        span = 0.0
        tilt = 0.0
        if len(wrists) == 2:
            left, right = sorted(wrists, key=lambda w: float(w[0]))
            dx = float(right[0]) - float(left[0])
            dy = float(right[1]) - float(left[1])
            span = math.hypot(dx, dy)
            tilt = signed_angle(dx, dy)

        return HandStats(hand_height=height, hand_span=span, hand_tilt=tilt)
