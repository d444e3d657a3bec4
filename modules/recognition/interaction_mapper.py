"""
Maps a frame's gestures onto rotation and density signals.

Pointing hands steer rotation, fists tighten the ring and open palms
loosen it. When several hands qualify, the last one in tracker order wins
for each signal; the signals are never averaged or combined.
"""

import logging

from core.types import GestureType, InteractionState
from modules.detection.landmark_extractor import WRIST, INDEX_TIP

logger = logging.getLogger(__name__)


class InteractionMapper:
    """Turns processed hands into (pointing_direction, density_delta)."""

    def __init__(self, config: dict = None):
        config = config or {}
        self._density_step = config.get("density_step", 0.01)

    def map(self, processed_hands: list, hands: list) -> tuple:
        """Compute this frame's interaction signals.

        Args:
            processed_hands: ProcessedHand list from the classifier
            hands: raw (21, 3) landmark arrays, indexed by ProcessedHand.id

        Returns:
            (pointing_direction in {-1, 0, 1}, density_delta)
        """
        pointing_direction = 0
        density_delta = 0.0

        for hand in processed_hands:
            if hand.gesture == GestureType.POINTING:
                raw = hands[hand.id]
                pointing_direction = -1 if raw[INDEX_TIP][0] < raw[WRIST][0] else 1
            elif hand.gesture == GestureType.FIST:
                density_delta = self._density_step
            elif hand.gesture == GestureType.OPEN_PALM:
                density_delta = -self._density_step

        return pointing_direction, density_delta

    def apply(self, state: InteractionState, processed_hands: list, hands: list) -> InteractionState:
        """Map the frame and write the result into the owned state."""
        pointing_direction, density_delta = self.map(processed_hands, hands)
        state.apply(pointing_direction, density_delta)
        return state
