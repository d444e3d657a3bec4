"""
Rule-based hand gesture classifier.

Each hand is reduced to fingertip-to-wrist distances measured in units of
a scale reference (wrist to middle-finger MCP), which makes the rules
independent of how far the hand is from the camera:

    1. index curled AND others curled      -> Fist
    2. index extended AND others curled    -> Pointing
    3. others extended                     -> Open Palm
    4. anything else                       -> Unknown

Rules are evaluated in that order and the first match wins. Poses between
the thresholds (index half extended, fingers half curled) are Unknown.
"""

import logging
import numpy as np

from core.types import GestureType, ProcessedHand
from modules.detection.landmark_extractor import (
    WRIST, INDEX_TIP, MIDDLE_MCP, MIDDLE_TIP, RING_TIP, PINKY_TIP, validate_hand,
)
from modules.utils.geometry import distance_2d, polar_from_center

logger = logging.getLogger(__name__)


class GestureClassifier:
    """Classifies hand landmark sets and derives per-hand screen signals.

    Keeps one piece of cross-frame state: the previous wrist position per
    key, used for the frame-to-frame `vector`. The key is the slot index
    unless the caller supplies stable track ids.
    """

    def __init__(self, config: dict = None):
        config = config or {}
        self._fist_mult = config.get("fist_multiplier", 1.4)
        self._pointing_mult = config.get("pointing_multiplier", 1.6)
        self._open_mult = config.get("open_palm_multiplier", 1.5)
        self._min_ref_scale = config.get("min_ref_scale", 1e-6)

        self._prev_positions = {}

    def measure(self, landmarks: np.ndarray) -> dict:
        """Scale reference and fingertip distances for one hand."""
        wrist = landmarks[WRIST]
        ref_scale = max(self._min_ref_scale, distance_2d(wrist, landmarks[MIDDLE_MCP]))
        index_dist = distance_2d(landmarks[INDEX_TIP], wrist)
        others = [distance_2d(landmarks[tip], wrist)
                  for tip in (MIDDLE_TIP, RING_TIP, PINKY_TIP)]
        return {
            "ref_scale": ref_scale,
            "index_dist": index_dist,
            "avg_curl": sum(others) / 3.0,
        }

    def classify(self, landmarks) -> GestureType:
        """Classify one hand into a GestureType. No side effects."""
        landmarks = validate_hand(landmarks)
        m = self.measure(landmarks)
        ref = m["ref_scale"]
        index_dist = m["index_dist"]
        avg_curl = m["avg_curl"]

        if index_dist < self._fist_mult * ref and avg_curl < self._fist_mult * ref:
            return GestureType.FIST
        if index_dist > self._pointing_mult * ref and avg_curl < self._fist_mult * ref:
            return GestureType.POINTING
        if avg_curl > self._open_mult * ref:
            return GestureType.OPEN_PALM
        return GestureType.UNKNOWN

    def process_hand(self, landmarks, index: int, track_id: int = None) -> ProcessedHand:
        """Classify one hand and compute its coords, polar and vector."""
        landmarks = validate_hand(landmarks)
        x = float(landmarks[WRIST][0])
        y = float(landmarks[WRIST][1])

        gesture = self.classify(landmarks)
        polar = polar_from_center(x, y)

        key = index if track_id is None else track_id
        prev_x, prev_y = self._prev_positions.get(key, (x, y))
        self._prev_positions[key] = (x, y)

        return ProcessedHand(
            hand_id=index,
            gesture=gesture,
            coords=(x, y),
            polar=polar,
            vector=(x - prev_x, y - prev_y),
            track_id=track_id,
        )

    def process(self, hands: list, track_ids: list = None) -> list:
        """Process every hand of a frame in tracker order."""
        processed = []
        for index, landmarks in enumerate(hands):
            track_id = track_ids[index] if track_ids is not None else None
            processed.append(self.process_hand(landmarks, index, track_id))
        if track_ids is not None:
            # Track ids are never reused; keep only this frame's
            live = set(track_ids)
            for key in [k for k in self._prev_positions if k not in live]:
                del self._prev_positions[key]
        return processed

    def reset(self):
        """Forget previous wrist positions."""
        self._prev_positions.clear()
