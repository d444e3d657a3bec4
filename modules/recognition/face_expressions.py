"""
Face mesh -> expression scalars (smile, eye/mouth openness, head turn).

All ratios are taken between distances on the same face, so the values do
not depend on how close the face is to the camera.
"""

import logging

from core.types import FaceExpressions
from modules.detection.landmark_extractor import (
    FACE_NOSE_TIP, FACE_LEFT_CHEEK, FACE_RIGHT_CHEEK,
    LEFT_EYE_OUTER, LEFT_EYE_INNER, LEFT_EYE_TOP, LEFT_EYE_BOTTOM,
    RIGHT_EYE_INNER, RIGHT_EYE_OUTER, RIGHT_EYE_TOP, RIGHT_EYE_BOTTOM,
    MOUTH_LEFT, MOUTH_RIGHT, MOUTH_TOP, MOUTH_BOTTOM,
    validate_face,
)
from modules.utils.geometry import distance_3d, clamp, safe_ratio
from modules.utils.logger import log_timing

logger = logging.getLogger(__name__)

_EYES = {
    "left": (LEFT_EYE_TOP, LEFT_EYE_BOTTOM, LEFT_EYE_OUTER, LEFT_EYE_INNER),
    "right": (RIGHT_EYE_TOP, RIGHT_EYE_BOTTOM, RIGHT_EYE_INNER, RIGHT_EYE_OUTER),
}


class FaceExpressionExtractor:
    """Extracts FaceExpressions from a single face mesh."""

    def __init__(self, config: dict = None):
        config = config or {}
        self._smile_threshold = config.get("smile_ratio_threshold", 0.40)
        self._eye_gain = config.get("eye_openness_gain", 3.0)
        self._mouth_gain = config.get("mouth_openness_gain", 2.0)

    @property
    def smile_threshold(self) -> float:
        return self._smile_threshold

    def head_turn(self, face) -> float:
        """Signed head turn in [-1, 1] from horizontal nose-to-cheek distances."""
        nose = face[FACE_NOSE_TIP]
        to_left = abs(float(nose[0]) - float(face[FACE_LEFT_CHEEK][0]))
        to_right = abs(float(nose[0]) - float(face[FACE_RIGHT_CHEEK][0]))
        return safe_ratio(to_left - to_right, to_left + to_right, 0.0)

    def eye_openness(self, face, side: str) -> float:
        """Eye aperture / eye width, scaled and clamped to [0, 1]."""
        top, bottom, corner_a, corner_b = _EYES[side]
        vertical = distance_3d(face[top], face[bottom])
        horizontal = distance_3d(face[corner_a], face[corner_b])
        return clamp(safe_ratio(vertical, horizontal, 0.0) * self._eye_gain)

    def mouth_openness(self, face) -> float:
        """Lip gap / mouth width, scaled and clamped to [0, 1]."""
        vertical = distance_3d(face[MOUTH_TOP], face[MOUTH_BOTTOM])
        horizontal = distance_3d(face[MOUTH_LEFT], face[MOUTH_RIGHT])
        return clamp(safe_ratio(vertical, horizontal, 0.0) * self._mouth_gain)

    def smile_ratio(self, face) -> float:
        """Mouth width relative to cheek-to-cheek face width."""
        mouth_width = distance_3d(face[MOUTH_LEFT], face[MOUTH_RIGHT])
        face_width = distance_3d(face[FACE_LEFT_CHEEK], face[FACE_RIGHT_CHEEK])
        return safe_ratio(mouth_width, face_width, 0.0)

    @log_timing
    def extract(self, landmarks) -> FaceExpressions:
        """Compute every expression scalar for one face mesh."""
        face = validate_face(landmarks)
        return FaceExpressions(
            smile=self.smile_ratio(face) > self._smile_threshold,
            left_eye_open=self.eye_openness(face, "left"),
            right_eye_open=self.eye_openness(face, "right"),
            mouth_open=self.mouth_openness(face),
            head_turn=self.head_turn(face),
        )
