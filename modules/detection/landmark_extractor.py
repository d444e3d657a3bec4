"""
Landmark index schemes and tracker-result conversion.

Hands use the 21-point MediaPipe skeleton, faces the 468-point MediaPipe
face mesh. Everything downstream works on numpy arrays of shape (N, 3)
with normalized x/y in [0, 1] and relative depth z.
"""

import logging
import numpy as np

logger = logging.getLogger(__name__)

# MediaPipe hand landmark indices
WRIST = 0
THUMB_CMC = 1
THUMB_MCP = 2
THUMB_IP = 3
THUMB_TIP = 4
INDEX_MCP = 5
INDEX_PIP = 6
INDEX_DIP = 7
INDEX_TIP = 8
MIDDLE_MCP = 9
MIDDLE_PIP = 10
MIDDLE_DIP = 11
MIDDLE_TIP = 12
RING_MCP = 13
RING_PIP = 14
RING_DIP = 15
RING_TIP = 16
PINKY_MCP = 17
PINKY_PIP = 18
PINKY_DIP = 19
PINKY_TIP = 20

HAND_POINT_COUNT = 21
PALM_POINTS = [WRIST, INDEX_MCP, MIDDLE_MCP, RING_MCP, PINKY_MCP]

# MediaPipe face mesh indices
FACE_NOSE_TIP = 1
FACE_LEFT_CHEEK = 234
FACE_RIGHT_CHEEK = 454

LEFT_EYE_OUTER = 33
LEFT_EYE_INNER = 133
LEFT_EYE_TOP = 159
LEFT_EYE_BOTTOM = 145

RIGHT_EYE_INNER = 362
RIGHT_EYE_OUTER = 263
RIGHT_EYE_TOP = 386
RIGHT_EYE_BOTTOM = 374

MOUTH_LEFT = 61
MOUTH_RIGHT = 291
MOUTH_TOP = 13
MOUTH_BOTTOM = 14

FACE_POINT_COUNT = 468
FACE_REQUIRED_INDICES = (
    FACE_NOSE_TIP, FACE_LEFT_CHEEK, FACE_RIGHT_CHEEK,
    LEFT_EYE_OUTER, LEFT_EYE_INNER, LEFT_EYE_TOP, LEFT_EYE_BOTTOM,
    RIGHT_EYE_INNER, RIGHT_EYE_OUTER, RIGHT_EYE_TOP, RIGHT_EYE_BOTTOM,
    MOUTH_LEFT, MOUTH_RIGHT, MOUTH_TOP, MOUTH_BOTTOM,
)


class LandmarkShapeError(ValueError):
    """Raised when a landmark set violates the input contract."""


def landmarks_to_array(landmarks) -> np.ndarray:
    """Convert tracker output into an (N, 3) float array.

    Accepts a MediaPipe NormalizedLandmarkList (anything with `.landmark`),
    an iterable of objects exposing `.x/.y/.z`, or an array-like of triples.
    """
    if isinstance(landmarks, np.ndarray):
        arr = landmarks.astype(float, copy=False)
    else:
        points = getattr(landmarks, "landmark", landmarks)
        rows = []
        for lm in points:
            if hasattr(lm, "x"):
                rows.append((lm.x, lm.y, getattr(lm, "z", 0.0)))
            else:
                rows.append(tuple(lm))
        arr = np.asarray(rows, dtype=float)

    if arr.ndim != 2 or arr.shape[1] not in (2, 3):
        raise LandmarkShapeError(
            f"Expected landmarks of shape (N, 3), got {arr.shape}"
        )
    if arr.shape[1] == 2:
        arr = np.hstack([arr, np.zeros((arr.shape[0], 1))])
    return arr


def validate_hand(landmarks) -> np.ndarray:
    """Return the hand as a (21, 3) array or raise LandmarkShapeError."""
    arr = landmarks_to_array(landmarks)
    if arr.shape[0] != HAND_POINT_COUNT:
        raise LandmarkShapeError(
            f"Hand observation must have {HAND_POINT_COUNT} points, got {arr.shape[0]}"
        )
    return arr


def validate_face(landmarks) -> np.ndarray:
    """Return the face mesh as an (N, 3) array covering every referenced index."""
    arr = landmarks_to_array(landmarks)
    needed = max(FACE_REQUIRED_INDICES) + 1
    if arr.shape[0] < needed:
        raise LandmarkShapeError(
            f"Face mesh must have at least {needed} points, got {arr.shape[0]}"
        )
    return arr


def palm_center(landmarks: np.ndarray) -> np.ndarray:
    """Mean of the wrist and the four finger MCP joints."""
    return np.mean(landmarks[PALM_POINTS], axis=0)
