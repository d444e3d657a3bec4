"""
Shared synthetic landmark builders.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from modules.detection.landmark_extractor import (
    WRIST, MIDDLE_MCP, INDEX_TIP, MIDDLE_TIP, RING_TIP, PINKY_TIP,
    FACE_NOSE_TIP, FACE_LEFT_CHEEK, FACE_RIGHT_CHEEK,
    LEFT_EYE_OUTER, LEFT_EYE_INNER, LEFT_EYE_TOP, LEFT_EYE_BOTTOM,
    RIGHT_EYE_INNER, RIGHT_EYE_OUTER, RIGHT_EYE_TOP, RIGHT_EYE_BOTTOM,
    MOUTH_LEFT, MOUTH_RIGHT, MOUTH_TOP, MOUTH_BOTTOM, FACE_POINT_COUNT,
)


def make_hand(wrist=(0.5, 0.6), ref=0.1, index=0.3, others=0.3, index_side=0):
    """
    Build a (21, 3) hand with exact fingertip-to-wrist distances.

    Args:
        wrist: (x, y) wrist position
        ref: wrist to middle-MCP distance (the scale reference)
        index: index tip distance in multiples of `ref`
        others: middle/ring/pinky tip distance in multiples of `ref`
        index_side: 0 points the index up, -1/+1 points it left/right in x

    Returns:
        (21, 3) float array
    """
    wx, wy = wrist
    hand = np.zeros((21, 3))
    hand[:, 0] = wx
    hand[:, 1] = wy - ref  # unused joints sit on the palm

    hand[WRIST] = (wx, wy, 0.0)
    hand[MIDDLE_MCP] = (wx, wy - ref, 0.0)

    if index_side:
        hand[INDEX_TIP] = (wx + index_side * index * ref, wy, 0.0)
    else:
        hand[INDEX_TIP] = (wx, wy - index * ref, 0.0)

    for tip in (MIDDLE_TIP, RING_TIP, PINKY_TIP):
        hand[tip] = (wx, wy - others * ref, 0.0)
    return hand


def make_face(face_width=0.4, mouth_width=0.2, mouth_gap=0.0,
              eye_width=0.1, eye_gap=0.03, nose_x=0.5):
    """
    Build a 468-point face mesh centred at x=0.5 with controllable ratios.
    """
    face = np.zeros((FACE_POINT_COUNT, 3))
    face[:, :2] = 0.5

    face[FACE_LEFT_CHEEK] = (0.5 - face_width / 2, 0.5, 0.0)
    face[FACE_RIGHT_CHEEK] = (0.5 + face_width / 2, 0.5, 0.0)
    face[FACE_NOSE_TIP] = (nose_x, 0.5, -0.05)

    face[MOUTH_LEFT] = (0.5 - mouth_width / 2, 0.7, 0.0)
    face[MOUTH_RIGHT] = (0.5 + mouth_width / 2, 0.7, 0.0)
    face[MOUTH_TOP] = (0.5, 0.7 - mouth_gap / 2, 0.0)
    face[MOUTH_BOTTOM] = (0.5, 0.7 + mouth_gap / 2, 0.0)

    face[LEFT_EYE_OUTER] = (0.4 - eye_width / 2, 0.4, 0.0)
    face[LEFT_EYE_INNER] = (0.4 + eye_width / 2, 0.4, 0.0)
    face[LEFT_EYE_TOP] = (0.4, 0.4 - eye_gap / 2, 0.0)
    face[LEFT_EYE_BOTTOM] = (0.4, 0.4 + eye_gap / 2, 0.0)

    face[RIGHT_EYE_INNER] = (0.6 - eye_width / 2, 0.4, 0.0)
    face[RIGHT_EYE_OUTER] = (0.6 + eye_width / 2, 0.4, 0.0)
    face[RIGHT_EYE_TOP] = (0.6, 0.4 - eye_gap / 2, 0.0)
    face[RIGHT_EYE_BOTTOM] = (0.6, 0.4 + eye_gap / 2, 0.0)
    return face


@pytest.fixture
def hand_factory():
    return make_hand


@pytest.fixture
def face_factory():
    return make_face


@pytest.fixture
def fist(hand_factory):
    return hand_factory(index=0.3, others=0.3)


@pytest.fixture
def open_palm(hand_factory):
    return hand_factory(index=2.0, others=2.0)


@pytest.fixture
def pointing(hand_factory):
    return hand_factory(index=2.0, others=0.3)
