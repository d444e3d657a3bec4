"""
Tests for landmark conversion and validation
============================================
"""

import pytest
import numpy as np
import sys
from pathlib import Path
from types import SimpleNamespace

sys.path.insert(0, str(Path(__file__).parent.parent))

from modules.detection.landmark_extractor import (
    LandmarkShapeError, landmarks_to_array, validate_hand, validate_face, palm_center,
    HAND_POINT_COUNT, FACE_REQUIRED_INDICES,
)


class TestConversion:
    def test_mediapipe_style_list(self):
        points = [SimpleNamespace(x=i / 21, y=0.5, z=-0.01) for i in range(21)]
        arr = landmarks_to_array(SimpleNamespace(landmark=points))
        assert arr.shape == (21, 3)
        assert arr[3, 0] == pytest.approx(3 / 21)

    def test_triples(self):
        arr = landmarks_to_array([(0.1, 0.2, 0.3)] * 4)
        assert arr.shape == (4, 3)

    def test_pairs_are_padded(self):
        arr = landmarks_to_array(np.ones((21, 2)))
        assert arr.shape == (21, 3)
        assert np.all(arr[:, 2] == 0.0)

    def test_bad_shape(self):
        with pytest.raises(LandmarkShapeError):
            landmarks_to_array(np.zeros((21, 4)))
        with pytest.raises(LandmarkShapeError):
            landmarks_to_array([])


class TestValidation:
    def test_hand_point_count(self):
        assert validate_hand(np.zeros((HAND_POINT_COUNT, 3))).shape == (21, 3)
        with pytest.raises(LandmarkShapeError, match="21 points"):
            validate_hand(np.zeros((22, 3)))

    def test_shape_error_is_value_error(self):
        with pytest.raises(ValueError):
            validate_hand(np.zeros((5, 3)))

    def test_face_needs_every_referenced_index(self):
        needed = max(FACE_REQUIRED_INDICES) + 1
        assert validate_face(np.zeros((needed, 3))).shape[0] == needed
        with pytest.raises(LandmarkShapeError):
            validate_face(np.zeros((needed - 1, 3)))

    def test_palm_center(self, hand_factory):
        hand = hand_factory(wrist=(0.5, 0.6), ref=0.1)
        center = palm_center(hand)
        assert center[0] == pytest.approx(0.5)
        assert center[1] == pytest.approx(0.52)
