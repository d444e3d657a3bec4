"""
MediaPipe Hands / FaceMesh / Pose wrapper feeding the interaction pipeline.

Only the live application imports this module. It turns one RGB frame into
plain numpy landmark arrays; face and pose models run on a staggered
cadence because they are more expensive than hand tracking.
"""

import logging
import numpy as np
import mediapipe as mp

from modules.detection.landmark_extractor import landmarks_to_array

logger = logging.getLogger(__name__)


class LandmarkSource:
    """Runs the MediaPipe solutions and yields per-frame landmark arrays."""

    def __init__(self, config: dict):
        self._max_hands = config.get("max_num_hands", 2)
        self._min_detect_conf = config.get("min_detection_confidence", 0.5)
        self._min_track_conf = config.get("min_tracking_confidence", 0.5)
        self._face_every = max(1, int(config.get("face_every_n_frames", 4)))
        self._pose_every = max(1, int(config.get("pose_every_n_frames", 4)))

        self._mp_hands = mp.solutions.hands
        self._mp_face_mesh = mp.solutions.face_mesh
        self._mp_pose = mp.solutions.pose

        self._hands = None
        self._face_mesh = None
        self._pose = None
        self._frame_index = 0
        self._initialized = False

    def initialize(self):
        """Create the MediaPipe solution objects."""
        self._hands = self._mp_hands.Hands(
            static_image_mode=False,
            model_complexity=1,
            max_num_hands=self._max_hands,
            min_detection_confidence=self._min_detect_conf,
            min_tracking_confidence=self._min_track_conf,
        )
        self._face_mesh = self._mp_face_mesh.FaceMesh(
            max_num_faces=1,
            refine_landmarks=True,
            min_detection_confidence=self._min_detect_conf,
            min_tracking_confidence=self._min_track_conf,
        )
        self._pose = self._mp_pose.Pose(
            model_complexity=1,
            smooth_landmarks=True,
            min_detection_confidence=self._min_detect_conf,
            min_tracking_confidence=self._min_track_conf,
        )
        self._initialized = True
        logger.info(
            "MediaPipe initialized (max_hands=%d, face every %d, pose every %d frames)",
            self._max_hands, self._face_every, self._pose_every,
        )

    def process(self, rgb_frame: np.ndarray) -> dict:
        """Run the trackers due on this frame.

        Returns:
            dict with "hands" (list of (21, 3) arrays, always present) and
            "faces"/"poses" (list of arrays) only on frames where that
            model ran.
        """
        if not self._initialized:
            self.initialize()

        index = self._frame_index
        self._frame_index += 1

        rgb_frame.flags.writeable = False
        try:
            hand_results = self._hands.process(rgb_frame)
            output = {"hands": [
                landmarks_to_array(h) for h in (hand_results.multi_hand_landmarks or [])
            ]}

            if index % self._face_every == 0:
                face_results = self._face_mesh.process(rgb_frame)
                output["faces"] = [
                    landmarks_to_array(f) for f in (face_results.multi_face_landmarks or [])
                ]

            if index % self._pose_every == 0:
                pose_results = self._pose.process(rgb_frame)
                output["poses"] = (
                    [landmarks_to_array(pose_results.pose_landmarks)]
                    if pose_results.pose_landmarks else []
                )
        finally:
            rgb_frame.flags.writeable = True

        return output

    def close(self):
        """Release MediaPipe resources."""
        for solution in (self._hands, self._face_mesh, self._pose):
            if solution is not None:
                solution.close()
        self._initialized = False
        logger.info("MediaPipe closed")

    def __enter__(self):
        self.initialize()
        return self

    def __exit__(self, *args):
        self.close()
