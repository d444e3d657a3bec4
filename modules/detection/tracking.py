"""
Optional stable hand identity across frames.

MediaPipe reports hands in an arbitrary order each frame, so the slot index
is not an identity. When enabled, the tracker matches this frame's palm
centres to the previous ones (closest pairs first, within `match_distance`)
and hands out persistent ids. Unmatched tracks survive `lost_timeout`
seconds so a brief dropout keeps its id.
"""

import time
import logging
import numpy as np

from modules.detection.landmark_extractor import palm_center

logger = logging.getLogger(__name__)


class TrackedHand:
    """Last known palm centre of one persistent hand."""

    __slots__ = ("track_id", "center", "first_seen", "last_seen", "frames_seen")

    def __init__(self, track_id: int, center: np.ndarray, now: float):
        self.track_id = track_id
        self.center = center
        self.first_seen = now
        self.last_seen = now
        self.frames_seen = 1

    def refresh(self, center: np.ndarray, now: float):
        self.center = center
        self.last_seen = now
        self.frames_seen += 1


class HandTracker:
    """Nearest-palm id assignment with a dropout grace period."""

    def __init__(self, match_distance: float = 0.2, lost_timeout: float = 0.5):
        self._match_distance = match_distance
        self._lost_timeout = lost_timeout
        self._tracks = {}
        self._next_id = 0

    def update(self, hands: list, now: float = None) -> list:
        """Assign ids to this frame's hands.

        Args:
            hands: list of (21, 3) landmark arrays in tracker order
            now: timestamp in seconds (defaults to time.time())

        Returns:
            list of track ids aligned with `hands`
        """
        now = time.time() if now is None else now
        centers = [palm_center(h)[:2] for h in hands]
        assigned = [None] * len(hands)

        track_ids = list(self._tracks)
        if centers and track_ids:
            previous = np.array([self._tracks[t].center for t in track_ids])
            current = np.array(centers)
            dist = np.linalg.norm(current[:, None, :] - previous[None, :, :], axis=-1)

            # Greedy global matching: closest pair first
            used_tracks = set()
            for flat in np.argsort(dist, axis=None):
                i, j = np.unravel_index(flat, dist.shape)
                if dist[i, j] >= self._match_distance:
                    break
                if assigned[i] is not None or j in used_tracks:
                    continue
                assigned[i] = track_ids[j]
                used_tracks.add(j)
                self._tracks[track_ids[j]].refresh(centers[i], now)

        for i, center in enumerate(centers):
            if assigned[i] is None:
                assigned[i] = self._next_id
                self._tracks[self._next_id] = TrackedHand(self._next_id, center, now)
                logger.debug("Hand track %d started", self._next_id)
                self._next_id += 1

        for track_id in [t for t, track in self._tracks.items()
                         if now - track.last_seen > self._lost_timeout]:
            logger.debug("Hand track %d dropped after %d frames",
                         track_id, self._tracks[track_id].frames_seen)
            del self._tracks[track_id]

        return [int(t) for t in assigned]

    def reset(self):
        self._tracks.clear()
