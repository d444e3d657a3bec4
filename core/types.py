"""
Shared domain types for the Touchless Ring system.

Centralizes enums, data classes, and type definitions used across modules
to eliminate circular imports and ensure type consistency.
"""

from enum import Enum
from typing import Optional, Dict, List


# =============================================================================
# Enumerations
# =============================================================================

class GestureType(Enum):
    """Discrete hand gesture labels. Values are the display strings."""
    FIST = "Fist"
    POINTING = "Pointing"
    OPEN_PALM = "Open Palm"
    UNKNOWN = "Unknown"


class DwellStatus(Enum):
    """Dwell-selection state of one interactive element."""
    IDLE = "IDLE"
    DETECTED = "DETECTED"
    SELECTED = "SELECTED"


class ParticleShape(Enum):
    """Particle geometry, cycled by sustained mouth-open."""
    SPHERE = "sphere"
    CUBE = "cube"
    TETRAHEDRON = "tetrahedron"

    def next(self) -> 'ParticleShape':
        order = list(ParticleShape)
        return order[(order.index(self) + 1) % len(order)]


# =============================================================================
# Data Containers
# =============================================================================

class ProcessedHand:
    """Per-hand classification output for a single frame.

    `id` is the frame-local slot index. `vector` is the wrist delta against
    the previous frame's entry for the same key, which is the slot index
    unless stable tracking is enabled (then `track_id`).
    """

    __slots__ = ("id", "gesture", "coords", "polar", "vector", "track_id")

    def __init__(self, hand_id: int, gesture: GestureType, coords: tuple,
                 polar: tuple, vector: tuple, track_id: Optional[int] = None):
        self.id = hand_id
        self.gesture = gesture
        self.coords = coords      # (x, y) wrist, normalized
        self.polar = polar        # (angle 0..359, distance 0..100)
        self.vector = vector      # (dx, dy)
        self.track_id = track_id

    def __repr__(self):
        return (f"ProcessedHand(id={self.id}, {self.gesture.value}, "
                f"coords=({self.coords[0]:.3f}, {self.coords[1]:.3f}))")

    @property
    def x(self) -> float:
        return self.coords[0]

    @property
    def y(self) -> float:
        return self.coords[1]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "gesture": self.gesture.value,
            "coords": {"x": self.coords[0], "y": self.coords[1]},
            "polar": {"angle": self.polar[0], "distance": self.polar[1]},
            "vector": {"dx": self.vector[0], "dy": self.vector[1]},
            "track_id": self.track_id,
        }


class HandStats:
    """Cross-hand aggregate signals, derived fresh every frame."""

    __slots__ = ("hand_height", "hand_span", "hand_tilt")

    def __init__(self, hand_height: float = 0.5, hand_span: float = 0.0,
                 hand_tilt: float = 0.0):
        self.hand_height = hand_height
        self.hand_span = hand_span
        self.hand_tilt = hand_tilt

    def __repr__(self):
        return (f"HandStats(height={self.hand_height:.3f}, "
                f"span={self.hand_span:.3f}, tilt={self.hand_tilt:.3f})")

    def to_dict(self) -> dict:
        return {
            "handHeight": self.hand_height,
            "handSpan": self.hand_span,
            "handTilt": self.hand_tilt,
        }


class FaceExpressions:
    """Scalar facial expression values for one face."""

    __slots__ = ("smile", "left_eye_open", "right_eye_open", "mouth_open",
                 "head_turn")

    def __init__(self, smile: bool = False, left_eye_open: float = 0.0,
                 right_eye_open: float = 0.0, mouth_open: float = 0.0,
                 head_turn: float = 0.0):
        self.smile = smile
        self.left_eye_open = left_eye_open
        self.right_eye_open = right_eye_open
        self.mouth_open = mouth_open
        self.head_turn = head_turn

    def __repr__(self):
        return (f"FaceExpressions(smile={self.smile}, mouth={self.mouth_open:.2f}, "
                f"turn={self.head_turn:+.2f})")

    def to_dict(self) -> dict:
        return {
            "smile": self.smile,
            "leftEyeOpen": self.left_eye_open,
            "rightEyeOpen": self.right_eye_open,
            "mouthOpen": self.mouth_open,
            "headTurnVal": self.head_turn,
        }


class InteractionState:
    """Single-writer interaction accumulator.

    `density` persists across frames and only changes through `apply()`,
    which clamps on write. `pointing_direction` is overwritten every frame.
    """

    __slots__ = ("_pointing_direction", "_density")

    def __init__(self, density: float = 0.5):
        self._pointing_direction = 0
        self._density = min(1.0, max(0.0, float(density)))

    def apply(self, pointing_direction: int, density_delta: float = 0.0):
        """Set this frame's pointing direction and accumulate density."""
        self._pointing_direction = pointing_direction
        self._density = min(1.0, max(0.0, self._density + density_delta))

    def reset_pointing(self):
        self._pointing_direction = 0

    @property
    def pointing_direction(self) -> int:
        return self._pointing_direction

    @property
    def density(self) -> float:
        return self._density

    def copy(self) -> 'InteractionState':
        clone = InteractionState(self._density)
        clone._pointing_direction = self._pointing_direction
        return clone

    def __repr__(self):
        return (f"InteractionState(pointing={self._pointing_direction:+d}, "
                f"density={self._density:.2f})")

    def to_dict(self) -> dict:
        return {"pointingDirection": self._pointing_direction,
                "density": self._density}


class FrameSnapshot:
    """Everything the renderer/UI reads after a frame."""

    __slots__ = ("interaction", "stats", "hands", "expressions",
                 "selectors", "field", "poses")

    def __init__(self, interaction: InteractionState, stats: HandStats,
                 hands: List[ProcessedHand],
                 expressions: Optional[FaceExpressions] = None,
                 selectors: Optional[Dict[str, dict]] = None,
                 field: Optional[dict] = None, poses: Optional[list] = None):
        self.interaction = interaction
        self.stats = stats
        self.hands = hands
        self.expressions = expressions
        self.selectors = selectors or {}
        self.field = field or {}
        self.poses = poses or []

    def to_dict(self) -> dict:
        return {
            "interaction": self.interaction.to_dict(),
            "stats": self.stats.to_dict(),
            "hands": [h.to_dict() for h in self.hands],
            "expressions": self.expressions.to_dict() if self.expressions else None,
            "selectors": dict(self.selectors),
            "field": dict(self.field),
        }
