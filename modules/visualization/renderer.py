"""
OpenCV renderer for the particle ring, dwell buttons and a status HUD.
"""

import logging
import cv2
import numpy as np

from core.types import DwellStatus, ParticleShape

logger = logging.getLogger(__name__)


def project_points(world: np.ndarray, width: int, height: int,
                   focal_length: float = 500.0, camera_distance: float = 12.0):
    """Perspective-project world points (y up) to pixel coordinates.

    Returns:
        (pixels (N, 2) int32, depth (N,) float) where depth is the
        distance along the view axis used for size attenuation.
    """
    depth = world[:, 2] + camera_distance
    depth = np.maximum(depth, 1e-3)
    px = world[:, 0] / depth * focal_length + width / 2.0
    py = -world[:, 1] / depth * focal_length + height / 2.0
    return np.stack([px, py], axis=-1).astype(np.int32), depth


class Renderer:
    """Draws a FrameSnapshot and the particle field onto a BGR canvas."""

    def __init__(self, config: dict = None):
        config = config or {}
        self._width = config.get("width", 1280)
        self._height = config.get("height", 720)
        self._focal = config.get("focal_length", 500.0)
        self._camera_distance = config.get("camera_distance", 12.0)
        self._show_hud = config.get("show_hud", True)
        self._background_alpha = config.get("background_alpha", 0.25)

        self._color_text = (255, 255, 255)
        self._color_accent = (255, 170, 0)   # BGR for #00aaff
        self._color_muted = (160, 160, 160)

    @property
    def size(self) -> tuple:
        return self._width, self._height

    def new_canvas(self, camera_frame: np.ndarray = None) -> np.ndarray:
        """Black canvas, optionally with the mirrored camera feed dimmed behind."""
        canvas = np.zeros((self._height, self._width, 3), dtype=np.uint8)
        if camera_frame is not None:
            feed = cv2.resize(cv2.flip(camera_frame, 1), (self._width, self._height))
            cv2.addWeighted(feed, self._background_alpha, canvas,
                            1.0 - self._background_alpha, 0, canvas)
        return canvas

    def render(self, canvas: np.ndarray, snapshot, animator, selectors=None) -> np.ndarray:
        """Draw particles, selectors and HUD in that order."""
        self.draw_particles(canvas, animator)
        for selector in (selectors or []):
            self.draw_selector(canvas, selector)
        if self._show_hud:
            self.draw_hud(canvas, snapshot)
        return canvas

    # =========================================================================
    # Particles
    # =========================================================================

    def draw_particles(self, canvas: np.ndarray, animator):
        pixels, depth = project_points(
            animator.world_positions, self._width, self._height,
            self._focal, self._camera_distance,
        )
        colors = (animator.colors()[:, ::-1] * 255).astype(np.uint8)  # RGB -> BGR
        sizes = np.clip(animator.scale * animator.field_scale * self._focal / depth,
                        1, 12).astype(int)
        shape = animator.shape

        # Far particles first so near ones overdraw them
        for i in np.argsort(-depth):
            x, y = int(pixels[i, 0]), int(pixels[i, 1])
            if not (0 <= x < self._width and 0 <= y < self._height):
                continue
            color = tuple(int(c) for c in colors[i])
            r = int(sizes[i])
            if shape == ParticleShape.CUBE:
                cv2.rectangle(canvas, (x - r, y - r), (x + r, y + r), color, -1)
            elif shape == ParticleShape.TETRAHEDRON:
                tri = np.array([[x, y - r], [x - r, y + r], [x + r, y + r]], dtype=np.int32)
                cv2.fillConvexPoly(canvas, tri, color)
            else:
                cv2.circle(canvas, (x, y), r, color, -1)

    # =========================================================================
    # Dwell selectors
    # =========================================================================

    def draw_selector(self, canvas: np.ndarray, selector):
        b = selector.bounds
        x1, y1 = int(b.left), int(b.top)
        x2, y2 = int(b.right), int(b.bottom)

        border = self._color_accent if selector.is_near else self._color_text
        if selector.status != DwellStatus.IDLE:
            overlay = canvas.copy()
            cv2.rectangle(overlay, (x1, y1), (x2, y2), (255, 255, 255), -1)
            cv2.addWeighted(overlay, 0.2, canvas, 0.8, 0, canvas)

        fill_h = int(selector.progress * (y2 - y1))
        if fill_h > 0:
            cv2.rectangle(canvas, (x1, y2 - fill_h), (x2, y2), self._color_accent, -1)

        cv2.rectangle(canvas, (x1, y1), (x2, y2), border, 3)
        label = selector.name.upper()
        text_size = cv2.getTextSize(label, cv2.FONT_HERSHEY_SIMPLEX, 0.8, 2)[0]
        cv2.putText(
            canvas, label,
            (x1 + (x2 - x1 - text_size[0]) // 2, y1 + (y2 - y1 + text_size[1]) // 2),
            cv2.FONT_HERSHEY_SIMPLEX, 0.8, self._color_text, 2,
        )

        if selector.is_near:
            hover = selector.hover
            cv2.circle(canvas, (int(x1 + hover["x"]), int(y1 + hover["y"])), 18,
                       self._color_accent, 2)

    # =========================================================================
    # HUD
    # =========================================================================

    def draw_hud(self, canvas: np.ndarray, snapshot):
        lines = [
            f"Density: {snapshot.interaction.density:.2f}   "
            f"Pointing: {snapshot.interaction.pointing_direction:+d}",
            f"Height: {snapshot.stats.hand_height:.2f}   Span: {snapshot.stats.hand_span:.2f}   "
            f"Tilt: {np.degrees(snapshot.stats.hand_tilt):.0f} deg",
        ]
        for hand in snapshot.hands:
            lines.append(
                f"Hand {hand.id}: {hand.gesture.value:<9} "
                f"angle {hand.polar[0]:3d} dist {hand.polar[1]:3d}"
            )
        if snapshot.expressions is not None:
            e = snapshot.expressions
            lines.append(
                f"Smile: {'yes' if e.smile else 'no'}   Mouth: {e.mouth_open:.2f}   "
                f"Turn: {e.head_turn:+.2f}"
            )
        field = snapshot.field
        if field:
            lines.append(f"Shape: {field.get('shape')}   Falling: {field.get('falling', 0)}")

        y = 28
        for line in lines:
            cv2.putText(canvas, line, (15, y), cv2.FONT_HERSHEY_SIMPLEX, 0.55,
                        self._color_muted, 1)
            y += 24
        return canvas
