"""
Particle ring animation driven by the interaction signals.

A fixed set of particles sits on a ring whose radius and spread follow the
accumulated density. Each frame the ring spins under pointing control,
follows hand height/tilt/span with exponential smoothing, and optionally:

    - smile      -> random particles drop out of the ring and fall
    - mouth open -> held open cycles the particle shape (latched)
    - head turn  -> shifts the hue, recoloring a sample of particles

All per-particle math is vectorised with numpy; nothing here draws.
"""

import math
import logging
import numpy as np

from core.types import ParticleShape, InteractionState, HandStats
from core.events import Events
from modules.control.debouncer import HoldLatch
from modules.utils.geometry import lerp

logger = logging.getLogger(__name__)


def hsv_to_rgb(h: np.ndarray, s: float = 1.0, v: float = 1.0) -> np.ndarray:
    """Vectorised HSV -> RGB for hue arrays in [0, 1). Returns (N, 3) floats."""
    h = np.asarray(h, dtype=float) % 1.0
    h6 = h * 6.0
    sector = np.floor(h6).astype(int) % 6
    f = h6 - np.floor(h6)
    p = np.full_like(h, v * (1.0 - s))
    q = v * (1.0 - s * f)
    t = v * (1.0 - s * (1.0 - f))
    vv = np.full_like(h, v)

    r = np.choose(sector, [vv, q, p, p, t, vv])
    g = np.choose(sector, [t, vv, vv, q, p, p])
    b = np.choose(sector, [p, p, t, vv, vv, q])
    return np.stack([r, g, b], axis=-1)


class ParticleFieldAnimator:
    """Fixed-size particle field updated once per render frame."""

    def __init__(self, config: dict = None, event_bus=None):
        config = config or {}
        self._count = int(config.get("count", 2000))
        self._rng = np.random.default_rng(config.get("seed"))
        self._bus = event_bus

        # Motion
        self._acceleration = config.get("acceleration", 0.5)
        self._max_speed = config.get("max_speed", 2.0)
        self._smoothing = config.get("smoothing", 0.1)
        self._height_gain = config.get("height_gain", 14.0)
        self._span_scale_base = config.get("span_scale_base", 0.2)
        self._span_scale_gain = config.get("span_scale_gain", 1.5)

        # Ring geometry
        self._base_radius = config.get("base_radius", 2.0)
        self._density_radius_gain = config.get("density_radius_gain", 1.0)
        self._max_spread = config.get("max_spread", 3.0)
        self._drift_amplitude = config.get("drift_amplitude", 0.1)

        # Falling
        self._fall_gravity = config.get("fall_gravity", 5.0)
        self._fall_chance = config.get("fall_chance", 0.02)
        self._respawn_y = config.get("respawn_y_threshold", -5.0)

        # Face-driven discrete changes
        self._mouth_trigger = config.get("mouth_open_trigger", 0.5)
        self._head_turn_min = config.get("head_turn_min", 0.2)
        self._hue_rate = config.get("hue_rate", 0.5)
        self._recolor_fraction = config.get("recolor_fraction", 0.05)
        self._shape_latch = HoldLatch(
            config.get("mouth_cycle_duration", 1.0),
            config.get("mouth_lock_reset_duration", 1.0),
            name="shape-cycle",
        )

        # Static per-particle attributes
        n = self._count
        self.theta = self._rng.uniform(0.0, 2.0 * math.pi, n)
        self.radial_offset = self._rng.random(n)
        self.vertical_offset = (self._rng.random(n) - 0.5) * config.get("vertical_spread", 0.5)
        self.scale = self._rng.random(n) * 0.1 + 0.05
        self.drift_speed = self._rng.uniform(0.5, 2.0, n)
        self.drift_phase = self._rng.uniform(0.0, 2.0 * math.pi, n)

        # Per-frame derived state
        self.local_positions = np.zeros((n, 3))
        self.world_positions = np.zeros((n, 3))
        self.hues = np.full(n, float(config.get("base_hue", 0.55)))

        # Falling sub-state
        self.falling = np.zeros(n, dtype=bool)
        self.fall_velocity = np.zeros(n)
        self.fall_position = np.zeros((n, 3))

        # Shared field state
        self._velocity = config.get("initial_velocity", 0.002)
        self._spin = 0.0
        self._group_y = 0.0
        self._tilt = 0.0
        self._field_scale = 1.0
        self._time = 0.0
        self._hue = float(config.get("base_hue", 0.55))
        self._shape = ParticleShape.SPHERE

        logger.info("Particle field initialized (%d particles)", n)

    # =========================================================================
    # Frame update
    # =========================================================================

    def update(self, dt: float, interaction: InteractionState, stats: HandStats,
               expressions=None):
        """Advance the field by `dt` seconds.

        Args:
            dt: frame delta in seconds
            interaction: current InteractionState (read only)
            stats: HandStats of the latest hand frame
            expressions: latest FaceExpressions, or None when no face
        """
        dt = max(0.0, float(dt))
        self._time += dt

        self._integrate_spin(dt, interaction.pointing_direction)
        self._follow_hands(stats)
        self._layout_ring(interaction.density)
        self.world_positions = self._to_world(self.local_positions)

        smiling = expressions is not None and expressions.smile
        self._update_falling(dt, smiling)

        if expressions is not None:
            self._update_shape(dt, expressions.mouth_open)
            self._update_hue(dt, expressions.head_turn)

    def _integrate_spin(self, dt: float, pointing_direction: int):
        if pointing_direction != 0:
            self._velocity += pointing_direction * self._acceleration * dt
        self._velocity = max(-self._max_speed, min(self._max_speed, self._velocity))
        self._spin += self._velocity * dt

    def _follow_hands(self, stats: HandStats):
        target_y = (0.5 - stats.hand_height) * self._height_gain
        self._group_y = lerp(self._group_y, target_y, self._smoothing)
        self._tilt = lerp(self._tilt, stats.hand_tilt, self._smoothing)

        if stats.hand_span > 0:
            target_scale = self._span_scale_base + stats.hand_span * self._span_scale_gain
        else:
            target_scale = 1.0
        self._field_scale = lerp(self._field_scale, target_scale, self._smoothing)

    def _layout_ring(self, density: float):
        # Tighter density: larger base radius, narrower spread
        spread = (1.0 - density) * self._max_spread
        drift = self._drift_amplitude * np.sin(self._time * self.drift_speed + self.drift_phase)
        radius = (self._base_radius + density * self._density_radius_gain
                  + self.radial_offset * spread + drift)
        self.local_positions[:, 0] = radius * np.cos(self.theta)
        self.local_positions[:, 1] = self.vertical_offset
        self.local_positions[:, 2] = radius * np.sin(self.theta)

    def _to_world(self, local: np.ndarray) -> np.ndarray:
        """Spin about Y, uniform scale, tilt about Z, then lift by group Y."""
        cs, ss = math.cos(self._spin), math.sin(self._spin)
        x = local[:, 0] * cs + local[:, 2] * ss
        z = -local[:, 0] * ss + local[:, 2] * cs
        y = local[:, 1]

        x = x * self._field_scale
        y = y * self._field_scale
        z = z * self._field_scale

        ct, st = math.cos(self._tilt), math.sin(self._tilt)
        world = np.empty_like(local)
        world[:, 0] = x * ct - y * st
        world[:, 1] = x * st + y * ct + self._group_y
        world[:, 2] = z
        return world

    def _update_falling(self, dt: float, smiling: bool):
        if smiling:
            starts = ~self.falling & (self._rng.random(self._count) < self._fall_chance)
            if starts.any():
                self.falling[starts] = True
                self.fall_velocity[starts] = 0.0
                self.fall_position[starts] = self.world_positions[starts]

        if not self.falling.any():
            return

        mask = self.falling
        self.fall_velocity[mask] -= self._fall_gravity * dt
        self.fall_position[mask, 1] += self.fall_velocity[mask] * dt
        self.world_positions[mask] = self.fall_position[mask]

        landed = mask & (self.fall_position[:, 1] < self._respawn_y)
        if landed.any():
            self.falling[landed] = False
            self.fall_velocity[landed] = 0.0

    def _update_shape(self, dt: float, mouth_open: float):
        if self._shape_latch.update(mouth_open > self._mouth_trigger, dt):
            old = self._shape
            self._shape = self._shape.next()
            logger.info("Particle shape: %s -> %s", old.value, self._shape.value)
            if self._bus is not None:
                self._bus.emit(Events.SHAPE_CHANGED, old=old, new=self._shape)

    def _update_hue(self, dt: float, head_turn: float):
        magnitude = abs(head_turn)
        if magnitude <= self._head_turn_min:
            return
        self._hue = (self._hue + head_turn * self._hue_rate * dt) % 1.0
        sample = min(self._count, int(math.ceil(magnitude * self._recolor_fraction * self._count)))
        if sample > 0:
            idx = self._rng.choice(self._count, size=sample, replace=False)
            self.hues[idx] = self._hue

    # =========================================================================
    # Read access
    # =========================================================================

    def colors(self) -> np.ndarray:
        """Per-particle RGB in [0, 1], shape (N, 3)."""
        return hsv_to_rgb(self.hues)

    @property
    def count(self) -> int:
        return self._count

    @property
    def velocity(self) -> float:
        return self._velocity

    @property
    def spin(self) -> float:
        return self._spin

    @property
    def group_y(self) -> float:
        return self._group_y

    @property
    def tilt(self) -> float:
        return self._tilt

    @property
    def field_scale(self) -> float:
        return self._field_scale

    @property
    def hue(self) -> float:
        return self._hue

    @property
    def shape(self) -> ParticleShape:
        return self._shape

    @property
    def falling_count(self) -> int:
        return int(self.falling.sum())

    def summary(self) -> dict:
        return {
            "count": self._count,
            "velocity": self._velocity,
            "spin": self._spin,
            "positionY": self._group_y,
            "tilt": self._tilt,
            "scale": self._field_scale,
            "hue": self._hue,
            "shape": self._shape.value,
            "falling": self.falling_count,
        }
