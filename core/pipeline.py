"""
Core frame orchestrator for the interaction system.

Wires the landmark callbacks to the recognition modules and the animation
tick to the dwell selectors and particle field:

    hands -> GestureClassifier -> HandStatsAggregator / InteractionMapper
          -> InteractionState -> DwellSelector.update (per element)
    face  -> FaceExpressionExtractor
    tick  -> DwellSelector.advance + ParticleFieldAnimator.update

Everything runs synchronously on the caller's thread. Hand, face and pose
callbacks may arrive at different cadences; each one only replaces its own
slice of state, and `tick()` always reads the latest of each.
"""

import time
import logging
from collections import OrderedDict

from core.types import HandStats, InteractionState, FrameSnapshot
from core.events import EventBus, Events
from modules.detection.landmark_extractor import validate_hand
from modules.detection.tracking import HandTracker
from modules.recognition.gesture_classifier import GestureClassifier
from modules.recognition.hand_stats import HandStatsAggregator
from modules.recognition.interaction_mapper import InteractionMapper
from modules.recognition.face_expressions import FaceExpressionExtractor
from modules.control.dwell_selector import DwellSelector, Rect
from modules.visualization.particle_field import ParticleFieldAnimator
from modules.utils.performance_monitor import PerformanceMonitor
from modules.utils.logger import InteractionLogger

logger = logging.getLogger(__name__)


def _section(config, name: str) -> dict:
    """Read a config section from a Config instance or a plain dict."""
    if config is None:
        return {}
    if hasattr(config, "get_section"):
        return config.get_section(name) or {}
    return config.get(name, {}) or {}


class InteractionPipeline:
    """Owns the interaction state and runs one frame of processing per call."""

    def __init__(self, config=None, event_bus: EventBus = None,
                 performance_monitor: PerformanceMonitor = None,
                 interaction_logger: InteractionLogger = None):
        tracking_cfg = _section(config, "tracking")
        interaction_cfg = _section(config, "interaction")
        camera_cfg = _section(config, "camera")
        viz_cfg = _section(config, "visualization")

        self._bus = event_bus or EventBus()
        self._perf = performance_monitor or PerformanceMonitor()
        self._events = interaction_logger or InteractionLogger()

        self._classifier = GestureClassifier(_section(config, "recognition"))
        self._stats_aggregator = HandStatsAggregator()
        self._mapper = InteractionMapper(interaction_cfg)
        self._face_extractor = FaceExpressionExtractor(_section(config, "face"))
        self._animator = ParticleFieldAnimator(_section(config, "particles"), event_bus=self._bus)

        self._tracker = None
        if tracking_cfg.get("stable_hand_ids", False):
            self._tracker = HandTracker(
                match_distance=tracking_cfg.get("match_distance", 0.2),
                lost_timeout=tracking_cfg.get("lost_timeout", 0.5),
            )
            logger.info("Stable hand ids enabled")

        self._dwell_cfg = _section(config, "dwell")
        self._mirror = camera_cfg.get("mirror", True)
        self._viewport = (viz_cfg.get("width", 1280), viz_cfg.get("height", 720))

        self._state = InteractionState(interaction_cfg.get("initial_density", 0.5))
        self._stats = HandStats()
        self._hands = []
        self._expressions = None
        self._poses = []
        self._selectors = OrderedDict()
        self._last_gestures = {}
        self._hand_frames = 0

        self._bus.subscribe(Events.DWELL_ACTIVATED, self._on_activation)
        self._bus.subscribe(Events.SHAPE_CHANGED, self._on_shape_changed)

    # =========================================================================
    # Landmark callbacks
    # =========================================================================

    def on_hand_results(self, hands: list, now_ms: float = None) -> list:
        """Process one frame of hand landmarks.

        Args:
            hands: list of (21, 3) landmark arrays (or convertible objects)
            now_ms: frame timestamp in milliseconds

        Returns:
            list of ProcessedHand
        """
        now_ms = time.time() * 1000 if now_ms is None else now_ms
        self._hand_frames += 1

        with self._perf.measure("hands"):
            if not hands:
                if self._hands:
                    self._bus.emit(Events.HANDS_LOST)
                self._hands = []
                self._stats = HandStats()
                self._state.reset_pointing()
                self._last_gestures.clear()
            else:
                arrays = [validate_hand(h) for h in hands]
                track_ids = None
                if self._tracker is not None:
                    track_ids = self._tracker.update(arrays, now_ms / 1000.0)

                self._hands = self._classifier.process(arrays, track_ids)
                self._stats = self._stats_aggregator.compute(arrays)
                self._mapper.apply(self._state, self._hands, arrays)
                self._note_gesture_changes()
                self._bus.emit(Events.HANDS_UPDATED, hands=self._hands,
                               stats=self._stats, interaction=self._state.copy())

            for selector in self._selectors.values():
                selector.update(self._hands, now_ms)

        return self._hands

    def on_face_results(self, faces: list):
        """Process one face frame. Only the first face is used."""
        with self._perf.measure("face"):
            if not faces:
                if self._expressions is not None:
                    self._bus.emit(Events.FACE_LOST)
                self._expressions = None
            else:
                self._expressions = self._face_extractor.extract(faces[0])
                self._bus.emit(Events.FACE_UPDATED, expressions=self._expressions)
        return self._expressions

    def on_pose_results(self, poses: list):
        """Store pose landmarks as-is; poses are not classified."""
        with self._perf.measure("pose"):
            self._poses = list(poses or [])
        return self._poses

    def _note_gesture_changes(self):
        current = {}
        for hand in self._hands:
            key = hand.id if hand.track_id is None else hand.track_id
            current[key] = hand.gesture
            old = self._last_gestures.get(key)
            if old != hand.gesture:
                self._events.log_gesture(
                    key, old.value if old else None, hand.gesture.value)
                self._bus.emit(Events.GESTURE_CHANGED, hand_id=key,
                               old=old, new=hand.gesture)
        self._last_gestures = current

    # =========================================================================
    # Dwell selectors
    # =========================================================================

    def create_selector(self, name: str, bounds: Rect, on_activate=None,
                        near_padding_px: float = None) -> DwellSelector:
        """Build and register a selector using the dwell configuration."""
        cfg = dict(self._dwell_cfg)
        if near_padding_px is not None:
            cfg["near_padding_px"] = near_padding_px
        selector = DwellSelector(
            name, bounds, on_activate=on_activate, config=cfg,
            viewport=self._viewport, mirror=self._mirror, event_bus=self._bus,
        )
        return self.add_selector(selector)

    def add_selector(self, selector: DwellSelector) -> DwellSelector:
        if selector.name in self._selectors:
            raise ValueError(f"Selector '{selector.name}' already registered")
        self._selectors[selector.name] = selector
        return selector

    def remove_selector(self, name: str):
        self._selectors.pop(name, None)

    def get_selector(self, name: str) -> DwellSelector:
        return self._selectors[name]

    def set_viewport(self, width: int, height: int):
        self._viewport = (width, height)
        for selector in self._selectors.values():
            selector.set_viewport(width, height)

    def _on_activation(self, name=None, dwell_ms=0.0, **kwargs):
        if name in self._selectors:
            self._events.log_activation(name, dwell_ms)

    def _on_shape_changed(self, old=None, new=None, **kwargs):
        self._events.log_shape_change(old.value, new.value)

    # =========================================================================
    # Animation tick
    # =========================================================================

    def tick(self, dt: float, now_ms: float = None):
        """Advance dwell progress and the particle field by one render frame.

        A selector whose activation callback raises is logged and skipped;
        the remaining selectors and the particle field still advance.
        """
        now_ms = time.time() * 1000 if now_ms is None else now_ms
        with self._perf.measure("animate"):
            for selector in list(self._selectors.values()):
                try:
                    selector.advance(now_ms)
                except Exception as e:
                    logger.error("Selector '%s' activation failed: %s", selector.name, e)
            self._animator.update(dt, self._state, self._stats, self._expressions)

    def snapshot(self) -> FrameSnapshot:
        """Copy of everything the renderer and UI consume."""
        return FrameSnapshot(
            interaction=self._state.copy(),
            stats=HandStats(self._stats.hand_height, self._stats.hand_span,
                            self._stats.hand_tilt),
            hands=list(self._hands),
            expressions=self._expressions,
            selectors={name: s.to_dict() for name, s in self._selectors.items()},
            field=self._animator.summary(),
            poses=self._poses,
        )

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def stats(self) -> HandStats:
        return self._stats

    @property
    def hands(self) -> list:
        return list(self._hands)

    @property
    def expressions(self):
        return self._expressions

    @property
    def animator(self) -> ParticleFieldAnimator:
        return self._animator

    @property
    def event_bus(self) -> EventBus:
        return self._bus

    @property
    def interaction_log(self) -> InteractionLogger:
        return self._events

    @property
    def selectors(self) -> dict:
        return dict(self._selectors)

    @property
    def hand_frame_count(self) -> int:
        return self._hand_frames
