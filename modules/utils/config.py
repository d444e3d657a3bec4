"""
Centralized configuration manager.
Loads YAML configs over built-in defaults and provides typed access.

    - Every tunable constant has a default, so a missing file still runs
    - Every key is type-checked against its default (warnings only)
    - Reset support for testing
"""

import os
import copy
import yaml
import logging

logger = logging.getLogger(__name__)

_BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
_CONFIG_DIR = os.path.join(_BASE_DIR, "config")

DEFAULTS = {
    "system": {
        "name": "Touchless Ring",
        "version": "1.0.0",
    },
    "logging": {
        "level": "INFO",
        "file": None,
        "max_size_mb": 10,
        "backup_count": 3,
    },
    "camera": {
        "device_id": 0,
        "width": 640,
        "height": 480,
        "mirror": True,
    },
    "tracking": {
        "max_num_hands": 2,
        "min_detection_confidence": 0.5,
        "min_tracking_confidence": 0.5,
        "face_every_n_frames": 4,
        "pose_every_n_frames": 4,
        "stable_hand_ids": False,
        "match_distance": 0.2,
        "lost_timeout": 0.5,
    },
    "recognition": {
        "fist_multiplier": 1.4,
        "pointing_multiplier": 1.6,
        "open_palm_multiplier": 1.5,
        "min_ref_scale": 1e-6,
    },
    "interaction": {
        "density_step": 0.01,
        "initial_density": 0.5,
    },
    "face": {
        "smile_ratio_threshold": 0.40,
        "eye_openness_gain": 3.0,
        "mouth_openness_gain": 2.0,
    },
    "dwell": {
        "dwell_time_ms": 1000,
        "near_padding_px": 40,
    },
    "particles": {
        "count": 2000,
        "seed": None,
        "initial_velocity": 0.002,
        "acceleration": 0.5,
        "max_speed": 2.0,
        "smoothing": 0.1,
        "height_gain": 14.0,
        "base_radius": 2.0,
        "density_radius_gain": 1.0,
        "max_spread": 3.0,
        "vertical_spread": 0.5,
        "drift_amplitude": 0.1,
        "span_scale_base": 0.2,
        "span_scale_gain": 1.5,
        "fall_gravity": 5.0,
        "fall_chance": 0.02,
        "respawn_y_threshold": -5.0,
        "mouth_open_trigger": 0.5,
        "mouth_cycle_duration": 1.0,
        "mouth_lock_reset_duration": 1.0,
        "head_turn_min": 0.2,
        "hue_rate": 0.5,
        "recolor_fraction": 0.05,
        "base_hue": 0.55,
    },
    "visualization": {
        "enabled": True,
        "window_name": "Touchless Ring",
        "width": 1280,
        "height": 720,
        "focal_length": 500.0,
        "camera_distance": 12.0,
        "show_hud": True,
        "background_alpha": 0.25,
        "exit_button": {"x": 1020, "y": 560, "w": 180, "h": 80, "near_padding_px": 150},
    },
}


# Keys whose default is None accept any type; everything else must match
# the default's type (ints are accepted where a float is expected).
def _type_problems(data: dict, defaults: dict = DEFAULTS, prefix: str = "") -> list:
    problems = []
    for key, default in defaults.items():
        path = f"{prefix}{key}"
        if key not in data:
            continue
        value = data[key]
        if isinstance(default, dict):
            if not isinstance(value, dict):
                problems.append(f"{path}: expected a mapping, got {type(value).__name__}")
            else:
                problems.extend(_type_problems(value, default, path + "."))
            continue
        if default is None:
            continue
        if isinstance(default, bool) or isinstance(value, bool):
            ok = isinstance(value, bool) and isinstance(default, bool)
        elif isinstance(default, float):
            ok = isinstance(value, (int, float))
        else:
            ok = isinstance(value, type(default))
        if not ok:
            problems.append(f"{path}: expected {type(default).__name__}, "
                            f"got {type(value).__name__} ({value!r})")
    return problems


def _merged(base: dict, override: dict) -> dict:
    """New dict with `override` laid over `base`, recursing into sections."""
    out = dict(base)
    for key, value in override.items():
        current = out.get(key)
        out[key] = (_merged(current, value)
                    if isinstance(current, dict) and isinstance(value, dict) else value)
    return out


class Config:
    """Process-wide configuration, YAML over built-in defaults."""

    _instance = None
    _data = {}

    def __new__(cls):
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._data = copy.deepcopy(DEFAULTS)
            cls._instance = instance
        return cls._instance

    def load(self, config_path=None, overrides: dict = None):
        """Read `config_path` (default config/config.yaml) over the defaults.

        A missing file or a non-mapping document falls back to defaults with
        a warning. `overrides` (e.g. from the CLI) are applied last.
        """
        path = config_path or os.path.join(_CONFIG_DIR, "config.yaml")
        loaded = {}
        if os.path.exists(path):
            with open(path, "r") as f:
                loaded = yaml.safe_load(f) or {}
            logger.info("Configuration read from %s", path)
        else:
            logger.warning("No config at %s, running on defaults", path)

        if not isinstance(loaded, dict):
            logger.warning("Ignoring %s: top level is a %s, not a mapping",
                           path, type(loaded).__name__)
            loaded = {}

        data = _merged(copy.deepcopy(DEFAULTS), loaded)
        if overrides:
            data = _merged(data, overrides)
        self._data = data
        self._validate()
        return self

    def _validate(self) -> list:
        """Type-check every known key against its default. Warnings only."""
        problems = _type_problems(self._data)
        for problem in problems:
            logger.warning("Config: %s", problem)
        return problems

    def get(self, key_path: str, default=None):
        """Dotted lookup, e.g. get("dwell.dwell_time_ms")."""
        node = self._data
        for part in key_path.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key_path: str, value):
        *parents, leaf = key_path.split(".")
        node = self._data
        for part in parents:
            node = node.setdefault(part, {})
        node[leaf] = value

    def get_section(self, section: str) -> dict:
        return self._data.get(section, {})

    camera = property(lambda self: self.get_section("camera"))
    tracking = property(lambda self: self.get_section("tracking"))
    recognition = property(lambda self: self.get_section("recognition"))
    interaction = property(lambda self: self.get_section("interaction"))
    face = property(lambda self: self.get_section("face"))
    dwell = property(lambda self: self.get_section("dwell"))
    particles = property(lambda self: self.get_section("particles"))
    visualization = property(lambda self: self.get_section("visualization"))

    @classmethod
    def reset(cls):
        """Forget the instance so the next Config() starts from defaults."""
        cls._instance = None
        cls._data = {}
