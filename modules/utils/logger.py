"""
Logging setup and the interaction event log.
"""

import os
import time
import logging
import logging.handlers
from functools import wraps

# Chatty third-party loggers pulled in by MediaPipe / OpenCV
_NOISY_LOGGERS = ("absl", "mediapipe", "matplotlib", "PIL")


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3):
    """Console logging at INFO plus an optional rotating DEBUG file.

    Returns the configured root logger.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname).1s %(name)s: %(message)s", datefmt="%H:%M:%S"))
    root.addHandler(console)

    if log_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=int(max_size_mb * 1024 * 1024), backupCount=backup_count,
        )
        rotating.setLevel(logging.DEBUG)
        rotating.setFormatter(logging.Formatter(
            "%(asctime)s.%(msecs)03d %(levelname)-7s %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(rotating)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root


class InteractionLogger:
    """Bounded history of user-visible interaction events.

    Entries are dicts with `timestamp`, `kind` ("gesture", "activation" or
    "shape") and kind-specific fields.
    """

    def __init__(self, max_history: int = 500):
        self.logger = logging.getLogger("interaction_events")
        self._history = []
        self._max_history = max_history

    def _append(self, kind: str, **fields) -> dict:
        entry = dict(fields, timestamp=time.time(), kind=kind)
        self._history.append(entry)
        if len(self._history) > self._max_history:
            del self._history[:-self._max_history]
        return entry

    def log_gesture(self, hand_id, old_gesture, new_gesture):
        self._append("gesture", hand_id=hand_id, old=old_gesture, new=new_gesture)
        self.logger.debug("hand %s: %s -> %s", hand_id, old_gesture or "-", new_gesture)

    def log_activation(self, element, dwell_ms):
        self._append("activation", element=element, dwell_ms=dwell_ms)
        self.logger.info("'%s' activated after %.0f ms dwell", element, dwell_ms)

    def log_shape_change(self, old_shape, new_shape):
        self._append("shape", old=old_shape, new=new_shape)
        self.logger.info("particle shape %s -> %s", old_shape, new_shape)

    def get_history(self, last_n=None, kind=None) -> list:
        entries = [e for e in self._history if kind is None or e["kind"] == kind]
        return entries[-last_n:] if last_n else entries

    @property
    def total_events(self) -> int:
        return len(self._history)


def log_timing(func=None, *, warn_ms=None):
    """Log call duration at DEBUG, or WARNING when it exceeds `warn_ms`.

    Usable bare (`@log_timing`) or configured (`@log_timing(warn_ms=8)`).
    """
    def decorate(fn):
        log = logging.getLogger(fn.__module__)

        @wraps(fn)
        def timed(*args, **kwargs):
            t0 = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed = (time.perf_counter() - t0) * 1000.0
                if warn_ms is not None and elapsed > warn_ms:
                    log.warning("%s took %.2fms (limit %.1fms)", fn.__qualname__, elapsed, warn_ms)
                else:
                    log.debug("%s took %.2fms", fn.__qualname__, elapsed)

        return timed

    return decorate(func) if func is not None else decorate
