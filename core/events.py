"""
Per-pipeline publish/subscribe bus for interaction events.

The pipeline publishes hand, face, dwell and particle events here; the live
app and renderer listen instead of reaching into pipeline internals.

Usage:
    bus = EventBus()

    @bus.on(Events.DWELL_ACTIVATED)
    def quit_app(name, dwell_ms, **kwargs):
        ...

    bus.emit(Events.DWELL_ACTIVATED, name="exit", dwell_ms=1000.0)
"""

import time
import logging
from collections import defaultdict, namedtuple
from itertools import count
from typing import Callable

logger = logging.getLogger(__name__)

EventRecord = namedtuple("EventRecord", ["name", "timestamp", "keys", "delivered"])
_Listener = namedtuple("_Listener", ["priority", "seq", "callback"])


class EventBus:
    """Synchronous event bus owned by one pipeline.

    Listeners run on the emitting thread, highest priority first and in
    subscription order within a priority. A listener that raises is logged
    and counted; the remaining listeners still run.
    """

    def __init__(self, max_history: int = 100):
        self._listeners = defaultdict(list)
        self._seq = count()
        self._history = []
        self._max_history = max_history
        self._errors = defaultdict(int)
        self._enabled = True

    def subscribe(self, event_name: str, callback: Callable, priority: int = 0) -> Callable:
        """Register `callback(**payload)` for `event_name` and return it."""
        bucket = self._listeners[event_name]
        bucket.append(_Listener(priority, next(self._seq), callback))
        bucket.sort(key=lambda entry: (-entry.priority, entry.seq))
        logger.debug("Listener %s added for '%s' (priority %d)",
                     getattr(callback, "__name__", callback), event_name, priority)
        return callback

    def on(self, event_name: str, priority: int = 0):
        """Decorator form of subscribe()."""
        def register(callback):
            return self.subscribe(event_name, callback, priority)
        return register

    def unsubscribe(self, event_name: str, callback: Callable):
        bucket = self._listeners.get(event_name)
        if bucket:
            self._listeners[event_name] = [e for e in bucket if e.callback is not callback]

    def emit(self, event_name: str, **payload) -> int:
        """Deliver an event. Returns how many listeners completed without error."""
        if not self._enabled:
            return 0

        delivered = 0
        for entry in list(self._listeners.get(event_name, ())):
            try:
                entry.callback(**payload)
                delivered += 1
            except Exception as e:
                self._errors[event_name] += 1
                logger.error("Listener %s failed on '%s': %s",
                             getattr(entry.callback, "__name__", entry.callback), event_name, e)

        self._history.append(EventRecord(event_name, time.time(), tuple(payload), delivered))
        if len(self._history) > self._max_history:
            del self._history[:-self._max_history]
        return delivered

    def set_enabled(self, enabled: bool):
        self._enabled = enabled

    def clear(self, event_name: str = None):
        """Drop listeners for one event, or all of them."""
        if event_name is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event_name, None)

    @property
    def registered_events(self) -> list:
        return [name for name, bucket in self._listeners.items() if bucket]

    @property
    def listener_count(self) -> int:
        return sum(len(bucket) for bucket in self._listeners.values())

    def error_count(self, event_name: str = None) -> int:
        """Listener failures so far, for one event or in total."""
        if event_name is None:
            return sum(self._errors.values())
        return self._errors.get(event_name, 0)

    def get_history(self, last_n: int = 10) -> list:
        return self._history[-last_n:]


class Events:
    """Event names and their payload keywords."""

    # Hand / face stream
    HANDS_UPDATED = "hands_updated"            # hands, stats, interaction
    HANDS_LOST = "hands_lost"
    GESTURE_CHANGED = "gesture_changed"        # hand_id, old, new
    FACE_UPDATED = "face_updated"              # expressions
    FACE_LOST = "face_lost"

    # Dwell selection
    DWELL_STATUS_CHANGED = "dwell_status_changed"  # name, old, new
    DWELL_ACTIVATED = "dwell_activated"            # name, dwell_ms

    # Particle field
    SHAPE_CHANGED = "shape_changed"            # old, new

    # Lifecycle
    SYSTEM_STARTED = "system_started"
    SYSTEM_SHUTDOWN = "system_shutdown"
