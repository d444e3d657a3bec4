"""
Frame-loop timing: per-stage latency windows, frame rate and the animation
time step.
"""

import time
import logging
from collections import deque
from contextlib import contextmanager

import numpy as np

logger = logging.getLogger(__name__)

STAGES = ("capture", "hands", "face", "pose", "animate", "render", "total")


class PerformanceMonitor:
    """Rolling latency statistics for the capture -> render loop.

    `tick()` doubles as the animation clock: it returns the seconds since
    the previous frame, capped at `max_dt` so a stalled frame (window drag,
    camera hiccup) does not teleport the particle field.
    """

    def __init__(self, window_size=100, max_dt=0.1):
        self._window = window_size
        self._max_dt = max_dt
        self._intervals = deque(maxlen=window_size)
        self._stages = {stage: deque(maxlen=window_size) for stage in STAGES}
        self._previous_tick = None
        self._frames = 0
        self._started = time.time()

    @contextmanager
    def measure(self, stage: str):
        """Time the enclosed block into `stage`, even if it raises."""
        t0 = time.perf_counter()
        try:
            yield
        finally:
            samples = self._stages.get(stage)
            if samples is None:
                samples = self._stages[stage] = deque(maxlen=self._window)
            samples.append((time.perf_counter() - t0) * 1000.0)

    def tick(self) -> float:
        """Mark a new frame. Returns the capped time step in seconds."""
        now = time.perf_counter()
        self._frames += 1
        if self._previous_tick is None:
            self._previous_tick = now
            return 0.0
        interval = now - self._previous_tick
        self._previous_tick = now
        self._intervals.append(interval)
        return min(interval, self._max_dt)

    @property
    def fps(self) -> float:
        if len(self._intervals) < 2:
            return 0.0
        mean = float(np.mean(self._intervals))
        return 1.0 / mean if mean > 0 else 0.0

    @property
    def frame_count(self) -> int:
        return self._frames

    def get_stage_latency(self, stage: str) -> float:
        """Mean latency of a stage in ms over the window."""
        samples = self._stages.get(stage)
        return float(np.mean(samples)) if samples else 0.0

    def get_stage_percentile(self, stage: str, q: float = 95.0) -> float:
        samples = self._stages.get(stage)
        return float(np.percentile(samples, q)) if samples else 0.0

    def get_report(self) -> dict:
        return {
            "fps": round(self.fps, 1),
            "frames": self._frames,
            "uptime_s": round(time.time() - self._started, 1),
            "stages": {
                stage: {
                    "mean_ms": round(self.get_stage_latency(stage), 2),
                    "p95_ms": round(self.get_stage_percentile(stage), 2),
                }
                for stage, samples in self._stages.items() if samples
            },
        }

    def print_report(self):
        report = self.get_report()
        logger.info("-" * 44)
        logger.info("Frame loop: %.1f fps over %d frames (%.1fs)",
                    report["fps"], report["frames"], report["uptime_s"])
        for stage, stats in report["stages"].items():
            logger.info("  %-8s mean %7.2f ms   p95 %7.2f ms",
                        stage, stats["mean_ms"], stats["p95_ms"])
        logger.info("-" * 44)

    def reset(self):
        self._intervals.clear()
        for samples in self._stages.values():
            samples.clear()
        self._previous_tick = None
        self._frames = 0
        self._started = time.time()
