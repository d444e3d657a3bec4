"""
Tests for performance monitoring and interaction logging
========================================================
"""

import logging
import time
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from modules.utils.performance_monitor import PerformanceMonitor
from modules.utils.logger import InteractionLogger, log_timing, setup_logging


class TestPerformanceMonitor:
    def test_measure_records_latency(self):
        monitor = PerformanceMonitor()
        with monitor.measure("hands"):
            time.sleep(0.01)
        assert monitor.get_stage_latency("hands") >= 5.0

    def test_measure_records_on_exception(self):
        monitor = PerformanceMonitor()
        with pytest.raises(ValueError):
            with monitor.measure("face"):
                raise ValueError("bad face")
        assert monitor.get_stage_latency("face") >= 0.0
        assert "face" in monitor.get_report()["stages"]

    def test_custom_stage(self):
        monitor = PerformanceMonitor()
        with monitor.measure("custom"):
            pass
        assert "custom" in monitor.get_report()["stages"]

    def test_tick_and_fps(self):
        monitor = PerformanceMonitor()
        assert monitor.tick() == 0.0
        for _ in range(5):
            time.sleep(0.005)
            assert monitor.tick() > 0.0
        assert monitor.frame_count == 6
        assert monitor.fps > 0.0

    def test_tick_caps_time_step(self):
        monitor = PerformanceMonitor(max_dt=0.001)
        monitor.tick()
        time.sleep(0.01)
        assert monitor.tick() == pytest.approx(0.001)
        assert monitor.fps == 0.0  # needs two intervals

    def test_percentile(self):
        monitor = PerformanceMonitor()
        for _ in range(20):
            with monitor.measure("render"):
                pass
        assert monitor.get_stage_percentile("render", 100) >= monitor.get_stage_latency("render") - 1e-9
        assert monitor.get_stage_percentile("missing") == 0.0

    def test_reset(self):
        monitor = PerformanceMonitor()
        monitor.tick()
        monitor.tick()
        monitor.reset()
        assert monitor.frame_count == 0
        assert monitor.fps == 0.0
        assert monitor.get_stage_latency("total") == 0.0


class TestInteractionLogger:
    def test_history(self):
        log = InteractionLogger(max_history=3)
        log.log_gesture(0, None, "Fist")
        log.log_activation("exit", 1000.0)
        log.log_shape_change("sphere", "cube")
        log.log_gesture(0, "Fist", "Open Palm")
        assert log.total_events == 3
        assert [e["kind"] for e in log.get_history()] == ["activation", "shape", "gesture"]
        assert log.get_history(kind="activation")[0]["element"] == "exit"
        assert len(log.get_history(last_n=1)) == 1

    def test_log_timing_preserves_result(self, caplog):
        @log_timing
        def double(x):
            return 2 * x

        with caplog.at_level(logging.DEBUG):
            assert double(4) == 8
        assert any("double took" in r.message for r in caplog.records)

    def test_setup_logging_with_file(self, tmp_path):
        log_file = tmp_path / "logs" / "ring.log"
        root = setup_logging(level="DEBUG", log_file=str(log_file))
        try:
            assert root.level == logging.DEBUG
            assert log_file.parent.exists()
        finally:
            for handler in list(root.handlers):
                handler.close()
                root.removeHandler(handler)
            root.setLevel(logging.WARNING)

    def test_log_timing_over_limit_warns(self, caplog):
        @log_timing(warn_ms=-1.0)
        def slow():
            return "done"

        with caplog.at_level(logging.DEBUG):
            assert slow() == "done"
        assert any(r.levelno == logging.WARNING and "limit" in r.message for r in caplog.records)
