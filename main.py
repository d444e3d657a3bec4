#!/usr/bin/env python3
"""
Touchless Ring - hand and face driven particle ring.
Main application entry point.

    camera -> MediaPipe (hands every frame, face/pose staggered)
           -> InteractionPipeline -> Renderer

Usage:
    python main.py                      # Default camera, windowed
    python main.py --camera 1           # Other camera device
    python main.py --no-window --max-frames 300   # Headless timing run
    python main.py --config my.yaml     # Custom configuration

Keys: q quit, p print performance report. Holding an open palm over the
EXIT button for the dwell time also quits.
"""

import sys
import os
import time
import signal
import argparse
import logging

import cv2

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from modules.utils.config import Config
from modules.utils.logger import setup_logging, InteractionLogger
from modules.utils.performance_monitor import PerformanceMonitor
from modules.detection.landmark_source import LandmarkSource
from modules.control.dwell_selector import Rect
from modules.visualization.renderer import Renderer

from core.events import EventBus, Events
from core.pipeline import InteractionPipeline

logger = logging.getLogger(__name__)


class TouchlessRing:
    """Live application: owns the camera, MediaPipe source and window."""

    def __init__(self, config: Config, show_window: bool = True, max_frames: int = None):
        self._config = config
        self._show_window = show_window and config.get("visualization.enabled", True)
        self._max_frames = max_frames
        self._running = False

        self._bus = EventBus()
        self._perf = PerformanceMonitor()
        self._interaction_log = InteractionLogger()

        self._source = LandmarkSource(config.tracking)
        self._pipeline = InteractionPipeline(
            config,
            event_bus=self._bus,
            performance_monitor=self._perf,
            interaction_logger=self._interaction_log,
        )
        self._renderer = Renderer(config.visualization)
        self._capture = None

        exit_cfg = config.get("visualization.exit_button", {})
        self._pipeline.create_selector(
            "exit",
            Rect(exit_cfg.get("x", 1020), exit_cfg.get("y", 560),
                 exit_cfg.get("w", 180), exit_cfg.get("h", 80)),
            near_padding_px=exit_cfg.get("near_padding_px", 150),
        )

        self._bus.subscribe(Events.DWELL_ACTIVATED, self._on_dwell_activated)
        self._bus.subscribe(Events.GESTURE_CHANGED, self._on_gesture_changed)
        logger.info("TouchlessRing initialized")

    def _on_dwell_activated(self, name=None, **kwargs):
        if name == "exit":
            self.stop()

    def _on_gesture_changed(self, hand_id=None, old=None, new=None, **kwargs):
        logger.debug("Hand %s gesture: %s -> %s", hand_id,
                     old.value if old else "none", new.value)

    def _open_camera(self) -> bool:
        cam = self._config.camera
        self._capture = cv2.VideoCapture(cam.get("device_id", 0))
        if not self._capture.isOpened():
            return False
        self._capture.set(cv2.CAP_PROP_FRAME_WIDTH, cam.get("width", 640))
        self._capture.set(cv2.CAP_PROP_FRAME_HEIGHT, cam.get("height", 480))
        logger.info("Camera %d opened (%dx%d requested)", cam.get("device_id", 0),
                    cam.get("width", 640), cam.get("height", 480))
        return True

    def start(self) -> bool:
        """Open the camera and run the frame loop until stopped."""
        if not self._open_camera():
            logger.error("Failed to open camera. Check connection and permissions.")
            return False

        self._source.initialize()
        self._running = True
        self._bus.emit(Events.SYSTEM_STARTED)
        logger.info("Starting main loop")

        try:
            self._run_main_loop()
        finally:
            self._shutdown()
        return True

    def _run_main_loop(self):
        window_name = self._config.get("visualization.window_name", "Touchless Ring")
        read_failures = 0

        while self._running:
            dt = self._perf.tick()
            now_ms = time.time() * 1000

            with self._perf.measure("total"):
                with self._perf.measure("capture"):
                    ok, frame = self._capture.read()
                if not ok:
                    read_failures += 1
                    if read_failures > 30:
                        logger.error("Camera stopped delivering frames")
                        break
                    continue
                read_failures = 0

                rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
                results = self._source.process(rgb)

                self._pipeline.on_hand_results(results["hands"], now_ms)
                if "faces" in results:
                    self._pipeline.on_face_results(results["faces"])
                if "poses" in results:
                    self._pipeline.on_pose_results(results["poses"])

                self._pipeline.tick(dt, now_ms)

                if self._show_window:
                    with self._perf.measure("render"):
                        canvas = self._renderer.new_canvas(frame)
                        self._renderer.render(
                            canvas, self._pipeline.snapshot(), self._pipeline.animator,
                            self._pipeline.selectors.values(),
                        )
                    cv2.imshow(window_name, canvas)

            if self._show_window:
                key = cv2.waitKey(1) & 0xFF
                if key == ord("q"):
                    self._running = False
                elif key == ord("p"):
                    self._perf.print_report()

            if self._max_frames and self._perf.frame_count >= self._max_frames:
                logger.info("Reached %d frames", self._max_frames)
                self._running = False

    def stop(self):
        """Request the loop to exit after the current frame."""
        if self._running:
            logger.info("Stop requested")
        self._running = False

    def _shutdown(self):
        """Clean shutdown of all resources."""
        logger.info("Shutting down...")
        self._running = False
        self._bus.emit(Events.SYSTEM_SHUTDOWN)
        if self._capture is not None:
            self._capture.release()
        self._source.close()
        if self._show_window:
            cv2.destroyAllWindows()

        self._perf.print_report()
        logger.info("Interaction events recorded: %d", self._interaction_log.total_events)
        logger.info("Shutdown complete.")

    def handle_signal(self, signum, frame):
        """Handle SIGINT/SIGTERM for graceful shutdown."""
        logger.info("Signal %d received, shutting down...", signum)
        self._running = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="touchless-ring",
        description="Steer a particle ring with hand gestures and facial expressions.",
    )
    parser.add_argument("--config", metavar="PATH", help="YAML file laid over the defaults")
    parser.add_argument("--camera", metavar="ID", type=int, help="override camera.device_id")
    parser.add_argument("--no-window", action="store_true", help="headless: skip the preview window")
    parser.add_argument("--max-frames", metavar="N", type=int, help="exit after N frames")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.camera is not None:
        overrides["camera"] = {"device_id": args.camera}

    config = Config()
    config.load(config_path=args.config, overrides=overrides)

    setup_logging(**config.get_section("logging"))
    logger.info("%s %s", config.get("system.name", "Touchless Ring"),
                config.get("system.version", "1.0.0"))

    app = TouchlessRing(config, show_window=not args.no_window,
                        max_frames=args.max_frames)

    signal.signal(signal.SIGINT, app.handle_signal)
    signal.signal(signal.SIGTERM, app.handle_signal)

    ok = app.start()
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
