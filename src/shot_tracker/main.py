"""
main.py - Entry point for the basketball shot tracker.

Usage:
    shot-tracker [--camera-id N] [--fps N] [--tick-interval MS]
                 [--detection {timer,analysis}] [--log-level {DEBUG,INFO,...}]

One ShotCounter is created per session and handed to the window; the window
asks for camera permission once the event loop is running.
"""

import argparse
import logging
import sys

from PyQt5.QtCore import QTimer
from PyQt5.QtWidgets import QApplication

from .app_window import TrackerWindow
from .camera_utils import CameraManager
from .config import (
    CAMERA_FPS, CAMERA_ID, DEFAULT_DETECTION_MODE, DEFAULT_LOG_LEVEL, DETECTION_MODES,
    LOG_FORMAT, LOG_LEVELS, TICK_INTERVAL_MS,
)
from .detection import FrameAnalysisDetectionSource, NullAnalyzer, TimerDetectionSource
from .permissions import CameraPermission, ask_user_for_camera
from .shot_counter import ShotCounter

logger = logging.getLogger(__name__)


def setup_logging(level=DEFAULT_LOG_LEVEL):
    logging.basicConfig(
        level=str(level).upper(),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="shot-tracker",
        description="Camera preview with a basketball shot counter",
    )
    parser.add_argument("--camera-id", type=int, default=CAMERA_ID,
                        help=f"OpenCV camera index (default: {CAMERA_ID})")
    parser.add_argument("--fps", type=int, default=CAMERA_FPS,
                        help=f"Target camera FPS (default: {CAMERA_FPS})")
    parser.add_argument("--tick-interval", type=int, default=TICK_INTERVAL_MS,
                        help=f"Fake detection period in ms (default: {TICK_INTERVAL_MS})")
    parser.add_argument("--detection", choices=DETECTION_MODES, default=DEFAULT_DETECTION_MODE,
                        help="What drives the counter: fixed timer or frame analysis")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default=DEFAULT_LOG_LEVEL,
                        help=f"Logging level (default: {DEFAULT_LOG_LEVEL})")
    args = parser.parse_args(argv)
    if args.tick_interval <= 0:
        parser.error("--tick-interval must be positive")
    if args.fps <= 0:
        parser.error("--fps must be positive")
    return args


def make_detector_factory(counter, mode, tick_interval_ms=TICK_INTERVAL_MS, analyzer=None):
    """Return callable(parent) building the detection source for one preview."""
    if mode == "timer":
        return lambda parent: TimerDetectionSource(counter, tick_interval_ms, parent)
    if mode == "analysis":
        analyzer = analyzer or NullAnalyzer()
        return lambda parent: FrameAnalysisDetectionSource(counter, analyzer, parent)
    raise ValueError(f"Unknown detection mode: {mode}")


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.log_level)

    app = QApplication(sys.argv[:1])

    counter = ShotCounter()
    camera = CameraManager(camera_id=args.camera_id, fps=args.fps)
    window = None
    # Dialog is parented to the window, which exists by the time it is asked
    permission = CameraPermission(lambda: ask_user_for_camera(window))
    window = TrackerWindow(
        counter=counter,
        permission=permission,
        camera=camera,
        detector_factory=make_detector_factory(counter, args.detection, args.tick_interval),
    )
    window.show()
    QTimer.singleShot(0, window.request_permission)
    logger.info("Basketball tracker started (detection: %s)", args.detection)

    try:
        return app.exec_()
    finally:
        CameraManager.unbind_all()
        logger.info("Final score: %s", counter.get_stats())


if __name__ == "__main__":
    sys.exit(main())
