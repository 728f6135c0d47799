"""
Detection sources: the things that drive ShotCounter.on_detection_tick().

TimerDetectionSource is the walking-skeleton default: a fixed-period Qt timer
that has nothing to do with what the camera sees. FrameAnalysisDetectionSource
is the real path: camera frames go through a FrameAnalyzer and every detection
it reports becomes one tick, marshalled onto the Qt main thread.
"""

import logging
from typing import List, Protocol

from PyQt5.QtCore import QObject, QTimer, pyqtSignal

from .config import TICK_INTERVAL_MS

logger = logging.getLogger(__name__)


class FrameAnalyzer(Protocol):
    """Turns a FrameEvent into zero or more detections."""

    def analyze(self, event) -> List[object]:
        ...


class NullAnalyzer:
    """Analyzer stub: discards every frame and never detects anything."""

    def analyze(self, event):
        event.discard()
        return []


class TimerDetectionSource(QObject):
    """
    Fake detector firing every `interval_ms`.

    Parent it to the preview widget: when the widget is destroyed the timer
    goes with it, so the tick loop ends with the view.
    """

    def __init__(self, counter, interval_ms=TICK_INTERVAL_MS, parent=None):
        super().__init__(parent)
        self.counter = counter
        self.interval_ms = interval_ms

        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._on_timeout)

    def start(self):
        self._timer.start()
        logger.debug("Detection timer started (%d ms)", self.interval_ms)

    def stop(self):
        if self._timer.isActive():
            self._timer.stop()
            logger.debug("Detection timer stopped")

    @property
    def is_active(self) -> bool:
        return self._timer.isActive()

    # camera frames are ignored in timer mode
    on_frame = None

    def _on_timeout(self):
        logger.debug("Fake object detected!")
        self.counter.on_detection_tick()


class FrameAnalysisDetectionSource(QObject):
    """
    Producer/consumer bridge from camera frames to the shot counter.

    on_frame() runs on the camera delivery thread, which already keeps only
    the newest frame. Detections are emitted through a Qt signal so the
    counter is only ever touched on the thread this object lives in.
    """

    _detected = pyqtSignal(int)

    def __init__(self, counter, analyzer=None, parent=None):
        super().__init__(parent)
        self.counter = counter
        self.analyzer = analyzer or NullAnalyzer()
        self._active = False
        self._detected.connect(self._on_detected)

    def start(self):
        self._active = True
        logger.debug("Frame analysis detection started with %s", type(self.analyzer).__name__)

    def stop(self):
        self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    def on_frame(self, event):
        """Camera callback (delivery thread)."""
        if not self._active:
            return
        detections = self.analyzer.analyze(event) or []
        if detections:
            logger.debug("%d object(s) detected in %r", len(detections), event)
            self._detected.emit(len(detections))

    def _on_detected(self, count):
        # Signal may still be queued after stop()
        if not self._active:
            return
        for _ in range(count):
            self.counter.on_detection_tick()
