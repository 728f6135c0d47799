import threading
import time

import numpy as np
from PyQt5 import sip
from PyQt5.QtTest import QTest
from PyQt5.QtWidgets import QApplication, QWidget

from shot_tracker.camera_utils import CameraManager, FrameEvent
from shot_tracker.detection import (
    FrameAnalysisDetectionSource, NullAnalyzer, TimerDetectionSource,
)
from shot_tracker.shot_counter import ShotCounter

from conftest import FakeCapture


def make_frame(frame_id=0):
    return FrameEvent(frame_id, 0, np.zeros((48, 64, 3), dtype=np.uint8))


class CountingAnalyzer:
    def __init__(self, per_frame=1):
        self.per_frame = per_frame
        self.frames = 0

    def analyze(self, event):
        self.frames += 1
        return ["ball"] * self.per_frame


# ── timer ────────────────────────────────────────────────────────────────────

def test_timer_tick_advances_counter(qapp):
    counter = ShotCounter()
    source = TimerDetectionSource(counter, interval_ms=3000)
    source.start()
    assert source.is_active

    source._on_timeout()
    source._on_timeout()
    assert counter.get_stats().as_dict() == {'shots': 2, 'makes': 1, 'percentage': 50}

    source.stop()
    source.stop()
    assert not source.is_active


def test_timer_does_not_tick_before_first_interval(qapp):
    counter = ShotCounter()
    source = TimerDetectionSource(counter, interval_ms=3000)
    source.start()
    QTest.qWait(50)
    assert counter.get_stats().shots == 0
    source.stop()


def test_timer_fires_repeatedly_until_stopped(qapp):
    counter = ShotCounter()
    source = TimerDetectionSource(counter, interval_ms=10)
    source.start()
    QTest.qWait(200)
    source.stop()

    shots = counter.get_stats().shots
    assert shots >= 2
    QTest.qWait(60)
    assert counter.get_stats().shots == shots


def test_timer_dies_with_parent_widget(qapp):
    counter = ShotCounter()
    parent = QWidget()
    source = TimerDetectionSource(counter, interval_ms=10, parent=parent)
    source.start()
    QTest.qWait(60)

    sip.delete(parent)
    shots = counter.get_stats().shots
    QTest.qWait(60)
    assert counter.get_stats().shots == shots


def test_timer_ignores_frames():
    assert TimerDetectionSource.on_frame is None


# ── frame analysis ───────────────────────────────────────────────────────────

def test_each_detection_is_one_tick(qapp):
    counter = ShotCounter()
    analyzer = CountingAnalyzer(per_frame=2)
    source = FrameAnalysisDetectionSource(counter, analyzer)
    source.start()

    source.on_frame(make_frame())
    assert analyzer.frames == 1
    assert counter.get_stats().shots == 2


def test_frames_ignored_while_stopped(qapp):
    counter = ShotCounter()
    analyzer = CountingAnalyzer()
    source = FrameAnalysisDetectionSource(counter, analyzer)

    source.on_frame(make_frame())
    assert analyzer.frames == 0
    assert not source.is_active
    assert counter.get_stats().shots == 0


def test_null_analyzer_never_ticks(qapp):
    counter = ShotCounter()
    source = FrameAnalysisDetectionSource(counter)
    assert isinstance(source.analyzer, NullAnalyzer)
    source.start()

    event = make_frame()
    source.on_frame(event)
    assert event.image is None
    assert counter.get_stats().shots == 0


def test_detections_from_camera_thread_reach_main_thread(qapp):
    counter = ShotCounter()
    tick_threads = []
    counter.subscribe(lambda stats: tick_threads.append(threading.current_thread()))
    source = FrameAnalysisDetectionSource(counter, CountingAnalyzer())
    source.start()

    worker = threading.Thread(target=source.on_frame, args=(make_frame(),))
    worker.start()
    worker.join(timeout=1.0)

    # Queued until the main thread processes events
    assert counter.get_stats().shots == 0
    QApplication.processEvents()
    QTest.qWait(20)

    assert counter.get_stats().shots == 1
    assert tick_threads == [threading.main_thread()]


def test_camera_frames_drive_counter_end_to_end(qapp):
    counter = ShotCounter()
    tick_threads = []
    counter.subscribe(lambda stats: tick_threads.append(threading.current_thread()))
    analyzer = CountingAnalyzer()
    source = FrameAnalysisDetectionSource(counter, analyzer)
    source.start()

    camera = CameraManager(fps=200, capture_factory=lambda camera_id: FakeCapture(frames=1000))
    assert camera.start(source.on_frame)

    deadline = time.monotonic() + 3.0
    while counter.get_stats().shots < 3 and time.monotonic() < deadline:
        QTest.qWait(10)
    camera.stop()
    QTest.qWait(50)

    stats = counter.get_stats()
    assert stats.shots >= 3
    assert stats.shots == analyzer.frames
    assert stats.makes == stats.shots // 2
    assert set(tick_threads) == {threading.main_thread()}
