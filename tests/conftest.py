import os

import numpy as np
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt5.QtWidgets import QApplication  # noqa: E402

from shot_tracker.camera_utils import CameraManager  # noqa: E402


class FakeCapture:
    """VideoCapture stand-in serving `frames` black frames after the probe read."""

    def __init__(self, frames=3, opened=True, readable=True, shape=(48, 64, 3)):
        self.opened = opened
        self.shape = shape
        # +1 for the probe read done while binding
        self._remaining = frames + 1 if readable else 0
        self.released = False
        self.props = {}

    def isOpened(self):
        return self.opened

    def set(self, prop, value):
        self.props[prop] = value
        return True

    def read(self):
        if self.released or self._remaining <= 0:
            return False, None
        self._remaining -= 1
        return True, np.zeros(self.shape, dtype=np.uint8)

    def release(self):
        self.released = True


class FakeCamera:
    """CameraManager stand-in for window tests."""

    def __init__(self, available=True):
        self.available = available
        self.starts = 0
        self.stops = 0
        self.on_frame = None

    def start(self, on_frame=None):
        self.starts += 1
        self.on_frame = on_frame
        return self.available

    def stop(self):
        self.stops += 1

    def get_current_frame(self):
        if not self.available:
            return None, -1, None
        return np.zeros((48, 64, 3), dtype=np.uint8), 0, 0


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture(autouse=True)
def release_cameras():
    yield
    CameraManager.unbind_all()
