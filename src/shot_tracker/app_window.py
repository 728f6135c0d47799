"""
app_window.py - Main window for the basketball shot tracker.

Two pages in a QStackedWidget:
  - PermissionPage: shown until camera access is granted, with a retry button.
  - CameraPreview: live camera image with the ShotCounterOverlay on top. The
    preview owns the detection source and the camera binding, so tearing it
    down stops both; a new preview starts a fresh timer.

The ShotCounter is created by the caller and outlives any preview. Counter
updates may come from any thread; they reach the overlay through a Qt signal
queued onto the main thread.
"""

import logging

import cv2
from PyQt5.QtCore import Qt, QTimer, pyqtSignal
from PyQt5.QtGui import QImage, QPixmap
from PyQt5.QtWidgets import (
    QLabel, QMainWindow, QPushButton, QSizePolicy, QStackedWidget, QVBoxLayout, QWidget,
)

from .config import BG_CSS, FG_TEXT, PREVIEW_REFRESH_MS
from .overlay import ShotCounterOverlay

logger = logging.getLogger(__name__)


class PermissionPage(QWidget):
    """Shown while camera access is denied."""

    def __init__(self, on_grant, parent=None):
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.addStretch(1)

        self.message_label = QLabel("Camera permission required")
        self.message_label.setStyleSheet(f"color:{FG_TEXT}; font-size:20pt; background:transparent;")
        self.message_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.message_label)

        layout.addSpacing(16)

        self.grant_button = QPushButton("Grant Permission")
        self.grant_button.setStyleSheet(
            "background-color:#2f81f7; color:white; font-size:14pt;"
            " font-weight:bold; padding:10px 24px; border:none; border-radius:6px;")
        self.grant_button.setCursor(Qt.PointingHandCursor)
        self.grant_button.clicked.connect(on_grant)
        layout.addWidget(self.grant_button, alignment=Qt.AlignCenter)

        layout.addStretch(1)


class CameraPreview(QWidget):
    """Camera image with the stats overlay pinned to the top."""

    def __init__(self, camera, detector_factory, parent=None):
        """
        Args:
            camera: CameraManager (or anything with start/stop/get_current_frame)
            detector_factory: callable(parent) -> detection source; the source
                is parented to this widget so it dies with it
        """
        super().__init__(parent)
        self.camera = camera
        self.detector = detector_factory(self)
        self.bound = False

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.camera_label = QLabel()
        self.camera_label.setAlignment(Qt.AlignCenter)
        self.camera_label.setStyleSheet("background-color: black;")
        self.camera_label.setSizePolicy(QSizePolicy.Ignored, QSizePolicy.Ignored)
        layout.addWidget(self.camera_label)

        # Overlay lives inside the camera label so it is drawn over the image
        label_layout = QVBoxLayout(self.camera_label)
        label_layout.setContentsMargins(16, 16, 16, 16)
        self.overlay = ShotCounterOverlay()
        label_layout.addWidget(self.overlay, alignment=Qt.AlignTop)
        label_layout.addStretch(1)

        self._refresh_timer = QTimer(self)
        self._refresh_timer.setInterval(PREVIEW_REFRESH_MS)
        self._refresh_timer.timeout.connect(self._refresh_preview)

    def bind(self):
        """Start the detection source and bind the camera."""
        if self.bound:
            return
        self.bound = True
        self.detector.start()
        if not self.camera.start(self.detector.on_frame):
            # Preview stays blank; counting still runs in timer mode
            logger.warning("Preview has no camera image")
        self._refresh_timer.start()

    def teardown(self):
        """Stop the detection source and release the camera."""
        if not self.bound:
            return
        self.bound = False
        self._refresh_timer.stop()
        self.detector.stop()
        self.camera.stop()

    def _refresh_preview(self):
        frame, _, _ = self.camera.get_current_frame()
        if frame is not None:
            self._display_camera_frame(frame)
        elif self.camera_label.pixmap() is not None:
            # Camera went away: blank the preview rather than freeze the last frame
            self.camera_label.clear()

    def _display_camera_frame(self, frame):
        try:
            rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            h, w, ch = rgb.shape
            # QImage shares the numpy buffer; keep rgb alive until after setPixmap
            qt_img = QImage(rgb.data, w, h, ch * w, QImage.Format_RGB888)
            pixmap = QPixmap.fromImage(qt_img)
            lw, lh = self.camera_label.width(), self.camera_label.height()
            if lw > 1 and lh > 1:
                pixmap = pixmap.scaled(lw, lh, Qt.KeepAspectRatio, Qt.FastTransformation)
            self.camera_label.setPixmap(pixmap)
        except Exception:
            logger.exception("Camera display error")


class TrackerWindow(QMainWindow):
    """Top-level window: permission gate, then live preview plus stats."""

    # Emitted from whatever thread delivered the tick; Qt queues it onto the main thread.
    _stats_signal = pyqtSignal(object)

    def __init__(self, counter, permission, camera, detector_factory):
        super().__init__()
        self.setWindowTitle("Basketball Tracker")
        self.setMinimumSize(480, 360)
        self.resize(960, 720)
        self.setStyleSheet(BG_CSS)

        self.counter = counter
        self.permission = permission
        self.camera = camera
        self.detector_factory = detector_factory
        self.preview = None

        self._stack = QStackedWidget()
        self.setCentralWidget(self._stack)
        self.permission_page = PermissionPage(self.request_permission)
        self._stack.addWidget(self.permission_page)

        self._stats_signal.connect(self._on_stats)
        self.counter.subscribe(self._publish_stats)
        self.permission.subscribe(self._on_permission_result)

    # ── permission ───────────────────────────────────────────────────────────

    def request_permission(self):
        self.permission.request()

    def _on_permission_result(self, granted):
        if granted:
            self._show_preview()
        else:
            self._teardown_preview()
            self._stack.setCurrentWidget(self.permission_page)

    # ── preview ──────────────────────────────────────────────────────────────

    def _show_preview(self):
        if self.preview is None:
            self.preview = CameraPreview(self.camera, self.detector_factory)
            self.preview.overlay.set_stats(self.counter.get_stats())
            self._stack.addWidget(self.preview)
        self._stack.setCurrentWidget(self.preview)
        self.preview.bind()

    def _teardown_preview(self):
        if self.preview is None:
            return
        preview = self.preview
        self.preview = None
        preview.teardown()
        self._stack.removeWidget(preview)
        preview.deleteLater()

    def is_showing_preview(self) -> bool:
        return self.preview is not None and self._stack.currentWidget() is self.preview

    # ── counter updates ──────────────────────────────────────────────────────

    def _publish_stats(self, stats):
        self._stats_signal.emit(stats)

    def _on_stats(self, stats):
        # main thread
        if self.preview is not None:
            self.preview.overlay.set_stats(stats)

    # ── cleanup ──────────────────────────────────────────────────────────────

    def closeEvent(self, event):
        self._teardown_preview()
        self.counter.unsubscribe(self._publish_stats)
        event.accept()
