"""
Camera utilities: exclusive camera binding, latest-only frame delivery and
the current-frame buffer used by the preview.

Failures to acquire the camera are logged and swallowed; the caller just gets
an unavailable camera and a blank preview.
"""

import logging
import time
from threading import Condition, Lock, RLock, Thread, current_thread

import cv2

from .config import CAMERA_FPS, CAMERA_ID, CAMERA_RESOLUTION, FRAME_WAIT_TIMEOUT

logger = logging.getLogger(__name__)

# Process-wide camera binding: at most one CameraManager owns the device.
_binding_lock = Lock()
_active_camera = None


class FrameEvent:
    """One captured frame handed to the frame callback."""

    def __init__(self, frame_id, timestamp_ms, image):
        self.frame_id = frame_id
        self.timestamp_ms = timestamp_ms  # host wall clock, ms
        self.image = image  # BGR numpy array, None once discarded

    def discard(self):
        """Drop the pixel payload."""
        self.image = None

    def __repr__(self):
        return f"FrameEvent(#{self.frame_id} @ {self.timestamp_ms}ms)"


class LatestValueSlot:
    """
    Single-slot channel where the newest value wins.

    put() overwrites any value the consumer has not taken yet and counts it
    in `dropped`, and so does close() for a value still pending. get()
    blocks until a value is available, the timeout expires (returns None) or
    the slot is closed (returns None).
    """

    def __init__(self):
        self._cond = Condition()
        self._value = None
        self._has_value = False
        self._closed = False
        self.dropped = 0

    def put(self, value):
        """Store value, replacing an undelivered one. Returns False if closed."""
        with self._cond:
            if self._closed:
                return False
            if self._has_value:
                self.dropped += 1
            self._value = value
            self._has_value = True
            self._cond.notify()
            return True

    def get(self, timeout=None):
        with self._cond:
            self._cond.wait_for(lambda: self._has_value or self._closed, timeout)
            if self._closed or not self._has_value:
                return None
            value = self._value
            self._value = None
            self._has_value = False
            return value

    def close(self):
        with self._cond:
            self._closed = True
            if self._has_value:
                self.dropped += 1
            self._value = None
            self._has_value = False
            self._cond.notify_all()

    @property
    def closed(self):
        return self._closed


class CameraManager:
    """Binds one OpenCV camera and delivers its frames, newest first."""

    def __init__(self, camera_id=CAMERA_ID, fps=CAMERA_FPS, resolution=CAMERA_RESOLUTION,
                 capture_factory=None):
        """
        Initialize camera manager. Nothing is opened until start().

        Args:
            camera_id: OpenCV device index (0 for default)
            fps: Target frames per second
            resolution: (width, height) tuple
            capture_factory: callable(camera_id) returning a VideoCapture-like
                object; defaults to cv2.VideoCapture
        """
        self.camera_id = camera_id
        self.target_fps = fps
        self.frame_time_ms = 1000.0 / fps
        self.resolution = resolution
        self.capture_factory = capture_factory or cv2.VideoCapture

        self.cap = None
        self.is_available = False
        self.is_running = False
        self.frame_count = 0

        # Newest frame for the preview
        self.frame_lock = Lock()
        self.current_frame = None
        self.current_frame_id = -1
        self.current_frame_ts = None

        # Guards cap, is_running and the current slot
        self._session_lock = RLock()
        self._slot = None
        self._threads = []

    # ── exclusive binding ────────────────────────────────────────────────────

    @staticmethod
    def active():
        """Return the CameraManager currently bound, or None."""
        with _binding_lock:
            return _active_camera

    @staticmethod
    def unbind_all():
        """Release whichever camera is currently bound."""
        with _binding_lock:
            camera = _active_camera
        if camera is not None:
            camera.stop()

    # ── lifecycle ────────────────────────────────────────────────────────────

    def start(self, on_frame=None):
        """
        Acquire the camera and start capture.

        Any previously bound camera is released first. Each captured frame is
        offered to on_frame(FrameEvent) on a dedicated delivery thread; frames
        that arrive while the callback is busy are dropped, and the payload is
        discarded once the callback returns.

        Returns:
            True if the camera is bound, False if acquisition failed.
        """
        global _active_camera

        if self.is_running:
            return True

        CameraManager.unbind_all()

        with self._session_lock:
            if self.is_running:
                return True

            if not self._open_camera():
                return False

            with _binding_lock:
                _active_camera = self

            self.is_running = True
            self.frame_count = 0
            slot = self._slot = LatestValueSlot()

            self._threads = [Thread(target=self._capture_worker, args=(self.cap, slot),
                                    name="camera-capture", daemon=True)]
            if on_frame is not None:
                self._threads.append(Thread(target=self._delivery_worker, args=(slot, on_frame),
                                            name="camera-analysis", daemon=True))

            for thread in self._threads:
                thread.start()

        logger.info("Camera started successfully")
        return True

    def stop(self):
        """Stop capture and release the device. Safe to call repeatedly."""
        with self._session_lock:
            was_running = self.is_running
            self.is_running = False
            if self._slot is not None:
                self._slot.close()
            threads = self._threads
            self._threads = []

        # Joined outside the lock: a dying capture thread takes it in _on_capture_lost
        for thread in threads:
            if thread is not current_thread():
                thread.join(timeout=1.0)

        self._release()

        if was_running:
            logger.info("Camera %s released (%d frames captured)", self.camera_id, self.frame_count)

    def _release(self):
        """Release the device, clear the preview frame and drop the binding."""
        global _active_camera

        with self._session_lock:
            cap = self.cap
            self.cap = None
            self.is_available = False
            if cap is not None:
                cap.release()

            with self.frame_lock:
                self.current_frame = None
                self.current_frame_id = -1
                self.current_frame_ts = None

            with _binding_lock:
                if _active_camera is self:
                    _active_camera = None

    def _on_capture_lost(self, slot):
        """End the session whose capture thread died on its own."""
        with self._session_lock:
            if slot.closed or self._slot is not slot:
                return
            self.is_running = False
            slot.close()
            logger.error("Camera %s lost after %d frames; preview cleared",
                         self.camera_id, self.frame_count)
            self._release()

    def _open_camera(self):
        """Open the capture device. Logs and returns False on any failure."""
        cap = None
        try:
            cap = self.capture_factory(self.camera_id)

            if not cap.isOpened():
                logger.error("Camera binding failed: camera %s not available", self.camera_id)
                cap.release()
                self.is_available = False
                return False

            cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.resolution[0])
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.resolution[1])
            cap.set(cv2.CAP_PROP_FPS, self.target_fps)

            # Test capture one frame
            ret, frame = cap.read()
            if not ret or frame is None:
                logger.error("Camera binding failed: camera %s cannot read frames", self.camera_id)
                cap.release()
                self.is_available = False
                return False

        except Exception:
            logger.exception("Camera binding failed")
            if cap is not None:
                cap.release()
            self.is_available = False
            return False

        self.cap = cap
        self.is_available = True
        logger.info("Camera %s bound (%dx%d, %sfps)",
                    self.camera_id, self.resolution[0], self.resolution[1], self.target_fps)
        return True

    # ── workers ──────────────────────────────────────────────────────────────

    def _capture_worker(self, cap, slot):
        """Read frames at the target FPS and publish the newest one."""
        last_frame_time = time.time()

        while not slot.closed:
            try:
                ret, frame = cap.read()
            except Exception:
                logger.exception("Camera capture error")
                break

            if not ret or frame is None:
                logger.warning("Camera stopped or frame capture failed")
                break

            host_ts_frame = time.time_ns() // 1_000_000  # ns -> ms

            with self.frame_lock:
                if slot.closed:
                    break
                self.current_frame = frame
                self.current_frame_id = self.frame_count
                self.current_frame_ts = host_ts_frame

            slot.put(FrameEvent(self.frame_count, host_ts_frame, frame))
            self.frame_count += 1

            # Maintain target FPS
            elapsed = time.time() - last_frame_time
            sleep_time = self.frame_time_ms / 1000.0 - elapsed
            if sleep_time > 0:
                time.sleep(sleep_time)
            last_frame_time = time.time()

        self._on_capture_lost(slot)
        logger.debug("Capture thread exiting (%d frames captured)", self.frame_count)

    def _delivery_worker(self, slot, on_frame):
        """Hand the newest frame to on_frame, then drop its payload."""
        # slot belongs to one session; a restart gets a new one
        while not slot.closed:
            event = slot.get(timeout=FRAME_WAIT_TIMEOUT)
            if event is None:
                continue
            try:
                on_frame(event)
            except Exception:
                logger.exception("Frame callback failed for %r", event)
            finally:
                event.discard()

    # ── accessors ────────────────────────────────────────────────────────────

    def get_current_frame(self):
        """
        Get the newest captured frame.

        Returns:
            (frame, frame_id, host_ts_frame) or (None, -1, None) if unavailable
        """
        if not self.is_available:
            return None, -1, None

        with self.frame_lock:
            return self.current_frame, self.current_frame_id, self.current_frame_ts

    @property
    def dropped_frames(self):
        """Frames overwritten before the delivery thread took them."""
        return self._slot.dropped if self._slot is not None else 0
