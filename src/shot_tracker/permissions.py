"""
Camera permission gate.

Desktop stand-in for a runtime camera permission: the user is asked once at
startup and can be asked again from the "Grant Permission" button.
"""

import logging

from PyQt5.QtWidgets import QMessageBox

logger = logging.getLogger(__name__)


def ask_user_for_camera(parent=None) -> bool:
    """Default requester: yes/no dialog."""
    answer = QMessageBox.question(
        parent, "Camera access",
        "Basketball Tracker needs the camera to show the live court view.\n"
        "Allow camera access?",
        QMessageBox.Yes | QMessageBox.No, QMessageBox.Yes)
    return answer == QMessageBox.Yes


class CameraPermission:
    """Holds the current grant and notifies listeners when it changes."""

    def __init__(self, requester=None):
        """
        Args:
            requester: callable() -> bool; True means access was granted.
                Defaults to ask_user_for_camera.
        """
        self.requester = requester or ask_user_for_camera
        self.granted = False
        self._listeners = []

    def subscribe(self, listener):
        self._listeners.append(listener)

    def request(self) -> bool:
        """Ask for access. Can be called again after a denial."""
        try:
            granted = bool(self.requester())
        except Exception:
            logger.exception("Camera permission request failed")
            granted = False

        self.granted = granted
        if granted:
            logger.info("Camera permission granted")
        else:
            logger.warning("Camera permission denied")

        for listener in list(self._listeners):
            listener(granted)
        return granted
