"""
Configuration constants for the basketball shot tracker.
"""

# --- Camera Configuration ---
CAMERA_ID = 0               # OpenCV device index (0 for default / back camera)
CAMERA_FPS = 30             # Target frames per second
CAMERA_RESOLUTION = (640, 480)  # (width, height)
FRAME_WAIT_TIMEOUT = 0.5    # seconds the delivery thread waits for a frame before rechecking

# --- Detection ---
TICK_INTERVAL_MS = 3000     # Fake detection period (walking skeleton)
DETECTION_MODES = ("timer", "analysis")
DEFAULT_DETECTION_MODE = "timer"

# --- Preview ---
PREVIEW_REFRESH_MS = 33     # ~30 Hz preview repaint

# --- Logging ---
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
DEFAULT_LOG_LEVEL = "INFO"

# --- Theme ---
BG_CSS = "background-color: #0d1117;"
CARD_CSS = "background-color: rgba(22, 27, 34, 230); border-radius: 12px;"
FG_VALUE = "#f0e040"        # stat values
FG_LABEL = "#8b949e"        # stat captions
FG_TEXT = "#e6edf3"         # permission page text
