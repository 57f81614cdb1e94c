"""
Global configuration settings for the clip view.
"""
import os
import pathlib
from dotenv import load_dotenv

# Load environment variables from .env file if present
load_dotenv()

# Paths
DATA_DIR = pathlib.Path.home() / ".clipview_app"
LOG_PATH = DATA_DIR / "clipview.log"

# Logging
LOG_LEVEL = os.environ.get("CLIPVIEW_LOG_LEVEL", "INFO").upper()

# Redraw cadence while a clip is still being captured
STREAM_REDRAW_INTERVAL_MS = int(os.environ.get("CLIPVIEW_REDRAW_MS", "100"))

# UI configuration
CURSOR_COLOR = "#60a5fa"
CURSOR_WIDTH = 1                 # logical pixels
TRANSCRIPT_STRIP_HEIGHT = 40     # logical pixels
TRANSCRIPT_LABEL_HEIGHT = 30
TRANSCRIPT_FONT_SIZE = 10
TRANSCRIPT_TEXT_COLOR = "#3b0764"
STATUS_MESSAGE_MS = 4000         # how long failures stay in the status bar
