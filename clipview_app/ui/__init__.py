"""
UI package for the clip view.
"""

from .clip_view import ClipView, ClipCanvas, TranscriptStrip
from .redraw_scheduler import RedrawScheduler
from .resize_watcher import ResizeWatcher
from .transcript_sync import TranscriptSynchronizer
