"""
RedrawScheduler decides when the clip view re-requests and re-blits a frame.

Triggers: subject change, render-mode change, a genuine container resize, and
a fixed-cadence timer while the clip is still being captured.
"""
import logging
import typing as t

from PySide6.QtCore import QObject, QTimer, Signal

from clipview_app.config import STREAM_REDRAW_INTERVAL_MS
from clipview_app.core.models import RenderMode, Subject

logger = logging.getLogger(__name__)

_UNSET = object()


class RedrawScheduler(QObject):
    """Turns input changes into redraw triggers.

    Each trigger emits ``redrawRequested`` exactly once; the receiver runs
    one redraw cycle per emission.

    Signals:
        redrawRequested: Emitted with the trigger reason
            ("subject", "mode", "resize" or "stream")
    """
    redrawRequested = Signal(str)

    def __init__(self, interval_ms: int = STREAM_REDRAW_INTERVAL_MS, parent=None):
        """Initialize the scheduler.

        Args:
            interval_ms: Redraw period while streaming
            parent: Optional parent object
        """
        super().__init__(parent)
        self._subject: t.Any = _UNSET
        self._mode: t.Any = _UNSET
        self._streaming = False
        self._active = True
        self.triggers = 0

        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(lambda: self._fire("stream"))

    @property
    def streaming(self) -> bool:
        return self._streaming

    @property
    def timer_active(self) -> bool:
        return self._timer.isActive()

    def set_subject(self, subject: Subject) -> bool:
        """Record the shown subject; triggers when it differs from the last one.

        Returns:
            True if a redraw was triggered
        """
        if self._subject is not _UNSET and self._subject == subject:
            return False
        self._subject = subject
        return self._fire("subject")

    def set_render_mode(self, mode: RenderMode, trigger: bool = True) -> bool:
        """Record the render mode; triggers when it differs from the last one.

        The first call only seeds the mode. Pass ``trigger=False`` when a
        subject change in the same update will redraw anyway.
        """
        if self._mode is _UNSET:
            self._mode = mode
            return False
        if self._mode is mode:
            return False
        self._mode = mode
        if not trigger:
            return False
        return self._fire("mode")

    def set_streaming(self, streaming: bool) -> None:
        """Start or stop the periodic redraw."""
        streaming = bool(streaming)
        if streaming == self._streaming:
            return
        self._streaming = streaming
        if streaming and self._active:
            logger.debug("Streaming redraw every %d ms", self._timer.interval())
            self._timer.start()
        else:
            self._timer.stop()

    def notify_resize(self) -> bool:
        """Forward a genuine resize."""
        return self._fire("resize")

    def shutdown(self) -> None:
        """Cancel the timer and ignore every later trigger."""
        self._timer.stop()
        self._active = False

    def _fire(self, reason: str) -> bool:
        if not self._active:
            return False
        self.triggers += 1
        self.redrawRequested.emit(reason)
        return True
