"""
ResizeWatcher reports genuine size changes of a container widget.

Qt delivers a resize event when a widget is first laid out or shown, before
the user has resized anything. That first observation only arms the watcher;
every later one is forwarded as ``resized``. The swallowed one is still
announced as ``swallowed`` so the owner can check it against what it drew.
"""
import logging
import typing as t

from PySide6.QtCore import QEvent, QObject, Signal
from PySide6.QtWidgets import QWidget

logger = logging.getLogger(__name__)


class ResizeWatcher(QObject):
    """Event filter that swallows the initial resize of its target.

    Signals:
        resized: Emitted once per genuine resize
        swallowed: Emitted for the first observation, which is not a resize
    """
    resized = Signal()
    swallowed = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._target: t.Optional[QWidget] = None
        self.seen_first = False

    @property
    def target(self) -> t.Optional[QWidget]:
        return self._target

    def attach(self, widget: QWidget) -> None:
        """Start watching ``widget``; the latch is re-armed."""
        self.detach()
        self._target = widget
        self.seen_first = False
        widget.installEventFilter(self)

    def detach(self) -> None:
        """Stop watching. Safe to call twice."""
        if self._target is None:
            return
        try:
            self._target.removeEventFilter(self)
        except RuntimeError:
            # Underlying C++ widget already deleted
            logger.debug("Resize target gone before detach")
        self._target = None

    def notify(self) -> bool:
        """Feed one size observation through the latch.

        Returns:
            True if it was forwarded as a genuine resize
        """
        if not self.seen_first:
            self.seen_first = True
            self.swallowed.emit()
            return False
        self.resized.emit()
        return True

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        if watched is self._target and event.type() == QEvent.Resize:
            self.notify()
        return False
