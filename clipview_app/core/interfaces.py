"""
Capability interfaces the clip view consumes and exposes.

The audio engine and the speech-to-text engine live outside this package;
these protocols are the whole of what the view assumes about them.
"""
import logging
import typing as t

from .models import RenderMode

logger = logging.getLogger(__name__)


@t.runtime_checkable
class PixelProducer(t.Protocol):
    """Renders the current subject into an RGBA frame."""

    def draw(self, width_px: int, height_px: int) -> t.Optional[bytes]:
        """Render one frame.

        Must return promptly. The result is either empty/None ("nothing to
        show yet") or exactly ``width_px * height_px * 4`` bytes. The caller
        copies the bytes, so the producer may reuse its buffer afterwards.
        """
        ...


@t.runtime_checkable
class TranscriptProducer(t.Protocol):
    """Transcribes the current subject."""

    def transcribe(self) -> t.Sequence[t.Any]:
        """Return segments ordered by start time.

        Called at most once per subject activation, on a worker thread.
        Items may be Segment objects, mappings or ``((t0, t1), text)`` tuples.
        """
        ...


class SeekSink(t.Protocol):
    def __call__(self, time: float) -> None: ...


class RenderModeSink(t.Protocol):
    def __call__(self, mode: RenderMode) -> None: ...


class ErrorReporter(t.Protocol):
    """Diagnostics collaborator for recoverable failures."""

    def report(self, message: str, exc: t.Optional[BaseException] = None) -> None: ...


class LoggingErrorReporter:
    """Report failures to the application log."""

    def __init__(self, log: t.Optional[logging.Logger] = None):
        self.log = log or logger

    def report(self, message: str, exc: t.Optional[BaseException] = None) -> None:
        if exc is not None:
            self.log.error("%s: %s", message, exc, exc_info=exc)
        else:
            self.log.error("%s", message)
