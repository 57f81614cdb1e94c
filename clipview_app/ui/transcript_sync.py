"""
Transcript synchronizer for the clip view.

Fetches transcript segments for the current subject on a worker thread and
applies the result on the GUI thread, unless the subject has changed since.
"""
import logging
import typing as t

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal, Slot

from clipview_app.core.interfaces import ErrorReporter, LoggingErrorReporter, TranscriptProducer
from clipview_app.core.models import Segment, Subject, normalize_segments

logger = logging.getLogger(__name__)


class WorkerSignals(QObject):
    """Signals for worker thread communication."""
    finished = Signal(int, object)  # generation, list of Segment
    error = Signal(int, object)     # generation, exception


class TranscriptWorker(QRunnable):
    """Worker thread running one transcript fetch."""

    def __init__(self, generation: int, producer: TranscriptProducer):
        super().__init__()
        self.generation = generation
        self.producer = producer
        self.signals = WorkerSignals()

    @Slot()
    def run(self):
        """Call the producer in a background thread."""
        try:
            segments = normalize_segments(self.producer.transcribe())
        except Exception as e:
            self.signals.error.emit(self.generation, e)
            return
        self.signals.finished.emit(self.generation, segments)


class TranscriptSynchronizer(QObject):
    """Keeps the displayed transcript in step with the shown subject.

    Every activation gets a new generation number. A fetch result is applied
    only if its generation is still current, so at most one fetch per
    activation ever reaches the screen.

    Signals:
        transcriptChanged: Emitted with the list of Segment now displayed
        transcriptFailed: Emitted with a message when the current fetch fails
    """
    transcriptChanged = Signal(object)
    transcriptFailed = Signal(str)

    def __init__(self, reporter: t.Optional[ErrorReporter] = None,
                 pool: t.Optional[QThreadPool] = None, parent=None):
        """Initialize the synchronizer.

        Args:
            reporter: Diagnostics sink for failed fetches
            pool: Thread pool to run fetches on; the global pool by default.
                It must outlive this object, since deleting a pool waits for
                its running fetches.
            parent: Optional parent object
        """
        super().__init__(parent)
        self.reporter = reporter or LoggingErrorReporter(logger)
        self.pool = pool or QThreadPool.globalInstance()
        self._generation = 0
        self._subject: t.Any = None
        self._segments: list[Segment] = []
        self._workers: dict[int, TranscriptWorker] = {}

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def segments(self) -> list[Segment]:
        return list(self._segments)

    @property
    def pending(self) -> bool:
        """True while the current generation's fetch has not completed."""
        return self._generation in self._workers

    def activate(self, subject: Subject, producer: t.Optional[TranscriptProducer]) -> int:
        """Start a new activation for ``subject``.

        The displayed transcript is cleared before the fetch starts.

        Returns:
            The new generation number
        """
        self._generation += 1
        generation = self._generation
        self._subject = subject
        self._set_segments([])

        if producer is None:
            logger.debug("No transcript producer for %r", subject)
            return generation

        worker = TranscriptWorker(generation, producer)
        worker.signals.finished.connect(self._on_finished)
        worker.signals.error.connect(self._on_error)
        self._workers[generation] = worker
        logger.debug("Transcript fetch %d started for %r", generation, subject)
        self.pool.start(worker)
        return generation

    def expire(self) -> None:
        """Supersede the current activation without starting a new one."""
        self._generation += 1

    def _set_segments(self, segments: list[Segment]) -> None:
        self._segments = list(segments)
        self.transcriptChanged.emit(self.segments)

    def _on_finished(self, generation: int, segments: list) -> None:
        self._workers.pop(generation, None)
        if generation != self._generation:
            logger.debug("Discarding stale transcript %d (current %d)",
                         generation, self._generation)
            return
        logger.info("Transcript for %r: %d segments", self._subject, len(segments))
        self._set_segments(segments)

    def _on_error(self, generation: int, exc: BaseException) -> None:
        self._workers.pop(generation, None)
        if generation != self._generation:
            logger.debug("Ignoring failure of stale transcript %d: %s", generation, exc)
            return
        self.reporter.report(f"Transcription of {self._subject!r} failed", exc)
        self.transcriptFailed.emit(f"Could not transcribe this clip: {exc}")
