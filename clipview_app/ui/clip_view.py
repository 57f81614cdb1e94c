"""
ClipView widget: the live waveform/spectrogram surface of the clip editor.

This module defines the draw surface, the transcript strip below it, and the
ClipView that wires them to the redraw scheduler, the resize watcher and the
transcript synchronizer.
"""
import logging
import typing as t

from PySide6.QtCore import QPointF, QRectF, Qt, Signal
from PySide6.QtGui import QColor, QFontMetricsF, QImage, QMouseEvent, QPainter
from PySide6.QtWidgets import QGridLayout, QToolButton, QVBoxLayout, QWidget

from clipview_app import config
from clipview_app.core import geometry
from clipview_app.core.interfaces import (
    ErrorReporter,
    LoggingErrorReporter,
    PixelProducer,
    RenderModeSink,
    SeekSink,
    TranscriptProducer,
)
from clipview_app.core.models import (
    DrawRequest,
    RenderInputs,
    RenderMode,
    Segment,
    Subject,
    ViewState,
    Viewport,
)
from .redraw_scheduler import RedrawScheduler
from .resize_watcher import ResizeWatcher
from .transcript_sync import TranscriptSynchronizer

logger = logging.getLogger(__name__)


class ClipCanvas(QWidget):
    """Draw surface showing the last blitted frame and the playhead.

    Signals:
        clicked: Emitted with (x, width) in logical pixels on a left click
    """
    clicked = Signal(float, float)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._image: t.Optional[QImage] = None
        self._cursor_fraction: t.Optional[float] = None
        self._cursor_color = QColor(config.CURSOR_COLOR)
        self.setCursor(Qt.PointingHandCursor)

    @property
    def image(self) -> t.Optional[QImage]:
        return self._image

    def blit(self, buffer: bytes, request: DrawRequest, ratio: float) -> None:
        """Copy an RGBA frame verbatim into the surface.

        The frame is ``request`` device pixels; giving the image the same
        device pixel ratio keeps its logical footprint equal to the container.
        """
        image = QImage(
            bytes(buffer),
            request.width_px,
            request.height_px,
            request.width_px * 4,
            QImage.Format_RGBA8888,
        ).copy()
        image.setDevicePixelRatio(ratio)
        self._image = image
        self.update()

    def set_cursor_fraction(self, fraction: t.Optional[float]) -> None:
        self._cursor_fraction = fraction
        self.update()

    def cursor_x(self) -> t.Optional[float]:
        """Left edge of the playhead marker in logical pixels."""
        if self._cursor_fraction is None:
            return None
        return self._cursor_fraction * self.width()

    def paintEvent(self, event):
        painter = QPainter(self)
        if self._image is not None:
            painter.drawImage(QPointF(0, 0), self._image)
        x = self.cursor_x()
        if x is not None:
            painter.fillRect(QRectF(x, 0, config.CURSOR_WIDTH, self.height()),
                             self._cursor_color)
        painter.end()

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.LeftButton:
            self.clicked.emit(event.position().x(), float(self.width()))
            event.accept()
            return
        super().mousePressEvent(event)


class TranscriptStrip(QWidget):
    """Row of transcript labels aligned with the viewport.

    Each label is stretched horizontally to cover the visible part of its
    segment.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self._segments: list[Segment] = []
        self._viewport: t.Optional[Viewport] = None
        self.setFixedHeight(config.TRANSCRIPT_STRIP_HEIGHT)

    @property
    def segments(self) -> list[Segment]:
        return list(self._segments)

    def set_segments(self, segments: t.Iterable[Segment]) -> None:
        self._segments = list(segments)
        self.update()

    def set_viewport(self, viewport: Viewport) -> None:
        self._viewport = viewport
        self.update()

    def label_rects(self) -> list[tuple[QRectF, str]]:
        """Geometry of every label that would be painted."""
        if self._viewport is None:
            return []
        width = self.width()
        rects = []
        for segment in self._segments:
            span = geometry.segment_span(self._viewport, segment)
            if span is None:
                continue
            left, frac = span
            rects.append((
                QRectF(left * width, 0, frac * width, config.TRANSCRIPT_LABEL_HEIGHT),
                segment.text,
            ))
        return rects

    def paintEvent(self, event):
        painter = QPainter(self)
        font = painter.font()
        font.setPointSize(config.TRANSCRIPT_FONT_SIZE)
        painter.setFont(font)
        painter.setPen(QColor(config.TRANSCRIPT_TEXT_COLOR))
        metrics = QFontMetricsF(font)

        for rect, text in self.label_rects():
            advance = metrics.horizontalAdvance(text)
            if advance <= 0 or rect.width() <= 0:
                continue
            # Stretch glyphs and spacing so the text spans the segment
            painter.save()
            painter.translate(rect.left(), rect.top())
            painter.scale(rect.width() / advance, 1.0)
            painter.drawText(QPointF(0, rect.height() / 2), text)
            painter.restore()
        painter.end()


class ClipView(QWidget):
    """Live view of the selected or recording clip.

    Requests frames from a pixel producer whenever the subject, the render
    mode or the container size changes, and every 100 ms while streaming.
    Clicks become seek requests; the mode button becomes render-mode requests.
    Neither changes the view by itself: the caller feeds the new time or mode
    back in.

    Signals:
        seekRequested: Emitted with an absolute time in seconds
        renderModeRequested: Emitted with the RenderMode the user selected
    """
    seekRequested = Signal(float)
    renderModeRequested = Signal(object)

    def __init__(
        self,
        producer: PixelProducer,
        transcriber: t.Optional[TranscriptProducer] = None,
        *,
        reporter: t.Optional[ErrorReporter] = None,
        pixel_ratio: t.Optional[t.Callable[[], float]] = None,
        render_mode: RenderMode = RenderMode.WAVEFORM,
        viewport: t.Optional[Viewport] = None,
        on_seek: t.Optional[SeekSink] = None,
        on_set_render_mode: t.Optional[RenderModeSink] = None,
        interval_ms: int = config.STREAM_REDRAW_INTERVAL_MS,
        parent=None,
    ):
        """Initialize the view.

        Args:
            producer: Renders RGBA frames for the current subject
            transcriber: Optional transcript producer
            reporter: Diagnostics sink for recoverable failures
            pixel_ratio: Returns the device pixel ratio; sampled on every redraw
            render_mode: Initial render mode
            viewport: Initial visible time window
            on_seek: Connected to seekRequested
            on_set_render_mode: Connected to renderModeRequested
            interval_ms: Redraw period while streaming
            parent: Optional parent widget
        """
        super().__init__(parent)
        self._producer = producer
        self._transcriber = transcriber
        self._reporter = reporter or LoggingErrorReporter(logger)
        self._pixel_ratio = pixel_ratio or self.devicePixelRatioF
        self._state = ViewState.UNINITIALIZED
        self._subject: t.Any = None
        self._has_subject = False
        self._render_mode = render_mode
        self._viewport = viewport or Viewport(time_start=0.0, time_end=1.0)
        self._time = self._viewport.time_start
        self.draw_requests = 0
        self.last_request: t.Optional[DrawRequest] = None
        self._drawn_size: t.Optional[t.Tuple[int, int]] = None

        # Draw surface and mode toggle share the container cell
        self.container = QWidget(self)
        grid = QGridLayout(self.container)
        grid.setContentsMargins(0, 0, 0, 0)
        self.canvas = ClipCanvas(self.container)
        grid.addWidget(self.canvas, 0, 0)
        self.mode_button = QToolButton(self.container)
        self.mode_button.setText("Spectrogram")
        self.mode_button.setToolTip("Toggle spectrogram")
        self.mode_button.setCheckable(True)
        self.mode_button.setChecked(render_mode is RenderMode.SPECTROGRAM)
        grid.addWidget(self.mode_button, 0, 0, Qt.AlignRight | Qt.AlignBottom)

        self.transcript = TranscriptStrip(self)
        self.transcript.set_viewport(self._viewport)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)
        layout.addWidget(self.container, 1)
        layout.addWidget(self.transcript)

        # Controllers
        self.scheduler = RedrawScheduler(interval_ms, self)
        self.scheduler.set_render_mode(render_mode)
        self.scheduler.redrawRequested.connect(self.redraw)

        self.watcher = ResizeWatcher(self)
        self.watcher.resized.connect(self.scheduler.notify_resize)
        self.watcher.swallowed.connect(self._on_first_layout)

        self.sync = TranscriptSynchronizer(self._reporter, parent=self)
        self.sync.transcriptChanged.connect(self.transcript.set_segments)

        self.canvas.clicked.connect(self._on_canvas_clicked)
        self.mode_button.clicked.connect(self._on_mode_clicked)
        if on_seek is not None:
            self.seekRequested.connect(on_seek)
        if on_set_render_mode is not None:
            self.renderModeRequested.connect(on_set_render_mode)

        self.watcher.attach(self.container)
        self._state = ViewState.OBSERVING
        self._update_cursor()

    # ----- state -------------------------------------------------------

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def subject(self) -> t.Any:
        return self._subject

    @property
    def render_mode(self) -> RenderMode:
        return self._render_mode

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def image(self) -> t.Optional[QImage]:
        return self.canvas.image

    @property
    def segments(self) -> list[Segment]:
        return self.sync.segments

    # ----- render inputs -----------------------------------------------

    def apply(self, inputs: RenderInputs) -> None:
        """Apply one full set of render inputs."""
        self.set_viewport(inputs.viewport)
        self.set_time(inputs.time)
        # A subject change redraws with the new mode in one cycle
        subject_changes = not self._has_subject or inputs.subject != self._subject
        self.set_render_mode(inputs.render_mode, trigger=not subject_changes)
        self.set_subject(inputs.subject)
        self.set_streaming(inputs.streaming)

    def set_subject(self, subject: Subject) -> None:
        """Show a different clip (or the live recording)."""
        if self._state is ViewState.TORN_DOWN:
            return
        if self._has_subject and subject == self._subject:
            return
        self._subject = subject
        self._has_subject = True
        self.sync.activate(subject, self._transcriber)
        self.scheduler.set_subject(subject)

    def set_transcriber(self, transcriber: t.Optional[TranscriptProducer],
                        refetch: bool = True) -> None:
        """Swap the transcript producer.

        Args:
            transcriber: New producer, or None to show no transcript
            refetch: Start a new activation for the current subject. Pass
                False when a subject change follows immediately.
        """
        if transcriber is self._transcriber:
            return
        self._transcriber = transcriber
        if refetch and self._has_subject and self._state is not ViewState.TORN_DOWN:
            self.sync.activate(self._subject, transcriber)

    def set_render_mode(self, mode: RenderMode, trigger: bool = True) -> None:
        if self._state is ViewState.TORN_DOWN:
            return
        self._render_mode = mode
        self.mode_button.setChecked(mode is RenderMode.SPECTROGRAM)
        self.scheduler.set_render_mode(mode, trigger)

    def set_viewport(self, viewport: Viewport) -> None:
        """Change the visible window; repaints overlays only."""
        self._viewport = viewport
        self.transcript.set_viewport(viewport)
        self._update_cursor()

    def set_time(self, time: float) -> None:
        """Move the playhead."""
        self._time = time
        self._update_cursor()

    def set_streaming(self, streaming: bool) -> None:
        self.scheduler.set_streaming(streaming)

    def _update_cursor(self) -> None:
        self.canvas.set_cursor_fraction(geometry.cursor_fraction(self._viewport, self._time))

    # ----- redraw cycle ------------------------------------------------

    def redraw(self, reason: str = "manual") -> bool:
        """Run one redraw cycle: size, request a frame, blit it.

        Returns:
            True if a frame was blitted
        """
        if self._state is ViewState.TORN_DOWN:
            return False
        if self.canvas.parentWidget() is None:
            logger.debug("Redraw (%s) skipped: draw surface detached", reason)
            return False

        ratio = self._pixel_ratio()
        size = (self.container.width(), self.container.height())
        request = geometry.draw_request(size[0], size[1], ratio)
        self._state = ViewState.READY
        self.draw_requests += 1
        self.last_request = request
        self._drawn_size = size
        logger.debug("Redraw (%s) %dx%d @%.2f", reason, request.width_px, request.height_px, ratio)

        if request.is_empty():
            logger.debug("Redraw (%s) skipped: container has no area", reason)
            return False

        try:
            buffer = self._producer.draw(request.width_px, request.height_px)
        except Exception as e:
            self._reporter.report(f"Drawing {self._subject!r} failed", e)
            return False

        if not buffer:
            logger.debug("Nothing to draw for %r", self._subject)
            return False
        if len(buffer) != request.byte_length:
            logger.warning("Frame size mismatch: got %d bytes, expected %d for %dx%d",
                           len(buffer), request.byte_length,
                           request.width_px, request.height_px)
            return False

        self.canvas.blit(buffer, request, ratio)
        return True

    def _on_first_layout(self) -> None:
        # A frame drawn before the first layout used the pre-layout size
        if self._state is not ViewState.READY:
            return
        size = (self.container.width(), self.container.height())
        if size != self._drawn_size:
            logger.debug("First layout changed size %s -> %s", self._drawn_size, size)
            self.scheduler.notify_resize()

    def teardown(self) -> None:
        """Release the timer and observer; no redraws happen afterwards."""
        if self._state is ViewState.TORN_DOWN:
            return
        self.scheduler.shutdown()
        self.watcher.detach()
        self.sync.expire()
        self.redraw("teardown")
        self._state = ViewState.TORN_DOWN
        logger.debug("ClipView torn down")

    def closeEvent(self, event):
        self.teardown()
        super().closeEvent(event)

    # ----- pointer -----------------------------------------------------

    def _on_canvas_clicked(self, x: float, width: float) -> None:
        if width <= 0:
            return
        self.seekRequested.emit(geometry.seek_time(self._viewport, x, width))

    def _on_mode_clicked(self) -> None:
        mode = self._render_mode.toggled()
        # The caller owns the mode; show the current one until it is fed back
        self.mode_button.setChecked(self._render_mode is RenderMode.SPECTROGRAM)
        self.renderModeRequested.emit(mode)
