#!/usr/bin/env python3
"""
Main entry point for the clip view demo.
"""
import sys
import logging
import argparse

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import QApplication, QListWidget, QListWidgetItem, QMainWindow, QSplitter

from clipview_app import config
from clipview_app.core.demo_source import ToneSource
from clipview_app.core.models import RECORDING, RenderInputs, RenderMode, Viewport
from clipview_app.ui import ClipView

logger = logging.getLogger(__name__)

RECORD_WINDOW_SEC = 10.0


# Configure logging
def setup_logging(verbose=False):
    """Set up logging configuration."""
    log_level = logging.DEBUG if verbose else getattr(logging, config.LOG_LEVEL, logging.INFO)
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    config.DATA_DIR.mkdir(exist_ok=True)

    # Configure root logger
    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(config.LOG_PATH)
        ]
    )

    # Qt's own chatter is rarely useful
    logging.getLogger('PySide6').setLevel(logging.WARNING)


class MainWindow(QMainWindow):
    """Demo window: a clip list next to a ClipView."""

    def __init__(self, source: ToneSource, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Clip View")
        self.resize(1000, 500)
        self.source = source
        self.inputs = RenderInputs()

        self.clips = QListWidget()
        item = QListWidgetItem("● Record")
        item.setData(Qt.UserRole, RECORDING)
        self.clips.addItem(item)
        for clip_id, duration in source.durations.items():
            item = QListWidgetItem(f"Clip {clip_id} ({duration:.1f}s)")
            item.setData(Qt.UserRole, clip_id)
            self.clips.addItem(item)
        self.clips.currentItemChanged.connect(self._on_clip_selected)

        self.view = ClipView(
            source,
            source,
            on_seek=self._on_seek,
            on_set_render_mode=self._on_set_render_mode,
        )
        self.view.sync.transcriptFailed.connect(
            lambda msg: self.statusBar().showMessage(msg, config.STATUS_MESSAGE_MS)
        )

        splitter = QSplitter()
        splitter.addWidget(self.clips)
        splitter.addWidget(self.view)
        splitter.setStretchFactor(1, 1)
        self.setCentralWidget(splitter)

        # Slides the viewport along while recording
        self._follow = QTimer(self)
        self._follow.setInterval(config.STREAM_REDRAW_INTERVAL_MS)
        self._follow.timeout.connect(self._follow_recording)

    def _render(self) -> None:
        self.source.render_mode = self.inputs.render_mode
        self.source.viewport = self.inputs.viewport
        self.view.apply(self.inputs)

    def _on_clip_selected(self, current, _previous) -> None:
        if current is None:
            return
        subject = current.data(Qt.UserRole)
        self.inputs.subject = subject
        self.inputs.viewport = self.source.select(subject)
        self.inputs.time = 0.0
        self.inputs.streaming = subject is RECORDING
        if self.inputs.streaming:
            self._follow.start()
        else:
            self._follow.stop()
        logger.info("Showing %r", subject)
        self.view.set_transcriber(None if subject is RECORDING else self.source, refetch=False)
        self._render()

    def _follow_recording(self) -> None:
        end = max(self.source.duration(), RECORD_WINDOW_SEC)
        self.inputs.viewport = Viewport(time_start=end - RECORD_WINDOW_SEC, time_end=end)
        self.inputs.time = self.source.duration()
        self._render()

    def _on_seek(self, time: float) -> None:
        self.inputs.time = min(max(time, self.inputs.viewport.time_start),
                               self.inputs.viewport.time_end)
        self._render()

    def _on_set_render_mode(self, mode: RenderMode) -> None:
        self.inputs.render_mode = mode
        self._render()

    def closeEvent(self, event):
        self._follow.stop()
        self.view.teardown()
        super().closeEvent(event)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description='Clip view demo')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    parser.add_argument('--fail-transcript', type=int, action='append', default=[],
                        metavar='CLIP', help='Make transcription of CLIP fail')

    args = parser.parse_args()
    setup_logging(args.verbose)

    logger.info("Starting clip view demo")

    app = QApplication(sys.argv)
    window = MainWindow(ToneSource(failing=args.fail_transcript))
    window.show()
    sys.exit(app.exec())


if __name__ == '__main__':
    main()
