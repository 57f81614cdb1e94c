"""
Pytest configuration file for the clip view test suite.
"""

import os
import sys
import threading
import pytest

# Render offscreen unless a display platform was chosen explicitly
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Add the parent directory to sys.path to allow imports from the root directory
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from clipview_app.core.models import RenderMode, Segment


class FakeProducer:
    """Pixel producer that records every request.

    Returns a solid frame of ``fill`` bytes, an empty buffer when ``empty``
    is set, or a buffer of ``wrong_length`` bytes when that is set.
    """

    def __init__(self, fill: int = 0x7F):
        self.fill = fill
        self.empty = False
        self.wrong_length = None
        self.error = None
        self.mode = RenderMode.WAVEFORM
        self.calls = []

    def draw(self, width_px, height_px):
        self.calls.append((width_px, height_px, self.mode))
        if self.error is not None:
            raise self.error
        if self.empty:
            return b""
        if self.wrong_length is not None:
            return bytes(self.wrong_length)
        return bytes([self.fill]) * (width_px * height_px * 4)


class FakeTranscriber:
    """Transcript producer that can block until released, or fail."""

    def __init__(self, segments=(), error=None, block=False):
        self.segments = list(segments)
        self.error = error
        self.release = threading.Event()
        if not block:
            self.release.set()
        self.calls = 0

    def transcribe(self):
        self.calls += 1
        self.release.wait(5)
        if self.error is not None:
            raise self.error
        return self.segments


@pytest.fixture
def producer():
    return FakeProducer()


@pytest.fixture
def hi_segments():
    return [Segment(t0=2.0, t1=4.0, text="hi")]


@pytest.fixture
def make_transcriber():
    """Factory for FakeTranscriber; releases any blocked ones at teardown."""
    made = []

    def factory(*args, **kwargs):
        transcriber = FakeTranscriber(*args, **kwargs)
        made.append(transcriber)
        return transcriber

    yield factory
    for transcriber in made:
        transcriber.release.set()


# Define custom markers for categorizing tests
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "optional: mark test as optional (may be skipped)")
    config.addinivalue_line("markers", "slow: mark test as slow (may take longer to run)")
    config.addinivalue_line("markers", "gui: mark test as requiring a Qt application")


# Setup logging for tests
@pytest.fixture(scope="session", autouse=True)
def setup_logging():
    """Configure logging for tests."""
    import logging
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    yield


@pytest.fixture
def reporter(mocker):
    """Stand-in diagnostics collaborator."""
    return mocker.Mock()
