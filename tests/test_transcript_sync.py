"""
Tests for the TranscriptSynchronizer.
"""
import importlib.util
import pytest
from PySide6.QtWidgets import QApplication

from clipview_app.core.models import Segment
from clipview_app.ui import TranscriptSynchronizer


pytestmark = pytest.mark.gui


def has_qt_display():
    """Check if we have a working Qt environment for testing."""
    try:
        if QApplication.instance() is None:
            QApplication([])
        return True
    except Exception:
        return False


if not has_qt_display() or not importlib.util.find_spec("pytestqt"):
    pytestmark = pytest.mark.skip(reason="GUI tests require pytest-qt and a working Qt platform")


@pytest.fixture
def sync(qtbot, reporter):
    synchronizer = TranscriptSynchronizer(reporter)
    yield synchronizer
    synchronizer.expire()
    synchronizer.pool.waitForDone(2000)


def test_activate_without_producer(sync):
    sync.activate("clip1", None)
    assert sync.segments == []
    assert not sync.pending


def test_activate_clears_synchronously(sync, qtbot, make_transcriber, hi_segments):
    sync.activate("clip1", make_transcriber(hi_segments))
    qtbot.waitUntil(lambda: sync.segments == hi_segments, timeout=2000)

    blocked = make_transcriber([Segment(t0=0, t1=1, text="later")], block=True)
    with qtbot.waitSignal(sync.transcriptChanged, timeout=500) as blocker:
        sync.activate("clip2", blocked)
    # Cleared before the fetch had any chance to finish
    assert blocker.args == [[]]
    assert sync.segments == []
    assert sync.pending


def test_result_applied(sync, qtbot, make_transcriber):
    transcriber = make_transcriber([((2.0, 4.0), "hi"), {"t0": 5, "t1": 6, "text": "there"}])
    sync.activate("clip1", transcriber)
    qtbot.waitUntil(lambda: len(sync.segments) == 2, timeout=2000)
    assert [s.text for s in sync.segments] == ["hi", "there"]
    assert transcriber.calls == 1
    assert not sync.pending


def test_stale_result_discarded(sync, qtbot, make_transcriber):
    """A fetch for A that resolves after switching to B never shows."""
    slow_a = make_transcriber([Segment(t0=0, t1=1, text="from A")], block=True)
    fast_b = make_transcriber([Segment(t0=0, t1=1, text="from B")])

    sync.activate("A", slow_a)
    sync.activate("B", fast_b)
    qtbot.waitUntil(lambda: [s.text for s in sync.segments] == ["from B"], timeout=2000)

    slow_a.release.set()
    assert sync.pool.waitForDone(2000)
    qtbot.wait(50)
    assert [s.text for s in sync.segments] == ["from B"]


def test_stale_empty_result_discarded(sync, hi_segments):
    """An outdated generation is ignored even when it resolves empty."""
    stale = sync.activate("A", None)
    current = sync.activate("B", None)
    sync._on_finished(current, hi_segments)
    sync._on_finished(stale, [])
    assert sync.segments == hi_segments


def test_current_generation_applied(sync, hi_segments):
    generation = sync.activate("A", None)
    sync._on_finished(generation, hi_segments)
    assert sync.segments == hi_segments


def test_expire_discards_pending(sync, qtbot, make_transcriber, hi_segments):
    transcriber = make_transcriber(hi_segments, block=True)
    sync.activate("A", transcriber)
    sync.expire()
    transcriber.release.set()
    assert sync.pool.waitForDone(2000)
    qtbot.wait(50)
    assert sync.segments == []


def test_failure_is_reported(sync, qtbot, reporter, make_transcriber):
    error = RuntimeError("model missing")
    with qtbot.waitSignal(sync.transcriptFailed, timeout=2000) as blocker:
        sync.activate("clip1", make_transcriber(error=error))
    assert "model missing" in blocker.args[0]
    assert sync.segments == []
    reporter.report.assert_called_once()
    assert reporter.report.call_args.args[1] is error


def test_stale_failure_not_reported(sync, qtbot, reporter, make_transcriber):
    failing = make_transcriber(error=RuntimeError("boom"), block=True)
    sync.activate("A", failing)
    sync.activate("B", None)
    failing.release.set()
    assert sync.pool.waitForDone(2000)
    qtbot.wait(50)
    reporter.report.assert_not_called()


def test_malformed_result_is_reported(sync, qtbot, reporter, make_transcriber):
    with qtbot.waitSignal(sync.transcriptFailed, timeout=2000):
        sync.activate("clip1", make_transcriber([{"t0": 1.0}]))
    assert sync.segments == []
    reporter.report.assert_called_once()
