"""
Pytest configuration and shared fixtures for FocusFlow tests.

- a QCoreApplication for the QObject services and their QTimers
- a DocumentStore rooted in a temporary directory
- a controllable wall clock injected as ``now``
"""

import os
import sys
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest

# keep log files out of the real user data dir
os.environ.setdefault("FOCUSFLOW_DATA_DIR", tempfile.mkdtemp(prefix="focusflow-tests-"))

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from PySide6.QtCore import QCoreApplication  # noqa: E402

from BackEnd.repos.document_repo import DocumentStore  # noqa: E402
from BackEnd.services.session_service import SessionService  # noqa: E402


class FakeClock:
    """Callable returning a fixed local time that tests move forward by hand."""

    def __init__(self, start):
        self.current = start

    def __call__(self):
        return self.current

    def advance(self, **kwargs):
        self.current = self.current + timedelta(**kwargs)
        return self.current


@pytest.fixture(scope="session", autouse=True)
def qapp():
    """One QCoreApplication for the whole run."""
    return QCoreApplication.instance() or QCoreApplication([])


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 10, 9, 0, 0).astimezone())


@pytest.fixture
def store(tmp_path):
    return DocumentStore(tmp_path / "data")


@pytest.fixture
def session(store, clock):
    svc = SessionService(store=store, now=clock)
    yield svc
    svc.shutdown()


@pytest.fixture
def notifications(session):
    """Collect (title, description) pairs emitted by the session."""
    seen = []
    session.notification.connect(lambda title, text: seen.append((title, text)))
    return seen


@pytest.fixture
def finish(clock):
    """Tick a running timer one second at a time until its interval completes.

    ``seconds`` shortcuts the countdown; the clock still moves a second per tick.
    """
    def _finish(timer, seconds=None):
        if seconds is not None:
            timer.state = timer.state.copy(time_left=seconds)
        ticks = 0
        while timer.state.is_running:
            clock.advance(seconds=1)
            timer.tick()
            ticks += 1
        return ticks
    return _finish
