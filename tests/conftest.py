"""Shared fixtures: an offscreen Qt app for QObject and widget tests, a temp-file repository, fixed clocks."""

import os
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

TZ = ZoneInfo("Europe/Lisbon")


def dt_local(y, m, d, hh=0, mm=0, ss=0):
    return datetime(y, m, d, hh, mm, ss, tzinfo=TZ)


@pytest.fixture(scope="session")
def qapp():
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PySide6.QtWidgets import QApplication
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


@pytest.fixture
def repo(tmp_path):
    from weekly_schedule.db import connect, migrate
    from weekly_schedule.repository import Repository

    conn = connect(tmp_path / "test_schedule.sqlite3")
    migrate(conn)
    yield Repository(conn)
    conn.close()


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FakeClock(dt_local(2026, 2, 18, 9, 0))  # Wednesday
