from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from .clock import now_local


class CountdownState(str, Enum):
    RUNNING = "running"
    EXPIRED = "expired"
    DISMISSED = "dismissed"


def format_remaining(target: datetime, now: datetime) -> str:
    """mm:ss until target; minutes wrap at one hour. "00:00" once now >= target."""
    distance_ms = int((target - now).total_seconds() * 1000)
    if distance_ms < 0:
        return "00:00"
    minutes = (distance_ms % (1000 * 60 * 60)) // (1000 * 60)
    seconds = (distance_ms % (1000 * 60)) // 1000
    return f"{minutes:02d}:{seconds:02d}"


class Countdown(QObject):
    updated = Signal(str)
    expired = Signal()

    def __init__(
        self,
        target: datetime,
        now_fn: Callable[[], datetime] = now_local,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.target = target
        self.now_fn = now_fn
        self.state = CountdownState.RUNNING
        self.text = ""
        self.timer = QTimer(self)
        self.timer.setInterval(1000)
        self.timer.timeout.connect(self.tick)

    def start(self) -> None:
        self.timer.start()
        # first value right away, not after one interval
        self.tick()

    def tick(self) -> None:
        if self.state != CountdownState.RUNNING:
            return
        now = self.now_fn()
        if now >= self.target:
            self.text = "00:00"
            self.state = CountdownState.EXPIRED
            self.timer.stop()
            self.updated.emit(self.text)
            self.expired.emit()
            return
        self.text = format_remaining(self.target, now)
        self.updated.emit(self.text)

    def dismiss(self) -> None:
        if self.state == CountdownState.RUNNING:
            self.state = CountdownState.DISMISSED
        self.timer.stop()
