from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from .clock import now_local
from .engine import evaluate_tick
from .fired import FiredSet
from .models import TickResult
from .repository import Repository

logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 1000


class Scheduler(QObject):
    """
    Evaluates the active profile once per second.

    Per tick: evaluate, record fired keys, then emit. Listeners on
    `notifications_due` start playback, listeners on `popup_ready` show it.
    """

    notifications_due = Signal(object)  # List[DueNotification]
    popup_ready = Signal(object)  # PopupPayload
    fired_reset = Signal()

    def __init__(
        self,
        repo: Repository,
        fired: Optional[FiredSet] = None,
        now_fn: Callable[[], datetime] = now_local,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.repo = repo
        self.fired = fired if fired is not None else FiredSet()
        self.now_fn = now_fn
        self.timer = QTimer(self)
        self.timer.setInterval(TICK_INTERVAL_MS)
        self.timer.timeout.connect(self.tick)

    def start(self) -> None:
        self.timer.start()

    def stop(self) -> None:
        self.timer.stop()

    def is_running(self) -> bool:
        return self.timer.isActive()

    def tick(self) -> Optional[TickResult]:
        try:
            return self._tick()
        except Exception:
            # keep ticking; next second gets a fresh attempt
            logger.exception("Notification tick failed")
            return None

    def reset_fired(self) -> None:
        self.fired.clear()
        self.fired_reset.emit()

    def _tick(self) -> TickResult:
        now = self.now_fn()
        tasks = self.repo.list_tasks()
        settings = self.repo.get_settings()

        result = evaluate_tick(now, tasks, settings, self.fired)

        if result.reset:
            if len(self.fired):
                logger.info("Midnight: clearing %d fired notification key(s)", len(self.fired))
            self.reset_fired()
            return result

        if result.due:
            self.fired.add(result.keys)
            for d in result.due:
                logger.info("Firing %s notification %s: %s", d.kind.value, d.key, d.text)
            self.notifications_due.emit(list(result.due))

        if result.popup is not None:
            self.popup_ready.emit(result.popup)

        return result
