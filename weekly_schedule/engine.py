from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from .clock import day_index, hhmm, is_workday, today_at
from .fired import FiredSet, main_key, pre_key, workday_key
from .models import (
    DueNotification,
    MilestoneKind,
    NotificationKind,
    NotificationSettings,
    PopupPayload,
    Task,
    TickResult,
)

logger = logging.getLogger(__name__)

MIDNIGHT = "00:00"
DEFAULT_USER_NAME = "bạn"

MILESTONE_TEMPLATES: Dict[MilestoneKind, str] = {
    MilestoneKind.WORK_START: "Chào buổi sáng {name}. Đã đến giờ làm việc rồi, bắt đầu một ngày thật năng suất nhé!",
    MilestoneKind.LUNCH_START: "{name} ơi, đã đến giờ nghỉ trưa. Tạm gác công việc lại và đi ăn thôi! Đừng quên chăm sóc sức khoẻ nhé.",
    MilestoneKind.LUNCH_END: "Đến giờ làm việc buổi chiều rồi {name}. Cùng tiếp tục nào!",
    MilestoneKind.WORK_END: "Đã hết giờ làm việc. Chúc {name} có một buổi tối vui vẻ!",
}


def compose(prefix: str, text: str) -> str:
    return f"{prefix} {text}"


def workday_milestones(settings: NotificationSettings) -> Dict[str, str]:
    """
    Map of milestone time -> message.

    Keyed by time, so two milestones configured at the same minute collapse
    into the later one. Unset (empty) times are dropped.
    """
    name = settings.user_name or DEFAULT_USER_NAME
    out: Dict[str, str] = {}
    for kind, t in settings.milestone_times().items():
        if not t:
            continue
        out[t] = MILESTONE_TEMPLATES[kind].format(name=name)
    return out


def pre_notification_time(now: datetime, task: Task, lead_minutes: int) -> Tuple[datetime, datetime]:
    """(when the pre-notification is due, when the task itself is due), both today."""
    due_at = today_at(now, task.time)
    return due_at - timedelta(minutes=lead_minutes), due_at


def _evaluate_task(
    now: datetime,
    current_time: str,
    task: Task,
    settings: NotificationSettings,
    fired: FiredSet,
) -> List[Tuple[DueNotification, PopupPayload]]:
    hits: List[Tuple[DueNotification, PopupPayload]] = []

    key = main_key(task.id)
    if task.time == current_time and not fired.contains(key):
        msg = compose(settings.notification_prefix, task.text)
        hits.append((
            DueNotification(text=msg, key=key, kind=NotificationKind.MAIN),
            PopupPayload(id=key, message=msg),
        ))

    if settings.pre_notification_enabled:
        key = pre_key(task.id)
        pre_at, due_at = pre_notification_time(now, task, settings.pre_notification_minutes)
        if hhmm(pre_at) == current_time and not fired.contains(key):
            msg = compose(settings.pre_notification_prefix, task.text)
            hits.append((
                DueNotification(text=msg, key=key, kind=NotificationKind.PRE),
                PopupPayload(id=key, message=msg, countdown_target=due_at),
            ))

    return hits


def evaluate_tick(
    now: datetime,
    tasks: Iterable[Task],
    settings: NotificationSettings,
    fired: FiredSet,
) -> TickResult:
    """
    Decide what fires at `now`.

    Pure: `fired` is only read. The caller clears it when `reset` is set and
    adds `keys` after dispatching `due`.
    """
    current_day = day_index(now)
    current_time = hhmm(now)

    # 00:00 belongs to the reset; nothing is evaluated on that minute.
    if current_time == MIDNIGHT:
        return TickResult(reset=True)

    due: List[DueNotification] = []
    popup: Optional[PopupPayload] = None

    for task in tasks:
        if task.is_completed or task.day != current_day:
            continue
        try:
            hits = _evaluate_task(now, current_time, task, settings, fired)
        except Exception:
            logger.exception("Skipping task %s (%r) this tick", task.id, task.time)
            continue
        for notification, payload in hits:
            due.append(notification)
            popup = payload

    if settings.workday_notifications_enabled and is_workday(current_day):
        for t, msg in workday_milestones(settings).items():
            key = workday_key(t)
            if t == current_time and not fired.contains(key):
                due.append(DueNotification(text=msg, key=key, kind=NotificationKind.WORKDAY))
                popup = PopupPayload(id=key, message=msg)

    return TickResult(due=due, popup=popup)
