from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional


class MilestoneKind(str, Enum):
    WORK_START = "work_start"
    LUNCH_START = "lunch_start"
    LUNCH_END = "lunch_end"
    WORK_END = "work_end"


class NotificationKind(str, Enum):
    MAIN = "main"
    PRE = "pre"
    WORKDAY = "workday"


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    color: str


@dataclass(frozen=True)
class Task:
    id: str
    # 0=Sun ... 6=Sat
    day: int
    time: str  # HH:MM, 24h
    text: str
    is_completed: bool = False
    category_id: Optional[str] = None  # weak ref, may dangle


@dataclass(frozen=True)
class NotificationSettings:
    ringtone: str = "Báo thức số"
    ringtone_duration: int = 3  # seconds
    voice: str = "default"
    volume: float = 0.8  # 0..1
    notification_prefix: str = "Đã đến giờ:"

    pre_notification_enabled: bool = False
    pre_notification_minutes: int = 5
    pre_notification_prefix: str = "Sắp đến giờ:"

    workday_notifications_enabled: bool = True
    user_name: str = "Sếp"
    work_start_time: str = ""
    lunch_start_time: str = ""
    lunch_end_time: str = ""
    work_end_time: str = ""

    def milestone_times(self) -> Dict[MilestoneKind, str]:
        return {
            MilestoneKind.WORK_START: self.work_start_time,
            MilestoneKind.LUNCH_START: self.lunch_start_time,
            MilestoneKind.LUNCH_END: self.lunch_end_time,
            MilestoneKind.WORK_END: self.work_end_time,
        }

    def with_changes(self, **changes) -> "NotificationSettings":
        return replace(self, **changes)


DEFAULT_SETTINGS = NotificationSettings()


@dataclass(frozen=True)
class DueNotification:
    text: str
    key: str
    kind: NotificationKind


@dataclass(frozen=True)
class PopupPayload:
    id: str  # the FiredKey that produced it
    message: str
    countdown_target: Optional[datetime] = None


@dataclass(frozen=True)
class TickResult:
    reset: bool = False
    due: List[DueNotification] = field(default_factory=list)
    popup: Optional[PopupPayload] = None

    @property
    def keys(self) -> List[str]:
        return [d.key for d in self.due]
