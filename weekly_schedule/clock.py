from __future__ import annotations
from datetime import datetime, time, timezone, tzinfo


class MalformedTime(ValueError):
    """Raised for a time-of-day that is not a valid 24h "HH:MM"."""


def local_tz() -> tzinfo:
    return datetime.now().astimezone().tzinfo  # type: ignore


def now_local() -> datetime:
    return datetime.now(timezone.utc).astimezone(local_tz())


def day_index(dt: datetime) -> int:
    """Weekday with Sunday=0 ... Saturday=6."""
    return (dt.weekday() + 1) % 7


def is_workday(day: int) -> bool:
    # Mon-Fri in Sunday-based indexing
    return 1 <= day <= 5


def hhmm(dt: datetime) -> str:
    return f"{dt.hour:02d}:{dt.minute:02d}"


def parse_hhmm(s: str) -> time:
    parts = s.split(":") if isinstance(s, str) else []
    if len(parts) != 2 or not all(p.isdigit() and len(p) == 2 for p in parts):
        raise MalformedTime(f"not an HH:MM time: {s!r}")
    hh, mm = int(parts[0]), int(parts[1])
    if hh > 23 or mm > 59:
        raise MalformedTime(f"out of range: {s!r}")
    return time(hh, mm)


def today_at(now: datetime, s: str) -> datetime:
    """Today (in now's timezone) at HH:MM with zero seconds."""
    hh, mm = s.split(":")
    return now.replace(hour=int(hh), minute=int(mm), second=0, microsecond=0)
