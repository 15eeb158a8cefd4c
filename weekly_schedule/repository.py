from __future__ import annotations
import sqlite3
import uuid
from dataclasses import fields
from typing import Dict, Iterable, List, Optional

from .clock import parse_hhmm
from .db import DEFAULT_PROFILE_NAME
from .models import Category, NotificationSettings, Task, DEFAULT_SETTINGS


def _new_id() -> str:
    return uuid.uuid4().hex


def _task_from_row(r: sqlite3.Row) -> Task:
    return Task(
        id=r["id"],
        day=int(r["day"]),
        time=r["time"],
        text=r["text"],
        is_completed=bool(r["is_completed"]),
        category_id=r["category_id"],
    )


def _decode_setting(raw: str, default):
    if isinstance(default, bool):
        return raw == "1"
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    return raw


def _encode_setting(value) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


class Repository:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    # ---------- Profiles ----------
    def list_profiles(self) -> List[str]:
        rows = self.conn.execute("SELECT name FROM profiles ORDER BY rowid ASC").fetchall()
        return [r["name"] for r in rows]

    def active_profile(self) -> str:
        row = self.conn.execute("SELECT value FROM meta WHERE key='active_profile'").fetchone()
        name = row["value"] if row else DEFAULT_PROFILE_NAME
        # Profile may have been removed behind our back
        if name not in self.list_profiles():
            return DEFAULT_PROFILE_NAME
        return name

    def add_profile(self, name: str) -> str:
        name = name.strip()
        if not name:
            raise ValueError("profile name must not be empty")
        self.conn.execute("INSERT OR IGNORE INTO profiles(name) VALUES(?)", (name,))
        self.conn.commit()
        self.switch_profile(name)
        return name

    def switch_profile(self, name: str) -> None:
        if name not in self.list_profiles():
            raise KeyError(name)
        self.conn.execute(
            "INSERT INTO meta(key,value) VALUES('active_profile',?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
            (name,),
        )
        self.conn.commit()

    def delete_profile(self, name: str) -> None:
        if name == DEFAULT_PROFILE_NAME:
            raise ValueError("the default profile cannot be deleted")
        was_active = self.active_profile() == name
        # tasks, settings and categories go with it (ON DELETE CASCADE)
        self.conn.execute("DELETE FROM profiles WHERE name=?", (name,))
        self.conn.commit()
        if was_active:
            self.switch_profile(DEFAULT_PROFILE_NAME)

    # ---------- Settings ----------
    def get_settings(self) -> NotificationSettings:
        rows = self.conn.execute(
            "SELECT key, value FROM settings WHERE profile=?", (self.active_profile(),)
        ).fetchall()
        stored: Dict[str, str] = {r["key"]: r["value"] for r in rows}

        values = {}
        for f in fields(NotificationSettings):
            default = getattr(DEFAULT_SETTINGS, f.name)
            raw = stored.get(f.name)
            if raw is None:
                continue
            try:
                values[f.name] = _decode_setting(raw, default)
            except ValueError:
                # keep default for a corrupt value
                continue
        return NotificationSettings(**values)

    def save_settings(self, settings: NotificationSettings) -> None:
        for t in settings.milestone_times().values():
            if t:
                parse_hhmm(t)
        profile = self.active_profile()
        for f in fields(NotificationSettings):
            self.conn.execute(
                "INSERT INTO settings(profile,key,value) VALUES(?,?,?) "
                "ON CONFLICT(profile,key) DO UPDATE SET value=excluded.value",
                (profile, f.name, _encode_setting(getattr(settings, f.name))),
            )
        self.conn.commit()

    # ---------- Categories ----------
    def list_categories(self) -> List[Category]:
        rows = self.conn.execute(
            "SELECT * FROM categories WHERE profile=? ORDER BY rowid ASC", (self.active_profile(),)
        ).fetchall()
        return [Category(id=r["id"], name=r["name"], color=r["color"]) for r in rows]

    def create_category(self, name: str, color: str) -> Category:
        name = name.strip()
        if not name:
            raise ValueError("category name must not be empty")
        cat = Category(id=_new_id(), name=name, color=color)
        self.conn.execute(
            "INSERT INTO categories(id, profile, name, color) VALUES(?,?,?,?)",
            (cat.id, self.active_profile(), cat.name, cat.color),
        )
        self.conn.commit()
        return cat

    def delete_category(self, category_id: str) -> None:
        # Tasks keep the stale category_id
        self.conn.execute("DELETE FROM categories WHERE id=?", (category_id,))
        self.conn.commit()

    def category_for(self, task: Task) -> Optional[Category]:
        if not task.category_id:
            return None
        for c in self.list_categories():
            if c.id == task.category_id:
                return c
        return None

    # ---------- Tasks ----------
    def list_tasks(self) -> List[Task]:
        rows = self.conn.execute(
            "SELECT * FROM tasks WHERE profile=? ORDER BY seq ASC", (self.active_profile(),)
        ).fetchall()
        return [_task_from_row(r) for r in rows]

    def tasks_for_day(self, day: int) -> List[Task]:
        """Open tasks of one weekday, earliest first."""
        tasks = [t for t in self.list_tasks() if t.day == day and not t.is_completed]
        return sorted(tasks, key=lambda t: t.time)

    def get_task(self, task_id: str) -> Task:
        r = self.conn.execute("SELECT * FROM tasks WHERE id=?", (task_id,)).fetchone()
        if not r:
            raise KeyError(task_id)
        return _task_from_row(r)

    def create_tasks(
        self,
        days: Iterable[int],
        time_hhmm: str,
        text: str,
        category_id: Optional[str] = None,
    ) -> List[Task]:
        """One task per selected weekday, sharing time/text/category."""
        days = sorted(set(days))
        if not days:
            raise ValueError("select at least one day")
        if any(d < 0 or d > 6 for d in days):
            raise ValueError(f"weekday out of range: {days}")
        parse_hhmm(time_hhmm)
        text = text.strip()
        if not text:
            raise ValueError("task text must not be empty")

        profile = self.active_profile()
        out: List[Task] = []
        for d in days:
            t = Task(id=_new_id(), day=d, time=time_hhmm, text=text, category_id=category_id)
            self.conn.execute(
                """
                INSERT INTO tasks(id, profile, day, time, text, is_completed, category_id)
                VALUES(?,?,?,?,?,0,?)
                """,
                (t.id, profile, t.day, t.time, t.text, t.category_id),
            )
            out.append(t)
        self.conn.commit()
        return out

    def update_task(
        self,
        task_id: str,
        time_hhmm: str,
        text: str,
        category_id: Optional[str] = None,
    ) -> Task:
        """Edit a task; editing also reopens it."""
        self.get_task(task_id)
        parse_hhmm(time_hhmm)
        text = text.strip()
        if not text:
            raise ValueError("task text must not be empty")
        self.conn.execute(
            "UPDATE tasks SET time=?, text=?, category_id=?, is_completed=0 WHERE id=?",
            (time_hhmm, text, category_id, task_id),
        )
        self.conn.commit()
        return self.get_task(task_id)

    def delete_task(self, task_id: str) -> None:
        self.conn.execute("DELETE FROM tasks WHERE id=?", (task_id,))
        self.conn.commit()

    def toggle_complete(self, task_id: str) -> Task:
        # No automatic reset: stays completed across days until toggled again.
        self.get_task(task_id)
        self.conn.execute(
            "UPDATE tasks SET is_completed = 1 - is_completed WHERE id=?",
            (task_id,),
        )
        self.conn.commit()
        return self.get_task(task_id)
