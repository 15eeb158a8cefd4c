from __future__ import annotations
import sqlite3
from pathlib import Path
from typing import Optional, Union

DB_NAME = "schedule.sqlite3"
APP_NAME = "WeeklySchedule"
DEFAULT_PROFILE_NAME = "Mặc định"
DATA_DIR_ENV = "WEEKLY_SCHEDULE_DATA_DIR"


def data_dir(app_name: str = APP_NAME) -> Path:
    # Cross-platform local app data dir
    # macOS: ~/Library/Application Support/WeeklySchedule
    # Windows: %APPDATA%\WeeklySchedule
    # Override with WEEKLY_SCHEDULE_DATA_DIR
    override = _get_env(DATA_DIR_ENV, "")
    if override:
        d = Path(override)
    else:
        home = Path.home()
        if _is_macos():
            base = home / "Library" / "Application Support"
        elif _is_windows():
            base = Path(_get_env("APPDATA", str(home)))
        else:
            base = home / ".local" / "share"
        d = base / app_name
    d.mkdir(parents=True, exist_ok=True)
    return d


def db_path() -> Path:
    return data_dir() / DB_NAME


def connect(path: Optional[Union[str, Path]] = None) -> sqlite3.Connection:
    conn = sqlite3.connect(str(path) if path is not None else db_path())
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON;")
    return conn


def migrate(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS meta (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS profiles (
            name TEXT PRIMARY KEY
        );

        CREATE TABLE IF NOT EXISTS settings (
            profile TEXT NOT NULL REFERENCES profiles(name) ON DELETE CASCADE,
            key TEXT NOT NULL,
            value TEXT NOT NULL,
            PRIMARY KEY (profile, key)
        );

        CREATE TABLE IF NOT EXISTS categories (
            id TEXT PRIMARY KEY,
            profile TEXT NOT NULL REFERENCES profiles(name) ON DELETE CASCADE,
            name TEXT NOT NULL,
            color TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS tasks (
            seq INTEGER PRIMARY KEY AUTOINCREMENT, -- insertion order
            id TEXT NOT NULL UNIQUE,
            profile TEXT NOT NULL REFERENCES profiles(name) ON DELETE CASCADE,
            day INTEGER NOT NULL CHECK (day BETWEEN 0 AND 6), -- 0=Sun
            time TEXT NOT NULL, -- HH:MM
            text TEXT NOT NULL,
            is_completed INTEGER NOT NULL DEFAULT 0,
            category_id TEXT -- no FK: dangles when the category is deleted
        );
        """
    )

    conn.execute("INSERT OR IGNORE INTO profiles(name) VALUES(?)", (DEFAULT_PROFILE_NAME,))

    if conn.execute("SELECT value FROM meta WHERE key='active_profile'").fetchone() is None:
        conn.execute("INSERT INTO meta(key,value) VALUES('active_profile',?)", (DEFAULT_PROFILE_NAME,))

    conn.commit()


def _is_windows() -> bool:
    import sys
    return sys.platform.startswith("win")


def _is_macos() -> bool:
    import sys
    return sys.platform == "darwin"


def _get_env(k: str, default: str) -> str:
    import os
    return os.environ.get(k, default)
