from __future__ import annotations
from pathlib import Path
from PySide6.QtGui import QIcon

from .db import data_dir


def resource_path(*parts: str) -> Path:
    # Works in dev and in PyInstaller
    import sys
    if getattr(sys, "frozen", False) and hasattr(sys, "_MEIPASS"):
        base = Path(sys._MEIPASS)  # type: ignore[attr-defined]
    else:
        base = Path(__file__).resolve().parent
    return base.joinpath(*parts)


def tray_icon() -> QIcon:
    p = resource_path("assets", "tray.png")
    if not p.exists():
        return QIcon.fromTheme("appointment-soon")
    return QIcon(str(p))


def ringtones_dir() -> Path:
    """User ringtones: any audio file copied here shows up in Settings."""
    d = data_dir() / "ringtones"
    d.mkdir(parents=True, exist_ok=True)
    return d
