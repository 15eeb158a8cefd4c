from __future__ import annotations
from typing import Iterable, Iterator, Set


def main_key(task_id: str) -> str:
    return f"{task_id}-main"


def pre_key(task_id: str) -> str:
    return f"{task_id}-pre"


def workday_key(hhmm: str) -> str:
    return f"workday-{hhmm}"


class FiredSet:
    """
    Keys of notifications that already fired today.

    In-memory only; cleared by the scheduler on the 00:00 tick. Losing it on
    restart can repeat at most the notifications of the current minute.
    """

    def __init__(self, keys: Iterable[str] = ()):
        self._keys: Set[str] = set(keys)

    def add(self, keys: Iterable[str]) -> None:
        self._keys.update(keys)

    def contains(self, key: str) -> bool:
        return key in self._keys

    def clear(self) -> None:
        self._keys.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._keys))
