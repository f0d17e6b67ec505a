"""Bounded undo/redo history of immutable settings snapshots."""

from __future__ import annotations

from collections import deque
from typing import Generic, TypeVar

from photograde.constants import HISTORY_LIMIT

T = TypeVar("T")


class EditHistory(Generic[T]):
    """Ring of snapshots with a cursor.

    Snapshots are stored as given, so they should be immutable
    (``EditSettings``, or a mapping of photo id to ``EditSettings`` that the
    caller does not mutate afterwards).

    Example:
        >>> history = EditHistory()
        >>> history.push(DEFAULT_SETTINGS)
        >>> history.push(DEFAULT_SETTINGS.replace(exposure=20.0))
        >>> history.undo().exposure
        0.0
    """

    def __init__(self, limit: int = HISTORY_LIMIT):
        if limit < 1:
            raise ValueError(f"limit={limit} must be at least 1")
        self.limit = limit
        self._entries: deque[T] = deque(maxlen=limit)
        self._cursor = -1

    def push(self, snapshot: T) -> None:
        """Record a new state, dropping any redo entries past the cursor."""
        while len(self._entries) > self._cursor + 1:
            self._entries.pop()
        self._entries.append(snapshot)
        self._cursor = len(self._entries) - 1

    def undo(self) -> T | None:
        """Step back; returns the now-current snapshot or None at the start."""
        if not self.can_undo:
            return None
        self._cursor -= 1
        return self._entries[self._cursor]

    def redo(self) -> T | None:
        """Step forward; returns the now-current snapshot or None at the end."""
        if not self.can_redo:
            return None
        self._cursor += 1
        return self._entries[self._cursor]

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._entries) - 1

    @property
    def current(self) -> T | None:
        if self._cursor < 0:
            return None
        return self._entries[self._cursor]

    @property
    def cursor(self) -> int:
        return self._cursor

    def clear(self) -> None:
        self._entries.clear()
        self._cursor = -1

    def __len__(self) -> int:
        return len(self._entries)
