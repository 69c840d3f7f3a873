"""Bounded snapshot stacks backing undo and redo."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional


@dataclass(frozen=True, slots=True)
class UndoState:
    """Full-text snapshot plus the cursor span it was taken with."""

    value: str
    cursor_start: int
    cursor_end: int

    @classmethod
    def capture(cls, value: str, cursor: int) -> "UndoState":
        return cls(value=value, cursor_start=cursor, cursor_end=cursor)


class UndoHistory:
    """Two LIFO stacks capped at ``depth`` entries; the oldest entry is dropped first."""

    def __init__(self, depth: int = 100) -> None:
        if depth <= 0:
            raise ValueError("depth must be positive")
        self.depth = depth
        self._undo: Deque[UndoState] = deque(maxlen=depth)
        self._redo: Deque[UndoState] = deque(maxlen=depth)

    def push(self, state: UndoState) -> None:
        """Record the state preceding a new mutation and forget any redo history."""

        self._undo.append(state)
        self._redo.clear()

    def undo(self, current: UndoState) -> Optional[UndoState]:
        if not self._undo:
            return None
        restored = self._undo.pop()
        self._redo.append(current)
        return restored

    def redo(self, current: UndoState) -> Optional[UndoState]:
        if not self._redo:
            return None
        restored = self._redo.pop()
        self._undo.append(current)
        return restored

    def can_undo(self) -> bool:
        return bool(self._undo)

    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()


__all__ = ["UndoHistory", "UndoState"]
