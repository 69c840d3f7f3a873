"""Dot-repeat records and the Insert-session bookkeeping that feeds them."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Iterator, Optional

from flatvim.buffer.undo import UndoState
from flatvim.motions import classify
from flatvim.runtime import telemetry

if TYPE_CHECKING:  # pragma: no cover
    from .base_mode import ModeContext

# Insert commands whose typed text is repeated ``count`` times on exit.
COUNTED_INSERTS = frozenset({"i", "a", "I", "A"})


@dataclass(frozen=True, slots=True)
class LastChange:
    """Enough of a completed command to replay it with ``.``.

    Exactly one shape is filled in: ``operator`` with ``motion`` (plus
    ``motion_char`` for finds) or ``text_object``, ``operator`` alone for a
    doubled operator, or a bare ``command``.
    """

    operator: Optional[str] = None
    motion: Optional[str] = None
    motion_char: Optional[str] = None
    text_object: Optional[str] = None
    command: Optional[str] = None
    char: Optional[str] = None
    count: Optional[int] = None
    register: Optional[str] = None
    inserted_text: Optional[str] = None

    def with_count(self, count: Optional[int]) -> "LastChange":
        return replace(self, count=count)

    @property
    def repeatable(self) -> bool:
        """Visual-mode changes carry neither field and are never replayed."""

        return self.operator is not None or self.command is not None


@dataclass(slots=True)
class InsertSession:
    """Captured when Insert mode is entered, consumed when it is left."""

    before: UndoState
    entry_text: str
    entry_cursor: int
    change: LastChange

    def inserted_text(self, now: str) -> str:
        before = self.entry_text
        limit = min(len(before), len(now))
        prefix = 0
        cap = min(limit, self.entry_cursor)
        while prefix < cap and before[prefix] == now[prefix]:
            prefix += 1
        suffix = 0
        while suffix < limit - prefix and before[-1 - suffix] == now[-1 - suffix]:
            suffix += 1
        return now[prefix : len(now) - suffix]


class RepeatTracker:
    def __init__(self) -> None:
        self.last: Optional[LastChange] = None
        self._replaying = False

    def record(self, change: LastChange) -> None:
        if self._replaying:
            return
        self.last = change
        telemetry.record_event(
            "repeat.record",
            level="debug",
            data={
                "operator": change.operator,
                "motion": change.motion,
                "text_object": change.text_object,
                "command": change.command,
                "count": change.count,
            },
        )

    @contextmanager
    def replay(self) -> Iterator[None]:
        previous = self._replaying
        self._replaying = True
        try:
            yield
        finally:
            self._replaying = previous


def open_insert_session(
    context: "ModeContext", change: LastChange, before: Optional[UndoState] = None
) -> InsertSession:
    """Remember the pre-command state so the whole Insert session undoes as one step."""

    buffer = context.buffer
    session = InsertSession(
        before=before or buffer.undo_state(),
        entry_text=buffer.text,
        entry_cursor=buffer.cursor,
        change=change,
    )
    context.insert = session
    return session


def close_insert_session(
    context: "ModeContext", *, replayed_text: Optional[str] = None
) -> Optional[LastChange]:
    """Finish the active Insert session as if Escape had been pressed.

    ``replayed_text`` is spliced at the cursor first; dot-repeat uses it to
    reproduce an earlier session without going through Insert mode.
    """

    session = context.insert
    if session is None:
        return None
    context.insert = None
    buffer = context.buffer
    if replayed_text:
        buffer.insert(buffer.cursor, replayed_text, label="insert_replay")

    inserted = session.inserted_text(buffer.text)
    count = session.change.count or 1
    if inserted and count > 1 and session.change.command in COUNTED_INSERTS:
        buffer.insert(buffer.cursor, inserted * (count - 1), label="insert_repeat")

    buffer.set_cursor(classify.retreat_after_insert(buffer.text, buffer.cursor), normal=True)
    context.memory.reset_column()
    if buffer.text == session.before.value:
        return None

    context.history.push(session.before)
    change = replace(session.change, inserted_text=inserted)
    if change.repeatable:
        context.repeat.record(change)
    return change


__all__ = [
    "COUNTED_INSERTS",
    "InsertSession",
    "LastChange",
    "RepeatTracker",
    "close_insert_session",
    "open_insert_session",
]
