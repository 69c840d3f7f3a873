"""Flat text buffer addressed by a single linear cursor offset."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import ContextManager, Optional

from flatvim.runtime import telemetry

from .state import TextRange
from .undo import UndoState
from .validation import clamp_offset


@dataclass(slots=True)
class BufferDelta:
    version: int
    start: int
    removed: str
    inserted: str
    cursor: int
    label: str


class TextBuffer:
    """Owned string plus cursor. Every write goes through ``replace_range``."""

    def __init__(self, text: str = "", cursor: int = 0, *, name: str = "default") -> None:
        self.name = name
        self._text = text
        self._cursor = clamp_offset(cursor, len(text))
        self.version = 0

    @property
    def text(self) -> str:
        return self._text

    @property
    def cursor(self) -> int:
        return self._cursor

    def __len__(self) -> int:
        return len(self._text)

    def set_cursor(self, offset: int, *, normal: bool = False) -> int:
        self._cursor = clamp_offset(offset, len(self._text), normal=normal)
        return self._cursor

    def char_at(self, offset: int) -> str:
        if 0 <= offset < len(self._text):
            return self._text[offset]
        return ""

    def slice(self, span: TextRange) -> str:
        span = span.clamp(len(self._text))
        return self._text[span.start : span.end]

    def undo_state(self) -> UndoState:
        return UndoState.capture(self._text, self._cursor)

    def restore(self, state: UndoState, *, normal: bool = True) -> None:
        with Transaction(self, "restore"):
            self._text = state.value
            self.version += 1
            self.set_cursor(state.cursor_start, normal=normal)

    def load(self, text: str, cursor: Optional[int] = None) -> None:
        """Adopt host-side text, keeping the cursor unless one is supplied."""

        with Transaction(self, "load"):
            self._text = text
            self.version += 1
            self.set_cursor(self._cursor if cursor is None else cursor)

    def replace_range(
        self,
        start: int,
        end: int,
        text: str,
        *,
        label: str,
        cursor: Optional[int] = None,
    ) -> BufferDelta:
        span = TextRange(start, end).clamp(len(self._text))
        with Transaction(self, label) as tx:
            removed = self._text[span.start : span.end]
            self._text = self._text[: span.start] + text + self._text[span.end :]
            self.version += 1
            target = span.start + len(text) if cursor is None else cursor
            self.set_cursor(target)
            tx.note(span, removed, text)

        return BufferDelta(
            version=self.version,
            start=span.start,
            removed=removed,
            inserted=text,
            cursor=self._cursor,
            label=label,
        )

    def insert(self, offset: int, text: str, *, label: str = "insert") -> BufferDelta:
        return self.replace_range(offset, offset, text, label=label)

    def delete(self, span: TextRange, *, label: str = "delete") -> BufferDelta:
        return self.replace_range(span.start, span.end, "", label=label)


class Transaction(AbstractContextManager["Transaction"]):
    def __init__(self, buffer: TextBuffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self._span_cm: Optional[ContextManager[telemetry.SpanHandle]] = None
        self._handle: Optional[telemetry.SpanHandle] = None

    def __enter__(self) -> "Transaction":
        self._span_cm = telemetry.span(
            name=f"buffer::{self.label}",
            component=True,
            metadata={"buffer": self.buffer.name, "cursor": self.buffer.cursor},
        )
        self._handle = self._span_cm.__enter__()
        return self

    def note(self, span: TextRange, removed: str, inserted: str) -> None:
        if self._handle is None:
            return
        self._handle.add_metadata("start", span.start)
        self._handle.add_metadata("removed", len(removed))
        self._handle.add_metadata("inserted", len(inserted))

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False


__all__ = ["BufferDelta", "TextBuffer", "Transaction"]
