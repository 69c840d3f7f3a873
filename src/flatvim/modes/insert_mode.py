"""Insert mode: typed text goes straight into the buffer."""

from __future__ import annotations

from typing import Optional

from flatvim.config import VimMode

from .base_mode import KeyInput, ModeResult
from .keymap_helpers import KeymapMode, printable_text
from .repeat import LastChange, close_insert_session, open_insert_session


class InsertMode(KeymapMode):
    """Named keys (Escape, Enter, Backspace, ...) resolve through the keymap;
    any other printable key is inserted at the cursor.

    The whole session is one undo step and one dot-repeat record, committed
    when the mode is left.
    """

    name = VimMode.INSERT.value
    accepts_count = False

    def on_enter(self, previous: Optional[str]) -> None:
        super().on_enter(previous)
        self.context.draft.clear()
        self.context.selection = None
        if self.context.insert is None:
            open_insert_session(self.context, LastChange(command="i"))

    def on_exit(self, next_mode: Optional[str]) -> None:
        super().on_exit(next_mode)
        close_insert_session(self.context)

    def handle_unmapped(self, key: KeyInput) -> ModeResult:
        text = printable_text(key)
        if text is None:
            return self.abort()
        buffer = self.context.buffer
        buffer.insert(buffer.cursor, text, label="insert_text")
        return ModeResult(consumed=True, status="insert")
