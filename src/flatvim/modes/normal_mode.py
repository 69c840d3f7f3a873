"""Normal mode: motions, operators, counts and command keys."""

from __future__ import annotations

from typing import Optional

from flatvim.config import VimMode

from .base_mode import ModeContext
from .keymap_helpers import KeymapMode, update_flag


class NormalMode(KeymapMode):
    name = VimMode.NORMAL.value

    def __init__(self, context: ModeContext) -> None:
        super().__init__(context)

    def on_enter(self, previous: Optional[str]) -> None:
        super().on_enter(previous)
        self.context.draft.clear()
        update_flag(self.context, "operator_pending", False)
        buffer = self.context.buffer
        buffer.set_cursor(buffer.cursor, normal=True)
