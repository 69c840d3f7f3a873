"""Charwise and linewise Visual modes."""

from __future__ import annotations

from typing import Optional

from flatvim.buffer import VisualSelection
from flatvim.config import VimMode

from .keymap_helpers import KeymapMode, update_flag


class VisualMode(KeymapMode):
    """Selection between a fixed anchor and the moving cursor.

    Switching between the charwise and linewise variants keeps the anchor;
    leaving for any other mode drops the selection.
    """

    name = VimMode.VISUAL.value
    linewise = False

    def on_enter(self, previous: Optional[str]) -> None:
        super().on_enter(previous)
        context = self.context
        context.draft.clear()
        update_flag(context, "operator_pending", False)
        buffer = context.buffer
        buffer.set_cursor(buffer.cursor, normal=True)
        if context.selection is None:
            context.selection = VisualSelection.at(buffer.cursor, linewise=self.linewise)
        else:
            context.selection.linewise = self.linewise
        context.track_selection()

    def on_exit(self, next_mode: Optional[str]) -> None:
        super().on_exit(next_mode)
        if next_mode is None or not VimMode.parse(next_mode).is_visual:
            self.context.selection = None
            self.context.bus.emit("visual.clear", None)


class VisualLineMode(VisualMode):
    name = VimMode.VISUAL_LINE.value
    linewise = True
