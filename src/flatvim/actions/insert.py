"""Named keys handled while in Insert mode."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flatvim.modes.base_mode import ModeContext, ModeResult

if TYPE_CHECKING:  # pragma: no cover
    from flatvim.keymaps.resolver import ResolutionMatch


def insert_newline(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    buffer.insert(buffer.cursor, "\n", label="insert_newline")
    return ModeResult(consumed=True, status="insert")


def insert_tab(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    buffer.insert(buffer.cursor, "\t", label="insert_tab")
    return ModeResult(consumed=True, status="insert")


def delete_backward(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    cursor = buffer.cursor
    if cursor == 0:
        return ModeResult(consumed=True, status="noop")
    buffer.replace_range(cursor - 1, cursor, "", label="insert_backspace")
    return ModeResult(consumed=True, status="insert")


def delete_forward(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    cursor = buffer.cursor
    if cursor >= len(buffer):
        return ModeResult(consumed=True, status="noop")
    buffer.replace_range(cursor, cursor + 1, "", label="insert_delete", cursor=cursor)
    return ModeResult(consumed=True, status="insert")


def cursor_left(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    buffer.set_cursor(buffer.cursor - 1)
    return ModeResult(consumed=True, status="motion")


def cursor_right(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    buffer.set_cursor(buffer.cursor + 1)
    return ModeResult(consumed=True, status="motion")


def paste_register(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """``Ctrl-R {register}``: type the register's text at the cursor."""

    del match
    name = context.draft.argument
    context.draft.clear()
    register = context.registers.read_for_paste(name) if name else None
    if register is None or not register.content:
        return ModeResult(consumed=True, status="noop", message="empty_register")
    buffer = context.buffer
    buffer.insert(buffer.cursor, register.content, label="insert_register")
    return ModeResult(consumed=True, status="insert")


__all__ = [
    "cursor_left",
    "cursor_right",
    "delete_backward",
    "delete_forward",
    "insert_newline",
    "insert_tab",
    "paste_register",
]
