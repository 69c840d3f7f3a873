"""Normal-mode editing commands: character deletes, replace, paste, Insert entry.

Each command is a plain function ``(context, change) -> ModeResult`` listed in
``COMMANDS`` so dot-repeat can re-run it from a ``LastChange``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Dict, Optional

from flatvim.buffer.state import TextRange
from flatvim.modes.base_mode import ModeContext, ModeResult
from flatvim.modes.operator_pipeline import ExecutionPlan
from flatvim.modes.repeat import LastChange, open_insert_session
from flatvim.motions import classify
from flatvim.runtime import telemetry

from . import motion as motion_actions

if TYPE_CHECKING:  # pragma: no cover
    from flatvim.keymaps.resolver import ResolutionMatch

Command = Callable[[ModeContext, LastChange], ModeResult]


def run_command(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """Keymap entry point: package the draft into a ``LastChange`` and run it."""

    name = str(match.action.metadata["command"])
    draft = context.draft
    change = LastChange(
        command=name, char=draft.argument, count=draft.count, register=draft.register
    )
    draft.clear()
    return COMMANDS[name](context, change)


def _count(change: LastChange) -> int:
    return max(1, change.count or 1)


def _delete_span(context: ModeContext, change: LastChange, target: TextRange) -> ModeResult:
    if target.is_empty:
        return ModeResult(consumed=True, status="noop")
    context.operators.execute(
        ExecutionPlan(operator="d", range=target, register=change.register)
    )
    context.memory.reset_column()
    context.repeat.record(change)
    return ModeResult(consumed=True, status="delete")


def delete_char(context: ModeContext, change: LastChange) -> ModeResult:
    """``x``: remove ``count`` characters at the cursor, clipped to the buffer end."""

    buffer = context.buffer
    start = buffer.cursor
    end = min(len(buffer), start + _count(change))
    return _delete_span(context, change, TextRange(start, end))


def delete_char_before(context: ModeContext, change: LastChange) -> ModeResult:
    """``X``: remove up to ``count`` characters left of the cursor on its line."""

    buffer = context.buffer
    end = buffer.cursor
    start = max(classify.line_start(buffer.text, end), end - _count(change))
    return _delete_span(context, change, TextRange(start, end))


def delete_to_line_end(context: ModeContext, change: LastChange) -> ModeResult:
    return motion_actions.apply_motion_operator(
        context, "d", "$", change.count, register=change.register
    )


def change_to_line_end(context: ModeContext, change: LastChange) -> ModeResult:
    return motion_actions.apply_motion_operator(
        context, "c", "$", change.count, register=change.register
    )


def change_line(context: ModeContext, change: LastChange) -> ModeResult:
    return motion_actions.apply_doubled(
        context, "c", change.count, register=change.register
    )


def substitute_char(context: ModeContext, change: LastChange) -> ModeResult:
    """``s``: delete ``count`` characters without crossing the line end, then insert."""

    buffer = context.buffer
    start = buffer.cursor
    end = min(classify.line_end(buffer.text, start), start + _count(change))
    before = buffer.undo_state()
    context.operators.execute(
        ExecutionPlan(
            operator="c",
            range=TextRange(start, end),
            register=change.register,
            record_undo=False,
        )
    )
    buffer.set_cursor(start)
    open_insert_session(context, change, before=before)
    return ModeResult(consumed=True, switch_to="insert", status="change")


def replace_char(context: ModeContext, change: LastChange) -> ModeResult:
    """``r{char}``: overwrite ``count`` characters; fails if the line is too short."""

    char = change.char
    buffer = context.buffer
    start = buffer.cursor
    count = _count(change)
    end = start + count
    if not char or end > classify.line_end(buffer.text, start):
        return ModeResult(consumed=True, status="noop")
    context.history.push(buffer.undo_state())
    if char == "\n":
        buffer.replace_range(start, end, "\n", label="replace_char")
        buffer.set_cursor(start + 1, normal=True)
    else:
        buffer.replace_range(start, end, char * count, label="replace_char")
        buffer.set_cursor(end - 1, normal=True)
    context.memory.reset_column()
    context.repeat.record(change)
    return ModeResult(consumed=True, status="replace")


def paste_after(context: ModeContext, change: LastChange) -> ModeResult:
    return _paste(context, change, after=True)


def paste_before(context: ModeContext, change: LastChange) -> ModeResult:
    return _paste(context, change, after=False)


def _paste(context: ModeContext, change: LastChange, *, after: bool) -> ModeResult:
    register = context.registers.read_for_paste(change.register)
    if register is None or not register.content:
        telemetry.record_event(
            "register.empty", level="debug", data={"register": change.register or '"'}
        )
        return ModeResult(consumed=True, status="noop", message="empty_register")

    buffer = context.buffer
    text, cursor = buffer.text, buffer.cursor
    count = _count(change)
    context.history.push(buffer.undo_state())
    if register.linewise:
        block = classify.linewise_content(register.content) * count
        if not after:
            at = classify.line_start(text, cursor)
            buffer.insert(at, block, label="paste_line")
            target = at
        else:
            end = classify.line_end(text, cursor)
            if end < len(text):
                buffer.insert(end + 1, block, label="paste_line")
                target = end + 1
            else:
                buffer.insert(len(text), "\n" + block[:-1], label="paste_line")
                target = len(text) + 1
        buffer.set_cursor(classify.first_non_blank(buffer.text, target), normal=True)
    else:
        block = register.content * count
        at = cursor
        if after and text and buffer.char_at(cursor) not in ("", "\n"):
            at = cursor + 1
        buffer.insert(at, block, label="paste")
        buffer.set_cursor(at + len(block) - 1, normal=True)
    context.memory.reset_column()
    context.repeat.record(change)
    return ModeResult(consumed=True, status="paste")


def insert_before(context: ModeContext, change: LastChange) -> ModeResult:
    return _start_insert(context, change, context.buffer.cursor)


def insert_after(context: ModeContext, change: LastChange) -> ModeResult:
    buffer = context.buffer
    cursor = buffer.cursor
    if buffer.char_at(cursor) not in ("", "\n"):
        cursor += 1
    return _start_insert(context, change, cursor)


def insert_line_start(context: ModeContext, change: LastChange) -> ModeResult:
    buffer = context.buffer
    return _start_insert(context, change, classify.first_non_blank(buffer.text, buffer.cursor))


def insert_line_end(context: ModeContext, change: LastChange) -> ModeResult:
    buffer = context.buffer
    return _start_insert(context, change, classify.line_end(buffer.text, buffer.cursor))


def open_line_below(context: ModeContext, change: LastChange) -> ModeResult:
    return _open_line(context, change, below=True)


def open_line_above(context: ModeContext, change: LastChange) -> ModeResult:
    return _open_line(context, change, below=False)


def _open_line(context: ModeContext, change: LastChange, *, below: bool) -> ModeResult:
    buffer = context.buffer
    before = buffer.undo_state()
    if below:
        at = classify.line_end(buffer.text, buffer.cursor)
        buffer.insert(at, "\n", label="open_line")
        target = at + 1
    else:
        at = classify.line_start(buffer.text, buffer.cursor)
        buffer.insert(at, "\n", label="open_line")
        target = at
    return _start_insert(context, change, target, before=before)


def _start_insert(
    context: ModeContext, change: LastChange, cursor: int, *, before=None
) -> ModeResult:
    context.buffer.set_cursor(cursor)
    context.memory.reset_column()
    open_insert_session(context, change, before=before)
    return ModeResult(consumed=True, switch_to="insert", status="insert")


COMMANDS: Dict[str, Command] = {
    "x": delete_char,
    "X": delete_char_before,
    "D": delete_to_line_end,
    "C": change_to_line_end,
    "s": substitute_char,
    "S": change_line,
    "r": replace_char,
    "p": paste_after,
    "P": paste_before,
    "i": insert_before,
    "a": insert_after,
    "I": insert_line_start,
    "A": insert_line_end,
    "o": open_line_below,
    "O": open_line_above,
}


def command_for(name: Optional[str]) -> Optional[Command]:
    if name is None:
        return None
    return COMMANDS.get(name)


__all__ = ["COMMANDS", "Command", "command_for", "run_command"]
