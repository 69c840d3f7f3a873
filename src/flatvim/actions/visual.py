"""Operators and selection edits available in Visual and VisualLine modes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from flatvim.buffer.state import TextRange, VisualSelection
from flatvim.modes.base_mode import ModeContext, ModeResult
from flatvim.modes.operator_pipeline import ExecutionPlan
from flatvim.modes.repeat import LastChange, open_insert_session
from flatvim.motions import classify
from flatvim.motions.text_objects import resolve_text_object

if TYPE_CHECKING:  # pragma: no cover
    from flatvim.keymaps.resolver import ResolutionMatch


def _selection(context: ModeContext) -> Optional[VisualSelection]:
    selection = context.selection
    if selection is not None:
        selection.track(context.buffer.text, context.buffer.cursor)
    return selection


def swap_anchor(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    context.draft.clear()
    selection = _selection(context)
    if selection is None:
        return ModeResult(consumed=False, status="no_selection")
    buffer = context.buffer
    anchor = selection.anchor
    selection.anchor = buffer.cursor
    buffer.set_cursor(anchor, normal=True)
    context.track_selection()
    return ModeResult(consumed=True, status="visual_swap")


def select_text_object(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """``i(``/``a"`` in Visual mode: select the object instead of operating on it."""

    draft = context.draft
    delimiter = draft.argument
    draft.clear()
    selection = _selection(context)
    if selection is None or delimiter is None:
        return ModeResult(consumed=False, status="no_selection")
    buffer = context.buffer
    inner = bool(match.action.metadata.get("inner"))
    result = resolve_text_object(buffer.text, buffer.cursor, delimiter, inner=inner)
    if not result.found or result.range.is_empty:
        return ModeResult(consumed=True, status="noop", message="no_text_object")
    selection.anchor = result.range.start
    buffer.set_cursor(result.range.end - 1, normal=True)
    context.track_selection()
    return ModeResult(consumed=True, status="visual_select")


def yank_selection(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _operate(context, "y")


def delete_selection(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _operate(context, "d")


def change_selection(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _operate(context, "c")


def _operate(context: ModeContext, operator: str) -> ModeResult:
    draft = context.draft
    register = draft.register
    draft.clear()
    selection = _selection(context)
    if selection is None:
        return ModeResult(consumed=False, status="no_selection")

    buffer = context.buffer
    target = selection.to_range(buffer.text)
    linewise = selection.linewise
    payload = {
        "operator": operator,
        "register": register or '"',
        "range": (target.start, target.end),
        "linewise": linewise,
    }
    if operator == "c":
        if linewise:
            # Changing whole lines keeps one (now empty) line to type into.
            target = TextRange(selection.start, selection.end)
        before = buffer.undo_state()
        context.operators.execute(
            ExecutionPlan(
                operator="c",
                range=target,
                linewise=linewise,
                register=register,
                record_undo=False,
            )
        )
        buffer.set_cursor(target.start)
        open_insert_session(context, LastChange(), before=before)
        context.bus.emit("visual.change", payload)
        return ModeResult(consumed=True, switch_to="insert", status="visual_change")

    outcome = context.operators.execute(
        ExecutionPlan(operator=operator, range=target, linewise=linewise, register=register)
    )
    event = "visual.yank" if operator == "y" else "visual.delete"
    payload["text"] = outcome.text
    context.bus.emit(event, payload)
    return ModeResult(
        consumed=True,
        switch_to="normal",
        status="visual_yank" if operator == "y" else "visual_delete",
        message=register or '"',
    )


def paste_over_selection(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """Replace the selection with a register; the replaced text is discarded."""

    del match
    draft = context.draft
    name = draft.register
    count = max(1, draft.count or 1)
    draft.clear()
    selection = _selection(context)
    if selection is None:
        return ModeResult(consumed=False, status="no_selection")
    register = context.registers.read_for_paste(name)
    if register is None or not register.content:
        return ModeResult(consumed=True, switch_to="normal", status="noop")

    buffer = context.buffer
    text = buffer.text
    if selection.linewise:
        target = TextRange(selection.start, selection.end)
        block = classify.linewise_content(register.content) * count
        block = block[:-1]
    else:
        target = selection.to_range(text)
        block = register.content * count
    context.history.push(buffer.undo_state())
    buffer.replace_range(
        target.start, target.end, block, label="visual_paste", cursor=target.start
    )
    buffer.set_cursor(target.start, normal=True)
    context.memory.reset_column()
    context.bus.emit(
        "visual.paste", {"register": name or '"', "range": (target.start, target.end)}
    )
    return ModeResult(consumed=True, switch_to="normal", status="visual_paste")


__all__ = [
    "change_selection",
    "delete_selection",
    "paste_over_selection",
    "select_text_object",
    "swap_anchor",
    "yank_selection",
]
