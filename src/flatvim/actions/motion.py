"""Cursor motions, operators and operator + motion / text-object composition.

The ``apply_*`` functions take plain arguments rather than a keymap match so
dot-repeat can call them with a recorded ``LastChange``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from flatvim.buffer.state import TextRange
from flatvim.modes.base_mode import ModeContext, ModeResult
from flatvim.modes.operator_pipeline import ExecutionPlan
from flatvim.modes.repeat import LastChange, open_insert_session
from flatvim.motions import classify
from flatvim.motions.resolver import Motion, WORD_START_MOTIONS
from flatvim.motions.text_objects import resolve_text_object

if TYPE_CHECKING:  # pragma: no cover
    from flatvim.keymaps.resolver import ResolutionMatch


def move_cursor(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """Bare motion, or the motion half of ``d{motion}`` when an operator waits."""

    motion = Motion(match.action.metadata["motion"])
    draft = context.draft
    if draft.operator is not None:
        operator, register, count, char = (
            draft.operator,
            draft.register,
            draft.count,
            draft.argument,
        )
        draft.clear()
        return apply_motion_operator(
            context, operator, motion, count, char=char, register=register
        )

    count, char = draft.count, draft.argument
    draft.clear()
    buffer = context.buffer
    result = context.motions.resolve(buffer.text, buffer.cursor, motion, count, char=char)
    buffer.set_cursor(result.position, normal=True)
    if context.selection is not None:
        context.track_selection()
    return ModeResult(consumed=True, status="motion" if result.moved else "noop")


def begin_operator(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """``d``/``c``/``y``: open operator-pending, or finish a doubled ``dd``."""

    operator = str(match.action.metadata["operator"])
    draft = context.draft
    if draft.operator is None:
        draft.operator = operator
        draft.raw_keys.append(operator)
        return ModeResult(consumed=True, status="pending", message="operator_pending")
    if draft.operator != operator:
        draft.clear()
        return ModeResult(consumed=False, status="unmapped")
    register, count = draft.register, draft.count
    draft.clear()
    return apply_doubled(context, operator, count, register=register)


def select_text_object(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """``i{delim}``/``a{delim}`` after an operator."""

    draft = context.draft
    kind = "i" if match.action.metadata.get("inner") else "a"
    delimiter = draft.argument
    operator, register, count = draft.operator, draft.register, draft.count
    draft.clear()
    if operator is None or delimiter is None:
        return ModeResult(consumed=False, status="unmapped")
    return apply_text_object(
        context, operator, kind + delimiter, count, register=register
    )


# -- composition ---------------------------------------------------------------


def motion_range(
    context: ModeContext,
    motion: Motion,
    count: Optional[int],
    *,
    char: Optional[str] = None,
    change: bool = False,
) -> Optional[tuple[TextRange, bool]]:
    """Span an operator covers for ``motion`` plus whether it is linewise.

    ``None`` when the motion fails (find miss, ``%`` off a bracket, ``j`` on
    the last line).
    """

    buffer = context.buffer
    text, cursor = buffer.text, buffer.cursor
    result = context.motions.resolve(
        text, cursor, motion, count, char=char, for_operator=True
    )
    if not result.moved:
        return None
    target = result.position
    if result.linewise:
        if change:
            first = classify.line_start(text, min(cursor, target))
            return TextRange(first, classify.line_end(text, max(cursor, target))), True
        start, end = classify.linewise_bounds(text, cursor, target)
        return TextRange(start, end), True

    start, end = min(cursor, target), max(cursor, target)
    if result.inclusive:
        end = min(len(text), end + 1)
    elif motion in WORD_START_MOTIONS and end > start:
        # A word motion that lands on a later line stops at the earlier line's end.
        newline = text.rfind("\n", start, end)
        if newline > start and not text[newline + 1 : end].strip(" \t"):
            end = newline
    return TextRange(start, end), False


def apply_motion_operator(
    context: ModeContext,
    operator: str,
    motion: Motion | str,
    count: Optional[int],
    *,
    char: Optional[str] = None,
    register: Optional[str] = None,
) -> ModeResult:
    motion = Motion(motion)
    span = motion_range(context, motion, count, char=char, change=operator == "c")
    if span is None:
        return ModeResult(consumed=True, status="noop", message="motion_failed")
    target, linewise = span
    change = LastChange(
        operator=operator,
        motion=motion.value,
        motion_char=char,
        count=count,
        register=register,
    )
    return _run_operator(context, operator, target, linewise, register, change)


def apply_text_object(
    context: ModeContext,
    operator: str,
    text_object: str,
    count: Optional[int],
    *,
    register: Optional[str] = None,
) -> ModeResult:
    buffer = context.buffer
    inner, delimiter = text_object[0] == "i", text_object[1:]
    result = resolve_text_object(buffer.text, buffer.cursor, delimiter, inner=inner)
    if not result.found:
        return ModeResult(consumed=True, status="noop", message="no_text_object")
    change = LastChange(
        operator=operator, text_object=text_object, count=count, register=register
    )
    return _run_operator(context, operator, result.range, False, register, change)


def apply_doubled(
    context: ModeContext,
    operator: str,
    count: Optional[int],
    *,
    register: Optional[str] = None,
) -> ModeResult:
    """``dd``/``yy``/``cc`` over ``count`` lines starting at the cursor line."""

    buffer = context.buffer
    text, cursor = buffer.text, buffer.cursor
    last = cursor
    for _ in range(max(1, count or 1) - 1):
        following = classify.next_line_start(text, last)
        if following is None:
            break
        last = following
    if operator == "c":
        target = TextRange(classify.line_start(text, cursor), classify.line_end(text, last))
    else:
        target = TextRange(*classify.linewise_bounds(text, cursor, last))
    change = LastChange(operator=operator, count=count, register=register)
    return _run_operator(context, operator, target, True, register, change)


def _run_operator(
    context: ModeContext,
    operator: str,
    target: TextRange,
    linewise: bool,
    register: Optional[str],
    change: LastChange,
) -> ModeResult:
    buffer = context.buffer
    context.memory.reset_column()
    if operator == "c":
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
        open_insert_session(context, change, before=before)
        return ModeResult(consumed=True, switch_to="insert", status="change")

    outcome = context.operators.execute(
        ExecutionPlan(operator=operator, range=target, linewise=linewise, register=register)
    )
    if operator == "y":
        return ModeResult(consumed=True, status="yank")
    if not outcome.changed:
        return ModeResult(consumed=True, status="noop")
    context.repeat.record(change)
    return ModeResult(consumed=True, status="delete")


__all__ = [
    "apply_doubled",
    "apply_motion_operator",
    "apply_text_object",
    "begin_operator",
    "motion_range",
    "move_cursor",
    "select_text_object",
]
