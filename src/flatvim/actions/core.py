"""Mode switches, cancellation, undo/redo and register selection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flatvim.buffer.registers import is_register_name
from flatvim.modes.base_mode import ModeContext, ModeResult
from flatvim.runtime import telemetry

if TYPE_CHECKING:  # pragma: no cover
    from flatvim.keymaps.resolver import ResolutionMatch


def cancel_pending(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """Escape in Normal mode: drop counts, register prefix and pending operator."""

    del match
    context.draft.clear()
    return ModeResult(consumed=True, status="cancelled")


def exit_to_normal_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    context.draft.clear()
    return ModeResult(consumed=True, switch_to="normal", message="exit_to_normal")


def enter_visual_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    context.draft.clear()
    return ModeResult(consumed=True, switch_to="visual", message="enter_visual")


def enter_visual_line_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    context.draft.clear()
    return ModeResult(consumed=True, switch_to="visual_line", message="enter_visual_line")


def toggle_visual_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """``v``/``V`` inside a visual mode: same key leaves, the other switches granularity."""

    target = str(match.action.metadata["target"])
    context.draft.clear()
    if match.binding.mode == target:
        return ModeResult(consumed=True, switch_to="normal", message="exit_visual")
    return ModeResult(consumed=True, switch_to=target, message=f"enter_{target}")


def undo(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _walk_history(context, redo=False)


def redo(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _walk_history(context, redo=True)


def _walk_history(context: ModeContext, *, redo: bool) -> ModeResult:
    steps = context.draft.take_count() or 1
    buffer = context.buffer
    history = context.history
    applied = 0
    for _ in range(steps):
        current = buffer.undo_state()
        state = history.redo(current) if redo else history.undo(current)
        if state is None:
            break
        buffer.restore(state)
        applied += 1
    context.memory.reset_column()
    name = "redo" if redo else "undo"
    telemetry.record_event(
        f"history.{name}",
        level="debug",
        data={
            "requested": steps,
            "applied": applied,
            "undo_depth": history.undo_depth,
            "redo_depth": history.redo_depth,
        },
    )
    return ModeResult(consumed=True, status=name if applied else "noop")


def select_register(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """``"{name}``: route the next yank, delete or paste through ``name``."""

    del match
    draft = context.draft
    name = draft.argument
    draft.argument = None
    if name is None or not is_register_name(name):
        draft.clear()
        return ModeResult(consumed=False, status="unmapped", message="bad_register")
    draft.register = name
    draft.raw_keys.extend(('"', name))
    return ModeResult(consumed=True, status="pending", message="register")


__all__ = [
    "cancel_pending",
    "enter_visual_line_mode",
    "enter_visual_mode",
    "exit_to_normal_mode",
    "redo",
    "select_register",
    "toggle_visual_mode",
    "undo",
]
