"""``.``: replay the last recorded change."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flatvim.modes.base_mode import ModeContext, ModeResult
from flatvim.modes.repeat import LastChange, close_insert_session
from flatvim.runtime import telemetry

from . import edit as edit_actions
from . import motion as motion_actions

if TYPE_CHECKING:  # pragma: no cover
    from flatvim.keymaps.resolver import ResolutionMatch


def repeat_last_change(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    count = context.draft.take_count()
    change = context.repeat.last
    if change is None:
        return ModeResult(consumed=True, status="noop", message="nothing_to_repeat")
    if count is not None:
        change = change.with_count(count)
    return replay(context, change)


def replay(context: ModeContext, change: LastChange) -> ModeResult:
    """Run ``change`` again without going through interactive Insert mode.

    Commands that would enter Insert mode get the text typed the first time
    spliced in directly, and the mode stays Normal.
    """

    with telemetry.span(
        "repeat::replay",
        component="repeat",
        metadata={
            "operator": change.operator,
            "motion": change.motion,
            "text_object": change.text_object,
            "command": change.command,
            "count": change.count,
        },
    ) as handle:
        with context.repeat.replay():
            result = _dispatch(context, change)
            if context.insert is not None:
                close_insert_session(context, replayed_text=change.inserted_text or "")
        if result is None:
            handle.fail("unknown_change")
            return ModeResult(consumed=True, status="noop")
        context.repeat.record(change)
        return ModeResult(consumed=True, status="repeat")


def _dispatch(context: ModeContext, change: LastChange):
    if change.operator is not None:
        if change.text_object is not None:
            return motion_actions.apply_text_object(
                context,
                change.operator,
                change.text_object,
                change.count,
                register=change.register,
            )
        if change.motion is not None:
            return motion_actions.apply_motion_operator(
                context,
                change.operator,
                change.motion,
                change.count,
                char=change.motion_char,
                register=change.register,
            )
        return motion_actions.apply_doubled(
            context, change.operator, change.count, register=change.register
        )
    command = edit_actions.command_for(change.command)
    if command is None:
        return None
    return command(context, change)


__all__ = ["repeat_last_change", "replay"]
