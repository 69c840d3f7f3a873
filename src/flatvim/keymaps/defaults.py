"""Built-in keymaps for the Normal, Insert, Visual and VisualLine modes."""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from flatvim.actions import core as core_actions
from flatvim.actions import edit as edit_actions
from flatvim.actions import insert as insert_actions
from flatvim.actions import motion as motion_actions
from flatvim.actions import repeat as repeat_actions
from flatvim.actions import visual as visual_actions
from flatvim.motions.resolver import FIND_MOTIONS, Motion

from .models import ActionRef, Binding, KeySequence
from .registry import KeymapRegistry

NORMAL = "normal"
INSERT = "insert"
VISUAL = "visual"
VISUAL_LINE = "visual_line"
VISUAL_MODES = (VISUAL, VISUAL_LINE)

ESCAPE_KEYS = ("ESC", "ctrl+[", "ctrl+]")
IDLE = ("!operator_pending",)
PENDING = ("operator_pending",)

# Key sequence -> motion. Arrow keys, space and backspace mirror hjkl.
MOTION_KEYS: tuple[tuple[tuple[str, ...], Motion], ...] = tuple(
    ((key,), Motion(key))
    for key in ("h", "l", "j", "k", "w", "W", "b", "B", "e", "E", "0", "^", "$")
) + (
    (("g", "g"), Motion.BUFFER_START),
    (("g", "e"), Motion.WORD_END_BACKWARD),
    (("g", "E"), Motion.BIG_WORD_END_BACKWARD),
    (("G",), Motion.BUFFER_END),
    (("{",), Motion.PARAGRAPH_BACKWARD),
    (("}",), Motion.PARAGRAPH_FORWARD),
    (("%",), Motion.MATCH_PAIR),
    (("f",), Motion.FIND_FORWARD),
    (("F",), Motion.FIND_BACKWARD),
    (("t",), Motion.TILL_FORWARD),
    (("T",), Motion.TILL_BACKWARD),
    ((";",), Motion.REPEAT_FIND),
    ((",",), Motion.REPEAT_FIND_REVERSE),
    (("LEFT",), Motion.LEFT),
    (("RIGHT",), Motion.RIGHT),
    (("UP",), Motion.UP),
    (("DOWN",), Motion.DOWN),
    (("BACKSPACE",), Motion.LEFT),
    ((" ",), Motion.RIGHT),
)

EDIT_KEYS = ("x", "X", "D", "C", "s", "S", "r", "p", "P", "i", "a", "I", "A", "o", "O")

_COMMAND_DESCRIPTIONS = {
    "x": "Delete characters under the cursor",
    "X": "Delete characters before the cursor",
    "D": "Delete to end of line",
    "C": "Change to end of line",
    "s": "Substitute characters",
    "S": "Substitute line",
    "r": "Replace characters",
    "p": "Paste after the cursor",
    "P": "Paste before the cursor",
    "i": "Insert before the cursor",
    "a": "Append after the cursor",
    "I": "Insert at first non-blank",
    "A": "Append at end of line",
    "o": "Open line below",
    "O": "Open line above",
}


def default_actions() -> tuple[ActionRef, ...]:
    """Every built-in action, keyed by id."""

    actions = [
        ActionRef("core.cancel", core_actions.cancel_pending, "Cancel pending command"),
        ActionRef("core.exit_to_normal", core_actions.exit_to_normal_mode, "Return to Normal mode"),
        ActionRef("core.enter_visual", core_actions.enter_visual_mode, "Enter Visual mode"),
        ActionRef(
            "core.enter_visual_line",
            core_actions.enter_visual_line_mode,
            "Enter VisualLine mode",
        ),
        ActionRef(
            "core.toggle_visual",
            core_actions.toggle_visual_mode,
            "Leave or switch to charwise Visual mode",
            {"target": VISUAL},
        ),
        ActionRef(
            "core.toggle_visual_line",
            core_actions.toggle_visual_mode,
            "Leave or switch to linewise Visual mode",
            {"target": VISUAL_LINE},
        ),
        ActionRef("history.undo", core_actions.undo, "Undo"),
        ActionRef("history.redo", core_actions.redo, "Redo"),
        ActionRef(
            "register.select",
            core_actions.select_register,
            "Use a register for the next command",
            {"argument": "char"},
        ),
        ActionRef("repeat.last", repeat_actions.repeat_last_change, "Repeat last change"),
        ActionRef(
            "text_object.inner",
            motion_actions.select_text_object,
            "Inner text object",
            {"argument": "char", "inner": True},
        ),
        ActionRef(
            "text_object.around",
            motion_actions.select_text_object,
            "Text object including delimiters",
            {"argument": "char", "inner": False},
        ),
        ActionRef("visual.yank", visual_actions.yank_selection, "Yank selection"),
        ActionRef("visual.delete", visual_actions.delete_selection, "Delete selection"),
        ActionRef("visual.change", visual_actions.change_selection, "Change selection"),
        ActionRef("visual.paste", visual_actions.paste_over_selection, "Replace selection"),
        ActionRef("visual.swap_anchor", visual_actions.swap_anchor, "Swap selection ends"),
        ActionRef(
            "visual.text_object.inner",
            visual_actions.select_text_object,
            "Select inner text object",
            {"argument": "char", "inner": True},
        ),
        ActionRef(
            "visual.text_object.around",
            visual_actions.select_text_object,
            "Select text object with delimiters",
            {"argument": "char", "inner": False},
        ),
        ActionRef("insert.newline", insert_actions.insert_newline, "Insert line break"),
        ActionRef("insert.tab", insert_actions.insert_tab, "Insert tab"),
        ActionRef("insert.backspace", insert_actions.delete_backward, "Delete before cursor"),
        ActionRef("insert.delete", insert_actions.delete_forward, "Delete under cursor"),
        ActionRef("insert.left", insert_actions.cursor_left, "Cursor left"),
        ActionRef("insert.right", insert_actions.cursor_right, "Cursor right"),
        ActionRef(
            "insert.paste_register",
            insert_actions.paste_register,
            "Insert register contents",
            {"argument": "char"},
        ),
    ]
    for operator, label in (("d", "Delete"), ("c", "Change"), ("y", "Yank")):
        actions.append(
            ActionRef(
                f"operator.{operator}",
                motion_actions.begin_operator,
                f"{label} operator",
                {"operator": operator},
            )
        )
    for motion in Motion:
        metadata: dict[str, object] = {"motion": motion.value}
        if motion in FIND_MOTIONS:
            metadata["argument"] = "char"
        actions.append(
            ActionRef(f"motion.{motion.name.lower()}", motion_actions.move_cursor, "", metadata)
        )
    for name in EDIT_KEYS:
        metadata = {"command": name}
        if name == "r":
            metadata["argument"] = "char"
        actions.append(
            ActionRef(
                _edit_action_id(name),
                edit_actions.run_command,
                _COMMAND_DESCRIPTIONS[name],
                metadata,
            )
        )
    return tuple(actions)


def _edit_action_id(name: str) -> str:
    return f"edit.{name}" if name.islower() else f"edit.shift_{name.lower()}"


def _binding(
    mode: str,
    keys: Sequence[str],
    action_id: str,
    *,
    when: Sequence[str] = (),
    suffix: str = "",
    description: str = "",
) -> Binding:
    label = "".join(keys) + suffix
    return Binding(
        id=f"{mode}.{label}",
        mode=mode,
        sequence=KeySequence.from_strings(*keys),
        action_id=action_id,
        description=description,
        when=tuple(when),
    )


def default_bindings() -> tuple[Binding, ...]:
    bindings: list[Binding] = []

    for key in ESCAPE_KEYS:
        bindings.append(_binding(NORMAL, (key,), "core.cancel"))
        bindings.append(_binding(INSERT, (key,), "core.exit_to_normal"))
        for mode in VISUAL_MODES:
            bindings.append(_binding(mode, (key,), "core.exit_to_normal"))

    for keys, motion in MOTION_KEYS:
        action_id = f"motion.{motion.name.lower()}"
        for mode in (NORMAL,) + VISUAL_MODES:
            bindings.append(_binding(mode, keys, action_id))

    for operator in ("d", "c", "y"):
        bindings.append(_binding(NORMAL, (operator,), f"operator.{operator}"))
    bindings.append(_binding(NORMAL, ("i",), "text_object.inner", when=PENDING, suffix="#object"))
    bindings.append(_binding(NORMAL, ("a",), "text_object.around", when=PENDING, suffix="#object"))

    for name in EDIT_KEYS:
        bindings.append(_binding(NORMAL, (name,), _edit_action_id(name), when=IDLE))
    bindings.extend(
        (
            _binding(NORMAL, ("v",), "core.enter_visual", when=IDLE),
            _binding(NORMAL, ("V",), "core.enter_visual_line", when=IDLE),
            _binding(NORMAL, ("u",), "history.undo", when=IDLE),
            _binding(NORMAL, ("ctrl+r",), "history.redo", when=IDLE),
            _binding(NORMAL, ('"',), "register.select", when=IDLE),
            _binding(NORMAL, (".",), "repeat.last", when=IDLE),
        )
    )

    for mode in VISUAL_MODES:
        bindings.extend(
            (
                _binding(mode, ("d",), "visual.delete"),
                _binding(mode, ("x",), "visual.delete"),
                _binding(mode, ("y",), "visual.yank"),
                _binding(mode, ("c",), "visual.change"),
                _binding(mode, ("s",), "visual.change"),
                _binding(mode, ("p",), "visual.paste"),
                _binding(mode, ("P",), "visual.paste"),
                _binding(mode, ("o",), "visual.swap_anchor"),
                _binding(mode, ("i",), "visual.text_object.inner"),
                _binding(mode, ("a",), "visual.text_object.around"),
                _binding(mode, ("v",), "core.toggle_visual"),
                _binding(mode, ("V",), "core.toggle_visual_line"),
                _binding(mode, ('"',), "register.select"),
            )
        )

    bindings.extend(
        (
            _binding(INSERT, ("ENTER",), "insert.newline"),
            _binding(INSERT, ("TAB",), "insert.tab"),
            _binding(INSERT, ("BACKSPACE",), "insert.backspace"),
            _binding(INSERT, ("DELETE",), "insert.delete"),
            _binding(INSERT, ("LEFT",), "insert.left"),
            _binding(INSERT, ("RIGHT",), "insert.right"),
            _binding(INSERT, ("ctrl+r",), "insert.paste_register"),
        )
    )
    return tuple(bindings)


def load_default_keymaps(
    registry: KeymapRegistry,
    *,
    replace: bool = False,
    extra_bindings: Iterable[Binding] | None = None,
    include_bindings: Sequence[str] | None = None,
    exclude_bindings: Sequence[str] | None = None,
    per_mode_overrides: Mapping[str, Iterable[Binding]] | None = None,
) -> None:
    """Register built-in actions and bindings for every mode.

    ``include_bindings``/``exclude_bindings`` filter by binding id; overrides
    replace whatever a default bound to the same keys.
    """

    include = set(include_bindings) if include_bindings else None
    exclude = set(exclude_bindings or ())

    for action in default_actions():
        registry.register_action(action, replace=replace)

    for binding in default_bindings():
        if include is not None and binding.id not in include:
            continue
        if binding.id in exclude:
            continue
        registry.register_binding(binding, replace=replace)

    for binding in extra_bindings or ():
        registry.register_binding(binding, replace=replace)

    for mode, overrides in (per_mode_overrides or {}).items():
        for binding in overrides:
            if binding.mode != mode:
                raise ValueError(
                    f"Override binding '{binding.id}' must target mode '{mode}'"
                )
            registry.register_binding(binding, replace=True)


__all__ = [
    "ESCAPE_KEYS",
    "MOTION_KEYS",
    "default_actions",
    "default_bindings",
    "load_default_keymaps",
]
