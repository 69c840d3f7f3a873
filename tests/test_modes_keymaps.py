from __future__ import annotations

from typing import Any, Dict, Optional

from flatvim.buffer import RegisterStore, TextBuffer
from flatvim.keymaps import (
    Binding,
    KeySequence,
    KeymapRegistry,
    KeymapResolver,
    load_default_keymaps,
)
from flatvim.modes import (
    InsertMode,
    KeyInput,
    ModeBus,
    ModeContext,
    NormalMode,
    VisualLineMode,
    VisualMode,
)
from flatvim.modes.keymap_helpers import argument_char, normalize_key, printable_text
from flatvim.modes.mode_manager import ModeManager


def make_context(
    registry: KeymapRegistry,
    resolver: KeymapResolver,
    *,
    buffer: Optional[TextBuffer] = None,
) -> ModeContext:
    extras: Dict[str, Any] = {
        "keymap_registry": registry,
        "keymap_resolver": resolver,
        "keymap_flags": {},
    }
    return ModeContext(
        buffer=buffer or TextBuffer(),
        registers=RegisterStore(),
        bus=ModeBus(),
        extras=extras,
    )


def make_manager(text: str = "", cursor: int = 0) -> ModeManager:
    registry = KeymapRegistry()
    load_default_keymaps(registry)
    resolver = KeymapResolver(registry)
    context = make_context(registry, resolver, buffer=TextBuffer(text, cursor))
    manager = ModeManager(
        context,
        keymap_registry=registry,
        keymap_resolver=resolver,
        load_defaults=False,
    )
    for mode_cls in (NormalMode, InsertMode, VisualMode, VisualLineMode):
        manager.register_mode(mode_cls)
    manager.start("normal")
    return manager


def test_normal_mode_uses_keymap_binding() -> None:
    registry = KeymapRegistry()
    load_default_keymaps(registry)
    resolver = KeymapResolver(registry)
    context = make_context(registry, resolver)
    mode = NormalMode(context)

    result = mode.handle_key(KeyInput(key="i"))

    assert result.switch_to == "insert"
    assert result.consumed is True


def test_insert_mode_escape_binding() -> None:
    registry = KeymapRegistry()
    load_default_keymaps(registry)
    resolver = KeymapResolver(registry)
    context = make_context(registry, resolver)
    mode = InsertMode(context)
    mode.on_enter("normal")

    result = mode.handle_key(KeyInput(key="ESC"))

    assert result.switch_to == "normal"
    assert result.consumed is True


def test_normal_mode_pending_sequence() -> None:
    registry = KeymapRegistry()
    load_default_keymaps(registry)
    resolver = KeymapResolver(registry)
    context = make_context(registry, resolver)

    custom_binding = Binding(
        id="normal.zi",
        mode="normal",
        sequence=KeySequence.from_strings("z", "i"),
        action_id="edit.i",
    )
    registry.register_binding(custom_binding)

    mode = NormalMode(context)

    pending = mode.handle_key(KeyInput(key="z"))
    assert pending.status == "pending"
    assert pending.consumed is True

    match = mode.handle_key(KeyInput(key="i"))
    assert match.switch_to == "insert"


def test_unknown_key_is_rejected_and_clears_prefix() -> None:
    manager = make_manager("abcdef")
    context = manager.context

    assert manager.handle_key(KeyInput(key="3")).status == "count"
    rejected = manager.handle_key(KeyInput(key="Z"))

    assert rejected.consumed is False
    assert context.draft.count is None

    manager.handle_key(KeyInput(key="x"))
    assert context.buffer.text == "bcdef"


def test_incomplete_sequence_then_miss_is_rejected() -> None:
    manager = make_manager("abc")

    assert manager.handle_key(KeyInput(key="g")).status == "pending"
    result = manager.handle_key(KeyInput(key="z"))

    assert result.consumed is False
    assert manager.context.buffer.cursor == 0


def test_zero_is_a_motion_unless_extending_a_count() -> None:
    text = "\n".join(f"line {index}" for index in range(12))
    manager = make_manager(text, cursor=3)

    manager.handle_key(KeyInput(key="0"))
    assert manager.context.buffer.cursor == 0

    for key in ("1", "0", "G"):
        manager.handle_key(KeyInput(key=key))
    assert manager.context.buffer.text.count("\n", 0, manager.context.buffer.cursor) == 9


def test_operator_pending_flag_selects_text_object_binding() -> None:
    manager = make_manager("foo(bar)baz", cursor=5)
    context = manager.context

    manager.handle_key(KeyInput(key="d"))
    assert context.extras["keymap_flags"] == {"operator_pending": False}
    assert context.draft.operator == "d"

    manager.handle_key(KeyInput(key="i"))
    assert context.extras["keymap_flags"] == {"operator_pending": True}
    result = manager.handle_key(KeyInput(key="("))

    assert result.status == "delete"
    assert context.buffer.text == "foo()baz"
    assert manager.active_name == "normal"


def test_escape_cancels_pending_operator() -> None:
    manager = make_manager("hello world")

    manager.handle_key(KeyInput(key="d"))
    cancel = manager.handle_key(KeyInput(key="ESC"))
    manager.handle_key(KeyInput(key="w"))

    assert cancel.status == "cancelled"
    assert manager.context.buffer.text == "hello world"
    assert manager.context.buffer.cursor == 6


def test_escape_cancels_char_argument() -> None:
    manager = make_manager("abc")

    manager.handle_key(KeyInput(key="r"))
    result = manager.handle_key(KeyInput(key="ESC"))

    assert result.status == "cancelled"
    assert manager.context.buffer.text == "abc"


def test_mismatched_operator_is_rejected() -> None:
    manager = make_manager("abc")

    manager.handle_key(KeyInput(key="d"))
    result = manager.handle_key(KeyInput(key="y"))

    assert result.consumed is False
    assert manager.context.draft.operator is None


def test_mode_manager_switches_to_visual_mode() -> None:
    manager = make_manager("abc")
    events: list[object] = []
    manager.context.bus.subscribe("mode.switch", events.append)

    result = manager.handle_key(KeyInput(key="v"))

    assert result.switch_to == "visual"
    assert manager.active_mode and manager.active_mode.name == "visual"
    assert events == [{"previous": "normal", "mode": "visual"}]


def test_insert_mode_types_printable_keys() -> None:
    manager = make_manager("ac", cursor=1)

    manager.handle_key(KeyInput(key="i"))
    manager.handle_key(KeyInput(key="b", text="b"))
    manager.handle_key(KeyInput(key="ESC"))

    assert manager.context.buffer.text == "abc"
    assert manager.context.buffer.cursor == 1
    assert manager.active_name == "normal"


def test_insert_mode_digits_are_text() -> None:
    manager = make_manager("")

    manager.handle_key(KeyInput(key="i"))
    manager.handle_key(KeyInput(key="4"))
    manager.handle_key(KeyInput(key="2"))

    assert manager.context.buffer.text == "42"


def test_reset_drops_half_typed_command() -> None:
    manager = make_manager("abc")

    manager.handle_key(KeyInput(key="2"))
    manager.handle_key(KeyInput(key="d"))
    manager.reset()
    manager.handle_key(KeyInput(key="x"))

    assert manager.context.buffer.text == "bc"


def test_normalize_key_folds_aliases_and_shift() -> None:
    assert normalize_key("Escape").key == "ESC"
    assert normalize_key("return").key == "ENTER"
    shifted = normalize_key("G", ("shift",))
    assert shifted.key == "G" and shifted.modifiers == ()
    chord = normalize_key("R", ("Control",))
    assert chord.key == "r" and chord.modifiers == ("ctrl",)


def test_printable_and_argument_characters() -> None:
    assert printable_text(KeyInput(key="a", text="a")) == "a"
    assert printable_text(KeyInput(key="r", modifiers=("ctrl",))) is None
    assert printable_text(KeyInput(key="ESC")) is None
    assert argument_char(KeyInput(key="ENTER")) == "\n"
    assert argument_char(KeyInput(key="TAB")) == "\t"
