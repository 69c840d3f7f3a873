import pytest

from flatvim.keymaps import (
    ActionRef,
    Binding,
    KeySequence,
    KeyStroke,
    KeymapConflictError,
    KeymapRegistry,
    WhenClause,
    default_bindings,
    load_default_keymaps,
)


def make_action(action_id: str = "core.test") -> ActionRef:
    return ActionRef(id=action_id, handler=lambda *args, **kwargs: None)


def make_sequence(*keys: str) -> KeySequence:
    return KeySequence.from_strings(*keys)


def make_binding(
    *,
    binding_id: str,
    mode: str = "normal",
    sequence: KeySequence | None = None,
    action_id: str = "core.test",
    when: tuple[WhenClause, ...] = (),
) -> Binding:
    return Binding(
        id=binding_id,
        mode=mode,
        sequence=sequence or make_sequence("g", "g"),
        action_id=action_id,
        when=when,
    )


def test_register_binding_success() -> None:
    registry = KeymapRegistry()
    action = make_action()
    registry.register_action(action)
    binding = make_binding(binding_id="normal.gg")

    registry.register_binding(binding)

    assert registry.stats().binding_count == 1
    assert list(registry.iter_bindings(mode="normal")) == [binding]


def test_register_binding_requires_known_action() -> None:
    registry = KeymapRegistry()

    with pytest.raises(KeyError):
        registry.register_binding(make_binding(binding_id="normal.gg"))


def test_register_action_twice_needs_replace() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    with pytest.raises(ValueError):
        registry.register_action(make_action())

    registry.register_action(make_action(), replace=True)
    assert registry.stats().action_count == 1


def test_register_binding_conflict_detection() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    binding = make_binding(binding_id="normal.gg")
    registry.register_binding(binding)

    with pytest.raises(KeymapConflictError) as info:
        registry.register_binding(make_binding(binding_id="normal.gg.duplicate"))

    assert info.value.conflicts == (binding,)


def test_register_binding_non_overlapping_when() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    binding_pending = make_binding(
        binding_id="pending",
        when=(WhenClause("operator_pending"),),
    )
    binding_idle = make_binding(
        binding_id="idle",
        when=(WhenClause.parse("!operator_pending"),),
    )

    registry.register_binding(binding_pending)
    registry.register_binding(binding_idle)

    assert registry.stats().binding_count == 2


def test_unconditional_binding_overlaps_conditional_one() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    registry.register_binding(
        make_binding(binding_id="idle", when=(WhenClause.parse("!operator_pending"),))
    )

    with pytest.raises(KeymapConflictError):
        registry.register_binding(make_binding(binding_id="always"))


def test_register_binding_with_replace() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    first = make_binding(binding_id="binding")
    second = make_binding(binding_id="binding")

    registry.register_binding(first)
    registry.register_binding(second, replace=True)

    assert list(registry.iter_bindings()) == [second]


def test_replace_drops_conflicting_binding() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    registry.register_binding(make_binding(binding_id="old"))

    registry.register_binding(make_binding(binding_id="new"), replace=True)

    assert [binding.id for binding in registry.iter_bindings()] == ["new"]


def test_unregister_binding() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    binding = make_binding(binding_id="binding")
    registry.register_binding(binding)
    before = registry.revision()

    removed = registry.unregister_binding("binding")

    assert removed == binding
    assert registry.stats().binding_count == 0
    assert registry.revision() == before + 1
    assert registry.unregister_binding("binding") is None


def test_keystroke_parse_handles_chords_and_plus_key() -> None:
    chord = KeyStroke.parse("ctrl+r")

    assert chord.key == "r"
    assert chord.modifiers == ("ctrl",)
    assert chord.token == "ctrl+r"
    assert KeyStroke.parse("+").token == "+"
    assert KeyStroke.parse("ctrl+[").token == "ctrl+["


def test_key_sequence_from_chars() -> None:
    sequence = KeySequence.from_chars("gg")

    assert sequence.tokens == ("g", "g")
    assert len(sequence) == 2


def test_when_clause_parse_negation() -> None:
    clause = WhenClause.parse("!operator_pending")

    assert clause.flag == "operator_pending"
    assert clause.expected is False
    assert clause.evaluate({}) is True
    assert clause.evaluate({"operator_pending": True}) is False


def test_load_default_keymaps_registers_every_mode() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(registry)

    stats = registry.stats()
    assert stats.modes == ("insert", "normal", "visual", "visual_line")
    assert stats.binding_count == len(default_bindings())
    assert registry.get_binding("normal.d").action_id == "operator.d"
    assert registry.get_binding("normal.i#object").action_id == "text_object.inner"


def test_load_default_keymaps_include_filters() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(registry, include_bindings=("normal.x",))

    assert registry.stats().binding_count == 1
    assert registry.get_binding("normal.x").action_id == "edit.x"


def test_load_default_keymaps_exclude_filters() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(registry, exclude_bindings=("normal.x",))

    with pytest.raises(KeyError):
        registry.get_binding("normal.x")


def test_load_default_keymaps_per_mode_override() -> None:
    registry = KeymapRegistry()
    custom_binding = Binding(
        id="normal.custom_delete",
        mode="normal",
        sequence=KeySequence.from_strings("x"),
        action_id="edit.shift_x",
        when=("!operator_pending",),
    )

    load_default_keymaps(
        registry,
        per_mode_overrides={"normal": (custom_binding,)},
    )

    assert registry.get_binding("normal.custom_delete").action_id == "edit.shift_x"
    with pytest.raises(KeyError):
        registry.get_binding("normal.x")


def test_per_mode_override_must_match_mode() -> None:
    registry = KeymapRegistry()
    stray = Binding(
        id="insert.stray",
        mode="insert",
        sequence=KeySequence.from_strings("ctrl+w"),
        action_id="insert.backspace",
    )

    with pytest.raises(ValueError):
        load_default_keymaps(registry, per_mode_overrides={"normal": (stray,)})
