from __future__ import annotations

from flatvim.keymaps import (
    ActionRef,
    Binding,
    KeySequence,
    KeymapRegistry,
    KeymapResolver,
    WhenClause,
    load_default_keymaps,
)


def make_action(action_id: str) -> ActionRef:
    return ActionRef(id=action_id, handler=lambda *args, **kwargs: None)


def make_binding(
    binding_id: str,
    *,
    mode: str = "normal",
    keys: tuple[str, ...] = ("g", "g"),
    action_id: str = "core.test",
    when: tuple[WhenClause, ...] = (),
    priority: int = 0,
) -> Binding:
    return Binding(
        id=binding_id,
        mode=mode,
        sequence=KeySequence.from_strings(*keys),
        action_id=action_id,
        when=when,
        priority=priority,
    )


def build_registry(bindings: list[Binding]) -> KeymapRegistry:
    registry = KeymapRegistry()
    action_ids = {binding.action_id for binding in bindings}
    for action_id in action_ids:
        registry.register_action(make_action(action_id))
    for binding in bindings:
        registry.register_binding(binding)
    return registry


def test_resolver_matches_exact_sequence() -> None:
    binding = make_binding("normal.gg")
    registry = build_registry([binding])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("normal", ("g", "g"))

    assert result.status == "match"
    assert result.match is not None
    assert result.match.binding.id == binding.id
    assert result.consumed == 2


def test_resolver_reports_pending_for_prefix() -> None:
    binding = make_binding("normal.gg")
    registry = build_registry([binding])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("normal", ("g",))

    assert result.status == "pending"
    assert result.next_expected == ("g",)


def test_resolver_misses_unknown_tokens() -> None:
    registry = build_registry([make_binding("normal.gg")])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("normal", ("g", "z"))

    assert result.status == "miss"
    assert result.consumed == 1


def test_resolver_keeps_modes_apart() -> None:
    registry = build_registry([make_binding("normal.gg")])
    resolver = KeymapResolver(registry)

    assert resolver.resolve("insert", ("g", "g")).status == "miss"


def test_resolver_honors_when_clauses() -> None:
    gating = make_binding(
        "pending.gg",
        when=(WhenClause("operator_pending"),),
        action_id="core.pending",
    )
    registry = build_registry([gating])
    resolver = KeymapResolver(registry)

    miss = resolver.resolve("normal", ("g", "g"), context={})
    assert miss.status == "miss"

    hit = resolver.resolve("normal", ("g", "g"), context={"operator_pending": True})
    assert hit.status == "match"
    assert hit.match is not None
    assert hit.match.binding.id == gating.id


def test_resolver_picks_binding_by_flag() -> None:
    idle = make_binding(
        "normal.i", keys=("i",), action_id="edit.i", when=(WhenClause.parse("!operator_pending"),)
    )
    pending = make_binding(
        "normal.i#object",
        keys=("i",),
        action_id="text_object.inner",
        when=(WhenClause("operator_pending"),),
    )
    registry = build_registry([idle, pending])
    resolver = KeymapResolver(registry)

    plain = resolver.resolve("normal", ("i",), context={"operator_pending": False})
    after_operator = resolver.resolve("normal", ("i",), context={"operator_pending": True})

    assert plain.match is not None and plain.match.action.id == "edit.i"
    assert after_operator.match is not None
    assert after_operator.match.action.id == "text_object.inner"


def test_resolver_cache_refreshes_on_revision() -> None:
    registry = build_registry([])
    resolver = KeymapResolver(registry)

    miss = resolver.resolve("normal", ("x",))
    assert miss.status == "miss"

    new_binding = make_binding("normal.x", keys=("x",), action_id="core.x")
    registry.register_action(make_action("core.x"))
    registry.register_binding(new_binding)

    match = resolver.resolve("normal", ("x",))
    assert match.status == "match"
    assert match.match is not None
    assert match.match.binding.id == new_binding.id


def test_default_keymap_resolves_chords_and_sequences() -> None:
    registry = KeymapRegistry()
    load_default_keymaps(registry)
    resolver = KeymapResolver(registry)
    idle = {"operator_pending": False}

    redo = resolver.resolve("normal", ("ctrl+r",), context=idle)
    start = resolver.resolve("normal", ("g", "g"), context=idle)
    insert_paste = resolver.resolve("insert", ("ctrl+r",))

    assert redo.match is not None and redo.match.action.id == "history.redo"
    assert start.match is not None and start.match.action.id == "motion.buffer_start"
    assert insert_paste.match is not None
    assert insert_paste.match.action.needs_argument
