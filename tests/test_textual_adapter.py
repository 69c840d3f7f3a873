from __future__ import annotations

from typing import Any, Dict, List

from flatvim import EngineConfig
from flatvim.adapters.textual import TextualUIHooks, TextualVimAdapter
from flatvim.adapters.textual.app import UIState, render_mirror
from flatvim.adapters.textual.controller import textual_key
from flatvim.session import Session


def make_session(text: str = "") -> Session:
    return Session(text=text, config=EngineConfig(clipboard_enabled=False))


def test_textual_key_translation() -> None:
    assert textual_key("escape", None) == ("ESC", ())
    assert textual_key("ctrl+r", None) == ("r", ("ctrl",))
    assert textual_key("G", "G") == ("G", ())
    assert textual_key("space", " ") == (" ", ())
    assert textual_key("left_parenthesis", "(") == ("(", ())


def test_adapter_updates_buffer_and_status() -> None:
    session = make_session("hello")
    updates: List[str] = []
    statuses: List[str] = []
    hooks = TextualUIHooks(
        update_buffer=lambda mirror: updates.append(mirror.text),
        update_status=lambda status: statuses.append(status),
    )
    adapter = TextualVimAdapter(session, hooks)

    adapter.handle_textual_key("i", character="i")
    adapter.handle_textual_key("X", character="X")
    adapter.handle_textual_key("escape")

    assert updates[0] == "hello"
    assert updates[-1] == "Xhello"
    assert statuses[0] == "normal"
    assert any(status.startswith("insert") for status in statuses)
    assert statuses[-1].startswith("normal")


def test_adapter_status_shows_pending_prefix() -> None:
    session = make_session("one two")
    statuses: List[str] = []
    hooks = TextualUIHooks(update_buffer=lambda mirror: None, update_status=statuses.append)
    adapter = TextualVimAdapter(session, hooks)

    adapter.handle_textual_key("2", character="2")
    adapter.handle_textual_key("d", character="d")

    assert statuses[-1] == "normal | 2d"


def test_adapter_reports_rejected_keys() -> None:
    session = make_session("abc")
    hooks = TextualUIHooks(update_buffer=lambda mirror: None)
    adapter = TextualVimAdapter(session, hooks)

    assert adapter.handle_textual_key("f13") is False
    assert adapter.handle_textual_key("x", character="x") is True


def test_adapter_surfaces_visual_selection_events() -> None:
    session = make_session("abc")
    events: List[Dict[str, Any]] = []
    hooks = TextualUIHooks(
        update_buffer=lambda mirror: None,
        handle_event=lambda name, payload: events.append(
            {"name": name, "payload": payload}
        ),
    )
    adapter = TextualVimAdapter(session, hooks)

    adapter.handle_textual_key("v", character="v")
    adapter.handle_textual_key("l", character="l")
    adapter.handle_textual_key("d", character="d")

    names = [event["name"] for event in events]
    assert "visual.selection" in names
    assert "visual.delete" in names
    assert names[-1] == "mode.switch"
    visual_payloads = [event for event in events if event["name"] == "visual.selection"]
    assert visual_payloads[-1]["payload"]["end"] == 1


def test_adapter_emits_log_lines() -> None:
    session = make_session("abc")
    logs: List[str] = []
    hooks = TextualUIHooks(
        update_buffer=lambda mirror: None,
        log=logs.append,
    )
    adapter = TextualVimAdapter(session, hooks)

    adapter.handle_textual_key("i", character="i")

    assert any(line.startswith("key ->") for line in logs)
    assert any(line.startswith("event ->") for line in logs)
    assert any(line.startswith("result <-") for line in logs)


def test_render_mirror_marks_cursor_and_selection() -> None:
    session = make_session("abcd")
    session.feed("vl")

    rendered = render_mirror(session.snapshot())

    assert rendered.plain == "abcd "
    styles = {(span.start, span.end, str(span.style)) for span in rendered.spans}
    assert (0, 2, "on blue") in styles
    assert (1, 2, "reverse") in styles
    assert UIState().buffer_text == ""


def test_detach_stops_event_forwarding() -> None:
    session = make_session("abc")
    names: List[str] = []
    hooks = TextualUIHooks(
        update_buffer=lambda mirror: None,
        handle_event=lambda name, payload: names.append(name),
    )
    adapter = TextualVimAdapter(session, hooks)

    adapter.detach()
    adapter.handle_textual_key("v", character="v")

    assert names == []
    assert session.mode.value == "visual"
