from __future__ import annotations

import pyperclip

from flatvim.buffer import ClipboardBridge, RegisterStore, global_registers

from conftest import FakeClipboard, ImmediateExecutor


def test_set_and_get_named_register() -> None:
    store = RegisterStore()

    store.set("a", "alpha")

    assert store.get("a").content == "alpha"
    assert store.get('"') is None


def test_uppercase_name_appends_to_lowercase_slot() -> None:
    store = RegisterStore()
    store.set("q", "one ")

    store.set("Q", "two\n", linewise=True)

    register = store.get("q")
    assert register.content == "one two\n"
    assert register.linewise is True
    assert store.get("Q") == register


def test_uppercase_name_on_empty_slot() -> None:
    store = RegisterStore()

    store.set("B", "bee")

    assert store.get("b").content == "bee"


def test_invalid_names_are_rejected() -> None:
    store = RegisterStore()

    assert store.set("1", "x") is None
    assert store.set("!", "x") is None
    assert store.get("1") is None
    assert store.names() == ()


def test_record_writes_target_and_default() -> None:
    store = RegisterStore()

    store.record("c", "text", False)

    assert store.get("c").content == "text"
    assert store.get('"').content == "text"


def test_plain_set_writes_exactly_one_slot() -> None:
    store = RegisterStore()

    store.set("c", "only c")

    assert store.names() == ("c",)


def test_record_without_name_uses_default_slot() -> None:
    store = RegisterStore()

    store.record(None, "line\n", True)

    assert store.names() == ('"',)
    assert store.get('"').linewise is True


def test_global_registers_are_shared(fresh_registers) -> None:
    assert global_registers() is fresh_registers


def test_clipboard_register_pushes_to_system(clipboard_store) -> None:
    store, backend = clipboard_store

    store.set("+", "copied")

    assert backend.copied == ["copied"]
    assert store.get("+").content == "copied"


def test_clipboard_refresh_lands_in_register(clipboard_store) -> None:
    store, backend = clipboard_store
    backend.value = "lines\n"

    register = store.read_for_paste("+")

    assert register.content == "lines\n"
    assert register.linewise is True


def test_clipboard_failure_keeps_register_value() -> None:
    backend = FakeClipboard(error=pyperclip.PyperclipException("no clipboard"))
    store = RegisterStore(clipboard=ClipboardBridge(backend, executor=ImmediateExecutor()))

    store.set("+", "kept")
    register = store.read_for_paste("+")

    assert register.content == "kept"


def test_clipboard_refresh_runs_in_background() -> None:
    backend = FakeClipboard("later")
    bridge = ClipboardBridge(backend)
    store = RegisterStore(clipboard=bridge)
    store.set("+", "now")

    future = bridge.pull(lambda text: None)
    future.result(timeout=5)
    bridge.shutdown(wait=True)

    assert backend.copied == ["now"]


def test_yank_to_clipboard_register(make_session, clipboard_store) -> None:
    store, backend = clipboard_store
    session = make_session("hello world", registers=store)

    session.feed('"+yw')

    assert backend.copied == ["hello "]
    assert store.get('"').content == "hello "


def test_paste_from_clipboard_register_reads_system(make_session, clipboard_store) -> None:
    store, backend = clipboard_store
    backend.value = "XY"
    session = make_session("ab", registers=store)

    session.feed('"+p')

    assert session.buffer.text == "aXYb"
