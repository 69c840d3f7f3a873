from __future__ import annotations

import pytest

from flatvim import EngineConfig
from flatvim.buffer import UndoHistory, UndoState


def test_undo_history_caps_both_stacks() -> None:
    history = UndoHistory(depth=2)
    for value in ("a", "b", "c"):
        history.push(UndoState.capture(value, 0))

    assert history.undo_depth == 2
    assert history.undo(UndoState.capture("d", 0)).value == "c"
    assert history.undo(UndoState.capture("c", 0)).value == "b"
    assert history.undo(UndoState.capture("b", 0)) is None
    assert history.redo_depth == 2


def test_push_clears_redo() -> None:
    history = UndoHistory()
    history.push(UndoState.capture("a", 0))
    history.undo(UndoState.capture("b", 0))

    history.push(UndoState.capture("c", 0))

    assert history.can_redo() is False


def test_undo_history_rejects_bad_depth() -> None:
    with pytest.raises(ValueError):
        UndoHistory(depth=0)


def test_undo_and_redo_round_trip(make_session) -> None:
    session = make_session("hello world")

    session.feed("dw")
    session.feed("u")
    assert session.buffer.text == "hello world"
    assert session.buffer.cursor == 0

    session.handle_key("r", ["ctrl"])
    assert session.buffer.text == "world"


def test_undo_with_nothing_to_undo(make_session) -> None:
    session = make_session("abc")

    assert session.handle_key("u") is True
    assert session.last_result.status == "noop"
    assert session.buffer.text == "abc"


def test_undo_count_and_cap(make_session) -> None:
    text = "x" * 120
    session = make_session(text)

    session.feed("x" * 105)
    assert session.context.history.undo_depth == 100

    session.feed("200u")
    assert session.buffer.text == text[5:]
    assert session.context.history.redo_depth == 100


def test_configured_undo_depth(make_session) -> None:
    config = EngineConfig(undo_depth=2, clipboard_enabled=False)
    session = make_session("abcd", config=config)

    session.feed("xxx")
    session.feed("uuu")

    assert session.buffer.text == "bcd"


def test_insert_session_is_one_undo_step(make_session) -> None:
    session = make_session("abc")

    session.feed("Axyz")
    session.handle_key("ESC")
    assert session.buffer.text == "abcxyz"

    session.feed("u")
    assert session.buffer.text == "abc"


def test_change_is_one_undo_step(make_session) -> None:
    session = make_session("hello world")

    session.feed("cwbye ")
    session.handle_key("ESC")
    session.feed("u")

    assert session.buffer.text == "hello world"


def test_insert_without_typing_leaves_no_undo(make_session) -> None:
    session = make_session("abc")

    session.feed("i")
    session.handle_key("ESC")

    assert session.context.history.can_undo() is False


def test_new_edit_after_undo_drops_redo(make_session) -> None:
    session = make_session("abc")

    session.feed("xux")
    session.handle_key("r", ["ctrl"])

    assert session.buffer.text == "bc"
    assert session.last_result.status == "noop"


def test_dot_repeats_delete_word(make_session) -> None:
    session = make_session("one two three four")

    session.feed("dw.")

    assert session.buffer.text == "three four"


def test_dot_with_count_overrides(make_session) -> None:
    session = make_session("a b c d e")

    session.feed("dw2.")

    assert session.buffer.text == "d e"


def test_dot_repeats_delete_line(make_session) -> None:
    session = make_session("a\nb\nc")

    session.feed("dd.")

    assert session.buffer.text == "c"


def test_dot_repeats_insert(make_session) -> None:
    session = make_session("abc")

    session.feed("iX")
    session.handle_key("ESC")
    session.feed(".")

    assert session.buffer.text == "XXabc"
    assert session.buffer.cursor == 0
    assert session.mode.value == "normal"


def test_dot_repeats_change_word(make_session) -> None:
    session = make_session("foo bar baz")

    session.feed("cwX")
    session.handle_key("ESC")
    session.feed("w.")

    assert session.buffer.text == "Xbar X"


def test_dot_repeats_text_object_delete(make_session) -> None:
    session = make_session("(a) (b)", cursor=1)

    session.feed("di(")
    session.feed("f(l.")

    assert session.buffer.text == "() ()"


def test_dot_repeats_replace(make_session) -> None:
    session = make_session("abcd")

    session.feed("rxl.")

    assert session.buffer.text == "xxcd"


def test_counted_insert_repeats_text(make_session) -> None:
    session = make_session("")

    session.feed("3ix")
    session.handle_key("ESC")

    assert session.buffer.text == "xxx"
    assert session.buffer.cursor == 2


def test_yank_is_not_repeated(make_session) -> None:
    session = make_session("abcd")

    session.feed("xyl.")

    assert session.buffer.text == "cd"


def test_repeat_is_one_undo_step(make_session) -> None:
    session = make_session("one two three")

    session.feed("dw.u")

    assert session.buffer.text == "two three"


def test_nothing_to_repeat(make_session) -> None:
    session = make_session("abc")

    assert session.handle_key(".") is True
    assert session.buffer.text == "abc"
