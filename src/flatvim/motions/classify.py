"""Character classes, line geometry and boundary searches over flat text.

Every helper takes the full buffer text plus an offset and returns an offset;
none of them mutate anything or raise on out-of-range input.
"""

from __future__ import annotations

import string
from typing import Optional, Tuple

WORD_CHARS = frozenset(string.ascii_letters + string.digits + "_")
BLANKS = frozenset(" \t\r\f\v")

OPENERS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = {close: open_ for open_, close in OPENERS.items()}

SPACE, PUNCT, WORD = 0, 1, 2


def is_word_char(ch: str) -> bool:
    return ch in WORD_CHARS and ch != ""


def is_space(ch: str) -> bool:
    return ch == "\n" or ch in BLANKS


def char_class(ch: str, *, big: bool = False) -> int:
    """``SPACE``, ``PUNCT`` or ``WORD``; with ``big`` only space vs non-space."""

    if is_space(ch):
        return SPACE
    if big or is_word_char(ch):
        return WORD
    return PUNCT


# -- line geometry -----------------------------------------------------------


def line_start(text: str, pos: int) -> int:
    return text.rfind("\n", 0, max(0, pos)) + 1


def line_end(text: str, pos: int) -> int:
    """Offset of the line break ending ``pos``'s line, or ``len(text)``."""

    newline = text.find("\n", max(0, pos))
    return len(text) if newline == -1 else newline


def line_bounds(text: str, pos: int) -> Tuple[int, int]:
    return line_start(text, pos), line_end(text, pos)


def line_count(text: str) -> int:
    return text.count("\n") + 1


def line_offset(text: str, index: int) -> int:
    """Start offset of the zero-based line ``index`` (clamped to the last line)."""

    offset = 0
    for _ in range(max(0, index)):
        newline = text.find("\n", offset)
        if newline == -1:
            break
        offset = newline + 1
    return offset


def next_line_start(text: str, pos: int) -> Optional[int]:
    end = line_end(text, pos)
    return end + 1 if end < len(text) else None


def prev_line_start(text: str, pos: int) -> Optional[int]:
    start = line_start(text, pos)
    return line_start(text, start - 1) if start > 0 else None


def first_non_blank(text: str, pos: int) -> int:
    start, end = line_bounds(text, pos)
    while start < end and text[start] in BLANKS:
        start += 1
    return start


def is_blank_line(text: str, pos: int) -> bool:
    start, end = line_bounds(text, pos)
    return text[start:end].strip() == ""


def column_target(text: str, start: int, column: int) -> int:
    end = line_end(text, start)
    return start + min(column, end - start)


def retreat_after_insert(text: str, pos: int) -> int:
    """Where the cursor lands when Insert mode hands control back to Normal mode."""

    if pos > 0 and text[pos - 1] != "\n":
        return pos - 1
    return pos


def linewise_content(fragment: str) -> str:
    """Register text for a linewise range: whole lines ending in a line break."""

    if fragment.startswith("\n") and not fragment.endswith("\n"):
        return fragment[1:] + "\n"
    if fragment.endswith("\n"):
        return fragment
    return fragment + "\n"


def linewise_bounds(text: str, first: int, last: int) -> Tuple[int, int]:
    """Half-open span removing the lines holding ``first``..``last`` entirely.

    The trailing line break is consumed; on the final line, which has none,
    the preceding break is consumed instead so the line disappears.
    """

    start = line_start(text, min(first, last))
    end = line_end(text, max(first, last))
    if end < len(text):
        return start, end + 1
    if start > 0:
        return start - 1, end
    return start, end


# -- word boundaries ---------------------------------------------------------


def next_word_start(text: str, pos: int, *, big: bool = False) -> int:
    length = len(text)
    if pos >= length:
        return length
    cls = char_class(text[pos], big=big)
    if cls != SPACE:
        while pos < length and char_class(text[pos], big=big) == cls:
            pos += 1
    while pos < length and text[pos] in BLANKS:
        pos += 1
    while pos < length and text[pos] == "\n":
        pos += 1
        if pos < length and text[pos] == "\n":
            return pos
        while pos < length and text[pos] in BLANKS:
            pos += 1
    return pos


def prev_word_start(text: str, pos: int, *, big: bool = False) -> int:
    if pos <= 0:
        return 0
    pos = min(pos, len(text)) - 1
    while pos > 0 and is_space(text[pos]):
        if text[pos] == "\n" and text[pos - 1] == "\n":
            return pos
        pos -= 1
    cls = char_class(text[pos], big=big)
    if cls == SPACE:
        return pos
    while pos > 0 and char_class(text[pos - 1], big=big) == cls:
        pos -= 1
    return pos


def next_word_end(text: str, pos: int, *, big: bool = False) -> int:
    length = len(text)
    if length == 0:
        return 0
    pos += 1
    while pos < length and is_space(text[pos]):
        pos += 1
    if pos >= length:
        return length - 1
    cls = char_class(text[pos], big=big)
    while pos + 1 < length and char_class(text[pos + 1], big=big) == cls:
        pos += 1
    return pos


def prev_word_end(text: str, pos: int, *, big: bool = False) -> int:
    length = len(text)
    if pos <= 0 or length == 0:
        return 0
    pos = min(pos, length - 1)
    cls = char_class(text[pos], big=big)
    if cls != SPACE:
        while pos > 0 and char_class(text[pos], big=big) == cls:
            pos -= 1
    while pos > 0 and is_space(text[pos]):
        pos -= 1
    return pos


# -- searches ------------------------------------------------------------------


def find_char_in_line(
    text: str,
    pos: int,
    char: str,
    *,
    forward: bool,
    till: bool = False,
    count: int = 1,
    skip_adjacent: bool = False,
) -> Optional[int]:
    """Offset reached by ``f``/``F``/``t``/``T`` or ``None`` when not found."""

    if not char:
        return None
    start, end = line_bounds(text, pos)
    step = 1 if forward else -1
    index = pos + step * (2 if skip_adjacent else 1)
    found = 0
    while start <= index < end:
        if text[index] == char:
            found += 1
            if found == max(1, count):
                return index - step if till else index
        index += step
    return None


def find_matching_pair(text: str, pos: int) -> Optional[int]:
    if not 0 <= pos < len(text):
        return None
    ch = text[pos]
    if ch in OPENERS:
        target, step = OPENERS[ch], 1
    elif ch in CLOSERS:
        target, step = CLOSERS[ch], -1
    else:
        return None
    depth = 0
    index = pos
    while 0 <= index < len(text):
        current = text[index]
        if current == ch:
            depth += 1
        elif current == target:
            depth -= 1
            if depth == 0:
                return index
        index += step
    return None


def paragraph_forward(text: str, pos: int) -> int:
    current: Optional[int] = line_start(text, pos)
    while current is not None and is_blank_line(text, current):
        current = next_line_start(text, current)
    while current is not None and not is_blank_line(text, current):
        current = next_line_start(text, current)
    return len(text) if current is None else current


def paragraph_backward(text: str, pos: int) -> int:
    current: Optional[int] = line_start(text, pos)
    while current is not None and is_blank_line(text, current):
        current = prev_line_start(text, current)
    while current is not None and not is_blank_line(text, current):
        current = prev_line_start(text, current)
    return 0 if current is None else current


__all__ = [
    "BLANKS",
    "CLOSERS",
    "OPENERS",
    "WORD_CHARS",
    "char_class",
    "column_target",
    "find_char_in_line",
    "find_matching_pair",
    "first_non_blank",
    "is_blank_line",
    "is_space",
    "is_word_char",
    "line_bounds",
    "line_count",
    "line_end",
    "line_offset",
    "line_start",
    "linewise_bounds",
    "linewise_content",
    "next_line_start",
    "next_word_end",
    "next_word_start",
    "paragraph_backward",
    "paragraph_forward",
    "prev_line_start",
    "prev_word_end",
    "prev_word_start",
    "retreat_after_insert",
]
