"""Delimiter-bounded text objects (``i(``, ``a"``, ...)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from flatvim.buffer.state import TextRange

SYMMETRIC_DELIMITERS = frozenset({'"', "'", "`"})

PAIRED_DELIMITERS = {
    "(": ("(", ")"),
    ")": ("(", ")"),
    "b": ("(", ")"),
    "[": ("[", "]"),
    "]": ("[", "]"),
    "{": ("{", "}"),
    "}": ("{", "}"),
    "B": ("{", "}"),
    "<": ("<", ">"),
    ">": ("<", ">"),
}


@dataclass(frozen=True, slots=True)
class TextObjectResult:
    range: TextRange
    found: bool


def is_text_object_key(key: str) -> bool:
    return key in SYMMETRIC_DELIMITERS or key in PAIRED_DELIMITERS


def resolve_text_object(
    text: str, cursor: int, delimiter: str, *, inner: bool
) -> TextObjectResult:
    """Range of the object around ``cursor``; a miss is an empty range at the cursor."""

    if delimiter in SYMMETRIC_DELIMITERS:
        bounds = _quote_bounds(text, cursor, delimiter)
    elif delimiter in PAIRED_DELIMITERS:
        opener, closer = PAIRED_DELIMITERS[delimiter]
        bounds = _pair_bounds(text, cursor, opener, closer)
    else:
        bounds = None

    if bounds is None:
        return TextObjectResult(range=TextRange.empty(cursor), found=False)
    start, end = bounds
    if inner:
        return TextObjectResult(range=TextRange(start + 1, end), found=True)
    return TextObjectResult(range=TextRange(start, end + 1), found=True)


def _quote_bounds(text: str, cursor: int, quote: str) -> Optional[Tuple[int, int]]:
    if not 0 <= cursor < len(text):
        return None
    positions = [i for i in range(cursor + 1) if text[i] == quote]
    if not positions:
        return None
    if len(positions) % 2 == 1:
        opener = positions[-1]
        closer = text.find(quote, max(cursor, opener) + 1)
        if closer == -1:
            return None
        return opener, closer
    # Even count: only a cursor resting on the closing quote is inside a pair.
    if text[cursor] == quote:
        return positions[-2], cursor
    return None


def _pair_bounds(
    text: str, cursor: int, opener: str, closer: str
) -> Optional[Tuple[int, int]]:
    if not 0 <= cursor < len(text):
        return None
    start = _find_opener(text, cursor, opener, closer)
    if start is None:
        return None
    depth = 0
    for index in range(start, len(text)):
        ch = text[index]
        if ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return start, index
    return None


def _find_opener(text: str, cursor: int, opener: str, closer: str) -> Optional[int]:
    if text[cursor] == opener:
        return cursor
    depth = 0
    index = cursor - 1 if text[cursor] == closer else cursor
    while index >= 0:
        ch = text[index]
        if ch == closer:
            depth += 1
        elif ch == opener:
            if depth == 0:
                return index
            depth -= 1
        index -= 1
    return None


__all__ = [
    "PAIRED_DELIMITERS",
    "SYMMETRIC_DELIMITERS",
    "TextObjectResult",
    "is_text_object_key",
    "resolve_text_object",
]
