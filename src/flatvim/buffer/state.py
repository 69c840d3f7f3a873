"""Range and selection value types for the flat text buffer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TextRange:
    """Half-open ``[start, end)`` span, normalized so ``start <= end``."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start > self.end:
            start, end = self.end, self.start
            object.__setattr__(self, "start", start)
            object.__setattr__(self, "end", end)

    @classmethod
    def empty(cls, offset: int) -> "TextRange":
        return cls(offset, offset)

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def __len__(self) -> int:
        return self.end - self.start

    def clamp(self, length: int) -> "TextRange":
        return TextRange(max(0, min(self.start, length)), max(0, min(self.end, length)))


@dataclass(slots=True)
class VisualSelection:
    """Anchor plus the ``start``/``end`` characters it currently covers.

    ``start`` and ``end`` are both inclusive character offsets. For linewise
    selections they are widened to the first and last offsets of the covered
    lines, with ``end`` sitting on the terminating line break (or the end of
    the buffer).
    """

    anchor: int
    start: int
    end: int
    linewise: bool = False

    @classmethod
    def at(cls, anchor: int, *, linewise: bool = False) -> "VisualSelection":
        return cls(anchor=anchor, start=anchor, end=anchor, linewise=linewise)

    def track(self, text: str, cursor: int) -> None:
        low, high = min(self.anchor, cursor), max(self.anchor, cursor)
        if self.linewise:
            low = text.rfind("\n", 0, low) + 1
            newline = text.find("\n", high)
            high = len(text) if newline == -1 else newline
        self.start, self.end = low, high

    def to_range(self, text: str) -> TextRange:
        """Half-open range the selection operates on."""

        length = len(text)
        if self.linewise:
            end = self.end + 1 if self.end < length else self.end
            start = self.start
            if end == length and self.end == length and start > 0:
                start -= 1
            return TextRange(start, end).clamp(length)
        return TextRange(self.start, self.end + 1).clamp(length)


__all__ = ["TextRange", "VisualSelection"]
