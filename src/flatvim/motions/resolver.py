"""Motion resolution: key + count -> target offset.

Each motion is applied ``count`` times, re-reading the position after every
step so clamping and column memory hold at each iteration.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

from flatvim.runtime import telemetry

from . import classify


class Motion(str, Enum):
    LEFT = "h"
    RIGHT = "l"
    DOWN = "j"
    UP = "k"
    WORD_FORWARD = "w"
    BIG_WORD_FORWARD = "W"
    WORD_BACKWARD = "b"
    BIG_WORD_BACKWARD = "B"
    WORD_END = "e"
    BIG_WORD_END = "E"
    WORD_END_BACKWARD = "ge"
    BIG_WORD_END_BACKWARD = "gE"
    LINE_START = "0"
    FIRST_NON_BLANK = "^"
    LINE_END = "$"
    BUFFER_START = "gg"
    BUFFER_END = "G"
    PARAGRAPH_BACKWARD = "{"
    PARAGRAPH_FORWARD = "}"
    MATCH_PAIR = "%"
    FIND_FORWARD = "f"
    FIND_BACKWARD = "F"
    TILL_FORWARD = "t"
    TILL_BACKWARD = "T"
    REPEAT_FIND = ";"
    REPEAT_FIND_REVERSE = ","

    @property
    def needs_char(self) -> bool:
        return self in FIND_MOTIONS


VERTICAL_MOTIONS = frozenset(
    {Motion.DOWN, Motion.UP, Motion.BUFFER_START, Motion.BUFFER_END}
)
FIND_MOTIONS = frozenset(
    {Motion.FIND_FORWARD, Motion.FIND_BACKWARD, Motion.TILL_FORWARD, Motion.TILL_BACKWARD}
)
WORD_START_MOTIONS = frozenset({Motion.WORD_FORWARD, Motion.BIG_WORD_FORWARD})


@dataclass(frozen=True, slots=True)
class FindState:
    """Last ``f/F/t/T`` search, replayed by ``;`` and ``,``."""

    char: str
    forward: bool
    till: bool

    @property
    def motion(self) -> Motion:
        if self.forward:
            return Motion.TILL_FORWARD if self.till else Motion.FIND_FORWARD
        return Motion.TILL_BACKWARD if self.till else Motion.FIND_BACKWARD


@dataclass(slots=True)
class MotionMemory:
    """Per-session state motions read and update."""

    wanted_column: Optional[int] = None
    last_find: Optional[FindState] = None

    def reset_column(self) -> None:
        self.wanted_column = None


@dataclass(frozen=True, slots=True)
class MotionResult:
    """Where a motion lands and how an operator should treat the span to it.

    ``inclusive`` motions cover the target character; ``linewise`` ones widen
    an operator's span to whole lines. ``moved`` is ``False`` for a miss.
    """

    position: int
    inclusive: bool = False
    linewise: bool = False
    moved: bool = True


class MotionResolver:
    def __init__(
        self, memory: Optional[MotionMemory] = None, *, logger_name: str | None = None
    ) -> None:
        self.memory = memory or MotionMemory()
        self._logger_name = logger_name
        self._handlers: Dict[Motion, Callable[..., MotionResult]] = {
            Motion.LEFT: self._left,
            Motion.RIGHT: self._right,
            Motion.DOWN: self._down,
            Motion.UP: self._up,
            Motion.WORD_FORWARD: self._word_forward,
            Motion.BIG_WORD_FORWARD: self._word_forward,
            Motion.WORD_BACKWARD: self._word_backward,
            Motion.BIG_WORD_BACKWARD: self._word_backward,
            Motion.WORD_END: self._word_end,
            Motion.BIG_WORD_END: self._word_end,
            Motion.WORD_END_BACKWARD: self._word_end_backward,
            Motion.BIG_WORD_END_BACKWARD: self._word_end_backward,
            Motion.LINE_START: self._line_start,
            Motion.FIRST_NON_BLANK: self._first_non_blank,
            Motion.LINE_END: self._line_end,
            Motion.BUFFER_START: self._buffer_start,
            Motion.BUFFER_END: self._buffer_end,
            Motion.PARAGRAPH_BACKWARD: self._paragraph_backward,
            Motion.PARAGRAPH_FORWARD: self._paragraph_forward,
            Motion.MATCH_PAIR: self._match_pair,
            Motion.FIND_FORWARD: self._find,
            Motion.FIND_BACKWARD: self._find,
            Motion.TILL_FORWARD: self._find,
            Motion.TILL_BACKWARD: self._find,
            Motion.REPEAT_FIND: self._repeat_find,
            Motion.REPEAT_FIND_REVERSE: self._repeat_find,
        }

    def resolve(
        self,
        text: str,
        cursor: int,
        motion: Motion | str,
        count: Optional[int] = None,
        *,
        char: Optional[str] = None,
        for_operator: bool = False,
    ) -> MotionResult:
        """Resolve ``motion`` from ``cursor``.

        ``count`` of ``None`` means no count was typed. With ``for_operator``
        the target may sit one past the last character so exclusive spans can
        reach the end of the buffer.
        """

        motion = Motion(motion)
        length = len(text)
        limit = length if for_operator else max(0, length - 1)
        start = max(0, min(cursor, limit))
        if motion not in VERTICAL_MOTIONS:
            self.memory.reset_column()

        with telemetry.span(
            "motion::resolve",
            logger_name=self._logger_name,
            component="motions",
            metadata={"motion": motion.value, "count": count or 1},
        ) as handle:
            result = self._handlers[motion](
                text, start, motion, count, char, for_operator, limit
            )
            position = max(0, min(result.position, limit))
            handle.add_metadata("target", position)
            if position != result.position:
                result = MotionResult(
                    position, result.inclusive, result.linewise, result.moved
                )
            return result

    # -- horizontal ------------------------------------------------------------

    def _left(self, text, pos, motion, count, char, for_operator, limit):
        return MotionResult(max(0, pos - _steps(count)))

    def _right(self, text, pos, motion, count, char, for_operator, limit):
        return MotionResult(min(limit, pos + _steps(count)))

    def _line_start(self, text, pos, motion, count, char, for_operator, limit):
        return MotionResult(classify.line_start(text, pos))

    def _first_non_blank(self, text, pos, motion, count, char, for_operator, limit):
        return MotionResult(classify.first_non_blank(text, pos))

    def _line_end(self, text, pos, motion, count, char, for_operator, limit):
        for _ in range(_steps(count) - 1):
            following = classify.next_line_start(text, pos)
            if following is None:
                break
            pos = following
        start, end = classify.line_bounds(text, pos)
        if end == start:
            return MotionResult(start)
        return MotionResult(end - 1, inclusive=True)

    # -- vertical --------------------------------------------------------------

    def _column(self, text: str, pos: int) -> int:
        if self.memory.wanted_column is None:
            self.memory.wanted_column = pos - classify.line_start(text, pos)
        return self.memory.wanted_column

    def _vertical(self, text: str, pos: int, count: Optional[int], down: bool) -> MotionResult:
        column = self._column(text, pos)
        origin = start = classify.line_start(text, pos)
        for _ in range(_steps(count)):
            step = (
                classify.next_line_start(text, start)
                if down
                else classify.prev_line_start(text, start)
            )
            if step is None:
                break
            start = step
        return MotionResult(
            classify.column_target(text, start, column),
            linewise=True,
            moved=start != origin,
        )

    def _down(self, text, pos, motion, count, char, for_operator, limit):
        return self._vertical(text, pos, count, down=True)

    def _up(self, text, pos, motion, count, char, for_operator, limit):
        return self._vertical(text, pos, count, down=False)

    def _goto_line(self, text: str, pos: int, index: int) -> MotionResult:
        column = self._column(text, pos)
        last = classify.line_count(text) - 1
        start = classify.line_offset(text, max(0, min(index, last)))
        return MotionResult(classify.column_target(text, start, column), linewise=True)

    def _buffer_start(self, text, pos, motion, count, char, for_operator, limit):
        index = count - 1 if count and count > 1 else 0
        return self._goto_line(text, pos, index)

    def _buffer_end(self, text, pos, motion, count, char, for_operator, limit):
        if count is not None:
            return self._goto_line(text, pos, count - 1)
        return self._goto_line(text, pos, classify.line_count(text) - 1)

    # -- words -------------------------------------------------------------------

    def _word_forward(self, text, pos, motion, count, char, for_operator, limit):
        big = motion is Motion.BIG_WORD_FORWARD
        for _ in range(_steps(count)):
            pos = min(limit, classify.next_word_start(text, pos, big=big))
        return MotionResult(pos)

    def _word_backward(self, text, pos, motion, count, char, for_operator, limit):
        big = motion is Motion.BIG_WORD_BACKWARD
        for _ in range(_steps(count)):
            pos = classify.prev_word_start(text, pos, big=big)
        return MotionResult(pos)

    def _word_end(self, text, pos, motion, count, char, for_operator, limit):
        big = motion is Motion.BIG_WORD_END
        for _ in range(_steps(count)):
            pos = min(limit, classify.next_word_end(text, pos, big=big))
        return MotionResult(pos, inclusive=True)

    def _word_end_backward(self, text, pos, motion, count, char, for_operator, limit):
        big = motion is Motion.BIG_WORD_END_BACKWARD
        for _ in range(_steps(count)):
            pos = classify.prev_word_end(text, pos, big=big)
        return MotionResult(pos, inclusive=True)

    # -- blocks ------------------------------------------------------------------

    def _paragraph_forward(self, text, pos, motion, count, char, for_operator, limit):
        for _ in range(_steps(count)):
            pos = min(limit, classify.paragraph_forward(text, pos))
        return MotionResult(pos)

    def _paragraph_backward(self, text, pos, motion, count, char, for_operator, limit):
        for _ in range(_steps(count)):
            pos = classify.paragraph_backward(text, pos)
        return MotionResult(pos)

    def _match_pair(self, text, pos, motion, count, char, for_operator, limit):
        target = classify.find_matching_pair(text, pos)
        if target is None:
            return MotionResult(pos, moved=False)
        return MotionResult(target, inclusive=True)

    # -- find ----------------------------------------------------------------------

    def _find(self, text, pos, motion, count, char, for_operator, limit):
        if not char:
            return MotionResult(pos, moved=False)
        state = FindState(
            char=char,
            forward=motion in (Motion.FIND_FORWARD, Motion.TILL_FORWARD),
            till=motion in (Motion.TILL_FORWARD, Motion.TILL_BACKWARD),
        )
        self.memory.last_find = state
        return _search(text, pos, state, count, repeat=False)

    def _repeat_find(self, text, pos, motion, count, char, for_operator, limit):
        state = self.memory.last_find
        if state is None:
            return MotionResult(pos, moved=False)
        if motion is Motion.REPEAT_FIND_REVERSE:
            state = FindState(char=state.char, forward=not state.forward, till=state.till)
        return _search(text, pos, state, count, repeat=True)


def _steps(count: Optional[int]) -> int:
    return max(1, count or 1)


def _search(
    text: str, pos: int, state: FindState, count: Optional[int], *, repeat: bool
) -> MotionResult:
    target = classify.find_char_in_line(
        text,
        pos,
        state.char,
        forward=state.forward,
        till=state.till,
        count=_steps(count),
        skip_adjacent=repeat and state.till,
    )
    if target is None:
        return MotionResult(pos, moved=False)
    return MotionResult(target, inclusive=state.forward)


__all__ = [
    "FIND_MOTIONS",
    "FindState",
    "Motion",
    "MotionMemory",
    "MotionResolver",
    "MotionResult",
    "VERTICAL_MOTIONS",
    "WORD_START_MOTIONS",
]
