"""Command prefix accumulation and operator execution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from flatvim.buffer import RegisterStore, TextBuffer, TextRange, UndoHistory
from flatvim.motions import classify
from flatvim.runtime import telemetry

OPERATORS = frozenset({"d", "c", "y"})


@dataclass(slots=True)
class OperatorDraft:
    """Prefix typed so far: counts, register, pending operator, char argument.

    Digits typed before the operator go to ``count_digits``; digits typed
    after it go to ``operator_count_digits``. The effective count is their
    product, so ``2d3w`` acts on six words.
    """

    count_digits: str = ""
    operator: Optional[str] = None
    operator_count_digits: str = ""
    register: Optional[str] = None
    argument: Optional[str] = None
    raw_keys: List[str] = field(default_factory=list)

    @property
    def digits(self) -> str:
        return self.operator_count_digits if self.operator else self.count_digits

    @property
    def count(self) -> Optional[int]:
        counts = [
            int(digits)
            for digits in (self.count_digits, self.operator_count_digits)
            if digits
        ]
        if not counts:
            return None
        total = 1
        for value in counts:
            total *= value
        return total

    def take_count(self) -> Optional[int]:
        count = self.count
        self.clear()
        return count

    def clear(self) -> None:
        self.count_digits = ""
        self.operator = None
        self.operator_count_digits = ""
        self.register = None
        self.argument = None
        self.raw_keys.clear()

    def describe(self) -> str:
        prefix = f'"{self.register}' if self.register else ""
        return f"{prefix}{self.count_digits}{self.operator or ''}{self.operator_count_digits}"


class CountParser:
    """Digits ``1``-``9`` start or extend a count; ``0`` only extends one."""

    def feed(self, draft: OperatorDraft, key: str) -> bool:
        if len(key) != 1 or not key.isdigit():
            return False
        if key == "0" and not draft.digits:
            return False
        if draft.operator:
            draft.operator_count_digits += key
        else:
            draft.count_digits += key
        draft.raw_keys.append(key)
        return True


@dataclass(slots=True)
class ExecutionPlan:
    operator: str
    range: TextRange
    linewise: bool = False
    register: Optional[str] = None
    record_undo: bool = True


@dataclass(frozen=True, slots=True)
class OperatorOutcome:
    text: str
    cursor: int
    changed: bool


class OperatorPipeline:
    """Applies ``d``/``y``/``c`` to a resolved range.

    ``c`` only performs the deletion here; the caller moves to Insert mode.
    """

    def __init__(
        self,
        *,
        buffer: TextBuffer,
        registers: RegisterStore,
        history: UndoHistory,
        logger_name: str | None = None,
    ) -> None:
        self.buffer = buffer
        self.registers = registers
        self.history = history
        self._logger_name = logger_name

    def execute(self, plan: ExecutionPlan) -> OperatorOutcome:
        if plan.operator not in OPERATORS:
            raise ValueError(f"Unknown operator '{plan.operator}'")
        buffer = self.buffer
        span = plan.range.clamp(len(buffer))
        with telemetry.span(
            "operator::execute",
            logger_name=self._logger_name,
            component="operators",
            metadata={
                "operator": plan.operator,
                "start": span.start,
                "end": span.end,
                "linewise": plan.linewise,
            },
        ) as handle:
            fragment = buffer.slice(span)
            if plan.linewise:
                content = classify.linewise_content(fragment)
            else:
                content = fragment
            if span.is_empty and not plan.linewise:
                handle.add_metadata("status", "empty")
                return OperatorOutcome(text="", cursor=buffer.cursor, changed=False)

            self.registers.record(plan.register, content, plan.linewise)
            if plan.operator == "y" or span.is_empty:
                return OperatorOutcome(text=content, cursor=buffer.cursor, changed=False)

            if plan.record_undo:
                self.history.push(buffer.undo_state())
            buffer.delete(span, label=f"operator_{plan.operator}")
            cursor = span.start
            if plan.operator == "d":
                cursor = min(cursor, max(0, len(buffer) - 1))
                if plan.linewise:
                    cursor = classify.first_non_blank(buffer.text, cursor)
                buffer.set_cursor(cursor, normal=True)
            else:
                buffer.set_cursor(cursor)
            handle.add_metadata("removed", len(fragment))
            return OperatorOutcome(text=content, cursor=buffer.cursor, changed=True)


__all__ = [
    "CountParser",
    "ExecutionPlan",
    "OPERATORS",
    "OperatorDraft",
    "OperatorOutcome",
    "OperatorPipeline",
]
