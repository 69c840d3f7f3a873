"""Base classes and the interpreter context shared by every mode."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from flatvim.buffer import RegisterStore, TextBuffer, UndoHistory, VisualSelection
from flatvim.motions import MotionMemory, MotionResolver

from .operator_pipeline import OperatorDraft, OperatorPipeline
from .repeat import InsertSession, RepeatTracker

Listener = Callable[[object], None]


@dataclass(slots=True)
class KeyInput:
    """One key after ``normalize_key``: engine token, chord modifiers and typed text."""

    key: str
    modifiers: Tuple[str, ...] = ()
    text: Optional[str] = None


@dataclass(slots=True)
class ModeResult:
    """Result returned from ``Mode.handle_key``.

    ``switch_to`` is applied by the ``ModeManager`` after the handler returns.
    """

    consumed: bool
    switch_to: Optional[str] = None
    status: str = "ok"
    message: Optional[str] = None


class ModeBus:
    """Named signals from modes and actions to adapters (`mode.switch`, `visual.*`)."""

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {}

    def subscribe(self, event: str, callback: Listener) -> Callable[[], None]:
        """Register ``callback``; the returned function removes it again."""

        listeners = self._listeners.setdefault(event, [])
        listeners.append(callback)

        def unsubscribe() -> None:
            if callback in listeners:
                listeners.remove(callback)

        return unsubscribe

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in tuple(self._listeners.get(event, ())):
            callback(payload)


@dataclass(slots=True)
class ModeContext:
    """Everything a key handler may read or mutate for one session."""

    buffer: TextBuffer
    registers: RegisterStore
    bus: ModeBus = field(default_factory=ModeBus)
    history: UndoHistory = field(default_factory=UndoHistory)
    memory: MotionMemory = field(default_factory=MotionMemory)
    draft: OperatorDraft = field(default_factory=OperatorDraft)
    repeat: RepeatTracker = field(default_factory=RepeatTracker)
    selection: Optional[VisualSelection] = None
    insert: Optional[InsertSession] = None
    extras: Dict[str, object] = field(default_factory=dict)
    _motions: Optional[MotionResolver] = None
    _operators: Optional[OperatorPipeline] = None

    @property
    def motions(self) -> MotionResolver:
        if self._motions is None or self._motions.memory is not self.memory:
            self._motions = MotionResolver(self.memory, logger_name="flatvim.motions")
        return self._motions

    @property
    def operators(self) -> OperatorPipeline:
        if self._operators is None:
            self._operators = OperatorPipeline(
                buffer=self.buffer,
                registers=self.registers,
                history=self.history,
                logger_name="flatvim.operators",
            )
        return self._operators

    def track_selection(self) -> None:
        if self.selection is not None:
            self.selection.track(self.buffer.text, self.buffer.cursor)
            self.bus.emit(
                "visual.selection",
                {
                    "anchor": self.selection.anchor,
                    "start": self.selection.start,
                    "end": self.selection.end,
                    "linewise": self.selection.linewise,
                },
            )


class Mode:
    """A mode interprets keys against the shared ``ModeContext``.

    Subclasses set ``name`` and implement ``handle_key``; the enter and exit
    hooks receive the neighbouring mode name (``None`` at start).
    """

    name: str = "mode"

    def __init__(self, context: ModeContext) -> None:
        self.context = context

    def on_enter(self, previous: Optional[str]) -> None:
        pass

    def on_exit(self, next_mode: Optional[str]) -> None:
        pass

    def handle_key(self, key: KeyInput) -> ModeResult:  # pragma: no cover - abstract
        raise NotImplementedError(f"{type(self).__name__} must handle keys")

    def reset(self) -> None:
        """Drop any half-typed key sequence."""
