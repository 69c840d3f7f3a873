"""Modes, command-prefix accumulation, operator execution and dot-repeat state."""

from .base_mode import KeyInput, Mode, ModeBus, ModeContext, ModeResult
from .normal_mode import NormalMode
from .insert_mode import InsertMode
from .visual_mode import VisualLineMode, VisualMode
from .operator_pipeline import (
    CountParser,
    ExecutionPlan,
    OperatorDraft,
    OperatorOutcome,
    OperatorPipeline,
)
from .repeat import InsertSession, LastChange, RepeatTracker

__all__ = [
    "CountParser",
    "ExecutionPlan",
    "InsertMode",
    "InsertSession",
    "KeyInput",
    "LastChange",
    "Mode",
    "ModeBus",
    "ModeContext",
    "ModeResult",
    "NormalMode",
    "OperatorDraft",
    "OperatorOutcome",
    "OperatorPipeline",
    "RepeatTracker",
    "VisualLineMode",
    "VisualMode",
]
