"""Motion and text-object resolution over flat text."""

from . import classify
from .resolver import (
    FIND_MOTIONS,
    FindState,
    Motion,
    MotionMemory,
    MotionResolver,
    MotionResult,
    VERTICAL_MOTIONS,
)
from .text_objects import TextObjectResult, is_text_object_key, resolve_text_object

__all__ = [
    "FIND_MOTIONS",
    "FindState",
    "Motion",
    "MotionMemory",
    "MotionResolver",
    "MotionResult",
    "TextObjectResult",
    "VERTICAL_MOTIONS",
    "classify",
    "is_text_object_key",
    "resolve_text_object",
]
