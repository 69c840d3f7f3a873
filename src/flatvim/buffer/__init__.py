"""Flat text buffer, undo history, registers and clipboard bridge."""

from .buffer import BufferDelta, TextBuffer, Transaction
from .clipboard import ClipboardBackend, ClipboardBridge, PyperclipBackend
from .registers import (
    CLIPBOARD_REGISTER,
    DEFAULT_REGISTER,
    Register,
    RegisterStore,
    global_registers,
    is_register_name,
    reset_global_registers,
)
from .state import TextRange, VisualSelection
from .sync import BufferMirror, BufferSync
from .undo import UndoHistory, UndoState
from .validation import clamp_offset, max_offset

__all__ = [
    "BufferDelta",
    "BufferMirror",
    "BufferSync",
    "CLIPBOARD_REGISTER",
    "ClipboardBackend",
    "ClipboardBridge",
    "DEFAULT_REGISTER",
    "PyperclipBackend",
    "Register",
    "RegisterStore",
    "TextBuffer",
    "TextRange",
    "Transaction",
    "UndoHistory",
    "UndoState",
    "VisualSelection",
    "clamp_offset",
    "global_registers",
    "is_register_name",
    "max_offset",
    "reset_global_registers",
]
