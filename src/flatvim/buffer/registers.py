"""Register storage shared by every session in the process."""

from __future__ import annotations

import string
from dataclasses import dataclass
from threading import RLock
from typing import Dict, Optional

from flatvim.runtime import telemetry

from .clipboard import ClipboardBridge

DEFAULT_REGISTER = '"'
CLIPBOARD_REGISTER = "+"


@dataclass(frozen=True, slots=True)
class Register:
    content: str = ""
    linewise: bool = False


def is_register_name(name: str) -> bool:
    return name in (DEFAULT_REGISTER, CLIPBOARD_REGISTER) or (
        len(name) == 1 and name in string.ascii_letters
    )


class RegisterStore:
    """Default, named (``a``-``z``) and clipboard-backed (``+``) slots.

    Writing an uppercase letter appends to the lowercase slot. Operator writes
    through ``record`` also refresh the default slot. The ``+`` slot mirrors
    writes to the system clipboard when a bridge is attached.
    """

    def __init__(self, clipboard: Optional[ClipboardBridge] = None) -> None:
        self._slots: Dict[str, Register] = {}
        self._lock = RLock()
        self.clipboard = clipboard

    def attach_clipboard(self, clipboard: Optional[ClipboardBridge]) -> None:
        self.clipboard = clipboard

    def get(self, name: str = DEFAULT_REGISTER) -> Optional[Register]:
        if not is_register_name(name):
            return None
        with self._lock:
            return self._slots.get(name.lower())

    def set(self, name: str, content: str, linewise: bool = False) -> Optional[Register]:
        """Store ``content`` in exactly one slot (uppercase names append)."""

        if not is_register_name(name):
            telemetry.record_event(
                "register.invalid", level="debug", data={"register": name}
            )
            return None
        slot = name.lower()
        with self._lock:
            if name.isupper():
                existing = self._slots.get(slot)
                if existing is not None:
                    content = existing.content + content
                    linewise = existing.linewise or linewise
            value = Register(content=content, linewise=linewise)
            self._slots[slot] = value
        if slot == CLIPBOARD_REGISTER and self.clipboard is not None:
            self.clipboard.push(content)
        return value

    def record(self, name: Optional[str], content: str, linewise: bool) -> Register:
        """Write the result of a yank or delete to ``name`` and the default slot."""

        target = name or DEFAULT_REGISTER
        value = self.set(target, content, linewise)
        if value is None:
            value = Register(content=content, linewise=linewise)
            target = DEFAULT_REGISTER
        if target != DEFAULT_REGISTER:
            with self._lock:
                self._slots[DEFAULT_REGISTER] = value
        telemetry.record_event(
            "register.write",
            level="debug",
            data={"register": target, "linewise": linewise, "length": len(content)},
        )
        return value

    def read_for_paste(self, name: Optional[str]) -> Optional[Register]:
        """Current value of ``name``; ``+`` also schedules a clipboard refresh."""

        target = (name or DEFAULT_REGISTER).lower()
        if target == CLIPBOARD_REGISTER:
            self.refresh_clipboard()
        return self.get(target)

    def refresh_clipboard(self) -> None:
        if self.clipboard is None:
            return
        self.clipboard.pull(self._apply_clipboard)

    def _apply_clipboard(self, text: str) -> None:
        with self._lock:
            current = self._slots.get(CLIPBOARD_REGISTER)
            if current is not None and current.content == text:
                return
            linewise = text.endswith("\n") and bool(text)
            self._slots[CLIPBOARD_REGISTER] = Register(content=text, linewise=linewise)

    def names(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(sorted(self._slots))

    def clear(self) -> None:
        with self._lock:
            self._slots.clear()


_GLOBAL_STORE: Optional[RegisterStore] = None
_GLOBAL_LOCK = RLock()


def global_registers() -> RegisterStore:
    """Process-wide store used by sessions that are not given their own."""

    global _GLOBAL_STORE
    with _GLOBAL_LOCK:
        if _GLOBAL_STORE is None:
            _GLOBAL_STORE = RegisterStore()
        return _GLOBAL_STORE


def reset_global_registers(store: Optional[RegisterStore] = None) -> RegisterStore:
    global _GLOBAL_STORE
    with _GLOBAL_LOCK:
        _GLOBAL_STORE = store or RegisterStore()
        return _GLOBAL_STORE


__all__ = [
    "CLIPBOARD_REGISTER",
    "DEFAULT_REGISTER",
    "Register",
    "RegisterStore",
    "global_registers",
    "is_register_name",
    "reset_global_registers",
]
