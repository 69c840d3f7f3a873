"""Host-facing sessions: one interpreter per editable text surface.

Hosts hold an opaque ``SessionHandle`` and drive the engine through the
module-level functions. ``submit_key`` never raises; anything that goes wrong
while interpreting a key is logged, pending input is dropped and ``False`` is
returned.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, replace
from threading import RLock
from typing import Dict, Iterable, Optional

from flatvim.buffer import (
    BufferMirror,
    ClipboardBridge,
    Register,
    RegisterStore,
    TextBuffer,
    UndoHistory,
    global_registers,
)
from flatvim.config import EngineConfig, VimMode
from flatvim.modes import (
    InsertMode,
    ModeContext,
    ModeResult,
    NormalMode,
    VisualLineMode,
    VisualMode,
)
from flatvim.modes.keymap_helpers import normalize_key
from flatvim.modes.mode_manager import ModeManager
from flatvim.runtime import telemetry

MODE_CLASSES = (NormalMode, InsertMode, VisualMode, VisualLineMode)


class Session:
    """Buffer, mode machine, undo history and repeat state for one surface."""

    def __init__(
        self,
        *,
        text: str = "",
        cursor: int = 0,
        initial_mode: VimMode | str | None = None,
        registers: Optional[RegisterStore] = None,
        config: Optional[EngineConfig] = None,
        name: str = "default",
    ) -> None:
        self.config = config or EngineConfig()
        self.name = name
        self.registers = registers if registers is not None else global_registers()
        if self.config.clipboard_enabled and self.registers.clipboard is None:
            self.registers.attach_clipboard(
                ClipboardBridge(max_workers=self.config.clipboard_workers)
            )
        self.buffer = TextBuffer(text, cursor, name=name)
        self.context = ModeContext(
            buffer=self.buffer,
            registers=self.registers,
            history=UndoHistory(self.config.undo_depth),
        )
        self.manager = ModeManager(self.context)
        for mode_cls in MODE_CLASSES:
            self.manager.register_mode(mode_cls)
        mode = VimMode.parse(initial_mode or self.config.initial_mode)
        self.manager.start(mode.value)
        self.last_result: Optional[ModeResult] = None

    @property
    def mode(self) -> VimMode:
        return VimMode.parse(self.manager.active_name or VimMode.NORMAL.value)

    def handle_key(
        self, key: str, modifiers: Iterable[str] = (), *, text: Optional[str] = None
    ) -> bool:
        """Interpret one key; ``True`` when the engine recognised it."""

        try:
            result = self.manager.handle_key(normalize_key(key, modifiers, text))
        except Exception as exc:
            telemetry.record_event(
                "session.key_error",
                level="error",
                data={
                    "session": self.name,
                    "key": key,
                    "mode": self.manager.active_name,
                    "error": f"{type(exc).__name__}: {exc}",
                },
            )
            self.manager.reset()
            self.last_result = ModeResult(consumed=False, status="error")
            return False
        self.last_result = result
        return result.consumed

    def feed(self, keys: Iterable[str]) -> list[bool]:
        """Submit several plain keys in order; convenient for scripted input."""

        return [self.handle_key(key) for key in keys]

    def snapshot(self) -> BufferMirror:
        selection = self.context.selection
        return BufferMirror(
            text=self.buffer.text,
            cursor=self.buffer.cursor,
            mode=self.mode.value,
            selection=replace(selection) if selection is not None else None,
            attributes={
                "pending": self.context.draft.describe(),
                "version": str(self.buffer.version),
            },
        )

    # BufferSync -----------------------------------------------------------------

    def pull_buffer(self) -> BufferMirror:
        return self.snapshot()

    def push_host_edit(self, text: str, cursor: int) -> None:
        """Adopt an edit made by the host outside the engine."""

        self.buffer.load(text, cursor)
        if self.mode is not VimMode.INSERT:
            self.buffer.set_cursor(self.buffer.cursor, normal=True)
        self.context.track_selection()


@dataclass(frozen=True, slots=True)
class SessionHandle:
    session_id: int


_SESSIONS: Dict[int, Session] = {}
_IDS = itertools.count(1)
_LOCK = RLock()


def initialize_session(
    initial_mode: VimMode | str = VimMode.NORMAL,
    *,
    text: str = "",
    cursor: int = 0,
    registers: Optional[RegisterStore] = None,
    config: Optional[EngineConfig] = None,
) -> SessionHandle:
    with _LOCK:
        session_id = next(_IDS)
        _SESSIONS[session_id] = Session(
            text=text,
            cursor=cursor,
            initial_mode=initial_mode,
            registers=registers,
            config=config,
            name=f"session-{session_id}",
        )
    telemetry.record_event(
        "session.start",
        level="debug",
        data={"session": session_id, "mode": VimMode.parse(initial_mode).value},
    )
    return SessionHandle(session_id)


def get_session(handle: SessionHandle) -> Session:
    with _LOCK:
        try:
            return _SESSIONS[handle.session_id]
        except KeyError as exc:
            raise KeyError(f"Unknown session {handle.session_id}") from exc


def destroy_session(handle: SessionHandle) -> None:
    with _LOCK:
        session = _SESSIONS.pop(handle.session_id, None)
    if session is not None:
        telemetry.record_event(
            "session.end", level="debug", data={"session": handle.session_id}
        )


def submit_key(
    handle: SessionHandle, key: str, modifiers: Iterable[str] = ()
) -> bool:
    with _LOCK:
        session = _SESSIONS.get(handle.session_id)
    if session is None:
        telemetry.record_event(
            "session.unknown", level="warning", data={"session": handle.session_id}
        )
        return False
    return session.handle_key(key, modifiers)


def get_snapshot(handle: SessionHandle) -> BufferMirror:
    return get_session(handle).snapshot()


def get_register(name: str) -> Optional[Register]:
    return global_registers().get(name)


def set_register(name: str, content: str, linewise: bool = False) -> bool:
    return global_registers().set(name, content, linewise) is not None


__all__ = [
    "MODE_CLASSES",
    "Session",
    "SessionHandle",
    "destroy_session",
    "get_register",
    "get_session",
    "get_snapshot",
    "initialize_session",
    "set_register",
    "submit_key",
]
