"""Adapter wiring a ``Session`` and its bus events into Textual UI callbacks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from flatvim.buffer import BufferMirror
from flatvim.session import Session

BUS_EVENTS = (
    "mode.switch",
    "visual.selection",
    "visual.clear",
    "visual.yank",
    "visual.delete",
    "visual.change",
    "visual.paste",
)

_TEXTUAL_KEYS = {
    "escape": "ESC",
    "enter": "ENTER",
    "tab": "TAB",
    "backspace": "BACKSPACE",
    "delete": "DELETE",
    "left": "LEFT",
    "right": "RIGHT",
    "up": "UP",
    "down": "DOWN",
    "space": " ",
}


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_buffer: Callable[[BufferMirror], None]
    update_status: Callable[[str], None] = _noop
    handle_event: Callable[[str, object | None], None] = _noop
    log: Callable[[str], None] = _noop


def textual_key(key: str, character: Optional[str]) -> tuple[str, tuple[str, ...]]:
    """Split a Textual key name (``ctrl+r``, ``escape``, ``a``) into key + modifiers."""

    modifiers: list[str] = []
    name = key
    while "+" in name[:-1]:
        modifier, _, name = name.partition("+")
        modifiers.append(modifier)
    if name in _TEXTUAL_KEYS:
        return _TEXTUAL_KEYS[name], tuple(modifiers)
    if character and len(character) == 1 and character.isprintable():
        if set(modifiers) <= {"shift"}:
            return character, ()
    return name, tuple(modifiers)


class TextualVimAdapter:
    """Feeds Textual key events to a session and pushes the results back out."""

    def __init__(self, session: Session, hooks: TextualUIHooks) -> None:
        self.session = session
        self.hooks = hooks
        self._unsubscribers: list[Callable[[], None]] = []
        self._subscribe_events()
        self._refresh_buffer()
        self.hooks.update_status(self.session.mode.value)

    def handle_textual_key(
        self,
        key: str,
        *,
        character: Optional[str] = None,
        modifiers: Iterable[str] = (),
    ) -> bool:
        name, parsed = textual_key(key, character)
        mods = tuple(dict.fromkeys((*parsed, *(str(mod).lower() for mod in modifiers))))
        self._log_state("key ->", key=name, mods=mods)
        handled = self.session.handle_key(name, mods)
        result = self.session.last_result
        self._refresh_buffer()
        status = self.session.mode.value
        if result is not None and result.status not in ("ok", "count", "pending"):
            status = f"{status} | {result.message or result.status}"
        pending = self.session.context.draft.describe()
        if pending:
            status = f"{status} | {pending}"
        self.hooks.update_status(status)
        self._log_state("result <-", handled=handled, status=status)
        return handled

    def detach(self) -> None:
        """Stop forwarding bus events; the session itself is left alone."""

        while self._unsubscribers:
            self._unsubscribers.pop()()

    def _subscribe_events(self) -> None:
        bus = self.session.context.bus
        for event in BUS_EVENTS:
            self._unsubscribers.append(
                bus.subscribe(
                    event, lambda payload, name=event: self._handle_event(name, payload)
                )
            )

    def _handle_event(self, name: str, payload: object | None) -> None:
        self._log_state("event ->", event=name, payload=payload)
        self.hooks.handle_event(name, payload)

    def _refresh_buffer(self) -> None:
        self.hooks.update_buffer(self.session.pull_buffer())

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix] + [f"{key}={value!r}" for key, value in snapshot.items()]
        self.hooks.log(" ".join(parts))

    def _state_metadata(self) -> Dict[str, object]:
        buffer = self.session.buffer
        return {
            "mode": self.session.mode.value,
            "cursor": buffer.cursor,
            "buffer": buffer.name,
            "buffer_version": buffer.version,
        }


__all__ = ["BUS_EVENTS", "TextualUIHooks", "TextualVimAdapter", "textual_key"]
