"""Boundary types for syncing sessions with host text widgets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol

from .state import VisualSelection


@dataclass(slots=True)
class BufferMirror:
    """Host-friendly snapshot of a session: text, caret, mode and selection."""

    text: str
    cursor: int
    mode: str
    selection: Optional[VisualSelection] = None
    attributes: dict[str, str] = field(default_factory=dict)


class BufferSync(Protocol):
    """How adapters exchange buffer state with a host widget."""

    def pull_buffer(self) -> BufferMirror:
        """Return the latest snapshot the host should render."""
        ...

    def push_host_edit(self, text: str, cursor: int) -> None:
        """Adopt text the host changed outside the engine (paste, IME, ...)."""
        ...
