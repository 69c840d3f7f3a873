"""Vim-style modal editing over a flat text buffer with one linear cursor."""

from .config import EngineConfig, TelemetrySettings, VimMode
from .session import (
    Session,
    SessionHandle,
    destroy_session,
    get_register,
    get_session,
    get_snapshot,
    initialize_session,
    set_register,
    submit_key,
)

__all__ = [
    "EngineConfig",
    "Session",
    "SessionHandle",
    "TelemetrySettings",
    "VimMode",
    "destroy_session",
    "get_register",
    "get_session",
    "get_snapshot",
    "initialize_session",
    "set_register",
    "submit_key",
]
