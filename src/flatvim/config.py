"""Environment-driven settings shared by the engine and its telemetry."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

ENV_PREFIX = "FLATVIM_"

_TRUTHY = {"1", "true", "yes", "on"}


class VimMode(str, Enum):
    """Editing modes a session can be in."""

    NORMAL = "normal"
    INSERT = "insert"
    VISUAL = "visual"
    VISUAL_LINE = "visual_line"

    @classmethod
    def parse(cls, value: "str | VimMode") -> "VimMode":
        if isinstance(value, VimMode):
            return value
        key = str(value).strip().lower().replace("-", "_")
        for mode in cls:
            if mode.value == key or mode.name.lower() == key:
                return mode
        raise ValueError(f"Unknown mode '{value}'")

    @property
    def is_visual(self) -> bool:
        return self in (VimMode.VISUAL, VimMode.VISUAL_LINE)


def env_value(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def env_flag(name: str, default: bool) -> bool:
    raw = env_value(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def env_int(name: str, default: int) -> int:
    raw = env_value(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True, slots=True)
class TelemetrySettings:
    """Inputs used to build the telelog configuration."""

    logger_name: str = "flatvim"
    level: str = "WARNING"
    console: bool = True
    colored: bool = True
    json: bool = False
    log_file: str = ""
    buffered: bool = False
    buffer_size: int = 2048

    @classmethod
    def from_env(cls) -> "TelemetrySettings":
        return cls(
            logger_name=env_value("LOGGER") or "flatvim",
            level=(env_value("LOG_LEVEL") or "WARNING").upper(),
            console=not env_flag("DISABLE_CONSOLE", False),
            colored=not env_flag("NO_COLOR", False),
            json=env_flag("LOG_JSON", False),
            log_file=env_value("LOG_FILE") or "",
            buffered=env_flag("LOG_BUFFERED", False),
            buffer_size=env_int("LOG_BUFFER_SIZE", 2048),
        )


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Per-session engine limits and integrations.

    ``undo_depth`` caps both the undo and the redo stack. ``clipboard_enabled``
    toggles mirroring of the ``+`` register to the system clipboard.
    """

    undo_depth: int = 100
    clipboard_enabled: bool = True
    clipboard_workers: int = 1
    initial_mode: VimMode = VimMode.NORMAL

    def __post_init__(self) -> None:
        if self.undo_depth <= 0:
            raise ValueError("undo_depth must be positive")
        if self.clipboard_workers <= 0:
            raise ValueError("clipboard_workers must be positive")
        object.__setattr__(self, "initial_mode", VimMode.parse(self.initial_mode))

    @classmethod
    def from_env(cls) -> "EngineConfig":
        return cls(
            undo_depth=env_int("UNDO_DEPTH", 100),
            clipboard_enabled=env_flag("CLIPBOARD", True),
            clipboard_workers=env_int("CLIPBOARD_WORKERS", 1),
            initial_mode=VimMode.parse(env_value("INITIAL_MODE") or "normal"),
        )


__all__ = [
    "ENV_PREFIX",
    "EngineConfig",
    "TelemetrySettings",
    "VimMode",
    "env_flag",
    "env_int",
    "env_value",
]
