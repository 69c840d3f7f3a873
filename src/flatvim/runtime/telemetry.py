"""Logging and profiling for flatvim, on top of telelog.

Engine code only uses four entry points:

``configure(...)`` -- choose the telelog configuration (settings, preset or raw)
``get_logger(name)`` -- a cached ``telelog.Logger`` under the active config
``record_event(name, ...)`` -- one structured log record at a chosen level
``span(name, ...)`` -- profile a block, optionally as a tracked component
"""

from __future__ import annotations

from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, Optional, cast

import telelog  # type: ignore[import]

from flatvim.config import TelemetrySettings

tl = cast(Any, telelog)

PRESETS: Dict[str, Callable[[TelemetrySettings], TelemetrySettings]] = {
    "development": lambda base: TelemetrySettings(
        logger_name=base.logger_name, level="DEBUG"
    ),
    "production": lambda base: TelemetrySettings(
        logger_name=base.logger_name,
        level="INFO",
        console=False,
        log_file=base.log_file or "flatvim.log",
        buffered=True,
    ),
    "quiet": lambda base: TelemetrySettings(
        logger_name=base.logger_name, level="ERROR", console=False
    ),
}


@dataclass(slots=True)
class _State:
    settings: TelemetrySettings
    config: Optional[Any] = None
    loggers: Dict[str, Any] = field(default_factory=dict)


_state = _State(settings=TelemetrySettings.from_env())


def _text(value: Any) -> str:
    if isinstance(value, (dict, list, tuple, set)):
        return repr(value)
    return str(value)


def build_config(settings: TelemetrySettings) -> Any:
    """``telelog.Config`` for ``settings``; profiling is always on."""

    config = tl.Config()
    config.with_min_level(settings.level)
    config.with_console_output(settings.console)
    if settings.console:
        config.with_colored_output(settings.colored)
    if settings.json:
        config.with_json_format(True)
    if settings.log_file:
        config.with_file_output(settings.log_file)
    if settings.buffered:
        config.with_buffering(True)
        config.with_buffer_size(settings.buffer_size)
    config.with_profiling(True)
    return config


def configure(
    *,
    config: Optional[Any] = None,
    preset: Optional[str] = None,
    settings: Optional[TelemetrySettings] = None,
) -> None:
    """Swap the active telelog configuration and drop cached loggers.

    Give at most one of ``config`` (a ready ``telelog.Config``), ``preset``
    (``development``, ``production`` or ``quiet``) or ``settings``. With none,
    the ``FLATVIM_*`` environment is read again.
    """

    if sum(option is not None for option in (config, preset, settings)) > 1:
        raise ValueError("Provide only one of `config`, `preset` or `settings`.")

    if preset is not None:
        factory = PRESETS.get(preset.lower())
        if factory is None:
            raise ValueError(f"Unknown preset '{preset}'.")
        settings = factory(_state.settings)
    if config is None:
        _state.settings = settings or TelemetrySettings.from_env()
        config = build_config(_state.settings)
    else:
        config.with_profiling(True)

    _state.config = config
    _state.loggers.clear()


def get_logger(name: Optional[str] = None) -> Any:
    key = name or _state.settings.logger_name
    logger = _state.loggers.get(key)
    if logger is None:
        if _state.config is None:
            _state.config = build_config(_state.settings)
        logger = tl.Logger.with_config(key, _state.config)
        _state.loggers[key] = logger
    return logger


def _log(logger: Any, level: str, message: str, fields: Dict[str, Any]) -> None:
    name = level.lower()
    structured = getattr(logger, f"{name}_with", None)
    if structured is not None:
        structured(message, [(str(key), _text(value)) for key, value in fields.items()])
        return
    plain = getattr(logger, name, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    plain(f"{message} {fields}")


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Log ``event::<name>`` with ``data`` as key/value pairs."""

    _log(get_logger(logger_name), level, f"event::{name}", {"event": name, **(data or {})})


@dataclass(slots=True)
class SpanHandle:
    logger: Any
    name: str
    component: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _text(value)

    def fail(self, reason: str) -> None:
        fields: Dict[str, Any] = {"span": self.name, **self.metadata, "reason": reason}
        if self.component:
            fields["component"] = self.component
        _log(self.logger, "error", "span::fail", fields)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile the block with ``logger.profile(name)``.

    ``component=True`` also tracks it as a component called ``name``; a string
    names the component. ``metadata`` is pushed as logger context while the
    block runs. An escaping exception is reported through ``fail`` and
    re-raised.
    """

    log = get_logger(logger_name)
    component_name = name if component is True else (component or None)
    context = {key: _text(value) for key, value in (metadata or {}).items()}
    handle = SpanHandle(log, name, component_name, dict(context))

    with ExitStack() as stack:
        for key, value in context.items():
            log.add_context(key, value)
            stack.callback(log.remove_context, key)
        if component_name:
            stack.enter_context(log.track_component(component_name))
        stack.enter_context(log.profile(name))
        try:
            yield handle
        except Exception as exc:
            handle.fail(f"{type(exc).__name__}: {exc}")
            raise


__all__ = [
    "PRESETS",
    "SpanHandle",
    "build_config",
    "configure",
    "get_logger",
    "record_event",
    "span",
]
