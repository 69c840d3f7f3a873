"""Active-mode bookkeeping: routes keys and applies requested transitions."""

from __future__ import annotations

from typing import Dict, Optional, Type

from flatvim.keymaps.defaults import load_default_keymaps
from flatvim.keymaps.registry import KeymapRegistry
from flatvim.keymaps.resolver import KeymapResolver
from flatvim.runtime import telemetry

from .base_mode import KeyInput, Mode, ModeContext, ModeResult

KEYMAP_LOGGER = "flatvim.keymaps"


class ModeManager:
    def __init__(
        self,
        context: ModeContext,
        *,
        keymap_registry: KeymapRegistry | None = None,
        keymap_resolver: KeymapResolver | None = None,
        load_defaults: bool = True,
    ) -> None:
        self.context = context
        self._modes: Dict[str, Mode] = {}
        self._active: Optional[Mode] = None

        registry = keymap_registry
        if registry is None:
            registry = KeymapRegistry(logger_name=KEYMAP_LOGGER)
            if load_defaults:
                load_default_keymaps(registry)
        self.keymap_registry = registry
        self.keymap_resolver = keymap_resolver or KeymapResolver(
            registry, logger_name=KEYMAP_LOGGER
        )
        extras = self.context.extras
        extras.setdefault("keymap_registry", self.keymap_registry)
        extras.setdefault("keymap_resolver", self.keymap_resolver)
        extras.setdefault("keymap_flags", {})

    @property
    def active_mode(self) -> Optional[Mode]:
        return self._active

    @property
    def active_name(self) -> Optional[str]:
        return self._active.name if self._active is not None else None

    def register_mode(self, mode_cls: Type[Mode], /) -> Mode:
        mode = mode_cls(self.context)
        if mode.name in self._modes:
            raise ValueError(f"Mode '{mode.name}' already registered")
        self._modes[mode.name] = mode
        return mode

    def start(self, name: str) -> None:
        """Enter the first mode; no exit hook runs."""

        if self._active is not None:
            raise RuntimeError("ModeManager already started")
        self._enter(self._lookup(name), previous=None)

    def switch_mode(self, name: str) -> None:
        target = self._lookup(name)
        previous = self._active
        if previous is target:
            return
        if previous is not None:
            previous.on_exit(name)
        self._enter(target, previous=previous.name if previous else None)

    def handle_key(self, key: KeyInput) -> ModeResult:
        mode = self._active
        if mode is None:
            raise RuntimeError("ModeManager has not been started")
        with telemetry.span(
            f"mode::{mode.name}",
            component=True,
            metadata={"key": key.key, "mode": mode.name},
        ) as handle:
            result = mode.handle_key(key)
            handle.add_metadata("status", result.status)
        if result.switch_to:
            self.switch_mode(result.switch_to)
        return result

    def reset(self) -> None:
        """Drop half-typed input in every mode and the shared draft."""

        for mode in self._modes.values():
            mode.reset()
        self.context.draft.clear()

    def _lookup(self, name: str) -> Mode:
        try:
            return self._modes[name]
        except KeyError:
            raise KeyError(f"Unknown mode '{name}'") from None

    def _enter(self, mode: Mode, *, previous: Optional[str]) -> None:
        self._active = mode
        mode.on_enter(previous)
        payload = {"previous": previous, "mode": mode.name}
        telemetry.record_event("mode.switch", level="debug", data=payload)
        self.context.bus.emit("mode.switch", payload)


__all__ = ["ModeManager"]
