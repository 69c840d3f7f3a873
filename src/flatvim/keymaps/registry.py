"""Store of actions and per-mode bindings shared by every resolver."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional

from flatvim.runtime.telemetry import span

from .models import ActionRef, Binding


@dataclass(slots=True)
class RegistryStats:
    action_count: int
    binding_count: int
    modes: tuple[str, ...]


class KeymapConflictError(RuntimeError):
    """A binding would shadow others on the same keys under overlapping flags."""

    def __init__(self, binding: Binding, conflicts: Iterable[Binding]):
        self.binding = binding
        self.conflicts = tuple(conflicts)
        names = ", ".join(conflict.id for conflict in self.conflicts)
        super().__init__(f"Binding '{binding.id}' conflicts with {names}")


class KeymapRegistry:
    """Actions by id and bindings by mode and key tokens.

    ``revision`` grows with every binding change so resolvers can tell when
    their tries are stale.
    """

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._actions: Dict[str, ActionRef] = {}
        self._bindings: Dict[str, Binding] = {}
        # mode -> key tokens -> binding ids
        self._by_keys: Dict[str, Dict[tuple[str, ...], list[str]]] = {}
        self._logger_name = logger_name
        self._revision = 0

    def revision(self) -> int:
        return self._revision

    def get_action(self, action_id: str) -> ActionRef:
        action = self._actions.get(action_id)
        if action is None:
            raise KeyError(f"Action '{action_id}' is not registered")
        return action

    def get_binding(self, binding_id: str) -> Binding:
        binding = self._bindings.get(binding_id)
        if binding is None:
            raise KeyError(f"Binding '{binding_id}' is not registered")
        return binding

    def register_action(self, action: ActionRef, *, replace: bool = False) -> ActionRef:
        if action.id in self._actions and not replace:
            raise ValueError(f"Action '{action.id}' already registered")
        self._actions[action.id] = action
        return action

    def register_binding(self, binding: Binding, *, replace: bool = False) -> Binding:
        """Add ``binding``; with ``replace`` it evicts same-id and conflicting ones."""

        with span(
            "keymaps::register_binding",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"binding_id": binding.id, "mode": binding.mode},
        ) as handle:
            if binding.action_id not in self._actions:
                handle.add_metadata("missing_action", binding.action_id)
                raise KeyError(
                    f"Binding '{binding.id}' references unknown action '{binding.action_id}'"
                )
            conflicts = self.conflicts_for(binding)
            if not replace:
                if binding.id in self._bindings:
                    raise ValueError(f"Binding id '{binding.id}' already registered")
                if conflicts:
                    handle.add_metadata("conflicts", len(conflicts))
                    raise KeymapConflictError(binding, conflicts)

            for stale in conflicts:
                self._remove(stale)
            if binding.id in self._bindings:
                self._remove(self._bindings[binding.id])
            self._bindings[binding.id] = binding
            slot = self._by_keys.setdefault(binding.mode, {})
            slot.setdefault(binding.tokens, []).append(binding.id)
            self._revision += 1
            return binding

    def unregister_binding(self, binding_id: str) -> Optional[Binding]:
        binding = self._bindings.get(binding_id)
        if binding is None:
            return None
        self._remove(binding)
        self._revision += 1
        return binding

    def iter_bindings(self, mode: Optional[str] = None) -> Iterator[Binding]:
        if mode is None:
            yield from self._bindings.values()
            return
        for ids in self._by_keys.get(mode, {}).values():
            for binding_id in sorted(ids):
                yield self._bindings[binding_id]

    def stats(self) -> RegistryStats:
        return RegistryStats(
            action_count=len(self._actions),
            binding_count=len(self._bindings),
            modes=tuple(sorted(self._by_keys)),
        )

    def conflicts_for(self, binding: Binding) -> list[Binding]:
        same_keys = self._by_keys.get(binding.mode, {}).get(binding.tokens, [])
        return [
            self._bindings[binding_id]
            for binding_id in same_keys
            if binding_id != binding.id
            and not binding.disjoint_from(self._bindings[binding_id])
        ]

    def _remove(self, binding: Binding) -> None:
        self._bindings.pop(binding.id, None)
        by_keys = self._by_keys.get(binding.mode, {})
        ids = by_keys.get(binding.tokens, [])
        if binding.id in ids:
            ids.remove(binding.id)
        if not ids:
            by_keys.pop(binding.tokens, None)
        if not by_keys:
            self._by_keys.pop(binding.mode, None)


__all__ = [
    "KeymapConflictError",
    "KeymapRegistry",
    "RegistryStats",
]
