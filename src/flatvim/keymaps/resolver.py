"""Resolve typed key tokens against the bindings of one mode.

Each mode gets a prefix tree of its bindings, rebuilt whenever the registry
revision moves. Walking the tree yields ``match`` (run an action), ``pending``
(the keys so far prefix a longer binding) or ``miss``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Mapping, Optional, Sequence

from flatvim.runtime.telemetry import span

from .models import ActionRef, Binding
from .registry import KeymapRegistry

Status = Literal["match", "pending", "miss"]


@dataclass(slots=True)
class _Node:
    bindings: list[Binding] = field(default_factory=list)
    children: Dict[str, "_Node"] = field(default_factory=dict)


@dataclass(slots=True)
class ModeTrie:
    mode: str
    revision: int
    root: _Node = field(default_factory=_Node)

    @classmethod
    def build(cls, registry: KeymapRegistry, mode: str) -> "ModeTrie":
        trie = cls(mode=mode, revision=registry.revision())
        for binding in registry.iter_bindings(mode):
            node = trie.root
            for token in binding.sequence.tokens:
                node = node.children.setdefault(token, _Node())
            node.bindings.append(binding)
        return trie

    def walk(self, tokens: Sequence[str]) -> tuple[Optional[_Node], int]:
        """Follow ``tokens`` from the root; stop at the first unknown token."""

        node = self.root
        for depth, token in enumerate(tokens):
            child = node.children.get(token)
            if child is None:
                return None, depth
            node = child
        return node, len(tokens)


@dataclass(frozen=True, slots=True)
class ResolutionMatch:
    binding: Binding
    action: ActionRef


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    status: Status
    match: Optional[ResolutionMatch] = None
    consumed: int = 0
    next_expected: tuple[str, ...] = ()


class KeymapResolver:
    def __init__(
        self, registry: KeymapRegistry, *, logger_name: str | None = None
    ) -> None:
        self._registry = registry
        self._logger_name = logger_name
        self._tries: Dict[str, ModeTrie] = {}

    @property
    def registry(self) -> KeymapRegistry:
        return self._registry

    def resolve(
        self,
        mode: str,
        tokens: Sequence[str],
        *,
        context: Optional[Mapping[str, bool]] = None,
    ) -> ResolutionResult:
        keys = tuple(tokens)
        with span(
            "keymaps::resolve",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"mode": mode, "keys": " ".join(keys)},
        ) as handle:
            result = self._resolve(mode, keys, context or {})
            handle.add_metadata("status", result.status)
            if result.match is not None:
                handle.add_metadata("binding_id", result.match.binding.id)
            return result

    def reset(self, mode: Optional[str] = None) -> None:
        if mode is None:
            self._tries.clear()
        else:
            self._tries.pop(mode, None)

    def _resolve(
        self, mode: str, keys: tuple[str, ...], flags: Mapping[str, bool]
    ) -> ResolutionResult:
        node, depth = self._trie(mode).walk(keys)
        if node is None:
            return ResolutionResult(status="miss", consumed=depth)

        candidates = [binding for binding in node.bindings if binding.allows(flags)]
        if candidates:
            best = min(candidates, key=lambda binding: (-binding.priority, binding.id))
            action = self._registry.get_action(best.action_id)
            return ResolutionResult(
                status="match",
                match=ResolutionMatch(binding=best, action=action),
                consumed=depth,
            )

        if node.children:
            return ResolutionResult(
                status="pending", consumed=depth, next_expected=tuple(sorted(node.children))
            )
        return ResolutionResult(status="miss", consumed=depth)

    def _trie(self, mode: str) -> ModeTrie:
        trie = self._tries.get(mode)
        if trie is None or trie.revision != self._registry.revision():
            trie = ModeTrie.build(self._registry, mode)
            self._tries[mode] = trie
        return trie


__all__ = [
    "KeymapResolver",
    "ModeTrie",
    "ResolutionMatch",
    "ResolutionResult",
]
