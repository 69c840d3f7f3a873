"""Key strokes, bindings and the actions they name."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping

MODIFIERS = frozenset({"alt", "ctrl", "meta", "shift"})


@dataclass(frozen=True, slots=True)
class KeyStroke:
    key: str
    modifiers: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.key:
            raise ValueError("key cannot be empty")
        cleaned = {mod.strip().lower() for mod in self.modifiers if mod.strip()}
        object.__setattr__(self, "modifiers", tuple(sorted(cleaned)))

    @property
    def token(self) -> str:
        return "+".join((*self.modifiers, self.key))

    @classmethod
    def parse(cls, token: str) -> "KeyStroke":
        """``ctrl+r`` is a chord, ``ctrl+[`` too; a lone ``+`` is the plus key."""

        *head, key = token.split("+") if len(token) > 1 else [token]
        if head and key and all(part.lower() in MODIFIERS for part in head):
            return cls(key, tuple(head))
        return cls(token)


@dataclass(frozen=True, slots=True)
class KeySequence:
    strokes: tuple[KeyStroke, ...]

    def __post_init__(self) -> None:
        if not self.strokes:
            raise ValueError("KeySequence requires at least one stroke")

    @property
    def tokens(self) -> tuple[str, ...]:
        return tuple(stroke.token for stroke in self.strokes)

    def __len__(self) -> int:
        return len(self.strokes)

    @classmethod
    def from_strings(cls, *keys: str) -> "KeySequence":
        return cls(tuple(KeyStroke.parse(key) for key in keys if key))

    @classmethod
    def from_chars(cls, keys: str) -> "KeySequence":
        return cls.from_strings(*keys)


@dataclass(frozen=True, slots=True)
class WhenClause:
    """Flag test on the dispatcher state, e.g. ``operator_pending`` or ``!operator_pending``."""

    flag: str
    expected: bool = True

    def __post_init__(self) -> None:
        if not self.flag:
            raise ValueError("flag cannot be empty")

    @classmethod
    def parse(cls, expression: str) -> "WhenClause":
        expr = expression.strip()
        negated = expr.startswith("!")
        flag = expr[1:] if negated else expr
        if not flag:
            raise ValueError(f"Invalid when expression '{expression}'")
        return cls(flag, not negated)

    def evaluate(self, flags: Mapping[str, bool]) -> bool:
        return bool(flags.get(self.flag, False)) is self.expected


@dataclass(frozen=True, slots=True)
class ActionRef:
    """Named handler invoked as ``handler(context, match)``.

    ``metadata["argument"] == "char"`` makes the dispatcher wait for one more
    key and store it on the draft before calling the handler.
    """

    id: str
    handler: Callable[..., object]
    description: str = ""
    metadata: Mapping[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("ActionRef id cannot be empty")
        if not callable(self.handler):
            raise TypeError("handler must be callable")
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def needs_argument(self) -> bool:
        return self.metadata.get("argument") == "char"

    def __call__(self, *args: object, **kwargs: object) -> object:
        return self.handler(*args, **kwargs)


@dataclass(frozen=True, slots=True)
class Binding:
    id: str
    mode: str
    sequence: KeySequence
    action_id: str
    description: str = ""
    when: tuple[WhenClause, ...] = ()
    priority: int = 0

    def __post_init__(self) -> None:
        for name in ("id", "mode", "action_id"):
            if not getattr(self, name):
                raise ValueError(f"binding {name} cannot be empty")
        clauses = tuple(
            clause if isinstance(clause, WhenClause) else WhenClause.parse(str(clause))
            for clause in self.when
        )
        object.__setattr__(self, "when", clauses)

    @property
    def tokens(self) -> tuple[str, ...]:
        return self.sequence.tokens

    def allows(self, flags: Mapping[str, bool]) -> bool:
        return all(clause.evaluate(flags) for clause in self.when)

    def disjoint_from(self, other: "Binding") -> bool:
        """True when some flag is required set by one binding and unset by the other."""

        mine = {clause.flag: clause.expected for clause in self.when}
        return any(
            clause.flag in mine and mine[clause.flag] is not clause.expected
            for clause in other.when
        )


__all__ = [
    "ActionRef",
    "Binding",
    "KeySequence",
    "KeyStroke",
    "MODIFIERS",
    "WhenClause",
]
