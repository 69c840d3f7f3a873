"""Key normalization and the keymap-driven dispatch loop shared by modes."""

from __future__ import annotations

from typing import Iterable, List, Mapping, MutableMapping, Optional, cast

from flatvim.keymaps.resolver import KeymapResolver, ResolutionMatch
from flatvim.runtime import telemetry

from .base_mode import KeyInput, Mode, ModeContext, ModeResult
from .operator_pipeline import CountParser

ESCAPE = "ESC"
ENTER = "ENTER"
BACKSPACE = "BACKSPACE"
DELETE = "DELETE"
TAB = "TAB"

_KEY_ALIASES = {
    "escape": ESCAPE,
    "esc": ESCAPE,
    "<esc>": ESCAPE,
    "enter": ENTER,
    "return": ENTER,
    "<cr>": ENTER,
    "backspace": BACKSPACE,
    "<bs>": BACKSPACE,
    "delete": DELETE,
    "del": DELETE,
    "<del>": DELETE,
    "tab": TAB,
    "<tab>": TAB,
    "left": "LEFT",
    "arrowleft": "LEFT",
    "right": "RIGHT",
    "arrowright": "RIGHT",
    "up": "UP",
    "arrowup": "UP",
    "down": "DOWN",
    "arrowdown": "DOWN",
    "space": " ",
}

_MODIFIER_ALIASES = {
    "control": "ctrl",
    "ctrl": "ctrl",
    "meta": "meta",
    "cmd": "meta",
    "alt": "alt",
    "option": "alt",
    "shift": "shift",
}

_ARGUMENT_KEYS = {ENTER: "\n", TAB: "\t"}


def normalize_key(
    key: str, modifiers: Iterable[str] = (), text: Optional[str] = None
) -> KeyInput:
    """Fold host key names and modifier spellings into the engine's vocabulary."""

    mods = []
    for modifier in modifiers:
        name = _MODIFIER_ALIASES.get(str(modifier).strip().lower())
        if name and name not in mods:
            mods.append(name)
    name = _KEY_ALIASES.get(key.lower(), key) if len(key) > 1 else key
    if len(name) == 1:
        # Shift is already folded into the character itself.
        mods = [mod for mod in mods if mod != "shift"]
        if "ctrl" in mods:
            name = name.lower()
        elif text is None:
            text = name
    return KeyInput(key=name, modifiers=tuple(sorted(mods)), text=text)


def key_to_token(key: KeyInput) -> str:
    if key.modifiers:
        modifier = "+".join(key.modifiers)
        return f"{modifier}+{key.key}"
    return key.key


def is_escape(key: KeyInput) -> bool:
    if key.key == ESCAPE and not key.modifiers:
        return True
    return key.modifiers == ("ctrl",) and key.key in ("[", "]")


def printable_text(key: KeyInput) -> Optional[str]:
    """The character a plain keypress types, or ``None`` for chords and named keys."""

    if any(mod in ("ctrl", "alt", "meta") for mod in key.modifiers):
        return None
    text = key.text if key.text is not None else key.key
    if len(text) == 1 and (text.isprintable() or text == "\t"):
        return text
    return None


def argument_char(key: KeyInput) -> Optional[str]:
    """Character argument for ``f``/``r``/``"``-style commands."""

    if not key.modifiers and key.key in _ARGUMENT_KEYS:
        return _ARGUMENT_KEYS[key.key]
    return printable_text(key)


def require_keymap_resolver(context: ModeContext) -> KeymapResolver:
    resolver = context.extras.get("keymap_resolver")
    if not isinstance(resolver, KeymapResolver):
        raise RuntimeError("ModeContext.extras missing 'keymap_resolver'")
    return resolver


def keymap_flag_context(context: ModeContext) -> Mapping[str, bool]:
    flags = context.extras.setdefault("keymap_flags", {})
    return cast(Mapping[str, bool], flags)


def update_flag(context: ModeContext, key: str, value: bool) -> None:
    flags = cast(
        MutableMapping[str, bool], context.extras.setdefault("keymap_flags", {})
    )
    flags[key] = value


class KeymapMode(Mode):
    """Mode that resolves key tokens through the keymap trie.

    Handles count digits, multi-key sequences (``gg``), and actions that need
    one more character (``f{char}``, ``r{char}``, ``"{register}``). Anything
    the keymap does not know goes to ``handle_unmapped``.
    """

    accepts_count = True

    def __init__(self, context: ModeContext) -> None:
        super().__init__(context)
        self.logger = telemetry.get_logger(f"flatvim.modes.{self.name}")
        self._resolver = require_keymap_resolver(context)
        self._flags = keymap_flag_context(context)
        self._counts = CountParser()
        self._pending: List[str] = []
        self._awaiting: Optional[ResolutionMatch] = None

    def reset(self) -> None:
        self._pending.clear()
        self._awaiting = None

    def on_enter(self, previous: Optional[str]) -> None:
        del previous
        self.reset()

    def on_exit(self, next_mode: Optional[str]) -> None:
        del next_mode
        self.reset()

    def abort(self) -> ModeResult:
        """Unknown input: forget every pending piece of the command."""

        self.reset()
        self.context.draft.clear()
        return ModeResult(consumed=False, status="unmapped")

    def handle_key(self, key: KeyInput) -> ModeResult:
        if self._awaiting is not None:
            return self._complete_argument(key)

        if (
            self.accepts_count
            and not self._pending
            and not key.modifiers
            and self._counts.feed(self.context.draft, key.key)
        ):
            return ModeResult(consumed=True, status="count")

        if is_escape(key) and self._pending:
            self._pending.clear()
            self.context.draft.clear()

        self._pending.append(key_to_token(key))
        update_flag(self.context, "operator_pending", self.context.draft.operator is not None)
        result = self._resolver.resolve(
            self.name, tuple(self._pending), context=self._flags
        )

        if result.status == "match" and result.match:
            self._pending.clear()
            if result.match.action.needs_argument:
                self._awaiting = result.match
                return ModeResult(consumed=True, status="pending", message="awaiting_char")
            return self._execute_match(result.match)

        if result.status == "pending":
            return ModeResult(consumed=True, status="pending", message="awaiting_sequence")

        self._pending.clear()
        return self.handle_unmapped(key)

    def handle_unmapped(self, key: KeyInput) -> ModeResult:
        del key
        return self.abort()

    def _complete_argument(self, key: KeyInput) -> ModeResult:
        match, self._awaiting = self._awaiting, None
        if is_escape(key):
            self.context.draft.clear()
            return ModeResult(consumed=True, status="cancelled")
        char = argument_char(key)
        if char is None or match is None:
            return self.abort()
        self.context.draft.argument = char
        return self._execute_match(match)

    def _execute_match(self, match: ResolutionMatch) -> ModeResult:
        with telemetry.span(
            "keymaps::execute",
            component="keymaps",
            metadata={"binding_id": match.binding.id, "action": match.action.id},
        ):
            outcome = match.action(self.context, match)

        if isinstance(outcome, ModeResult):
            return outcome
        return ModeResult(consumed=True)


__all__ = [
    "BACKSPACE",
    "DELETE",
    "ENTER",
    "ESCAPE",
    "KeymapMode",
    "TAB",
    "argument_char",
    "is_escape",
    "key_to_token",
    "keymap_flag_context",
    "normalize_key",
    "printable_text",
    "require_keymap_resolver",
    "update_flag",
]
