"""Declarative key bindings loaded from a JSON keymap document."""

import json
import logging
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError, model_validator

from ..consts import DEFAULT_KEYMAP_RESOURCE
from ..enums import ActionKind, KeyCode, KeymapContext
from ..errors import KeymapException
from ..form.keys import KeyEvent

logger = logging.getLogger(__name__)

STEP_ACTIONS = {
    ActionKind.FIELD_STEP,
    ActionKind.SECTION_STEP,
    ActionKind.ROOT_STEP,
    ActionKind.LIST_MOVE,
    ActionKind.LIST_SELECT,
}

NAMED_KEYS = {
    "tab": KeyCode.TAB,
    "backtab": KeyCode.BACKTAB,
    "enter": KeyCode.ENTER,
    "esc": KeyCode.ESC,
    "escape": KeyCode.ESC,
    "left": KeyCode.LEFT,
    "right": KeyCode.RIGHT,
    "up": KeyCode.UP,
    "down": KeyCode.DOWN,
}


@dataclass(frozen=True)
class KeyAction:
    kind: ActionKind
    delta: int = 0


class RawAction(BaseModel):
    kind: ActionKind
    delta: Optional[int] = None

    @model_validator(mode="after")
    def require_delta(self) -> "RawAction":
        if self.kind in STEP_ACTIONS and self.delta is None:
            raise ValueError(f"action {self.kind.value} requires a delta")
        return self

    def to_action(self) -> KeyAction:
        return KeyAction(self.kind, self.delta or 0)


class RawEntry(BaseModel):
    id: str
    description: str
    contexts: list[str]
    action: RawAction
    combos: list[str]


@dataclass(frozen=True)
class KeyPattern:
    """One parsed combo such as `Ctrl+Shift+Tab`."""

    code: KeyCode
    char: Optional[str]
    ctrl: bool
    shift: bool
    alt: bool
    display: str

    @classmethod
    def parse(cls, spec: str) -> "KeyPattern":
        display = spec.strip()
        if not display:
            raise ValueError("combo cannot be empty")
        tokens = [token.strip() for token in display.split("+") if token.strip()]
        if display.endswith("++"):
            tokens.append("+")
        if not tokens:
            raise ValueError("combo must contain key")

        key_token = tokens.pop()
        normalized = key_token.lower()
        if normalized in NAMED_KEYS:
            code, char = NAMED_KEYS[normalized], None
        elif len(normalized) == 1:
            code, char = KeyCode.CHAR, normalized
        else:
            raise ValueError(f"unsupported key '{key_token}'")

        ctrl = shift = alt = False
        for token in tokens:
            match token.lower():
                case "ctrl" | "control":
                    ctrl = True
                case "shift":
                    shift = True
                case "alt":
                    alt = True
                case other:
                    raise ValueError(f"unsupported modifier '{other}'")
        return cls(code=code, char=char, ctrl=ctrl, shift=shift, alt=alt, display=display)

    @property
    def allows_extra_shift(self) -> bool:
        return not self.shift and self.code in (KeyCode.CHAR, KeyCode.BACKTAB)

    def matches(self, key: KeyEvent) -> bool:
        if key.code != self.code:
            return False
        if self.code == KeyCode.CHAR and (key.char or "").lower() != self.char:
            return False
        if key.ctrl != self.ctrl or key.alt != self.alt:
            return False
        if key.shift == self.shift:
            return True
        return key.shift and self.allows_extra_shift


@dataclass(frozen=True)
class KeyBinding:
    id: str
    action: KeyAction
    contexts: tuple[KeymapContext, ...]
    combos: tuple[KeyPattern, ...]
    snippet: str

    @classmethod
    def from_raw(cls, raw: RawEntry) -> "KeyBinding":
        contexts = []
        for context in raw.contexts:
            try:
                contexts.append(KeymapContext(context))
            except ValueError:
                logger.warning(f"Ignoring unknown keymap context '{context}' in entry {raw.id}")
        if not contexts:
            raise KeymapException(f"keymap entry {raw.id} must declare contexts")

        combos = []
        for combo in raw.combos:
            try:
                combos.append(KeyPattern.parse(combo))
            except ValueError as e:
                raise KeymapException(f"failed to parse combo '{combo}' for {raw.id}: {e}") from e
        if not combos:
            raise KeymapException(f"keymap entry {raw.id} must declare combos")

        display = "/".join(pattern.display for pattern in combos)
        return cls(
            id=raw.id,
            action=raw.action.to_action(),
            contexts=tuple(contexts),
            combos=tuple(combos),
            snippet=f"{display} -> {raw.description}",
        )

    def matches(self, key: KeyEvent) -> bool:
        return any(pattern.matches(key) for pattern in self.combos)


class Keymap:
    """Ordered bindings; the first entry whose combo matches wins."""

    def __init__(self, bindings: list[KeyBinding]):
        self.bindings = bindings

    @classmethod
    def from_json(cls, raw: str) -> "Keymap":
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise KeymapException(f"invalid keymap JSON: {e}") from e
        if not isinstance(data, list):
            raise KeymapException("keymap document must be a list of entries")

        bindings = []
        for item in data:
            try:
                entry = RawEntry.model_validate(item)
            except ValidationError as e:
                raise KeymapException(f"invalid keymap entry: {e}") from e
            bindings.append(KeyBinding.from_raw(entry))
        return cls(bindings)

    @classmethod
    def builtin(cls) -> "Keymap":
        source = resources.files("schemaui").joinpath("keymap", DEFAULT_KEYMAP_RESOURCE)
        return cls.from_json(source.read_text(encoding="utf-8"))

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Keymap":
        """Load the keymap at `path`, or the built-in one when no path is given."""
        if path is None:
            return cls.builtin()
        keymap_path = Path(path).expanduser()
        if not keymap_path.exists():
            raise KeymapException(f"keymap file not found: {path}")
        logger.debug(f"Loading keymap from {keymap_path}")
        return cls.from_json(keymap_path.read_text(encoding="utf-8"))

    def classify(self, key: KeyEvent) -> Optional[KeyAction]:
        for binding in self.bindings:
            if binding.matches(key):
                return binding.action
        return None

    def help_text(self, context: KeymapContext) -> Optional[str]:
        snippets = [binding.snippet for binding in self.bindings if context in binding.contexts]
        return " • ".join(snippets) if snippets else None
