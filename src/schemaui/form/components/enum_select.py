import json
from typing import Any, Optional

from ...enums import ComponentKind, KeyCode
from ...schema.models import FieldSchema
from ..keys import KeyEvent
from ..palette import palette
from .base import FieldComponent


def option_label(value: Any) -> str:
    return value if isinstance(value, str) else json.dumps(value)


class EnumComponent(FieldComponent):
    kind = ComponentKind.ENUM

    def __init__(self, options: list[str], schema: FieldSchema):
        self.options = list(options)
        self.selected = 0
        if schema.default is not None:
            label = option_label(schema.default)
            if label in self.options:
                self.selected = self.options.index(label)

    def display_value(self, schema: FieldSchema) -> str:
        if not self.options:
            return "<none>"
        return self.options[self.selected]

    def handle_key(self, schema: FieldSchema, key: KeyEvent) -> bool:
        if not self.options or key.ctrl:
            return False
        match key.code:
            case KeyCode.UP | KeyCode.LEFT:
                return self._step(-1)
            case KeyCode.DOWN | KeyCode.RIGHT:
                return self._step(1)
            case _:
                return False

    def _step(self, delta: int) -> bool:
        count = len(self.options)
        target = self.selected + delta
        if palette().enum.wrap_around:
            target %= count
        else:
            target = max(0, min(count - 1, target))
        if target == self.selected:
            return False
        self.selected = target
        return True

    def seed_value(self, schema: FieldSchema, value: Any) -> None:
        label = option_label(value)
        if label in self.options:
            self.selected = self.options.index(label)

    def current_value(self, schema: FieldSchema) -> Any:
        if not self.options:
            return None
        return schema.kind.enum_value(self.selected)

    def enum_state(self) -> Optional[tuple[list[str], int]]:
        return list(self.options), self.selected

    def set_enum_index(self, index: int) -> bool:
        if not self.options:
            return False
        bounded = max(0, min(len(self.options) - 1, index))
        if bounded == self.selected:
            return False
        self.selected = bounded
        return True
