from typing import Any, Optional

from ...enums import ComponentKind, KeyCode
from ...schema.models import FieldSchema
from ..keys import KeyEvent
from ..palette import palette
from .base import FieldComponent


class BoolComponent(FieldComponent):
    kind = ComponentKind.BOOL

    def __init__(self, schema: FieldSchema):
        self.value = schema.default if isinstance(schema.default, bool) else False

    def display_value(self, schema: FieldSchema) -> str:
        return palette().boolean.label(self.value)

    def handle_key(self, schema: FieldSchema, key: KeyEvent) -> bool:
        presentation = palette().boolean
        if key.ctrl or key.alt:
            return False
        is_space = key.code == KeyCode.CHAR and key.char == " "
        is_arrow = key.code in (KeyCode.LEFT, KeyCode.RIGHT)
        if (is_space and presentation.toggle_with_space) or (
            is_arrow and presentation.toggle_with_arrows
        ):
            self.value = not self.value
            return True
        return False

    def seed_value(self, schema: FieldSchema, value: Any) -> None:
        if isinstance(value, bool):
            self.value = value

    def current_value(self, schema: FieldSchema) -> Any:
        return self.value

    def bool_value(self) -> Optional[bool]:
        return self.value

    def set_bool(self, value: bool) -> bool:
        if self.value == value:
            return False
        self.value = value
        return True
