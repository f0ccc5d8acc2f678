import json
from typing import Any

from ...enums import ComponentKind, KindType
from ...schema.models import FieldSchema
from ...utils import value_to_text
from ..keys import KeyEvent
from ..values import integer_value, json_value, number_value, string_value
from .base import FieldComponent, handle_text_edit


class TextComponent(FieldComponent):
    """Free text buffer for string, integer, number and JSON fields."""

    kind = ComponentKind.TEXT

    def __init__(self, schema: FieldSchema):
        self.buffer = "" if schema.default is None else self._render(schema, schema.default)

    @staticmethod
    def _render(schema: FieldSchema, value: Any) -> str:
        if schema.kind.type == KindType.JSON:
            return json.dumps(value, ensure_ascii=False)
        return value_to_text(value)

    def display_value(self, schema: FieldSchema) -> str:
        return self.buffer

    def handle_key(self, schema: FieldSchema, key: KeyEvent) -> bool:
        updated = handle_text_edit(self.buffer, schema, key)
        if updated is None:
            return False
        self.buffer = updated
        return True

    def seed_value(self, schema: FieldSchema, value: Any) -> None:
        if value is None:
            return
        self.buffer = self._render(schema, value)

    def current_value(self, schema: FieldSchema) -> Any:
        match schema.kind.type:
            case KindType.INTEGER:
                return integer_value(self.buffer, schema)
            case KindType.NUMBER:
                return number_value(self.buffer, schema)
            case KindType.JSON:
                return json_value(self.buffer, schema)
            case _:
                return string_value(self.buffer, schema)
