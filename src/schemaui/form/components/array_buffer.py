import json
from typing import Any

from ...enums import ComponentKind
from ...schema.models import FieldSchema
from ..keys import KeyEvent
from ..values import json_array_value
from .base import FieldComponent, handle_text_edit


class ArrayBufferComponent(FieldComponent):
    """Arrays of free-form JSON edited as raw JSON text."""

    kind = ComponentKind.ARRAY_BUFFER

    def __init__(self, schema: FieldSchema):
        self.buffer = ""
        if isinstance(schema.default, list):
            self.buffer = json.dumps(schema.default, ensure_ascii=False)

    def display_value(self, schema: FieldSchema) -> str:
        return self.buffer.strip() or "[]"

    def handle_key(self, schema: FieldSchema, key: KeyEvent) -> bool:
        updated = handle_text_edit(self.buffer, schema, key)
        if updated is None:
            return False
        self.buffer = updated
        return True

    def seed_value(self, schema: FieldSchema, value: Any) -> None:
        if isinstance(value, list):
            self.buffer = json.dumps(value, ensure_ascii=False)

    def current_value(self, schema: FieldSchema) -> Any:
        return json_array_value(self.buffer, schema)
