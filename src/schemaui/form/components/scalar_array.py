from typing import Any, Optional

from ...enums import ComponentKind
from ...schema.models import FieldSchema
from ..array import ScalarArrayState
from ..keys import KeyEvent
from ..sessions import EntryEditorContext, OverlayContext
from .base import FieldComponent, collection_overlay_context, format_collection_value


class ScalarArrayComponent(FieldComponent):
    kind = ComponentKind.SCALAR_ARRAY

    def __init__(self, schema: FieldSchema):
        self.state = ScalarArrayState(
            schema.pointer,
            schema.title,
            schema.description,
            schema.kind.inner,
            schema.default,
        )

    def display_value(self, schema: FieldSchema) -> str:
        return format_collection_value("Array", len(self.state), self.state.selected_label())

    def handle_key(self, schema: FieldSchema, key: KeyEvent) -> bool:
        return False

    def seed_value(self, schema: FieldSchema, value: Any) -> None:
        if isinstance(value, list):
            self.state.seed_entries(value)

    def current_value(self, schema: FieldSchema) -> Any:
        return self.state.build_value(schema.required)

    def collection_panel(self) -> Optional[tuple[list[str], int]]:
        return self.state.panel()

    def collection_selected_label(self) -> Optional[str]:
        return self.state.selected_label()

    def collection_selected_index(self) -> Optional[int]:
        return self.state.selected_index()

    def collection_select(self, delta: int) -> bool:
        return self.state.select(delta)

    def collection_set_selected(self, index: int) -> bool:
        return self.state.set_selected(index)

    def collection_add(self) -> bool:
        return self.state.add_entry()

    def collection_remove(self) -> bool:
        return self.state.remove_selected()

    def collection_move(self, delta: int) -> bool:
        return self.state.move_selected(delta)

    def open_entry_editor(self, pointer: str) -> EntryEditorContext:
        return self.state.open_selected_editor()

    def apply_entry_editor(self, entry_index: int, session) -> bool:
        return self.state.apply_editor_session(entry_index, session)

    def overlay_context(self, schema: FieldSchema) -> Optional[OverlayContext]:
        return collection_overlay_context(self.state.selected_label(), self.state.panel())
