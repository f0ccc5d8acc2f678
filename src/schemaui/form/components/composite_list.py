from typing import Any, Optional

from ...enums import ComponentKind
from ...schema.models import FieldSchema
from ..composite import CompositeListState
from ..keys import KeyEvent
from ..sessions import EntryEditorContext, OverlayContext
from .base import FieldComponent, collection_overlay_context, format_collection_value


class CompositeListComponent(FieldComponent):
    kind = ComponentKind.COMPOSITE_LIST

    def __init__(self, schema: FieldSchema):
        self.state = CompositeListState(schema.pointer, schema.kind.inner.composite, schema.default)

    def display_value(self, schema: FieldSchema) -> str:
        return format_collection_value("List", len(self.state), self.state.selected_label())

    def handle_key(self, schema: FieldSchema, key: KeyEvent) -> bool:
        return False

    def seed_value(self, schema: FieldSchema, value: Any) -> None:
        if isinstance(value, list):
            self.state.seed_entries(value)

    def current_value(self, schema: FieldSchema) -> Any:
        return self.state.build_value(schema.required)

    def collection_panel(self) -> Optional[tuple[list[str], int]]:
        index = self.state.selected_index()
        if index is None:
            return None
        return self.state.summaries(), index

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
        index, session = self.state.open_selected_editor()
        return EntryEditorContext(entry_index=index, session=session)

    def apply_entry_editor(self, entry_index: int, session) -> bool:
        self.state.restore_entry_editor(entry_index, session)
        return session.form_state.is_dirty()

    def overlay_context(self, schema: FieldSchema) -> Optional[OverlayContext]:
        return collection_overlay_context(self.state.selected_label(), self.collection_panel())
