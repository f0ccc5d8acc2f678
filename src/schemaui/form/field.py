from dataclasses import dataclass
from typing import Any, Optional

from ..enums import ComponentKind
from ..schema.models import FieldSchema
from .components import FieldComponent, build_component
from .keys import KeyEvent

COLLECTION_KINDS = (ComponentKind.SCALAR_ARRAY, ComponentKind.COMPOSITE_LIST, ComponentKind.KEY_VALUE)


@dataclass
class FieldState:
    """One field of a live form: its schema, its component and edit flags."""

    schema: FieldSchema
    component: FieldComponent
    dirty: bool = False
    error: Optional[str] = None

    @classmethod
    def from_schema(cls, schema: FieldSchema) -> "FieldState":
        return cls(schema=schema, component=build_component(schema))

    @property
    def pointer(self) -> str:
        return self.schema.pointer

    def after_edit(self) -> None:
        self.dirty = True
        self.error = None

    def display_value(self) -> str:
        return self.component.display_value(self.schema)

    def handle_key(self, key: KeyEvent) -> bool:
        if self.component.handle_key(self.schema, key):
            self.after_edit()
            return True
        return False

    def seed_value(self, value: Any) -> None:
        self.component.seed_value(self.schema, value)
        self.dirty = False
        self.error = None

    def current_value(self) -> Any:
        return self.component.current_value(self.schema)

    def set_error(self, message: str) -> None:
        self.error = message

    def clear_error(self) -> None:
        self.error = None

    def _edited(self, changed: bool) -> bool:
        if changed:
            self.after_edit()
        return changed

    def set_bool(self, value: bool) -> bool:
        return self._edited(self.component.set_bool(value))

    def set_enum_index(self, index: int) -> bool:
        return self._edited(self.component.set_enum_index(index))

    def set_multi_state(self, flags: list[bool]) -> bool:
        return self._edited(self.component.set_multi_state(flags))

    def apply_composite_selection(self, selection: int, flags: Optional[list[bool]]) -> bool:
        return self._edited(self.component.apply_composite_selection(selection, flags))

    def is_collection(self) -> bool:
        return self.component.kind in COLLECTION_KINDS

    def collection_add(self) -> bool:
        return self._edited(self.component.collection_add())

    def collection_remove(self) -> bool:
        return self._edited(self.component.collection_remove())

    def collection_move(self, delta: int) -> bool:
        return self._edited(self.component.collection_move(delta))

    def collection_select(self, delta: int) -> bool:
        return self.component.collection_select(delta)

    def collection_set_selected(self, index: int) -> bool:
        return self.component.collection_set_selected(index)

    def restore_composite_editor(self, session, mark_dirty: bool) -> None:
        self.component.restore_composite_editor(session)
        if mark_dirty:
            self.after_edit()

    def apply_entry_editor(self, entry_index: int, session) -> bool:
        return self._edited(self.component.apply_entry_editor(entry_index, session))
