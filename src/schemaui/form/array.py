"""State behind arrays of scalar values."""

import copy
from typing import Any, Optional

from ..enums import KindType
from ..errors import FieldCoercionError
from ..schema.models import FieldKind, FieldSchema
from ..utils import summarize_value
from .sessions import ArrayEditorSession, EntryEditorContext
from .values import default_scalar

ENTRY_SECTION_ID = "array_entry"


def kind_to_schema_fragment(kind: FieldKind) -> dict[str, Any]:
    match kind.type:
        case KindType.STRING:
            return {"type": "string"}
        case KindType.INTEGER:
            return {"type": "integer"}
        case KindType.NUMBER:
            return {"type": "number"}
        case KindType.BOOLEAN:
            return {"type": "boolean"}
        case KindType.ENUM:
            return {"enum": list(kind.values or kind.options)}
        case _:
            return {}


class ScalarArrayState:
    def __init__(
        self,
        pointer: str,
        label: str,
        description: Optional[str],
        item_kind: FieldKind,
        default: Any = None,
    ):
        self.pointer = pointer
        self.label = label
        self.description = description
        self.item_kind = item_kind
        self.entry_schema = {
            "type": "object",
            "required": ["value"],
            "properties": {"value": kind_to_schema_fragment(item_kind)},
        }
        self.entries: list[Any] = []
        self.selected = 0
        if isinstance(default, list):
            self.seed_entries(default)

    def __len__(self) -> int:
        return len(self.entries)

    def selected_index(self) -> Optional[int]:
        if not self.entries:
            return None
        return min(self.selected, len(self.entries) - 1)

    def summaries(self) -> list[str]:
        return [f"#{index + 1} {summarize_value(value)}" for index, value in enumerate(self.entries)]

    def selected_label(self) -> Optional[str]:
        index = self.selected_index()
        if index is None:
            return None
        return f"#{index + 1} {summarize_value(self.entries[index])}"

    def panel(self) -> Optional[tuple[list[str], int]]:
        index = self.selected_index()
        if index is None:
            return None
        return self.summaries(), index

    def select(self, delta: int) -> bool:
        if not self.entries:
            return False
        target = max(0, min(len(self.entries) - 1, self.selected + delta))
        changed = target != self.selected
        self.selected = target
        return changed

    def set_selected(self, index: int) -> bool:
        if not 0 <= index < len(self.entries) or index == self.selected:
            return False
        self.selected = index
        return True

    def add_entry(self) -> bool:
        self.entries.append(default_scalar(self.item_kind))
        self.selected = len(self.entries) - 1
        return True

    def remove_selected(self) -> bool:
        index = self.selected_index()
        if index is None:
            return False
        del self.entries[index]
        if index >= len(self.entries):
            self.selected = max(len(self.entries) - 1, 0)
        return True

    def move_selected(self, delta: int) -> bool:
        index = self.selected_index()
        if index is None or len(self.entries) < 2:
            return False
        target = index + delta
        if not 0 <= target < len(self.entries):
            return False
        self.entries[index], self.entries[target] = self.entries[target], self.entries[index]
        self.selected = target
        return True

    def seed_entries(self, items: list[Any]) -> None:
        self.entries = copy.deepcopy(list(items))
        self.selected = min(self.selected, max(len(self.entries) - 1, 0))

    def build_value(self, required: bool) -> Optional[list[Any]]:
        if not self.entries:
            return [] if required else None
        return copy.deepcopy(self.entries)

    def _entry_field(self, value: Any) -> FieldSchema:
        return FieldSchema(
            name="value",
            path=["value"],
            pointer="/value",
            title=f"{self.label} item",
            description=self.description,
            section_id=ENTRY_SECTION_ID,
            kind=self.item_kind,
            required=True,
            default=copy.deepcopy(value),
        )

    def open_selected_editor(self) -> EntryEditorContext:
        from .state import FormState

        index = self.selected_index()
        if index is None:
            raise FieldCoercionError(self.pointer, "no entry selected")
        form_state = FormState.from_fields(
            ENTRY_SECTION_ID,
            self.label,
            self.description,
            [self._entry_field(self.entries[index])],
        )
        form_state.seed_from_value({"value": self.entries[index]})
        return EntryEditorContext(
            entry_index=index,
            session=ArrayEditorSession(
                title=f"{self.label} · entry #{index + 1}",
                description=self.description,
                schema=copy.deepcopy(self.entry_schema),
                form_state=form_state,
            ),
        )

    def apply_editor_session(self, entry_index: int, session: ArrayEditorSession) -> bool:
        built = session.form_state.try_build_value()
        if not 0 <= entry_index < len(self.entries):
            raise FieldCoercionError(self.pointer, "invalid entry selection")
        value = built.get("value")
        if self.entries[entry_index] == value:
            return False
        self.entries[entry_index] = value
        self.selected = entry_index
        return True
