"""State behind free-form `key -> value` maps."""

import copy
from typing import Any, Optional

from ..consts import KEY_VALUE_SECTION_ID, KEY_VALUE_SECTION_TITLE, SUMMARY_KEY_VALUE_LIMIT
from ..enums import KindType
from ..errors import FieldCoercionError
from ..schema.models import FieldKind, FieldSchema, KeyValueTemplate
from ..utils import pointer_for_key, summarize_value, value_to_text
from .sessions import EntryEditorContext, KeyValueEditorSession


class KeyValueEntry:
    __slots__ = ("key", "value")

    def __init__(self, key: str, value: Any):
        self.key = key
        self.value = value

    def label(self) -> str:
        return f"{self.key} = {summarize_value(self.value, SUMMARY_KEY_VALUE_LIMIT)}"


class KeyValueState:
    """Ordered entries plus a counter used to synthesize `key-N` placeholders."""

    def __init__(self, pointer: str, template: KeyValueTemplate, default: Any = None):
        self.pointer = pointer
        self.template = template
        self.entries: list[KeyValueEntry] = []
        self.selected = 0
        self.counter = 0
        if isinstance(default, dict):
            self.seed_entries(default)

    def __len__(self) -> int:
        return len(self.entries)

    def keys(self) -> list[str]:
        return [entry.key for entry in self.entries]

    def selected_index(self) -> Optional[int]:
        if not self.entries:
            return None
        return min(self.selected, len(self.entries) - 1)

    def summaries(self) -> list[str]:
        return [entry.label() for entry in self.entries]

    def selected_label(self) -> Optional[str]:
        index = self.selected_index()
        if index is None:
            return None
        return self.entries[index].label()

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

    def next_placeholder_key(self) -> str:
        existing = set(self.keys())
        while True:
            self.counter += 1
            candidate = f"key-{self.counter}"
            if candidate not in existing:
                return candidate

    def add_entry(self) -> bool:
        self.entries.append(
            KeyValueEntry(self.next_placeholder_key(), copy.deepcopy(self.template.value_default))
        )
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

    def seed_entries(self, mapping: dict[str, Any]) -> None:
        self.entries = [KeyValueEntry(key, copy.deepcopy(value)) for key, value in mapping.items()]
        self.selected = min(self.selected, max(len(self.entries) - 1, 0))

    def build_value(self, required: bool) -> Optional[dict[str, Any]]:
        if not self.entries:
            return {} if required else None
        result: dict[str, Any] = {}
        for entry in self.entries:
            key = entry.key.strip()
            if not key:
                raise FieldCoercionError(self.pointer, "key cannot be empty")
            if key in result:
                raise FieldCoercionError(pointer_for_key(self.pointer, key), f"duplicate key '{key}'")
            result[key] = copy.deepcopy(entry.value)
        return result

    def _key_field(self, entry: KeyValueEntry) -> FieldSchema:
        return FieldSchema(
            name="key",
            path=["key"],
            pointer="/key",
            title=self.template.key_title,
            description=self.template.key_description,
            section_id=KEY_VALUE_SECTION_ID,
            kind=FieldKind.scalar(KindType.STRING),
            required=True,
            default=entry.key,
        )

    def _value_field(self, entry: KeyValueEntry) -> FieldSchema:
        value = entry.value if entry.value is not None else self.template.value_default
        return FieldSchema(
            name="value",
            path=["value"],
            pointer="/value",
            title=self.template.value_title,
            description=self.template.value_description,
            section_id=KEY_VALUE_SECTION_ID,
            kind=self.template.value_kind,
            required=True,
            default=copy.deepcopy(value),
        )

    def open_selected_editor(self) -> EntryEditorContext:
        from .state import FormState

        index = self.selected_index()
        if index is None:
            raise FieldCoercionError(self.pointer, "no entry selected")
        entry = self.entries[index]
        form_state = FormState.from_fields(
            KEY_VALUE_SECTION_ID,
            KEY_VALUE_SECTION_TITLE,
            None,
            [self._key_field(entry), self._value_field(entry)],
        )
        if entry.value is not None:
            form_state.seed_from_value({"key": entry.key, "value": entry.value})
        return EntryEditorContext(
            entry_index=index,
            session=KeyValueEditorSession(
                title=entry.label(),
                description=self.template.value_description,
                schema=copy.deepcopy(self.template.entry_schema),
                form_state=form_state,
            ),
        )

    def apply_editor_session(self, entry_index: int, session: KeyValueEditorSession) -> bool:
        """Write an edited entry back; the entry is left untouched on error."""
        built = session.form_state.try_build_value()
        raw_key = built.get("key")
        key = raw_key if isinstance(raw_key, str) else value_to_text(raw_key if raw_key is not None else "")
        if not key.strip():
            raise FieldCoercionError(pointer_for_key(self.pointer, key), "key cannot be empty")
        for index, existing in enumerate(self.entries):
            if index != entry_index and existing.key == key:
                raise FieldCoercionError(pointer_for_key(self.pointer, key), f"duplicate key '{key}'")
        if not 0 <= entry_index < len(self.entries):
            raise FieldCoercionError(self.pointer, "invalid entry selection")

        entry = self.entries[entry_index]
        value = built.get("value")
        changed = entry.key != key or entry.value != value
        entry.key, entry.value = key, value
        if changed:
            self.selected = entry_index
        return changed
