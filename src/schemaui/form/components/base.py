from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from ...enums import ComponentKind, KeyCode
from ...errors import FieldCoercionError
from ...schema.models import FieldSchema
from ..keys import KeyEvent
from ..palette import palette
from ..sessions import (
    CompositeEditorSession,
    CompositePopupData,
    CompositeVariantSummary,
    EntryEditorContext,
    EntryPanel,
    OverlayContext,
)
from ..values import adjust_numeric


class FieldComponent(ABC):
    """Editable state behind one field.

    Subclasses implement the four core operations; the remaining accessors
    default to "not supported" and are overridden by the widgets that need
    them (toggles, selections, popups, repeatable entries and overlays).
    """

    kind: ComponentKind

    @abstractmethod
    def display_value(self, schema: FieldSchema) -> str: ...

    @abstractmethod
    def handle_key(self, schema: FieldSchema, key: KeyEvent) -> bool: ...

    @abstractmethod
    def seed_value(self, schema: FieldSchema, value: Any) -> None: ...

    @abstractmethod
    def current_value(self, schema: FieldSchema) -> Any: ...

    def bool_value(self) -> Optional[bool]:
        return None

    def set_bool(self, value: bool) -> bool:
        return False

    def enum_state(self) -> Optional[tuple[list[str], int]]:
        return None

    def set_enum_index(self, index: int) -> bool:
        return False

    def multi_state(self) -> Optional[tuple[list[str], list[bool]]]:
        return None

    def set_multi_state(self, flags: list[bool]) -> bool:
        return False

    def composite_popup(self) -> Optional[CompositePopupData]:
        return None

    def active_composite_variants(self) -> list[int]:
        return []

    def composite_summaries(self) -> Optional[list[CompositeVariantSummary]]:
        return None

    def apply_composite_selection(self, selection: int, flags: Optional[list[bool]]) -> bool:
        return False

    def open_composite_editor(self, pointer: str, variant_index: int) -> CompositeEditorSession:
        raise FieldCoercionError(pointer, "field does not support composite editing")

    def restore_composite_editor(self, session: CompositeEditorSession) -> None:
        pass

    def collection_panel(self) -> Optional[tuple[list[str], int]]:
        return None

    def collection_selected_label(self) -> Optional[str]:
        return None

    def collection_selected_index(self) -> Optional[int]:
        return None

    def collection_select(self, delta: int) -> bool:
        return False

    def collection_set_selected(self, index: int) -> bool:
        return False

    def collection_add(self) -> bool:
        return False

    def collection_remove(self) -> bool:
        return False

    def collection_move(self, delta: int) -> bool:
        return False

    def open_entry_editor(self, pointer: str) -> EntryEditorContext:
        raise FieldCoercionError(pointer, "field does not support entry editing")

    def apply_entry_editor(self, entry_index: int, session) -> bool:
        return False

    def overlay_context(self, schema: FieldSchema) -> Optional[OverlayContext]:
        return None


def handle_text_edit(buffer: str, schema: FieldSchema, key: KeyEvent) -> Optional[str]:
    """Apply one key to a text buffer; returns the new text or None when ignored."""
    match key.code:
        case KeyCode.LEFT | KeyCode.RIGHT:
            direction = -1 if key.code == KeyCode.LEFT else 1
            return adjust_numeric(buffer, schema.kind.type, direction, key.shift, palette().numeric)
        case KeyCode.CHAR:
            if key.ctrl or not key.char:
                return None
            return buffer + key.char
        case KeyCode.BACKSPACE:
            return buffer[:-1]
        case KeyCode.DELETE:
            return ""
        case _:
            return None


def format_collection_value(label: str, length: int, selection: Optional[str]) -> str:
    hint = palette().collection.list_hint
    if length == 0:
        return f"{label}: empty {hint}"
    return f"{label}[{length}] • {selection or '<no selection>'} {hint}"


def collection_overlay_context(
    label: Optional[str], panel: Optional[tuple[list[str], int]]
) -> OverlayContext:
    context = OverlayContext(instructions=palette().collection.overlay_instructions)
    if label is not None:
        context.title = label
        context.description = label
    if panel is not None:
        entries, selected = panel
        context.entry_panel = EntryPanel(entries=entries, selected=selected)
    return context
