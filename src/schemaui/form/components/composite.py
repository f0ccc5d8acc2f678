from typing import Any, Optional

from ...enums import ComponentKind
from ...schema.models import FieldSchema
from ..composite import CompositeState
from ..keys import KeyEvent
from ..palette import palette
from ..sessions import CompositeEditorSession, CompositePopupData, CompositeVariantSummary
from .base import FieldComponent


class CompositeComponent(FieldComponent):
    """oneOf/anyOf field; selection happens in the popup, editing in an overlay."""

    kind = ComponentKind.COMPOSITE

    def __init__(self, schema: FieldSchema):
        self.state = CompositeState(schema.pointer, schema.kind.composite)
        if schema.default is not None:
            self.state.seed_from_value(schema.default)

    def display_value(self, schema: FieldSchema) -> str:
        hints = palette().composite
        return self.state.summary() + (hints.multi_hint if self.state.is_multi else hints.single_hint)

    def handle_key(self, schema: FieldSchema, key: KeyEvent) -> bool:
        return False

    def seed_value(self, schema: FieldSchema, value: Any) -> None:
        if value is not None:
            self.state.seed_from_value(value)

    def current_value(self, schema: FieldSchema) -> Any:
        return self.state.build_value(schema.required)

    def composite_popup(self) -> Optional[CompositePopupData]:
        options = self.state.option_titles()
        if not options:
            return None
        selected = min(self.state.selected_index() or 0, len(options) - 1)
        return CompositePopupData(
            options=options,
            selected=selected,
            multi=self.state.is_multi,
            active=self.state.active_flags(),
        )

    def active_composite_variants(self) -> list[int]:
        return self.state.active_indices()

    def composite_summaries(self) -> Optional[list[CompositeVariantSummary]]:
        return self.state.active_summaries()

    def apply_composite_selection(self, selection: int, flags: Optional[list[bool]]) -> bool:
        if self.state.is_multi:
            return flags is not None and self.state.apply_multi(flags)
        return self.state.apply_single(selection)

    def open_composite_editor(self, pointer: str, variant_index: int) -> CompositeEditorSession:
        return self.state.open_editor_session(pointer, variant_index)

    def restore_composite_editor(self, session: CompositeEditorSession) -> None:
        self.state.restore_editor_session(session)
