from typing import Any, Optional

from ...enums import ComponentKind
from ...schema.models import FieldKind, FieldSchema
from ..keys import KeyEvent
from ..palette import palette
from .base import FieldComponent
from .enum_select import option_label


class MultiSelectComponent(FieldComponent):
    """Array of enum values, edited through the selection popup only."""

    kind = ComponentKind.MULTI_SELECT

    def __init__(self, inner: FieldKind, default: Any = None):
        self.inner = inner
        self.options = list(inner.options)
        self.selected = self._flags_for(default) or [False] * len(self.options)

    def _flags_for(self, value: Any) -> Optional[list[bool]]:
        if not isinstance(value, list):
            return None
        labels = {option_label(item) for item in value}
        return [option in labels for option in self.options]

    def _chosen(self) -> list[int]:
        return [i for i, flag in enumerate(self.selected) if flag]

    def display_value(self, schema: FieldSchema) -> str:
        chosen = [self.options[i] for i in self._chosen()]
        if not chosen:
            return f"[] {palette().collection.list_hint}"
        return f"[{', '.join(chosen)}]"

    def handle_key(self, schema: FieldSchema, key: KeyEvent) -> bool:
        return False

    def seed_value(self, schema: FieldSchema, value: Any) -> None:
        flags = self._flags_for(value)
        if flags is not None:
            self.selected = flags

    def current_value(self, schema: FieldSchema) -> Any:
        return [self.inner.enum_value(i) for i in self._chosen()]

    def multi_state(self) -> Optional[tuple[list[str], list[bool]]]:
        return list(self.options), list(self.selected)

    def set_multi_state(self, flags: list[bool]) -> bool:
        if len(flags) != len(self.selected) or list(flags) == self.selected:
            return False
        self.selected = list(flags)
        return True
