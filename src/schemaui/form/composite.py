"""State behind oneOf/anyOf fields and lists of them."""

import copy
import logging
from typing import Any, Optional

from ..consts import WRAPPED_VALUE_FIELD
from ..enums import CompositeMode
from ..errors import FieldCoercionError, SchemaError
from ..schema.models import CompositeSpec, CompositeVariant
from .sessions import CompositeEditorSession, CompositeVariantSummary

logger = logging.getLogger(__name__)


def variant_matches(variant: CompositeVariant, value: Any) -> bool:
    """Cheap structural check used to pick the variant a seed value belongs to.

    Object variants match when every property pinned by `const` (or a
    single-valued `enum`) agrees with `value`; variants with no pinned
    properties never claim a value. Non-object variants match on JSON type.
    """
    schema = variant.json_schema
    if variant.is_object:
        if not isinstance(value, dict):
            return False
        pinned = {}
        for name, prop in (schema.get("properties") or {}).items():
            if not isinstance(prop, dict):
                continue
            if "const" in prop:
                pinned[name] = prop["const"]
            elif isinstance(prop.get("enum"), list) and len(prop["enum"]) == 1:
                pinned[name] = prop["enum"][0]
        if not pinned:
            return False
        return all(name in value and value[name] == expected for name, expected in pinned.items())

    declared = schema.get("type")
    if "const" in schema:
        return schema["const"] == value
    if isinstance(schema.get("enum"), list):
        return value in schema["enum"]
    match declared:
        case "string":
            return isinstance(value, str)
        case "boolean":
            return isinstance(value, bool)
        case "integer":
            return isinstance(value, int) and not isinstance(value, bool)
        case "number":
            return isinstance(value, (int, float)) and not isinstance(value, bool)
        case "array":
            return isinstance(value, list)
        case "null":
            return value is None
        case _:
            return False


class CompositeVariantState:
    def __init__(self, variant: CompositeVariant, active: bool = False):
        self.variant = variant
        self.active = active
        self.form = None
        self.preview = None

    @property
    def title(self) -> str:
        return self.variant.title

    @property
    def description(self) -> Optional[str]:
        return self.variant.description

    def compile_form(self, pointer: str):
        from ..schema.compiler import build_form_schema, variant_form_document
        from .state import FormState

        try:
            schema = build_form_schema(variant_form_document(self.variant))
        except SchemaError as e:
            raise FieldCoercionError(
                pointer, f"failed to parse composite variant '{self.title}': {e}"
            ) from e
        return FormState.from_schema(schema)

    def ensure_form(self, pointer: str):
        """Compile the variant sub-form on first use."""
        if self.form is None:
            self.form = self.compile_form(pointer)
            logger.debug(f"Materialized variant '{self.title}' form for {pointer}")
        return self.form

    def seed(self, pointer: str, value: Any) -> None:
        form = self.ensure_form(pointer)
        if not self.variant.is_object:
            value = {WRAPPED_VALUE_FIELD: value}
        form.seed_from_value(value)

    def build(self, pointer: str) -> Any:
        form = self.ensure_form(pointer)
        try:
            value = form.try_build_value()
        except FieldCoercionError as e:
            raise e.with_prefix(pointer) from e
        if not self.variant.is_object:
            return value.get(WRAPPED_VALUE_FIELD)
        return value

    def snapshot(self, pointer: str) -> CompositeVariantSummary:
        """List the variant's sections and current values.

        A variant that was never materialized is listed from a separate
        preview form so that rendering it leaves the built value unchanged.
        """
        summary = CompositeVariantSummary(title=self.title, description=self.description)
        form = self.form
        if form is None:
            try:
                if self.preview is None:
                    self.preview = self.compile_form(pointer)
            except FieldCoercionError as e:
                summary.lines.append(f"Error: {e.message}")
                return summary
            form = self.preview

        sections = [section for root in form.roots for section in root.sections]
        if not sections:
            summary.lines.append("No fields defined for this variant.")
        for section in sections:
            summary.lines.append(f"Section: {section.title}")
            if not section.fields:
                summary.lines.append("  • <empty>")
            for field_state in section.fields:
                summary.lines.append(f"  • {field_state.schema.display_label()} = {field_state.display_value()}")
        return summary


class CompositeState:
    """Per-variant slots for a oneOf/anyOf field.

    OneOf keeps exactly one slot active (the first one initially); anyOf
    starts with none and accepts any subset of flags.
    """

    def __init__(self, pointer: str, spec: CompositeSpec):
        self.pointer = pointer
        self.mode = spec.mode
        self.variants = [
            CompositeVariantState(variant, self.mode == CompositeMode.ONE_OF and index == 0)
            for index, variant in enumerate(spec.variants)
        ]

    @property
    def is_multi(self) -> bool:
        return self.mode == CompositeMode.ANY_OF

    def summary(self) -> str:
        titles = [variant.title for variant in self.variants if variant.active]
        if self.is_multi:
            return f"Variants: {', '.join(titles)}" if titles else "Variants: []"
        return f"Variant: {titles[0]}" if titles else "Variant: <none>"

    def option_titles(self) -> list[str]:
        return [variant.title for variant in self.variants]

    def active_flags(self) -> list[bool]:
        return [variant.active for variant in self.variants]

    def active_indices(self) -> list[int]:
        return [index for index, variant in enumerate(self.variants) if variant.active]

    def active_summaries(self) -> list[CompositeVariantSummary]:
        return [variant.snapshot(self.pointer) for variant in self.variants if variant.active]

    def selected_index(self) -> Optional[int]:
        indices = self.active_indices()
        return indices[0] if indices else None

    def apply_single(self, index: int) -> bool:
        if self.is_multi or not self.variants:
            return False
        target = min(max(index, 0), len(self.variants) - 1)
        changed = False
        for position, variant in enumerate(self.variants):
            active = position == target
            if variant.active != active:
                variant.active = active
                changed = True
        self.variants[target].ensure_form(self.pointer)
        return changed

    def apply_multi(self, flags: list[bool]) -> bool:
        if not self.is_multi or len(flags) != len(self.variants):
            return False
        changed = False
        for variant, flag in zip(self.variants, flags):
            if variant.active != bool(flag):
                variant.active = bool(flag)
                changed = True
            if variant.active:
                variant.ensure_form(self.pointer)
        return changed

    def open_editor_session(self, pointer: str, variant_index: int) -> CompositeEditorSession:
        if not 0 <= variant_index < len(self.variants):
            raise FieldCoercionError(pointer, "invalid variant selection")
        variant = self.variants[variant_index]
        if not variant.active:
            raise FieldCoercionError(pointer, "variant is not active; select it before editing")
        form = copy.deepcopy(variant.ensure_form(pointer))
        return CompositeEditorSession(
            variant_index=variant_index,
            title=variant.title,
            description=variant.description,
            schema=variant_form_schema(variant.variant),
            form_state=form,
        )

    def restore_editor_session(self, session: CompositeEditorSession) -> None:
        if 0 <= session.variant_index < len(self.variants):
            self.variants[session.variant_index].form = session.form_state

    def seed_from_value(self, value: Any) -> None:
        """Activate the variant(s) `value` belongs to and seed their forms."""
        if not self.variants:
            return
        if self.is_multi:
            items = value if isinstance(value, list) else [value]
            flags = [False] * len(self.variants)
            for item in items:
                index = self._match(item)
                flags[index] = True
                self.variants[index].seed(self.pointer, item)
            self.apply_multi(flags)
            return

        index = self._match(value)
        self.apply_single(index)
        self.variants[index].seed(self.pointer, value)

    def _match(self, value: Any) -> int:
        for index, variant in enumerate(self.variants):
            if variant_matches(variant.variant, value):
                return index
        if isinstance(value, dict) and value:
            for index, variant in enumerate(self.variants):
                properties = variant.variant.json_schema.get("properties") or {}
                if variant.variant.is_object and set(value) <= set(properties):
                    return index
        return 0

    def build_value(self, required: bool) -> Any:
        active = [variant for variant in self.variants if variant.active]
        if not required:
            # variants never seeded, selected or opened contribute nothing
            active = [variant for variant in active if variant.form is not None]
        if not self.is_multi:
            if active:
                return active[0].build(self.pointer)
            if required:
                raise FieldCoercionError(self.pointer, "oneOf requires a selected variant")
            return None

        values = [variant.build(self.pointer) for variant in active]
        if not values:
            if required:
                raise FieldCoercionError(
                    self.pointer, "anyOf requires at least one active variant"
                )
            return None
        return values


def variant_form_schema(variant: CompositeVariant) -> dict[str, Any]:
    from ..schema.compiler import variant_form_document

    return copy.deepcopy(variant_form_document(variant))


class CompositeListState:
    """Ordered composites, each addressed as `<list>/entry_<i>`."""

    def __init__(self, pointer: str, spec: CompositeSpec, default: Any = None):
        self.pointer = pointer
        self.spec = spec
        self.entries: list[CompositeState] = []
        self.selected = 0
        if isinstance(default, list):
            self.seed_entries(default)

    def __len__(self) -> int:
        return len(self.entries)

    def _entry_pointer(self, index: int) -> str:
        return f"{self.pointer}/entry_{index}"

    def _renumber(self) -> None:
        for index, entry in enumerate(self.entries):
            entry.pointer = self._entry_pointer(index)

    def entry_pointers(self) -> list[str]:
        return [entry.pointer for entry in self.entries]

    def selected_index(self) -> Optional[int]:
        if not self.entries:
            return None
        return min(self.selected, len(self.entries) - 1)

    def summaries(self) -> list[str]:
        return [f"#{index + 1} {entry.summary()}" for index, entry in enumerate(self.entries)]

    def selected_label(self) -> Optional[str]:
        index = self.selected_index()
        if index is None:
            return None
        return f"#{index + 1} {self.entries[index].summary()}"

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
        self.entries.append(CompositeState(self._entry_pointer(len(self.entries)), self.spec))
        self.selected = len(self.entries) - 1
        return True

    def remove_selected(self) -> bool:
        index = self.selected_index()
        if index is None:
            return False
        del self.entries[index]
        self._renumber()
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
        self._renumber()
        self.selected = target
        return True

    def seed_entries(self, items: list[Any]) -> None:
        self.entries = []
        for item in items:
            entry = CompositeState(self._entry_pointer(len(self.entries)), self.spec)
            entry.seed_from_value(item)
            self.entries.append(entry)
        self.selected = min(self.selected, max(len(self.entries) - 1, 0))

    def build_value(self, required: bool) -> Optional[list[Any]]:
        if not self.entries:
            return [] if required else None
        return [entry.build_value(required=True) for entry in self.entries]

    def open_selected_editor(self) -> tuple[int, CompositeEditorSession]:
        index = self.selected_index()
        if index is None:
            raise FieldCoercionError(self.pointer, "no entry selected")
        entry = self.entries[index]
        variant_index = entry.selected_index()
        if variant_index is None:
            raise FieldCoercionError(entry.pointer, "entry has no active variant")
        return index, entry.open_editor_session(entry.pointer, variant_index)

    def restore_entry_editor(self, index: int, session: CompositeEditorSession) -> None:
        if 0 <= index < len(self.entries):
            self.entries[index].restore_editor_session(session)
