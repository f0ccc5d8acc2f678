"""Live form tree: roots, flattened sections, fields and the focus cursors."""

import logging
from typing import Any, Iterator, Optional

from ..errors import FieldCoercionError
from ..schema.models import FieldSchema, FormSchema
from ..utils import insert_at_path, lookup_path
from .field import FieldState
from .section import RootState, SectionState

logger = logging.getLogger(__name__)


class FormState:
    """Mutable companion of a :class:`FormSchema`.

    Focus is kept as three cursors (root, section, field). Every navigation
    method leaves them pointing at a field whenever the form has one.
    """

    def __init__(
        self,
        roots: list[RootState],
        title: Optional[str] = None,
        description: Optional[str] = None,
    ):
        self.roots = roots
        self.title = title
        self.description = description
        self.root_index = 0
        self.section_index = 0
        self.field_index = 0
        self.normalize_focus()

    @classmethod
    def from_schema(cls, schema: FormSchema) -> "FormState":
        return cls(
            [RootState.from_schema(root) for root in schema.roots],
            title=schema.title,
            description=schema.description,
        )

    @classmethod
    def from_sections(
        cls,
        id: str,
        title: str,
        description: Optional[str],
        sections: list[SectionState],
    ) -> "FormState":
        return cls([RootState(id=id, title=title, description=description, sections=sections)])

    @classmethod
    def from_fields(
        cls,
        id: str,
        title: str,
        description: Optional[str],
        fields: list[FieldSchema],
    ) -> "FormState":
        section = SectionState(
            id=id,
            title=title,
            description=description,
            fields=[FieldState.from_schema(schema) for schema in fields],
        )
        return cls.from_sections(id, title, description, [section])

    # ==================== Traversal ====================

    def iter_fields(self) -> Iterator[FieldState]:
        for root in self.roots:
            for section in root.sections:
                yield from section.fields

    def _positions(self) -> list[tuple[int, int, int]]:
        return [
            (r, s, f)
            for r, root in enumerate(self.roots)
            for s, section in enumerate(root.sections)
            for f in range(len(section.fields))
        ]

    def _focusable_sections(self) -> list[tuple[int, int]]:
        return [
            (r, s)
            for r, root in enumerate(self.roots)
            for s, section in enumerate(root.sections)
            if section.fields
        ]

    def has_focusable_fields(self) -> bool:
        return any(True for _ in self.iter_fields())

    def current_root(self) -> Optional[RootState]:
        if 0 <= self.root_index < len(self.roots):
            return self.roots[self.root_index]
        return None

    def current_section(self) -> Optional[SectionState]:
        root = self.current_root()
        if root is None or not 0 <= self.section_index < len(root.sections):
            return None
        return root.sections[self.section_index]

    def focused_field(self) -> Optional[FieldState]:
        section = self.current_section()
        if section is None or not 0 <= self.field_index < len(section.fields):
            return None
        return section.fields[self.field_index]

    def field_by_pointer(self, pointer: str) -> Optional[FieldState]:
        return next((field for field in self.iter_fields() if field.pointer == pointer), None)

    field_mut_by_pointer = field_by_pointer

    # ==================== Focus ====================

    def normalize_focus(self) -> None:
        """Clamp the cursors and move off empty sections."""
        if not self.roots:
            self.root_index = self.section_index = self.field_index = 0
            return
        self.root_index = min(max(self.root_index, 0), len(self.roots) - 1)
        sections = self.roots[self.root_index].sections
        self.section_index = min(max(self.section_index, 0), max(len(sections) - 1, 0))

        section = self.current_section()
        if section is None or not section.fields:
            target = self._first_non_empty_from(self.root_index, self.section_index)
            if target is None:
                self.field_index = 0
                return
            if target != (self.root_index, self.section_index):
                self.root_index, self.section_index = target
                self.field_index = 0

        count = len(self.current_section().fields)
        self.field_index = min(max(self.field_index, 0), count - 1)

    def _first_non_empty_from(self, root_index: int, section_index: int) -> Optional[tuple[int, int]]:
        sections = self.roots[root_index].sections
        for s in range(section_index, len(sections)):
            if sections[s].fields:
                return root_index, s
        count = len(self.roots)
        for offset in range(1, count + 1):
            r = (root_index + offset) % count
            for s, section in enumerate(self.roots[r].sections):
                if section.fields:
                    return r, s
        return None

    def _focus(self, position: tuple[int, int, int]) -> None:
        self.root_index, self.section_index, self.field_index = position

    def _step_field(self, delta: int) -> None:
        positions = self._positions()
        if not positions:
            return
        current = (self.root_index, self.section_index, self.field_index)
        index = positions.index(current) if current in positions else 0
        self._focus(positions[(index + delta) % len(positions)])

    def focus_next_field(self) -> None:
        self._step_field(1)

    def focus_prev_field(self) -> None:
        self._step_field(-1)

    def focus_first_field(self) -> None:
        positions = self._positions()
        if positions:
            self._focus(positions[0])

    def focus_last_field(self) -> None:
        positions = self._positions()
        if positions:
            self._focus(positions[-1])

    def focus_is_first(self) -> bool:
        positions = self._positions()
        return bool(positions) and positions[0] == (self.root_index, self.section_index, self.field_index)

    def focus_is_last(self) -> bool:
        positions = self._positions()
        return bool(positions) and positions[-1] == (self.root_index, self.section_index, self.field_index)

    def focus_next_section(self, delta: int) -> None:
        sections = self._focusable_sections()
        if not sections:
            return
        current = (self.root_index, self.section_index)
        if current in sections:
            index = (sections.index(current) + delta) % len(sections)
        else:
            index = 0 if delta >= 0 else len(sections) - 1
        self.root_index, self.section_index = sections[index]
        self.field_index = 0

    def focus_next_root(self, delta: int) -> None:
        roots = [r for r, root in enumerate(self.roots) if root.has_fields()]
        if not roots:
            return
        if self.root_index in roots:
            index = (roots.index(self.root_index) + delta) % len(roots)
        else:
            index = 0
        self.root_index = roots[index]
        self.section_index = 0
        self.field_index = 0
        self.normalize_focus()

    def focus_pointer(self, pointer: str) -> bool:
        for position in self._positions():
            r, s, f = position
            if self.roots[r].sections[s].fields[f].pointer == pointer:
                self._focus(position)
                return True
        return False

    # ==================== Values & errors ====================

    def try_build_value(self) -> dict[str, Any]:
        """Assemble the JSON object described by the form.

        Raises:
            FieldCoercionError: From the first field whose text cannot be
                coerced; later fields are not visited.
        """
        result: dict[str, Any] = {}
        for field in self.iter_fields():
            value = field.current_value()
            if value is not None:
                insert_at_path(result, field.schema.path, value)
        return result

    def seed_from_value(self, value: Any) -> None:
        """Load `value` into every field found at its path."""
        if not isinstance(value, dict):
            return
        for field in self.iter_fields():
            found, item = lookup_path(value, field.schema.path)
            if found and item is not None:
                field.seed_value(item)

    def set_error(self, pointer: str, message: str) -> bool:
        field = self.field_by_pointer(pointer)
        if field is None:
            return False
        field.set_error(message)
        return True

    def clear_error(self, pointer: str) -> None:
        field = self.field_by_pointer(pointer)
        if field is not None:
            field.clear_error()

    def clear_errors(self) -> None:
        for field in self.iter_fields():
            field.clear_error()

    def mark_clean(self) -> None:
        for field in self.iter_fields():
            field.dirty = False

    def is_dirty(self) -> bool:
        return any(field.dirty for field in self.iter_fields())

    def error_count(self) -> int:
        return sum(1 for field in self.iter_fields() if field.error)

    def apply_coercion_error(self, error: FieldCoercionError) -> bool:
        logger.debug(f"Coercion error at {error.pointer or '<root>'}: {error.message}")
        return self.set_error(error.pointer, error.message)
