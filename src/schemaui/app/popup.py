"""Modal selection list for booleans, enums, multi-selects and composites."""

from dataclasses import dataclass, field
from typing import Optional

from ..enums import ComponentKind, PopupOwner
from ..form.field import FieldState


@dataclass
class PopupState:
    owner: PopupOwner
    pointer: str
    title: str
    options: list[str]
    selected: int = 0
    multi: bool = False
    flags: list[bool] = field(default_factory=list)

    @classmethod
    def from_field(cls, field_state: FieldState, owner: PopupOwner = PopupOwner.ROOT) -> Optional["PopupState"]:
        """Build the popup matching the field's component, or None when it has none."""
        component = field_state.component
        common = {
            "owner": owner,
            "pointer": field_state.pointer,
            "title": field_state.schema.display_label(),
        }

        multi = component.multi_state()
        if multi is not None:
            options, flags = multi
            return cls(options=options, selected=0, multi=True, flags=flags, **common)

        current = component.bool_value()
        if current is not None:
            return cls(options=["true", "false"], selected=0 if current else 1, **common)

        enum = component.enum_state()
        if enum is not None:
            options, selected = enum
            return cls(options=options, selected=selected, **common)

        if component.kind == ComponentKind.COMPOSITE:
            data = component.composite_popup()
            if data is None:
                return None
            return cls(
                options=data.options,
                selected=data.selected,
                multi=data.multi,
                flags=list(data.active),
                **common,
            )
        return None

    def select_previous(self) -> None:
        if self.options:
            self.selected = (self.selected - 1) % len(self.options)

    def select_next(self) -> None:
        if self.options:
            self.selected = (self.selected + 1) % len(self.options)

    def toggle_current(self) -> None:
        if self.multi and 0 <= self.selected < len(self.flags):
            self.flags[self.selected] = not self.flags[self.selected]

    def active(self) -> Optional[list[bool]]:
        return self.flags if self.multi else None


def apply_selection_to_field(field_state: FieldState, selection: int, flags: Optional[list[bool]]) -> bool:
    """Write a popup choice back into the field; returns True when the value changed."""
    component = field_state.component
    match component.kind:
        case ComponentKind.COMPOSITE:
            return field_state.apply_composite_selection(selection, flags)
        case ComponentKind.MULTI_SELECT:
            return flags is not None and field_state.set_multi_state(flags)
        case ComponentKind.BOOL:
            return field_state.set_bool(selection == 0)
        case ComponentKind.ENUM:
            return field_state.set_enum_index(selection)
    return False
