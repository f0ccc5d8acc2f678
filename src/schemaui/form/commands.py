"""Form-level commands and the engine that applies them."""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from ..errors import FieldCoercionError
from .state import FormState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FocusNextField:
    pass


@dataclass(frozen=True)
class FocusPrevField:
    pass


@dataclass(frozen=True)
class FocusNextSection:
    delta: int


@dataclass(frozen=True)
class FocusNextRoot:
    delta: int


@dataclass(frozen=True)
class FieldEdited:
    pointer: str


FormCommand = Union[FocusNextField, FocusPrevField, FocusNextSection, FocusNextRoot, FieldEdited]


def apply_command(state: FormState, command: FormCommand) -> None:
    match command:
        case FocusNextField():
            state.focus_next_field()
        case FocusPrevField():
            state.focus_prev_field()
        case FocusNextSection(delta=delta):
            state.focus_next_section(delta)
        case FocusNextRoot(delta=delta):
            state.focus_next_root(delta)
        case FieldEdited():
            pass


class FormEngine:
    """Applies commands to a form and refreshes per-field validation errors.

    `validator` is anything exposing `iter_errors(value)` that yields objects
    with `pointer` and `message` attributes (see `app.validation`).
    """

    def __init__(self, state: FormState, validator=None):
        self.state = state
        self.validator = validator

    def dispatch(self, command: FormCommand) -> Optional[str]:
        """Apply `command`; returns an error message when validation could not run."""
        if isinstance(command, FieldEdited):
            return self.validate_field(command.pointer)
        apply_command(self.state, command)
        return None

    def validate_field(self, pointer: str) -> Optional[str]:
        """Refresh the error of the field at `pointer`.

        Only a coercion failure of that field is returned; a failure elsewhere
        in the form is marked on its own field and skips schema validation.
        """
        field_state = self.state.field_by_pointer(pointer)
        if field_state is not None:
            try:
                field_state.current_value()
            except FieldCoercionError as e:
                field_state.set_error(e.message)
                return e.message
        self.state.clear_error(pointer)

        try:
            value = self.state.try_build_value()
        except FieldCoercionError as e:
            logger.debug(f"Skipping validation of {pointer}: {e.pointer} does not coerce")
            self.state.set_error(e.pointer, e.message)
            return None

        if self.validator is None:
            return None
        for error in self.validator.iter_errors(value):
            if error.pointer == pointer:
                self.state.set_error(pointer, error.message)
        return None
