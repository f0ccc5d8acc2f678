from .keymap import KeyAction, Keymap, KeyPattern
from .popup import PopupState, apply_selection_to_field
from .runtime import App
from .schema_ui import SchemaUI
from .status import StatusLine
from .validation import (
    BuildError,
    Invalid,
    SchemaValidator,
    Valid,
    ValidationIssue,
    ValidationOutcome,
    validate_form,
)

__all__ = [
    "App",
    "BuildError",
    "Invalid",
    "KeyAction",
    "KeyPattern",
    "Keymap",
    "PopupState",
    "SchemaUI",
    "SchemaValidator",
    "StatusLine",
    "Valid",
    "ValidationIssue",
    "ValidationOutcome",
    "apply_selection_to_field",
    "validate_form",
]
