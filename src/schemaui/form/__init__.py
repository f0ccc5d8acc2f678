from .commands import (
    FieldEdited,
    FocusNextField,
    FocusNextRoot,
    FocusNextSection,
    FocusPrevField,
    FormCommand,
    FormEngine,
    apply_command,
)
from .field import FieldState
from .keys import KeyEvent
from .palette import ComponentPalette
from .section import RootState, SectionState
from .sessions import (
    ArrayEditorSession,
    CompositeEditorSession,
    CompositePopupData,
    EntryEditorContext,
    EntryPanel,
    KeyValueEditorSession,
    OverlayContext,
)
from .state import FormState

__all__ = [
    "ArrayEditorSession",
    "ComponentPalette",
    "CompositeEditorSession",
    "CompositePopupData",
    "EntryEditorContext",
    "EntryPanel",
    "FieldEdited",
    "FieldState",
    "FocusNextField",
    "FocusNextRoot",
    "FocusNextSection",
    "FocusPrevField",
    "FormCommand",
    "FormEngine",
    "FormState",
    "KeyEvent",
    "KeyValueEditorSession",
    "OverlayContext",
    "RootState",
    "SectionState",
    "apply_command",
]
