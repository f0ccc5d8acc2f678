"""Translation of classified keys into form or application commands."""

from dataclasses import dataclass
from typing import Optional, Union

from ..enums import ActionKind
from ..form.commands import FocusNextField, FocusNextRoot, FocusNextSection, FocusPrevField, FormCommand
from ..form.keys import KeyEvent
from .keymap import KeyAction


@dataclass(frozen=True)
class Save:
    pass


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class ResetStatus:
    pass


@dataclass(frozen=True)
class TogglePopup:
    pass


@dataclass(frozen=True)
class EditComposite:
    pass


@dataclass(frozen=True)
class ListAddEntry:
    pass


@dataclass(frozen=True)
class ListRemoveEntry:
    pass


@dataclass(frozen=True)
class ListMove:
    delta: int


@dataclass(frozen=True)
class ListSelect:
    delta: int


AppCommand = Union[
    Save,
    Quit,
    ResetStatus,
    TogglePopup,
    EditComposite,
    ListAddEntry,
    ListRemoveEntry,
    ListMove,
    ListSelect,
]


@dataclass(frozen=True)
class FormDispatch:
    command: FormCommand


@dataclass(frozen=True)
class AppDispatch:
    command: AppCommand


@dataclass(frozen=True)
class InputDispatch:
    """Raw key handed to the focused field."""

    key: KeyEvent


@dataclass(frozen=True)
class NoDispatch:
    pass


CommandDispatch = Union[FormDispatch, AppDispatch, InputDispatch, NoDispatch]


def resolve(action: Optional[KeyAction], key: KeyEvent) -> CommandDispatch:
    if action is None:
        return InputDispatch(key)

    match action.kind:
        case ActionKind.SAVE:
            return AppDispatch(Save())
        case ActionKind.QUIT:
            return AppDispatch(Quit())
        case ActionKind.RESET_STATUS:
            return AppDispatch(ResetStatus())
        case ActionKind.TOGGLE_POPUP:
            return AppDispatch(TogglePopup())
        case ActionKind.EDIT_COMPOSITE:
            return AppDispatch(EditComposite())
        case ActionKind.FIELD_STEP:
            return FormDispatch(FocusPrevField() if action.delta < 0 else FocusNextField())
        case ActionKind.SECTION_STEP:
            return FormDispatch(FocusNextSection(action.delta))
        case ActionKind.ROOT_STEP:
            return FormDispatch(FocusNextRoot(action.delta))
        case ActionKind.LIST_ADD_ENTRY:
            return AppDispatch(ListAddEntry())
        case ActionKind.LIST_REMOVE_ENTRY:
            return AppDispatch(ListRemoveEntry())
        case ActionKind.LIST_MOVE:
            return AppDispatch(ListMove(action.delta))
        case ActionKind.LIST_SELECT:
            return AppDispatch(ListSelect(action.delta))
    return NoDispatch()
