"""Enumeration type definitions"""

from enum import Enum


class KindType(str, Enum):
    """Field kinds produced by the schema compiler"""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    JSON = "json"
    ENUM = "enum"
    ARRAY = "array"
    COMPOSITE = "composite"
    KEY_VALUE = "key_value"


class CompositeMode(str, Enum):
    ONE_OF = "oneOf"
    ANY_OF = "anyOf"


class ComponentKind(str, Enum):
    TEXT = "text"
    BOOL = "bool"
    ENUM = "enum"
    MULTI_SELECT = "multi_select"
    ARRAY_BUFFER = "array_buffer"
    SCALAR_ARRAY = "scalar_array"
    COMPOSITE = "composite"
    COMPOSITE_LIST = "composite_list"
    KEY_VALUE = "key_value"


class KeymapContext(str, Enum):
    DEFAULT = "default"
    COLLECTION = "collection"
    OVERLAY = "overlay"


class DocumentFormat(str, Enum):
    JSON = "json"
    YAML = "yaml"
    TOML = "toml"


class PopupOwner(Enum):
    ROOT = "root"
    OVERLAY = "overlay"


class OverlayFocus(Enum):
    FORM_FIELDS = "form_fields"
    ENTRY_TABS = "entry_tabs"


class KeyCode(str, Enum):
    """Terminal-independent key identifiers"""

    CHAR = "char"
    TAB = "tab"
    BACKTAB = "backtab"
    ENTER = "enter"
    ESC = "esc"
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    BACKSPACE = "backspace"
    DELETE = "delete"


class ActionKind(str, Enum):
    """Keymap action identifiers, as spelled in keymap documents"""

    SAVE = "save"
    QUIT = "quit"
    RESET_STATUS = "resetStatus"
    TOGGLE_POPUP = "togglePopup"
    EDIT_COMPOSITE = "editComposite"
    FIELD_STEP = "fieldStep"
    SECTION_STEP = "sectionStep"
    ROOT_STEP = "rootStep"
    LIST_ADD_ENTRY = "listAddEntry"
    LIST_REMOVE_ENTRY = "listRemoveEntry"
    LIST_MOVE = "listMove"
    LIST_SELECT = "listSelect"


class OverlayTargetKind(Enum):
    """What an overlay writes back to when it commits"""

    FIELD = "field"
    LIST_ENTRY = "list_entry"
    KEY_VALUE_ENTRY = "key_value_entry"
    ARRAY_ENTRY = "array_entry"
