"""Constants for SchemaUI"""

# ==================== File Paths ====================
DEFAULT_TEMP_FILE = "/tmp/schemaui.json"
DEFAULT_LOG_FILE = "~/.cache/schemaui/schemaui.log"
DEFAULT_KEYMAP_RESOURCE = "default.keymap.json"

# ==================== JSON Schema ====================
JSON_SCHEMA_DRAFT = "http://json-schema.org/draft-07/schema#"
DEFINITIONS_REF_PREFIX = "#/definitions/"
OBJECT_KEYWORDS = (
    "properties",
    "patternProperties",
    "additionalProperties",
    "propertyNames",
    "required",
)

# ==================== Layout ====================
GENERAL_ROOT_ID = "general"
GENERAL_ROOT_TITLE = "General"
KEY_VALUE_SECTION_ID = "key_value"
KEY_VALUE_SECTION_TITLE = "Key/Value Entry"
WRAPPED_VALUE_FIELD = "__value"
DEFAULT_KEY_TITLE = "Key"
DEFAULT_VALUE_TITLE = "Value"
DEFAULT_ENTRY_TITLE = "Entry"

# ==================== Runtime ====================
DEFAULT_TICK_RATE_MS = 250
ROOT_ERROR_PREFIX = "<root>"
OVERLAY_FALLBACK_HELP = "Ctrl+S save • Esc cancel"

# ==================== Status Messages ====================
READY_STATUS = "Ready. Press Ctrl+S to validate and save."
SAVED_STATUS = "Configuration saved. Press Ctrl+Q to exit."
PENDING_EXIT_STATUS = "Unsaved changes. Press Ctrl+Q again to quit without saving."
OVERLAY_PENDING_EXIT_STATUS = "Overlay dirty. Press Esc again to discard changes."
POPUP_MULTI_STATUS = "Use ↑/↓ to move, Space to toggle, Enter to apply"
POPUP_SINGLE_STATUS = "Use ↑/↓ and Enter to choose"

# ==================== Summaries ====================
SUMMARY_STRING_LIMIT = 24
SUMMARY_KEY_VALUE_LIMIT = 12
