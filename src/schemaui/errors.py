"""Exception definitions for SchemaUI"""


class SchemaUIException(Exception):
    """Base exception for all SchemaUI errors.

    All custom exceptions in SchemaUI inherit from this class.
    Use this as a catch-all for SchemaUI-specific errors when you don't need
    to handle specific exception types.
    """

    pass


class SchemaError(SchemaUIException):
    """Raised when a JSON Schema cannot be compiled into a form.

    Use this exception when:
    - The root schema does not describe an object
    - A `$ref` cannot be resolved or points outside the document
    - `$ref` expansion re-enters a definition already being expanded
    - A field uses an unsupported construct (nested arrays, arrays of maps,
      empty tuple `items`)
    """

    pass


class FieldCoercionError(SchemaUIException):
    """Raised when the text of a field cannot be turned into its declared type.

    The error carries the JSON pointer of the offending field so it can be
    routed back onto the form.
    """

    def __init__(self, pointer: str, message: str):
        super().__init__(message)
        self.pointer = pointer
        self.message = message

    def with_prefix(self, prefix: str) -> "FieldCoercionError":
        from .utils import join_pointer

        return FieldCoercionError(join_pointer(prefix, self.pointer), self.message)


class OverlayCommitError(SchemaUIException):
    """Raised when an overlay editor cannot be written back to its parent field.

    Use this exception when:
    - The overlay sub-form fails to build (coercion error, empty or duplicate key)
    - The parent field no longer exists
    - The overlay session does not match its recorded target
    """

    pass


class KeymapException(SchemaUIException):
    """Raised when a keymap document is invalid.

    Use this exception when:
    - The keymap JSON cannot be parsed
    - An entry declares no known contexts or no combos
    - A combo names an unsupported key or modifier
    """

    pass


class ConfigException(SchemaUIException):
    """Raised when UI settings validation or loading fails.

    Use this exception when:
    - The settings file cannot be found
    - The TOML syntax is invalid
    - Settings validation fails
    """

    pass


class DocumentException(SchemaUIException):
    """Raised when an input document cannot be read or an output cannot be written."""

    pass


class TerminalException(SchemaUIException):
    pass


class ExitWithoutSave(SchemaUIException):
    """Raised when the user leaves the form before any successful save."""

    pass
