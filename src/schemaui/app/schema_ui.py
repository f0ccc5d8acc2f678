"""High level entry point: compile a schema and run the form on the terminal."""

import logging
from typing import Any, Optional

from ..config import UiOptions
from ..form.palette import configure
from ..form.state import FormState
from ..schema.compiler import build_form_schema
from .keymap import Keymap
from .runtime import App
from .terminal import TerminalGuard
from .validation import SchemaValidator

logger = logging.getLogger(__name__)


class SchemaUI:
    """Builder around :class:`App`.

    Example:
        >>> value = SchemaUI(schema).with_title("Service").run()
    """

    def __init__(self, schema: dict[str, Any]):
        self.schema = schema
        self.title: Optional[str] = None
        self.options = UiOptions()
        self.initial_data: Any = None

    def with_title(self, title: Optional[str]) -> "SchemaUI":
        self.title = title
        return self

    def with_options(self, options: UiOptions) -> "SchemaUI":
        self.options = options
        return self

    def with_initial_data(self, data: Any) -> "SchemaUI":
        self.initial_data = data
        return self

    def build_app(self) -> App:
        configure(self.options.palette)
        form_schema = build_form_schema(self.schema)
        form_state = FormState.from_schema(form_schema)
        if self.title:
            form_state.title = self.title
        if self.initial_data is not None:
            form_state.seed_from_value(self.initial_data)
        validator = SchemaValidator(self.schema)
        keymap = Keymap.load(self.options.keymap_file)
        fields = sum(1 for _ in form_state.iter_fields())
        logger.info(f"Compiled form with {len(form_state.roots)} root(s) and {fields} field(s)")
        return App(form_state, validator, self.options, keymap)

    def run(self) -> dict[str, Any]:
        app = self.build_app()
        with TerminalGuard() as terminal:
            return app.run(terminal)
