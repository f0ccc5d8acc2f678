"""The interactive form application: key routing, save and exit handling."""

import logging
from typing import Any, Optional

from ..config import UiOptions
from ..enums import KeyCode, KeymapContext, PopupOwner
from ..errors import ExitWithoutSave, SchemaUIException
from ..form.commands import FieldEdited, FormCommand, FormEngine
from ..form.keys import KeyEvent
from ..form.state import FormState
from .input import (
    AppDispatch,
    EditComposite,
    FormDispatch,
    InputDispatch,
    ListAddEntry,
    ListMove,
    ListRemoveEntry,
    ListSelect,
    Quit,
    ResetStatus,
    Save,
    TogglePopup,
    resolve,
)
from .keymap import Keymap
from .list_ops import ListOpsMixin
from .overlay import EditorOverlay, OverlayMixin
from .popup import PopupState, apply_selection_to_field
from .status import StatusLine
from .validation import BuildError, Invalid, SchemaValidator, Valid, validate_form

logger = logging.getLogger(__name__)


class App(OverlayMixin, ListOpsMixin):
    """Single-threaded form session.

    Each key is fully handled (popup, overlay or root form) before the next
    one is read. `result` holds the last successfully saved value.
    """

    def __init__(
        self,
        form_state: FormState,
        validator: SchemaValidator,
        options: Optional[UiOptions] = None,
        keymap: Optional[Keymap] = None,
    ):
        self.form_state = form_state
        self.validator = validator
        self.options = options or UiOptions()
        self.keymap = keymap or Keymap.load(self.options.keymap_file)
        self.status = StatusLine()
        self.global_errors: list[str] = []
        self.validation_errors = 0
        self.exit_armed = False
        self.should_quit = False
        self.result: Optional[dict[str, Any]] = None
        self.popup: Optional[PopupState] = None
        self.overlays: list[EditorOverlay] = []

    def run(self, terminal) -> dict[str, Any]:
        """Drive the session on `terminal` until the user quits.

        Raises:
            ExitWithoutSave: The user quit before any successful save.
        """
        logger.info("Form session started")
        while not self.should_quit:
            terminal.draw(self)
            key = terminal.read_key(self.options.tick_rate)
            if key is not None:
                self.handle_key(key)

        if self.result is None:
            logger.info("Form session ended without saving")
            raise ExitWithoutSave("user exited without saving")
        logger.info("Form session ended with a saved value")
        return self.result

    def help_context(self) -> KeymapContext:
        if self.overlays:
            return KeymapContext.OVERLAY
        field_state = self.form_state.focused_field()
        if field_state is not None and field_state.is_collection():
            return KeymapContext.COLLECTION
        return KeymapContext.DEFAULT

    def help_text(self) -> Optional[str]:
        if not self.options.show_help:
            return None
        return self.keymap.help_text(self.help_context())

    # ==================== Key routing ====================

    def handle_key(self, key: KeyEvent) -> None:
        try:
            if self.popup is not None:
                self._handle_popup_key(key)
            elif self.overlays:
                self.handle_overlay_key(key)
            else:
                self._handle_root_key(key)
        except SchemaUIException as e:
            logger.warning(f"Command failed on {key.describe()}: {e}")
            self.status.set_raw(str(e))

    def _handle_root_key(self, key: KeyEvent) -> None:
        match resolve(self.keymap.classify(key), key):
            case FormDispatch(command=command):
                self.dispatch_form_command(command)
                self.exit_armed = False
            case AppDispatch(command=command):
                self._handle_app_command(command)
            case InputDispatch(key=event):
                self._handle_field_input(event)

    def _handle_app_command(self, command) -> None:
        match command:
            case Save():
                self.exit_armed = False
                self.on_save()
            case Quit():
                self.on_exit()
            case ResetStatus():
                self.exit_armed = False
                self.status.ready()
            case TogglePopup():
                self.try_open_popup(PopupOwner.ROOT)
            case EditComposite():
                self.open_editor()
            case ListAddEntry():
                self.handle_list_add_entry()
            case ListRemoveEntry():
                self.handle_list_remove_entry()
            case ListMove(delta=delta):
                self.handle_list_move_entry(delta)
            case ListSelect(delta=delta):
                self.handle_list_select_entry(delta)

    def dispatch_form_command(self, command: FormCommand) -> None:
        message = FormEngine(self.form_state, self.validator).dispatch(command)
        if message:
            self.status.set_raw(message)
        self.validation_errors = self.form_state.error_count()

    def _handle_field_input(self, key: KeyEvent) -> None:
        field_state = self.form_state.focused_field()
        if field_state is None or not field_state.handle_key(key):
            return
        self.exit_armed = False
        self.status.editing(field_state.schema.display_label())
        if self.options.auto_validate:
            self.dispatch_form_command(FieldEdited(field_state.pointer))

    # ==================== Popup ====================

    def try_open_popup(self, owner: PopupOwner) -> bool:
        if self.popup is not None:
            return True
        form = self.form_state if owner == PopupOwner.ROOT else self.top_form_state()
        field_state = form.focused_field()
        if field_state is None:
            return False
        popup = PopupState.from_field(field_state, owner)
        if popup is None:
            return False
        self.status.popup_hint(popup.multi)
        self.popup = popup
        return True

    def _handle_popup_key(self, key: KeyEvent) -> None:
        popup = self.popup
        match key.code:
            case KeyCode.ESC:
                self.popup = None
                self.status.ready()
            case KeyCode.UP:
                popup.select_previous()
            case KeyCode.DOWN:
                popup.select_next()
            case KeyCode.CHAR if key.char == " " and popup.multi:
                popup.toggle_current()
            case KeyCode.ENTER:
                self.popup = None
                self._apply_popup_selection(popup)
                self.status.value_updated()

    def _apply_popup_selection(self, popup: PopupState) -> None:
        flags = list(popup.flags) if popup.multi else None
        if popup.owner == PopupOwner.OVERLAY and self.overlays:
            field_state = self.top_form_state().field_by_pointer(popup.pointer)
            if field_state is not None:
                apply_selection_to_field(field_state, popup.selected, flags)
                self.run_overlay_validation()
            return

        field_state = self.form_state.field_by_pointer(popup.pointer)
        if field_state is not None and apply_selection_to_field(field_state, popup.selected, flags):
            self.exit_armed = False
        if self.options.auto_validate:
            self.run_validation(False)

    # ==================== Save & exit ====================

    def on_save(self) -> None:
        value = self.run_validation(True)
        if value is None:
            return
        self.result = value
        self.form_state.mark_clean()
        self.exit_armed = False
        self.status.saved()
        logger.info("Form value saved")

    def on_exit(self) -> None:
        if self.options.confirm_exit and self.form_state.is_dirty() and not self.exit_armed:
            self.exit_armed = True
            self.status.pending_exit()
            return
        self.should_quit = True

    def run_validation(self, announce: bool) -> Optional[dict[str, Any]]:
        """Validate the whole root form; returns the value when it is valid."""
        match validate_form(self.form_state, self.validator):
            case Valid(value=value):
                self.global_errors = []
                self.validation_errors = 0
                if announce:
                    self.status.validation_passed()
                return value
            case Invalid(issues=issues, global_errors=global_errors):
                self.global_errors = global_errors
                self.validation_errors = issues
                if announce:
                    self.status.issues_remaining(issues)
            case BuildError(message=message):
                self.global_errors = [message]
                self.validation_errors = 1
                self.status.set_raw(message)
        return None
