"""Stacked sub-form editors for composites and collection entries.

An overlay owns the sub-form it edits. Committing copies the sub-form back
into the field it was opened from (in the root form or in the overlay
below it) and pops it off the stack.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from ..consts import DEFAULT_ENTRY_TITLE, OVERLAY_FALLBACK_HELP
from ..enums import ComponentKind, KeyCode, KeymapContext, OverlayFocus, OverlayTargetKind, PopupOwner
from ..errors import FieldCoercionError, OverlayCommitError, SchemaError
from ..form.commands import FieldEdited, FocusNextField, FocusPrevField, FormCommand, FormEngine
from ..form.sessions import (
    ArrayEditorSession,
    CompositeEditorSession,
    KeyValueEditorSession,
    OverlayContext,
)
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
from .validation import BuildError, Invalid, SchemaValidator, validate_form

logger = logging.getLogger(__name__)

EditorSession = Union[CompositeEditorSession, KeyValueEditorSession, ArrayEditorSession]

ENTRY_TARGETS = {
    ComponentKind.COMPOSITE_LIST: OverlayTargetKind.LIST_ENTRY,
    ComponentKind.KEY_VALUE: OverlayTargetKind.KEY_VALUE_ENTRY,
    ComponentKind.SCALAR_ARRAY: OverlayTargetKind.ARRAY_ENTRY,
}

SESSION_TYPES = {
    OverlayTargetKind.FIELD: CompositeEditorSession,
    OverlayTargetKind.LIST_ENTRY: CompositeEditorSession,
    OverlayTargetKind.KEY_VALUE_ENTRY: KeyValueEditorSession,
    OverlayTargetKind.ARRAY_ENTRY: ArrayEditorSession,
}


@dataclass
class OverlayTarget:
    kind: OverlayTargetKind = OverlayTargetKind.FIELD
    entry_index: Optional[int] = None

    @property
    def is_entry(self) -> bool:
        return self.kind != OverlayTargetKind.FIELD


def session_title(session: EditorSession) -> str:
    if isinstance(session, KeyValueEditorSession):
        return DEFAULT_ENTRY_TITLE
    return session.title


def session_description(session: EditorSession) -> Optional[str]:
    if isinstance(session, KeyValueEditorSession):
        return None
    return session.description


@dataclass
class EditorOverlay:
    """One level of the overlay stack.

    `host_level` is 0 when the edited field belongs to the root form and
    otherwise the level of the overlay whose form holds it.
    """

    field_pointer: str
    field_label: str
    level: int
    host_level: int
    session: EditorSession
    instructions: str = ""
    target: OverlayTarget = field(default_factory=OverlayTarget)
    display_title: str = ""
    display_description: Optional[str] = None
    exit_armed: bool = False
    list_entries: Optional[list[str]] = None
    list_selected: Optional[int] = None
    validator: Optional[SchemaValidator] = None
    focus: OverlayFocus = OverlayFocus.FORM_FIELDS
    commit_error: Optional[str] = None

    def __post_init__(self):
        if not self.display_title:
            self.display_title = f"Edit {self.field_label} – {session_title(self.session)}"
        if self.display_description is None:
            self.display_description = session_description(self.session)

    @property
    def form_state(self) -> FormState:
        return self.session.form_state

    def dirty(self) -> bool:
        return self.form_state.is_dirty()

    def can_focus_entries(self) -> bool:
        return self.list_entries is not None

    def set_list_panel(self, entries: list[str], selected: int) -> None:
        self.list_entries = entries
        self.list_selected = selected

    def apply_component_context(self, context: OverlayContext) -> None:
        if context.title is not None:
            self.display_title = f"Edit {self.field_label} – {context.title}"
        if context.description is not None:
            self.display_description = context.description
        if context.entry_panel is not None:
            self.set_list_panel(context.entry_panel.entries, context.entry_panel.selected)
        if context.instructions:
            if self.instructions.strip():
                self.instructions = f"{self.instructions} • {context.instructions}"
            else:
                self.instructions = context.instructions


class OverlayMixin:
    """Overlay stack handling for :class:`~schemaui.app.runtime.App`."""

    # ==================== Stack access ====================

    def active_overlay(self) -> Optional[EditorOverlay]:
        return self.overlays[-1] if self.overlays else None

    def top_form_state(self) -> FormState:
        overlay = self.active_overlay()
        return overlay.form_state if overlay is not None else self.form_state

    def host_form_state(self, host_level: int) -> FormState:
        if host_level <= 0:
            return self.form_state
        return self.overlays[host_level - 1].form_state

    def overlay_help_text(self, level: Optional[int] = None) -> str:
        base = self.keymap.help_text(KeymapContext.OVERLAY) or OVERLAY_FALLBACK_HELP
        if level is None:
            overlay = self.active_overlay()
            if overlay is None:
                return base
            level = overlay.level
        return f"L{level} · {base}"

    def _set_overlay_status(self) -> None:
        overlay = self.active_overlay()
        if overlay is not None:
            self.status.set_raw(f"Overlay {overlay.level}: {self.overlay_help_text()}")

    # ==================== Opening ====================

    def open_editor(self) -> None:
        """Open an overlay on the focused field of the top-most form."""
        level = len(self.overlays) + 1
        field_state = self.top_form_state().focused_field()
        if field_state is None:
            self.status.set_raw("No field selected")
            return

        component = field_state.component
        pointer = field_state.pointer
        try:
            if component.kind == ComponentKind.COMPOSITE:
                active = component.active_composite_variants()
                if not active:
                    self.status.set_raw("Select a variant via Enter before editing (oneOf/anyOf)")
                    return
                session = component.open_composite_editor(pointer, active[0])
                target = OverlayTarget()
            elif component.kind in ENTRY_TARGETS:
                context = component.open_entry_editor(pointer)
                session = context.session
                target = OverlayTarget(ENTRY_TARGETS[component.kind], context.entry_index)
            else:
                self.status.set_raw("Focus a composite or composite list field before editing")
                return
        except FieldCoercionError as e:
            self.status.set_raw(e.message)
            return

        self.popup = None
        overlay = EditorOverlay(
            field_pointer=pointer,
            field_label=field_state.schema.display_label(),
            level=level,
            host_level=level - 1,
            session=session,
            instructions=self.overlay_help_text(level),
            target=target,
        )
        component_context = component.overlay_context(field_state.schema)
        if component_context is not None:
            overlay.apply_component_context(component_context)
        self.overlays.append(overlay)
        logger.debug(f"Opened overlay level {level} on {pointer} ({target.kind.value})")
        self._initialize_active_overlay()

    def _initialize_active_overlay(self) -> None:
        overlay = self.active_overlay()
        self._set_overlay_status()
        self.refresh_list_overlay_panel()
        try:
            overlay.validator = SchemaValidator(overlay.session.schema)
        except SchemaError as e:
            logger.warning(f"Overlay {overlay.level} runs without validation: {e}")
            overlay.validator = None
        self.run_overlay_validation()
        overlay.focus = OverlayFocus.ENTRY_TABS if overlay.can_focus_entries() else OverlayFocus.FORM_FIELDS

    # ==================== Closing ====================

    def close_active_overlay(self, commit: bool) -> bool:
        """Pop the top overlay, writing it back first when `commit` is set.

        Returns False when the commit failed; the overlay then stays open and
        the status line carries the reason.
        """
        if not self.overlays:
            return False
        overlay = self.overlays.pop()
        self.popup = None

        if commit:
            try:
                self._commit_overlay(overlay)
            except OverlayCommitError as e:
                overlay.commit_error = str(e)
                overlay.exit_armed = False
                self.overlays.append(overlay)
                self.status.set_raw(str(e))
                logger.debug(f"Overlay {overlay.level} commit failed: {e}")
                return False
            overlay.commit_error = None
            overlay.form_state.mark_clean()
            self.exit_armed = False
            self.status.value_updated()
            if overlay.level == 1 and self.options.auto_validate:
                self.run_validation(False)
            else:
                self.run_overlay_validation()
        else:
            self.status.ready()
        logger.debug(f"Closed overlay level {overlay.level} ({'commit' if commit else 'discard'})")

        parent = self.active_overlay()
        if parent is not None:
            parent.exit_armed = False
            self._set_overlay_status()
            self.refresh_list_overlay_panel()
            self.run_overlay_validation()
        return True

    def save_active_overlay(self) -> bool:
        overlay = self.active_overlay()
        if overlay is None:
            return False
        if not self.close_active_overlay(True):
            return False
        self.status.set_raw(f"Overlay {overlay.level} saved.")
        return True

    def request_overlay_exit(self) -> bool:
        """Discard the top overlay; a dirty overlay needs a second request."""
        overlay = self.active_overlay()
        if overlay is not None and overlay.dirty() and not overlay.exit_armed:
            overlay.exit_armed = True
            self.status.overlay_pending_exit()
            return False
        self.close_active_overlay(False)
        return True

    def _check_overlay_form(self, overlay: EditorOverlay) -> None:
        if overlay.validator is None:
            try:
                overlay.form_state.try_build_value()
            except FieldCoercionError as e:
                overlay.form_state.apply_coercion_error(e)
                raise OverlayCommitError(e.message) from e
            return
        match validate_form(overlay.form_state, overlay.validator):
            case BuildError(message=message):
                raise OverlayCommitError(message)
            case Invalid(issues=issues, global_errors=global_errors):
                if global_errors:
                    raise OverlayCommitError(global_errors[0])
                raise OverlayCommitError(f"{issues} issue(s) remaining")

    def _commit_overlay(self, overlay: EditorOverlay) -> None:
        self._check_overlay_form(overlay)

        host = self.host_form_state(overlay.host_level)
        field_state = host.field_by_pointer(overlay.field_pointer)
        if field_state is None:
            raise OverlayCommitError("Overlay target no longer exists")
        session = overlay.session
        if not isinstance(session, SESSION_TYPES[overlay.target.kind]):
            raise OverlayCommitError("Invalid overlay session")

        if overlay.target.kind == OverlayTargetKind.FIELD:
            field_state.restore_composite_editor(session, mark_dirty=session.form_state.is_dirty())
            return
        try:
            field_state.apply_entry_editor(overlay.target.entry_index, session)
        except FieldCoercionError as e:
            field_state.set_error(e.message)
            raise OverlayCommitError(e.message) from e

    # ==================== Key handling ====================

    def handle_overlay_key(self, key) -> None:
        if key.code == KeyCode.ESC:
            self.request_overlay_exit()
            return

        match resolve(self.keymap.classify(key), key):
            case FormDispatch(command=command):
                if self._handle_overlay_focus_command(command):
                    return
                overlay = self.active_overlay()
                overlay.exit_armed = False
                FormEngine(overlay.form_state).dispatch(command)
                self.run_overlay_validation()
            case AppDispatch(command=command):
                self._handle_overlay_app_command(command)
            case InputDispatch(key=event):
                self._handle_overlay_field_input(event)

    def _handle_overlay_app_command(self, command) -> None:
        match command:
            case Save():
                self.save_active_overlay()
            case Quit():
                self.request_overlay_exit()
            case EditComposite():
                self.open_editor()
            case TogglePopup():
                self.try_open_popup(PopupOwner.OVERLAY)
            case ResetStatus():
                self.status.ready()
                self.active_overlay().exit_armed = False
            case ListAddEntry():
                self.handle_list_add_entry()
            case ListRemoveEntry():
                self.handle_list_remove_entry()
            case ListMove(delta=delta):
                self.handle_list_move_entry(delta)
            case ListSelect(delta=delta):
                self.handle_list_select_entry(delta)

    def _handle_overlay_field_input(self, key) -> None:
        overlay = self.active_overlay()
        overlay.exit_armed = False
        field_state = overlay.form_state.focused_field()
        if field_state is None or not field_state.handle_key(key):
            return
        self.status.editing(f"{overlay.field_label} › {field_state.schema.display_label()}")
        self.validate_overlay_field(field_state.pointer)

    def _focus_entries(self, overlay: EditorOverlay) -> bool:
        overlay.exit_armed = False
        overlay.focus = OverlayFocus.ENTRY_TABS
        return True

    def _handle_overlay_focus_command(self, command: FormCommand) -> bool:
        """Move between the entry strip and the overlay form with Tab/Shift+Tab."""
        if not isinstance(command, (FocusNextField, FocusPrevField)):
            return False
        overlay = self.active_overlay()
        if overlay is None or not overlay.can_focus_entries():
            return False

        forward = isinstance(command, FocusNextField)
        delta = 1 if forward else -1
        form = overlay.form_state
        has_fields = form.has_focusable_fields()
        entries = len(overlay.list_entries or [])

        if overlay.focus == OverlayFocus.ENTRY_TABS and has_fields:
            overlay.exit_armed = False
            overlay.focus = OverlayFocus.FORM_FIELDS
            if forward:
                form.focus_first_field()
            else:
                form.focus_last_field()
            return True

        at_edge = form.focus_is_last() if forward else form.focus_is_first()
        if overlay.focus == OverlayFocus.ENTRY_TABS or not has_fields or at_edge:
            if entries > 0 and self._advance_overlay_entry(delta):
                return True
            return self._focus_entries(self.active_overlay())
        return False

    def _advance_overlay_entry(self, delta: int) -> bool:
        overlay = self.active_overlay()
        if overlay is None or not overlay.can_focus_entries():
            return False
        entries = len(overlay.list_entries or [])
        if entries == 0:
            return False
        selected = overlay.list_selected or 0
        next_index = (selected + delta) % entries
        if entries == 1 or next_index == selected:
            return self._focus_entries(overlay)

        depth = len(self.overlays)
        if not self.close_active_overlay(True):
            return False

        field_state = self.host_form_state(overlay.host_level).field_by_pointer(overlay.field_pointer)
        if field_state is None:
            return False
        changed = field_state.collection_set_selected(next_index)
        label = field_state.component.collection_selected_label()
        self.exit_armed = False
        if label is not None:
            self.status.set_raw(f"Selected entry {label}")
        elif not changed:
            self.status.ready()

        self.open_editor()
        if len(self.overlays) != depth:
            return False
        reopened = self.active_overlay()
        reopened.exit_armed = False
        if reopened.can_focus_entries():
            reopened.focus = OverlayFocus.ENTRY_TABS
        return True

    # ==================== Validation & panels ====================

    def validate_overlay_field(self, pointer: str) -> None:
        overlay = self.active_overlay()
        if overlay is None or overlay.validator is None:
            return
        message = FormEngine(overlay.form_state, overlay.validator).dispatch(FieldEdited(pointer))
        if message:
            self.status.set_raw(message)

    def run_overlay_validation(self) -> None:
        overlay = self.active_overlay()
        if overlay is None:
            return
        field_state = overlay.form_state.focused_field()
        if field_state is not None:
            self.validate_overlay_field(field_state.pointer)

    def refresh_list_overlay_panel(self) -> None:
        overlay = self.active_overlay()
        if overlay is None or not overlay.target.is_entry:
            return
        field_state = self.host_form_state(overlay.host_level).field_by_pointer(overlay.field_pointer)
        if field_state is None:
            return
        component = field_state.component
        panel = component.collection_panel()
        if panel is not None:
            overlay.set_list_panel(*panel)
        label = component.collection_selected_label()
        if label is not None:
            overlay.display_title = f"Edit {overlay.field_label} – {label}"
            overlay.display_description = label
        index = component.collection_selected_index()
        if index is not None:
            overlay.target.entry_index = index
