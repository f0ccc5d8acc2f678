"""Add, remove, reorder and select entries of repeatable fields."""

import logging
from typing import Callable, Optional

from ..form.field import FieldState
from ..form.state import FormState

logger = logging.getLogger(__name__)


class ListOpsMixin:
    """Collection commands for :class:`~schemaui.app.runtime.App`.

    When the top overlay edits an entry of the targeted list, it is committed
    first and reopened on the (possibly new) selection afterwards.
    """

    def _list_target(self) -> Optional[tuple[FormState, str, bool]]:
        overlay = self.active_overlay()
        if overlay is not None and overlay.target.is_entry:
            return self.host_form_state(overlay.host_level), overlay.field_pointer, True
        form = self.top_form_state()
        field_state = form.focused_field()
        if field_state is not None and field_state.is_collection():
            return form, field_state.pointer, False
        return None

    def _apply_list_op(self, hint: str, op: Callable[[FieldState], bool]) -> bool:
        target = self._list_target()
        if target is None:
            self.status.set_raw(f"Focus a repeatable field before {hint}")
            return False
        form, pointer, reopen = target
        if reopen and not self.close_active_overlay(True):
            return False

        field_state = form.field_by_pointer(pointer)
        handled = field_state is not None and op(field_state)
        self.refresh_list_overlay_panel()
        self.run_overlay_validation()
        if reopen:
            message = self.status.message
            self.open_editor()
            if handled:
                self.status.set_raw(message)
        return handled

    def _list_changed(self, message: str) -> None:
        self.exit_armed = False
        self.status.set_raw(message)
        if self.options.auto_validate:
            self.run_validation(False)

    def handle_list_add_entry(self) -> bool:
        def add(field_state: FieldState) -> bool:
            if not field_state.collection_add():
                return False
            label = field_state.component.collection_selected_label()
            self._list_changed(f"Added entry {label}" if label else "Added entry")
            logger.debug(f"Added entry to {field_state.pointer}")
            return True

        return self._apply_list_op("Ctrl+N add", add)

    def handle_list_remove_entry(self) -> bool:
        def remove(field_state: FieldState) -> bool:
            if not field_state.collection_remove():
                self.status.set_raw("No entry to remove")
                return False
            label = field_state.component.collection_selected_label()
            self._list_changed(f"Removed entry • now at {label}" if label else "List is now empty")
            logger.debug(f"Removed entry from {field_state.pointer}")
            return True

        return self._apply_list_op("Ctrl+D remove", remove)

    def handle_list_move_entry(self, delta: int) -> bool:
        def move(field_state: FieldState) -> bool:
            if not field_state.collection_move(delta):
                self.status.set_raw("Cannot move entry further")
                return False
            label = field_state.component.collection_selected_label()
            self._list_changed(f"Moved entry to {label}" if label else "Value updated")
            return True

        return self._apply_list_op("Ctrl+↑/↓ move", move)

    def handle_list_select_entry(self, delta: int) -> bool:
        def select(field_state: FieldState) -> bool:
            if not field_state.collection_select(delta):
                return False
            label = field_state.component.collection_selected_label()
            if label is not None:
                self.status.set_raw(f"Selected entry {label}")
            return True

        return self._apply_list_op("Ctrl+←/→ select", select)
