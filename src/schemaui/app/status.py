from ..consts import (
    OVERLAY_PENDING_EXIT_STATUS,
    PENDING_EXIT_STATUS,
    POPUP_MULTI_STATUS,
    POPUP_SINGLE_STATUS,
    READY_STATUS,
    SAVED_STATUS,
)


class StatusLine:
    """Single-line message shown in the footer."""

    def __init__(self):
        self._message = READY_STATUS

    @property
    def message(self) -> str:
        return self._message

    def set_raw(self, message: str) -> None:
        self._message = message

    def ready(self) -> None:
        self._message = READY_STATUS

    def editing(self, label: str) -> None:
        self._message = f"Editing {label}"

    def value_updated(self) -> None:
        self._message = "Value updated"

    def validation_passed(self) -> None:
        self._message = "Validation passed"

    def issues_remaining(self, count: int) -> None:
        self._message = f"{count} issue(s) remaining"

    def saved(self) -> None:
        self._message = SAVED_STATUS

    def pending_exit(self) -> None:
        self._message = PENDING_EXIT_STATUS

    def popup_hint(self, multi: bool) -> None:
        self._message = POPUP_MULTI_STATUS if multi else POPUP_SINGLE_STATUS

    def overlay_pending_exit(self) -> None:
        self._message = OVERLAY_PENDING_EXIT_STATUS
