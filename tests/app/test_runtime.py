"""Headless runtime tests driving App.handle_key"""

import pytest

from schemaui.app import App, SchemaUI
from schemaui.config import UiOptions
from schemaui.consts import PENDING_EXIT_STATUS, READY_STATUS, SAVED_STATUS
from schemaui.enums import KeyCode
from schemaui.errors import ExitWithoutSave
from schemaui.form.keys import KeyEvent

CTRL_S = KeyEvent.of_char("s", ctrl=True)
CTRL_Q = KeyEvent.of_char("q", ctrl=True)
CTRL_N = KeyEvent.of_char("n", ctrl=True)
CTRL_E = KeyEvent.of_char("e", ctrl=True)
CTRL_D = KeyEvent.of_char("d", ctrl=True)
CTRL_DOWN = KeyEvent.of(KeyCode.DOWN, ctrl=True)
ENTER = KeyEvent.of(KeyCode.ENTER)
ESC = KeyEvent.of(KeyCode.ESC)
DOWN = KeyEvent.of(KeyCode.DOWN)
TAB = KeyEvent.of(KeyCode.TAB)
BACKSPACE = KeyEvent.of(KeyCode.BACKSPACE)

LISTENERS_SCHEMA = {
    "type": "object",
    "properties": {
        "listeners": {
            "type": "array",
            "items": {
                "oneOf": [
                    {
                        "title": "HTTP",
                        "type": "object",
                        "properties": {"kind": {"const": "http"}, "port": {"type": "integer"}},
                        "required": ["kind"],
                    },
                    {
                        "title": "Unix",
                        "type": "object",
                        "properties": {"kind": {"const": "unix"}, "path": {"type": "string"}},
                        "required": ["kind"],
                    },
                ]
            },
        }
    },
}


def build_app(schema, data=None, **options) -> App:
    return SchemaUI(schema).with_options(UiOptions(**options)).with_initial_data(data).build_app()


def feed(app, *keys):
    for key in keys:
        app.handle_key(key)


def typed(text):
    return [KeyEvent.of_char(ch) for ch in text]


class FakeTerminal:
    def __init__(self, keys):
        self.keys = list(keys)
        self.frames = 0

    def draw(self, app):
        self.frames += 1

    def read_key(self, timeout):
        return self.keys.pop(0) if self.keys else None


# ========== Save & exit ==========


def test_save_stores_validated_value():
    """Test: Ctrl+S on a valid form stores the value and reports it"""
    app = build_app({"type": "object", "properties": {"name": {"type": "string", "default": "demo"}}})

    feed(app, CTRL_S)

    assert app.result == {"name": "demo"}
    assert app.status.message == SAVED_STATUS
    assert app.validation_errors == 0


def test_save_with_coercion_error_marks_field():
    """Test: A non-numeric integer blocks saving and is shown on the field"""
    app = build_app({"type": "object", "properties": {"port": {"type": "integer"}}})

    feed(app, *typed("8a"), CTRL_S)

    assert app.result is None
    assert app.form_state.field_by_pointer("/port").error == "expected integer"
    assert app.status.message == "expected integer"


def test_underscored_integer_is_not_saved():
    """Test: Digit separators are not accepted in integer fields"""
    app = build_app({"type": "object", "properties": {"port": {"type": "integer"}}})

    feed(app, *typed("1_000"), CTRL_S)

    assert app.result is None
    assert app.form_state.field_by_pointer("/port").error == "expected integer"


def test_status_shows_only_the_focused_field_error():
    """Test: Editing a valid field does not repeat another field's error"""
    app = build_app({"type": "object", "properties": {"port": {"type": "integer"}, "name": {"type": "string"}}})

    feed(app, *typed("8a"))
    assert app.status.message == "expected integer"

    feed(app, TAB, *typed("x"))

    assert app.status.message == "Editing Name"
    assert app.form_state.field_by_pointer("/port").error == "expected integer"


def test_save_with_schema_violation_counts_issues():
    app = build_app(
        {
            "type": "object",
            "required": ["name"],
            "properties": {"name": {"type": "string", "minLength": 3}, "port": {"type": "integer", "maximum": 10}},
        },
        {"name": "ab", "port": 11},
    )

    feed(app, CTRL_S)

    assert app.result is None
    assert app.validation_errors == 2
    assert app.status.message == "2 issue(s) remaining"
    assert "too short" in app.form_state.field_by_pointer("/name").error


def test_root_level_issue_becomes_global_error():
    app = build_app(
        {
            "type": "object",
            "properties": {"a": {"type": "string"}},
            "required": ["b"],
        }
    )

    feed(app, CTRL_S)

    assert app.global_errors == ["<root>: 'b' is a required property"]


def test_quit_on_dirty_form_needs_confirmation():
    """Test: The first Ctrl+Q on a dirty form only arms the exit"""
    app = build_app({"type": "object", "properties": {"name": {"type": "string"}}})
    feed(app, *typed("x"))

    feed(app, CTRL_Q)
    assert app.should_quit is False
    assert app.status.message == PENDING_EXIT_STATUS

    feed(app, CTRL_Q)
    assert app.should_quit is True


def test_other_key_disarms_exit():
    app = build_app({"type": "object", "properties": {"name": {"type": "string"}}})
    feed(app, *typed("x"), CTRL_Q, *typed("y"), CTRL_Q)

    assert app.should_quit is False


def test_quit_on_clean_form_is_immediate():
    app = build_app({"type": "object", "properties": {"name": {"type": "string"}}})

    feed(app, CTRL_Q)

    assert app.should_quit is True


def test_run_returns_saved_value():
    app = build_app({"type": "object", "properties": {"name": {"type": "string", "default": "a"}}})
    terminal = FakeTerminal([CTRL_S, CTRL_Q])

    assert app.run(terminal) == {"name": "a"}
    assert terminal.frames == 2


def test_run_without_save_raises():
    app = build_app({"type": "object", "properties": {"name": {"type": "string"}}})

    with pytest.raises(ExitWithoutSave):
        app.run(FakeTerminal([CTRL_Q]))


# ========== Editing & navigation ==========


def test_typing_sets_editing_status_and_live_validation():
    app = build_app({"type": "object", "properties": {"name": {"type": "string", "maxLength": 1}}})

    feed(app, *typed("ab"))

    assert app.status.message == "Editing Name"
    assert app.form_state.focused_field().error is not None
    assert app.validation_errors == 1


def test_tab_moves_focus():
    app = build_app({"type": "object", "properties": {"a": {"type": "string"}, "b": {"type": "string"}}})

    feed(app, TAB)

    assert app.form_state.focused_field().pointer == "/b"


def test_help_context_follows_focus():
    app = build_app(
        {"type": "object", "properties": {"name": {"type": "string"}, "tags": {"type": "array", "items": {"type": "string"}}}}
    )
    assert "Ctrl+N" not in app.help_text()

    feed(app, TAB)
    assert "Ctrl+N -> Add entry" in app.help_text()


def test_help_can_be_hidden():
    app = build_app({"type": "object", "properties": {"name": {"type": "string"}}}, show_help=False)

    assert app.help_text() is None


# ========== Popups ==========


def test_one_of_popup_switches_variant():
    """Test: Enter opens the variant popup; choosing applies the variant"""
    app = build_app(
        {
            "type": "object",
            "properties": {
                "endpoint": {
                    "oneOf": [
                        {"title": "Tcp", "type": "object", "properties": {"port": {"type": "integer"}}},
                        {"title": "Socket", "type": "object", "properties": {"path": {"type": "string"}}},
                    ]
                }
            },
        }
    )

    feed(app, ENTER)
    assert app.popup is not None
    assert app.popup.options == ["Tcp", "Socket"]

    feed(app, DOWN, ENTER)
    assert app.popup is None
    assert app.status.message == "Value updated"
    assert app.form_state.focused_field().component.active_composite_variants() == [1]
    assert app.form_state.is_dirty() is True


def test_bool_popup_and_escape():
    app = build_app({"type": "object", "properties": {"debug": {"type": "boolean"}}})

    feed(app, ENTER)
    assert app.popup.selected == 1
    feed(app, ESC)
    assert app.popup is None
    assert app.status.message == READY_STATUS

    feed(app, ENTER, KeyEvent.of(KeyCode.UP), ENTER)
    assert app.form_state.focused_field().current_value() is True


def test_multi_select_popup_toggles_with_space():
    app = build_app({"type": "object", "properties": {"modes": {"type": "array", "items": {"enum": ["a", "b", "c"]}}}})

    feed(app, ENTER, KeyEvent.of_char(" "), DOWN, DOWN, KeyEvent.of_char(" "), ENTER)

    assert app.form_state.focused_field().current_value() == ["a", "c"]


def test_enter_on_text_field_opens_nothing():
    app = build_app({"type": "object", "properties": {"name": {"type": "string"}}})

    feed(app, ENTER)

    assert app.popup is None


# ========== Collections & overlays ==========


def test_key_value_duplicate_key_keeps_overlay_open():
    """Test: Committing a renamed entry onto an existing key is rejected"""
    app = build_app(
        {"type": "object", "properties": {"labels": {"type": "object", "additionalProperties": {"type": "string"}}}}
    )

    feed(app, CTRL_N, CTRL_N, CTRL_E)
    assert len(app.overlays) == 1
    assert app.active_overlay().target.entry_index == 1

    feed(app, BACKSPACE, *typed("1"), CTRL_S)

    assert len(app.overlays) == 1
    assert app.status.message == "duplicate key 'key-1'"
    assert app.active_overlay().commit_error == "duplicate key 'key-1'"
    labels = app.form_state.field_by_pointer("/labels")
    assert labels.component.state.keys() == ["key-1", "key-2"]


def test_key_value_entry_commit():
    app = build_app(
        {"type": "object", "properties": {"labels": {"type": "object", "additionalProperties": {"type": "string"}}}}
    )

    feed(app, CTRL_N, CTRL_E, *[BACKSPACE] * 5, *typed("env"), CTRL_S)

    assert app.overlays == []
    assert app.status.message == "Overlay 1 saved."
    assert app.form_state.field_by_pointer("/labels").current_value() == {"env": ""}


def test_composite_list_reorder():
    """Test: Ctrl+Down moves the selected entry and renumbers pointers"""
    app = build_app(
        LISTENERS_SCHEMA,
        {"listeners": [{"kind": "http", "port": 80}, {"kind": "unix", "path": "/run/s"}]},
    )

    feed(app, CTRL_DOWN)

    listeners = app.form_state.field_by_pointer("/listeners")
    assert listeners.component.state.entry_pointers() == ["/listeners/entry_0", "/listeners/entry_1"]
    assert [entry["kind"] for entry in listeners.current_value()] == ["unix", "http"]
    assert listeners.dirty is True
    assert app.status.message.startswith("Moved entry to #2")


def test_list_ops_outside_collection():
    app = build_app({"type": "object", "properties": {"name": {"type": "string"}}})

    feed(app, CTRL_N)

    assert app.status.message == "Focus a repeatable field before Ctrl+N add"


def test_remove_from_empty_list():
    app = build_app({"type": "object", "properties": {"tags": {"type": "array", "items": {"type": "string"}}}})

    feed(app, CTRL_D)

    assert app.status.message == "No entry to remove"


def test_list_op_inside_entry_overlay_reopens_it():
    app = build_app({"type": "object", "properties": {"tags": {"type": "array", "items": {"type": "string"}}}})

    feed(app, CTRL_N, CTRL_E)
    assert app.active_overlay().list_entries == ['#1 ""']

    feed(app, CTRL_N)

    assert len(app.overlays) == 1
    assert app.active_overlay().target.entry_index == 1
    assert app.active_overlay().list_entries == ['#1 ""', '#2 ""']
    assert app.status.message == 'Added entry #2 ""'


def test_edit_requires_composite_or_collection():
    app = build_app({"type": "object", "properties": {"name": {"type": "string"}}})

    feed(app, CTRL_E)

    assert app.overlays == []
    assert app.status.message == "Focus a composite or composite list field before editing"


def test_composite_overlay_edit_and_commit():
    app = build_app(
        {
            "type": "object",
            "properties": {
                "endpoint": {
                    "oneOf": [{"title": "Tcp", "type": "object", "properties": {"port": {"type": "integer"}}}]
                }
            },
        }
    )

    feed(app, CTRL_E)
    overlay = app.active_overlay()
    assert overlay.display_title == "Edit Endpoint – Tcp"
    assert app.status.message.startswith("Overlay 1: L1 · Ctrl+S -> Save")

    feed(app, *typed("443"))
    assert app.status.message == "Editing Endpoint › Port"

    feed(app, CTRL_S)
    assert app.overlays == []
    assert app.form_state.field_by_pointer("/endpoint").current_value() == {"port": 443}


def test_dirty_overlay_needs_second_escape():
    app = build_app(
        {
            "type": "object",
            "properties": {"endpoint": {"oneOf": [{"type": "object", "properties": {"port": {"type": "integer"}}}]}},
        }
    )

    feed(app, CTRL_E, *typed("1"), ESC)
    assert len(app.overlays) == 1
    assert app.active_overlay().exit_armed is True

    feed(app, ESC)
    assert app.overlays == []
    assert app.form_state.field_by_pointer("/endpoint").current_value() == {}


def test_overlay_validation_blocks_commit():
    app = build_app(
        {
            "type": "object",
            "properties": {
                "endpoint": {
                    "oneOf": [{"type": "object", "properties": {"port": {"type": "integer", "minimum": 10}}}]
                }
            },
        }
    )

    feed(app, CTRL_E, *typed("5"), CTRL_S)

    assert len(app.overlays) == 1
    assert app.status.message == "1 issue(s) remaining"
    assert app.active_overlay().form_state.focused_field().error is not None


def test_nested_overlay_commits_into_parent():
    """Test: A list entry overlay can open a composite overlay on one of its fields"""
    app = build_app(
        {
            "type": "object",
            "properties": {
                "routes": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "target": {
                                "oneOf": [{"title": "Host", "type": "object", "properties": {"host": {"type": "string"}}}]
                            }
                        },
                    },
                }
            },
        }
    )

    feed(app, CTRL_N, CTRL_E)
    assert app.active_overlay().level == 1

    feed(app, TAB, CTRL_E)
    assert app.active_overlay().level == 2
    assert app.active_overlay().host_level == 1

    feed(app, *typed("db"), CTRL_S)
    assert len(app.overlays) == 1

    feed(app, CTRL_S)
    assert app.overlays == []
    routes = app.form_state.field_by_pointer("/routes")
    assert routes.current_value() == [{"target": {"host": "db"}}]
