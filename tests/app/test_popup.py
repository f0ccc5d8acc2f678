"""Popup construction and selection tests"""

from schemaui.app import PopupState, apply_selection_to_field
from schemaui.enums import PopupOwner
from schemaui.form import FieldState
from schemaui.schema import build_form_schema


def make_field(prop):
    return FieldState.from_schema(next(build_form_schema({"properties": {"f": prop}}).iter_fields()))


def test_text_field_has_no_popup():
    assert PopupState.from_field(make_field({"type": "string"})) is None


def test_enum_popup_starts_on_current_option():
    popup = PopupState.from_field(make_field({"enum": ["a", "b", "c"], "default": "b"}), PopupOwner.OVERLAY)

    assert popup.options == ["a", "b", "c"]
    assert popup.selected == 1
    assert popup.owner == PopupOwner.OVERLAY
    assert popup.active() is None


def test_selection_wraps():
    popup = PopupState.from_field(make_field({"enum": ["a", "b"]}))

    popup.select_previous()
    assert popup.selected == 1
    popup.select_next()
    assert popup.selected == 0


def test_any_of_popup_is_multi():
    field_state = make_field({"anyOf": [{"type": "string", "title": "Text"}, {"type": "integer"}]})
    popup = PopupState.from_field(field_state)

    assert popup.multi is True
    assert popup.flags == [False, False]

    popup.select_next()
    popup.toggle_current()
    assert apply_selection_to_field(field_state, popup.selected, popup.active()) is True
    assert field_state.component.active_composite_variants() == [1]


def test_apply_enum_and_bool():
    enum_field = make_field({"enum": ["a", "b"]})
    bool_field = make_field({"type": "boolean"})

    assert apply_selection_to_field(enum_field, 1, None) is True
    assert enum_field.current_value() == "b"
    assert apply_selection_to_field(bool_field, 0, None) is True
    assert bool_field.current_value() is True
    assert apply_selection_to_field(bool_field, 0, None) is False
