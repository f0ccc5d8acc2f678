"""Composite, key/value and array state tests"""

import pytest

from schemaui.enums import ComponentKind, KeyCode
from schemaui.errors import FieldCoercionError
from schemaui.form import FieldState
from schemaui.form.keys import KeyEvent
from schemaui.schema import build_form_schema

LISTENER_VARIANTS = [
    {
        "title": "HTTP",
        "type": "object",
        "properties": {"kind": {"const": "http"}, "port": {"type": "integer"}},
    },
    {
        "title": "Unix",
        "type": "object",
        "properties": {"kind": {"const": "unix"}, "path": {"type": "string"}},
    },
]


def make_field(prop, required=False):
    schema = {"properties": {"f": prop}}
    if required:
        schema["required"] = ["f"]
    return FieldState.from_schema(next(build_form_schema(schema).iter_fields()))


def type_into(form_state, text, backspaces=0):
    field_state = form_state.focused_field()
    for _ in range(backspaces):
        field_state.handle_key(KeyEvent.of(KeyCode.BACKSPACE))
    for ch in text:
        field_state.handle_key(KeyEvent.of_char(ch))


# ========== Composite ==========


class TestComposite:
    """Tests for oneOf/anyOf fields"""

    def test_one_of_starts_on_first_variant(self):
        field_state = make_field({"oneOf": LISTENER_VARIANTS})

        assert field_state.component.kind == ComponentKind.COMPOSITE
        assert field_state.component.active_composite_variants() == [0]
        assert field_state.display_value().startswith("Variant: HTTP")

    def test_seed_picks_variant_by_const(self):
        field_state = make_field({"oneOf": LISTENER_VARIANTS})
        field_state.seed_value({"kind": "unix", "path": "/run/app.sock"})

        assert field_state.component.active_composite_variants() == [1]
        assert field_state.current_value() == {"kind": "unix", "path": "/run/app.sock"}

    def test_seed_picks_variant_by_property_coverage(self):
        variants = [
            {"type": "object", "properties": {"host": {"type": "string"}, "port": {"type": "integer"}}},
            {"type": "object", "properties": {"socket": {"type": "string"}}},
        ]
        field_state = make_field({"oneOf": variants})
        field_state.seed_value({"socket": "/tmp/s"})

        assert field_state.component.active_composite_variants() == [1]

    def test_selection_switches_variant(self):
        field_state = make_field({"oneOf": LISTENER_VARIANTS})

        assert field_state.apply_composite_selection(1, None) is True
        assert field_state.dirty is True
        assert field_state.component.active_composite_variants() == [1]
        assert field_state.apply_composite_selection(1, None) is False

    def test_any_of_collects_active_values(self):
        field_state = make_field({"anyOf": [{"type": "string"}, {"type": "integer"}]})
        assert field_state.current_value() is None

        field_state.seed_value(["text", 3])
        assert field_state.component.active_composite_variants() == [0, 1]
        assert field_state.current_value() == ["text", 3]

    def test_any_of_required_needs_a_variant(self):
        field_state = make_field({"anyOf": [{"type": "string"}]}, required=True)

        with pytest.raises(FieldCoercionError, match="anyOf requires at least one active variant"):
            field_state.current_value()

    def test_editor_session_is_isolated_until_restored(self):
        """Test: Edits in a session only reach the field once restored"""
        field_state = make_field({"oneOf": LISTENER_VARIANTS})
        session = field_state.component.open_composite_editor(field_state.pointer, 0)
        session.form_state.focus_pointer("/port")
        type_into(session.form_state, "8080")

        assert field_state.current_value() == {}
        field_state.restore_composite_editor(session, mark_dirty=session.form_state.is_dirty())
        assert field_state.current_value() == {"port": 8080}
        assert field_state.dirty is True

    def test_inactive_variant_cannot_be_edited(self):
        field_state = make_field({"oneOf": LISTENER_VARIANTS})

        with pytest.raises(FieldCoercionError, match="not active"):
            field_state.component.open_composite_editor(field_state.pointer, 1)

    def test_scalar_variant_errors_are_prefixed(self):
        field_state = make_field({"oneOf": [{"type": "integer"}]})
        session = field_state.component.open_composite_editor(field_state.pointer, 0)
        type_into(session.form_state, "x")
        field_state.restore_composite_editor(session, mark_dirty=True)

        with pytest.raises(FieldCoercionError) as exc_info:
            field_state.current_value()
        assert exc_info.value.pointer == "/f/__value"


class TestCompositeList:
    def make_list(self):
        field_state = make_field({"type": "array", "items": {"oneOf": LISTENER_VARIANTS}})
        field_state.seed_value([{"kind": "http", "port": 80}, {"kind": "unix", "path": "/s"}])
        return field_state

    def test_entries_and_pointers(self):
        field_state = self.make_list()
        state = field_state.component.state

        assert field_state.component.kind == ComponentKind.COMPOSITE_LIST
        assert state.entry_pointers() == ["/f/entry_0", "/f/entry_1"]
        assert field_state.current_value() == [{"kind": "http", "port": 80}, {"kind": "unix", "path": "/s"}]

    def test_move_renumbers_entries(self):
        field_state = self.make_list()

        assert field_state.collection_move(1) is True
        assert field_state.current_value()[0]["kind"] == "unix"
        assert field_state.component.state.entry_pointers() == ["/f/entry_0", "/f/entry_1"]
        assert field_state.component.collection_selected_index() == 1
        assert field_state.collection_move(1) is False

    def test_add_and_remove(self):
        field_state = self.make_list()

        field_state.collection_add()
        assert len(field_state.component.state) == 3
        assert field_state.component.collection_selected_label() == "#3 Variant: HTTP"

        field_state.collection_remove()
        field_state.collection_remove()
        field_state.collection_remove()
        assert field_state.current_value() is None
        assert field_state.collection_remove() is False

    def test_entry_editor_round_trip(self):
        field_state = self.make_list()
        context = field_state.component.open_entry_editor(field_state.pointer)
        context.session.form_state.focus_pointer("/port")
        type_into(context.session.form_state, "81", backspaces=2)

        assert field_state.apply_entry_editor(context.entry_index, context.session) is True
        assert field_state.current_value()[0] == {"kind": "http", "port": 81}


# ========== Key/value ==========


class TestKeyValue:
    def make_map(self, **extra):
        return make_field({"type": "object", "additionalProperties": {"type": "string"}, **extra})

    def test_add_synthesizes_unique_keys(self):
        field_state = self.make_map()
        field_state.component.state.seed_entries({"key-1": "taken"})

        field_state.collection_add()
        field_state.collection_add()

        assert field_state.component.state.keys() == ["key-1", "key-2", "key-3"]
        assert field_state.component.collection_selected_index() == 2

    def test_duplicate_key_is_rejected_and_entry_kept(self):
        """Test: Renaming an entry onto an existing key fails without changing it"""
        field_state = self.make_map()
        field_state.collection_add()
        field_state.collection_add()
        context = field_state.component.open_entry_editor(field_state.pointer)
        type_into(context.session.form_state, "1", backspaces=1)

        with pytest.raises(FieldCoercionError, match="duplicate key 'key-1'") as exc_info:
            field_state.apply_entry_editor(context.entry_index, context.session)
        assert exc_info.value.pointer == "/f/key-1"
        assert field_state.component.state.keys() == ["key-1", "key-2"]

    def test_entry_editor_renames_and_sets_value(self):
        field_state = self.make_map()
        field_state.collection_add()
        context = field_state.component.open_entry_editor(field_state.pointer)
        form = context.session.form_state
        type_into(form, "env", backspaces=5)
        form.focus_next_field()
        type_into(form, "prod")

        assert field_state.apply_entry_editor(context.entry_index, context.session) is True
        assert field_state.current_value() == {"env": "prod"}

    def test_empty_key_fails_build(self):
        field_state = self.make_map()
        field_state.seed_value({" ": "x"})

        with pytest.raises(FieldCoercionError, match="key cannot be empty"):
            field_state.current_value()

    def test_default_seeds_entries_and_summaries(self):
        field_state = self.make_map(default={"a": "1", "b": "2"})

        assert field_state.component.collection_panel() == (['a = "1"', 'b = "2"'], 0)
        assert field_state.current_value() == {"a": "1", "b": "2"}

    def test_empty_map_value(self):
        assert self.make_map().current_value() is None
        assert make_field(
            {"type": "object", "additionalProperties": {"type": "string"}}, required=True
        ).current_value() == {}


# ========== Scalar arrays ==========


class TestScalarArray:
    def test_defaults_and_reorder(self):
        field_state = make_field({"type": "array", "items": {"type": "string"}, "default": ["a", "b"]})

        assert field_state.component.kind == ComponentKind.SCALAR_ARRAY
        assert field_state.collection_move(1) is True
        assert field_state.current_value() == ["b", "a"]

    def test_add_uses_item_default(self):
        field_state = make_field({"type": "array", "items": {"type": "integer"}})
        field_state.collection_add()

        assert field_state.current_value() == [0]
        assert field_state.display_value().startswith("Array[1] • #1 0")

    def test_entry_editor_updates_value(self):
        field_state = make_field({"type": "array", "items": {"type": "string"}, "default": ["a", "b"]})
        context = field_state.component.open_entry_editor(field_state.pointer)
        type_into(context.session.form_state, "x")

        assert context.session.title == "F · entry #1"
        assert field_state.apply_entry_editor(context.entry_index, context.session) is True
        assert field_state.current_value() == ["ax", "b"]

    def test_entry_editor_rejects_bad_input(self):
        field_state = make_field({"type": "array", "items": {"type": "integer"}, "default": [1]})
        context = field_state.component.open_entry_editor(field_state.pointer)
        type_into(context.session.form_state, "x")

        with pytest.raises(FieldCoercionError, match="expected integer"):
            field_state.apply_entry_editor(context.entry_index, context.session)
        assert field_state.current_value() == [1]

    def test_empty_list_cannot_open_editor(self):
        field_state = make_field({"type": "array", "items": {"type": "string"}})

        with pytest.raises(FieldCoercionError, match="no entry selected"):
            field_state.component.open_entry_editor(field_state.pointer)
