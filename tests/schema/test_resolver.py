"""Reference resolution and allOf merging tests"""

import pytest

from schemaui.app import SchemaUI
from schemaui.enums import KeyCode, KindType
from schemaui.errors import SchemaError
from schemaui.form.keys import KeyEvent
from schemaui.schema import SchemaResolver, build_form_schema
from schemaui.schema.compiler import variant_form_document

LINKED_LIST_SCHEMA = {
    "definitions": {
        "node": {
            "type": "object",
            "properties": {
                "value": {"type": "integer"},
                "next": {"oneOf": [{"$ref": "#/definitions/node"}, {"type": "null"}]},
            },
        }
    },
    "$ref": "#/definitions/node",
}


def test_resolves_definitions_reference():
    resolver = SchemaResolver({"definitions": {"name": {"type": "string", "title": "Name"}}})

    with resolver.expand({"$ref": "#/definitions/name"}) as resolved:
        assert resolved == {"type": "string", "title": "Name"}


def test_reference_siblings_override_target():
    resolver = SchemaResolver({"definitions": {"name": {"type": "string", "title": "Name"}}})

    with resolver.expand({"$ref": "#/definitions/name", "title": "Alias"}) as resolved:
        assert resolved["title"] == "Alias"
        assert resolved["type"] == "string"


def test_resolves_json_pointer_reference():
    resolver = SchemaResolver({"$defs": {"a/b": {"type": "integer"}}})

    with resolver.expand({"$ref": "#/$defs/a~1b"}) as resolved:
        assert resolved == {"type": "integer"}


def test_boolean_schema_is_normalised():
    resolver = SchemaResolver({})

    with resolver.expand(True) as resolved:
        assert resolved == {}


@pytest.mark.parametrize(
    "reference,message",
    [
        ("#/definitions/missing", "definition 'missing' not found"),
        ("#/nope/x", "not found"),
        ("other.json#/x", "unsupported reference"),
    ],
)
def test_bad_references(reference, message):
    resolver = SchemaResolver({"definitions": {}})

    with pytest.raises(SchemaError, match=message):
        with resolver.expand({"$ref": reference}):
            pass


def test_reference_stack_is_released_after_expand():
    resolver = SchemaResolver({"definitions": {"a": {"type": "string"}}})

    with resolver.expand({"$ref": "#/definitions/a"}):
        pass
    with resolver.expand({"$ref": "#/definitions/a"}) as resolved:
        assert resolved["type"] == "string"


def test_cyclic_reference_is_reported():
    """Test: A definition that contains itself cannot be compiled"""
    schema = {
        "definitions": {
            "node": {
                "type": "object",
                "properties": {"name": {"type": "string"}, "child": {"$ref": "#/definitions/node"}},
            }
        },
        "properties": {"tree": {"$ref": "#/definitions/node"}},
    }

    with pytest.raises(SchemaError, match="cyclic"):
        build_form_schema(schema)


def test_all_of_object_parts_are_merged():
    resolver = SchemaResolver({"definitions": {"base": {"properties": {"id": {"type": "integer"}}, "required": ["id"]}}})
    schema = {
        "allOf": [
            {"$ref": "#/definitions/base"},
            {"type": "object", "properties": {"name": {"type": "string"}}, "required": ["name"]},
        ]
    }

    with resolver.expand(schema) as merged:
        assert list(merged["properties"]) == ["id", "name"]
        assert merged["required"] == ["id", "name"]
        assert merged["type"] == "object"
        assert "allOf" not in merged


def test_all_of_without_object_content_is_kept():
    resolver = SchemaResolver({})
    schema = {"allOf": [{"minLength": 1}, {"maxLength": 3}]}

    with resolver.expand(schema) as resolved:
        assert resolved is schema


# ========== Recursive schemas ==========


def test_detached_resolution_ignores_enclosing_references():
    resolver = SchemaResolver(LINKED_LIST_SCHEMA)

    with resolver.expand({"$ref": "#/definitions/node"}):
        branch = resolver.resolve_detached({"$ref": "#/definitions/node"})
        assert branch["type"] == "object"
        with pytest.raises(SchemaError, match="cyclic"):
            with resolver.expand({"$ref": "#/definitions/node"}):
                pass


def test_detached_resolution_still_reports_self_reference():
    resolver = SchemaResolver({"definitions": {"loop": {"$ref": "#/definitions/loop"}}})

    with pytest.raises(SchemaError, match="cyclic"):
        resolver.resolve_detached({"$ref": "#/definitions/loop"})


def test_recursion_through_one_of_compiles_lazily():
    """Test: A self-referencing oneOf branch is compiled one level at a time"""
    form = build_form_schema(LINKED_LIST_SCHEMA)

    next_field = next(field for field in form.iter_fields() if field.name == "next")
    assert next_field.kind.type == KindType.COMPOSITE
    node, null = next_field.kind.composite.variants
    assert node.is_object is True
    assert null.is_object is False

    nested = build_form_schema(variant_form_document(node))
    assert [field.name for field in nested.iter_fields()] == ["value", "next"]


def test_recursion_through_array_items_compiles():
    schema = {
        "definitions": {
            "tree": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "children": {"type": "array", "items": {"$ref": "#/definitions/tree"}},
                },
            }
        },
        "$ref": "#/definitions/tree",
    }

    form = build_form_schema(schema)

    children = next(field for field in form.iter_fields() if field.name == "children")
    assert children.kind.type == KindType.ARRAY


def test_self_referencing_array_items_are_rejected():
    schema = {
        "definitions": {"grid": {"type": "array", "items": {"$ref": "#/definitions/grid"}}},
        "properties": {"grid": {"$ref": "#/definitions/grid"}},
    }

    with pytest.raises(SchemaError, match="nested arrays"):
        build_form_schema(schema)


def test_linked_list_is_edited_and_saved():
    """Test: The recursive variant opens in an overlay and saves a two-node list"""
    app = SchemaUI(LINKED_LIST_SCHEMA).build_app()

    app.handle_key(KeyEvent.of_char("1"))
    app.handle_key(KeyEvent.of(KeyCode.TAB))
    app.handle_key(KeyEvent.of_char("e", ctrl=True))
    assert app.active_overlay().display_title.endswith("Variant 1")

    app.handle_key(KeyEvent.of_char("2"))
    app.handle_key(KeyEvent.of_char("s", ctrl=True))
    assert app.overlays == []

    app.handle_key(KeyEvent.of_char("s", ctrl=True))

    assert app.result == {"value": 1, "next": {"value": 2}}


def test_untouched_recursive_variant_is_left_out():
    app = SchemaUI(LINKED_LIST_SCHEMA).build_app()

    app.handle_key(KeyEvent.of_char("s", ctrl=True))

    assert app.result == {}
