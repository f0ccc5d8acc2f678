"""Compile a JSON Schema document into a form tree of roots, sections and fields."""

import copy
import logging
from dataclasses import dataclass
from typing import Any, Optional

from ..consts import (
    DEFAULT_ENTRY_TITLE,
    DEFAULT_KEY_TITLE,
    DEFAULT_VALUE_TITLE,
    GENERAL_ROOT_ID,
    GENERAL_ROOT_TITLE,
    WRAPPED_VALUE_FIELD,
)
from ..enums import CompositeMode, KindType
from ..errors import SchemaError
from ..utils import pointer_from_path, prettify_label
from .models import (
    CompositeSpec,
    CompositeVariant,
    FieldKind,
    FieldSchema,
    FormSchema,
    KeyValueTemplate,
    RootSchema,
    SectionSchema,
)
from .resolver import SchemaResolver, has_object_content

logger = logging.getLogger(__name__)

TYPE_KINDS = {
    "string": KindType.STRING,
    "integer": KindType.INTEGER,
    "number": KindType.NUMBER,
    "boolean": KindType.BOOLEAN,
    "object": KindType.JSON,
}


@dataclass
class SectionInfo:
    id: str
    title: str
    description: Optional[str] = None


def general_section_info() -> SectionInfo:
    return SectionInfo(id=GENERAL_ROOT_ID, title=GENERAL_ROOT_TITLE)


def instance_type(schema: dict[str, Any]) -> Optional[str]:
    declared = schema.get("type")
    if isinstance(declared, str):
        return declared
    if isinstance(declared, list):
        return next((t for t in declared if t != "null"), None)
    return None


def is_object_schema(schema: dict[str, Any]) -> bool:
    declared = instance_type(schema)
    if declared == "object":
        return True
    if declared is None:
        return has_object_content(schema)
    return False


def has_composite_subschemas(schema: dict[str, Any]) -> bool:
    return "oneOf" in schema or "anyOf" in schema


def should_descend(schema: dict[str, Any]) -> bool:
    properties = schema.get("properties")
    return (
        is_object_schema(schema)
        and isinstance(properties, dict)
        and bool(properties)
        and not has_composite_subschemas(schema)
    )


def extension_string(schema: dict[str, Any], key: str) -> Optional[str]:
    value = schema.get(key)
    return value if isinstance(value, str) else None


def metadata_map(schema: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in schema.items() if k.startswith("x-")}


def section_info_for_object(
    schema: dict[str, Any], name: str, parent: Optional[SectionInfo] = None
) -> SectionInfo:
    group = extension_string(schema, "x-group")
    if group:
        return SectionInfo(
            id=group,
            title=extension_string(schema, "x-group-title") or prettify_label(group),
            description=extension_string(schema, "x-group-description"),
        )

    description = schema.get("description")
    if description is None and parent is not None:
        description = parent.description
    return SectionInfo(
        id=name,
        title=schema.get("title") or prettify_label(name),
        description=description,
    )


def schema_titles(schema: dict[str, Any], fallback: str) -> tuple[str, Optional[str], Any]:
    return schema.get("title") or fallback, schema.get("description"), schema.get("default")


class SchemaCompiler:
    """Walks one schema document and produces its :class:`FormSchema`."""

    def __init__(self, document: Any):
        if not isinstance(document, dict):
            raise SchemaError("root schema must be an object")
        self.document = document
        self.resolver = SchemaResolver(document)

    def compile(self) -> FormSchema:
        with self.resolver.expand(self.document) as root:
            if not is_object_schema(root) and instance_type(root) is not None:
                raise SchemaError("schema must describe an object")
            properties = root.get("properties") or {}
            required = set(root.get("required") or [])

            general_fields: list[FieldSchema] = []
            roots: dict[str, RootSchema] = {}
            for name, property_schema in properties.items():
                with self.resolver.expand(property_schema) as resolved:
                    if should_descend(resolved):
                        info = section_info_for_object(resolved, name)
                        section = self._build_section(resolved, [name], None, 0)
                        roots[name] = RootSchema(
                            id=name,
                            title=info.title,
                            description=info.description,
                            sections=[section],
                        )
                    else:
                        general_fields.append(
                            self._build_field(
                                resolved, name, [name], general_section_info(), name in required
                            )
                        )

            roots_out: list[RootSchema] = []
            if general_fields or not roots:
                roots_out.append(
                    RootSchema(
                        id=GENERAL_ROOT_ID,
                        title=GENERAL_ROOT_TITLE,
                        sections=[
                            SectionSchema(
                                id=GENERAL_ROOT_ID,
                                title=GENERAL_ROOT_TITLE,
                                fields=general_fields,
                            )
                        ],
                    )
                )
            roots_out.extend(roots.values())

            form = FormSchema(
                title=root.get("title"),
                description=root.get("description"),
                roots=roots_out,
            )

        logger.debug(
            f"Compiled schema into {len(form.roots)} root(s) "
            f"and {sum(1 for _ in form.iter_fields())} field(s)"
        )
        return form

    def _build_section(
        self,
        schema: dict[str, Any],
        path: list[str],
        parent: Optional[SectionInfo],
        depth: int,
    ) -> SectionSchema:
        info = section_info_for_object(schema, path[-1] if path else "section", parent)
        required = set(schema.get("required") or [])

        fields: list[FieldSchema] = []
        children: list[SectionSchema] = []
        for child_name, child_schema in schema["properties"].items():
            next_path = [*path, child_name]
            with self.resolver.expand(child_schema) as resolved:
                if should_descend(resolved):
                    children.append(self._build_section(resolved, next_path, info, depth + 1))
                else:
                    fields.append(
                        self._build_field(
                            resolved, child_name, next_path, info, child_name in required
                        )
                    )

        return SectionSchema(
            id=info.id,
            title=info.title,
            description=info.description,
            path=path,
            depth=depth,
            fields=fields,
            children=children,
        )

    def _build_field(
        self,
        schema: dict[str, Any],
        name: str,
        path: list[str],
        section: SectionInfo,
        required: bool,
    ) -> FieldSchema:
        try:
            kind = self.detect_kind(schema)
        except SchemaError as e:
            raise SchemaError(f"unsupported schema for field '{name}': {e}") from e

        return FieldSchema(
            name=name,
            path=path,
            pointer=pointer_from_path(path),
            title=schema.get("title") or prettify_label(name),
            description=schema.get("description"),
            section_id=section.id,
            kind=kind,
            required=required,
            default=copy.deepcopy(schema.get("default")),
            metadata=metadata_map(schema),
        )

    def detect_kind(self, schema: dict[str, Any]) -> FieldKind:
        key_value = self._key_value_template(schema)
        if key_value is not None:
            return FieldKind.of_key_value(key_value)

        composite = self._composite_spec(schema)
        if composite is not None:
            return FieldKind.of_composite(composite)

        if isinstance(schema.get("enum"), list):
            return FieldKind.enum(schema["enum"])

        declared = instance_type(schema)
        if declared is None:
            return FieldKind.scalar(KindType.STRING)
        if declared in TYPE_KINDS:
            return FieldKind.scalar(TYPE_KINDS[declared])
        if declared == "array":
            return self._array_kind(schema)
        raise SchemaError(f"unsupported field type {declared}")

    def _array_kind(self, schema: dict[str, Any]) -> FieldKind:
        items = schema.get("items")
        if items is None:
            return FieldKind.array(FieldKind.scalar(KindType.JSON))
        if isinstance(items, list):
            if not items:
                raise SchemaError("tuple arrays without items are not supported")
            items = items[0]

        inner = self.resolver.resolve_detached(items)
        if instance_type(inner) == "array" and not has_composite_subschemas(inner) and "enum" not in inner:
            raise SchemaError("nested arrays are not supported")
        inner_kind = self.detect_kind(inner)
        match inner_kind.type:
            case KindType.KEY_VALUE:
                raise SchemaError("arrays of key/value maps are not supported")
            case KindType.JSON if is_object_schema(inner):
                return FieldKind.array(
                    FieldKind.of_composite(self._inline_object_composite(inner))
                )
            case _:
                return FieldKind.array(inner_kind)

    def _key_value_template(self, schema: dict[str, Any]) -> Optional[KeyValueTemplate]:
        if not is_object_schema(schema) or schema.get("properties"):
            return None

        additional = schema.get("additionalProperties")
        pattern_properties = schema.get("patternProperties") or {}
        if isinstance(additional, dict):
            value_source, key_override = additional, None
        elif pattern_properties:
            pattern, value_source = next(iter(pattern_properties.items()))
            key_override = {"type": "string", "pattern": pattern, "title": DEFAULT_KEY_TITLE}
        else:
            return None

        with self.resolver.expand(value_source) as value_schema:
            value_kind = self.detect_kind(value_schema)
            value_schema = copy.deepcopy(value_schema)
        value_title, value_description, value_default = schema_titles(
            value_schema, DEFAULT_VALUE_TITLE
        )

        key_title, key_description, key_default = DEFAULT_KEY_TITLE, None, None
        if key_override is not None:
            key_schema = key_override
        elif "propertyNames" in schema:
            with self.resolver.expand(schema["propertyNames"]) as names:
                key_schema = copy.deepcopy(names)
            key_title, key_description, key_default = schema_titles(key_schema, DEFAULT_KEY_TITLE)
        else:
            key_schema = {"type": "string", "title": DEFAULT_KEY_TITLE}

        return KeyValueTemplate(
            key_title=key_title,
            key_description=key_description,
            key_default=key_default,
            key_schema=key_schema,
            value_title=value_title,
            value_description=value_description,
            value_default=value_default,
            value_schema=value_schema,
            value_kind=value_kind,
            entry_schema={
                "type": "object",
                "required": ["key", "value"],
                "properties": {"key": key_schema, "value": value_schema},
            },
        )

    def _composite_spec(self, schema: dict[str, Any]) -> Optional[CompositeSpec]:
        if "oneOf" in schema:
            mode, branches = CompositeMode.ONE_OF, schema["oneOf"]
        elif "anyOf" in schema:
            mode, branches = CompositeMode.ANY_OF, schema["anyOf"]
        else:
            return None
        if not isinstance(branches, list) or not branches:
            return None

        variants = []
        for index, branch in enumerate(branches):
            resolved = self.resolver.resolve_detached(branch)
            variants.append(
                CompositeVariant(
                    id=f"variant_{index}",
                    title=resolved.get("title") or f"Variant {index + 1}",
                    description=resolved.get("description"),
                    json_schema=self._embed_definitions(resolved),
                    is_object=is_object_schema(resolved),
                )
            )
        return CompositeSpec(mode=mode, variants=variants)

    def _inline_object_composite(self, schema: dict[str, Any]) -> CompositeSpec:
        variant = CompositeVariant(
            id="variant_0",
            title=schema.get("title") or DEFAULT_ENTRY_TITLE,
            description=schema.get("description"),
            json_schema=self._embed_definitions(schema),
        )
        return CompositeSpec(mode=CompositeMode.ONE_OF, variants=[variant])

    def _embed_definitions(self, schema: dict[str, Any]) -> dict[str, Any]:
        embedded = copy.deepcopy(schema)
        for key, value in self.resolver.definitions_snapshot().items():
            embedded.setdefault(key, value)
        return embedded


def build_form_schema(document: Any) -> FormSchema:
    """Compile `document` into a :class:`FormSchema`.

    Raises:
        SchemaError: If the document is not an object schema, contains an
            unresolvable or cyclic `$ref`, or uses an unsupported construct.
    """
    return SchemaCompiler(document).compile()


def variant_form_document(variant: CompositeVariant) -> dict[str, Any]:
    """Schema document used to edit one composite variant.

    Non-object variants are wrapped into a single `__value` property.
    """
    if variant.is_object:
        return variant.json_schema

    inner = {k: v for k, v in variant.json_schema.items() if k not in ("definitions", "$defs")}
    document: dict[str, Any] = {
        "type": "object",
        "required": [WRAPPED_VALUE_FIELD],
        "properties": {WRAPPED_VALUE_FIELD: inner},
    }
    for key in ("definitions", "$defs"):
        if key in variant.json_schema:
            document[key] = variant.json_schema[key]
    return document
