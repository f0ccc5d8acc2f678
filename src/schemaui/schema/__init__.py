from .compiler import build_form_schema, variant_form_document
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
from .resolver import SchemaResolver

__all__ = [
    "CompositeSpec",
    "CompositeVariant",
    "FieldKind",
    "FieldSchema",
    "FormSchema",
    "KeyValueTemplate",
    "RootSchema",
    "SchemaResolver",
    "SectionSchema",
    "build_form_schema",
    "variant_form_document",
]
