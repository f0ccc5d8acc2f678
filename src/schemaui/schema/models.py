from __future__ import annotations

import json
from typing import Any, Iterator, Optional

from pydantic import BaseModel, ConfigDict

from ..enums import CompositeMode, KindType

SCALAR_KINDS = (KindType.STRING, KindType.INTEGER, KindType.NUMBER, KindType.BOOLEAN)


class CompositeVariant(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: Optional[str] = None
    json_schema: dict[str, Any]
    is_object: bool = True


class CompositeSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: CompositeMode
    variants: list[CompositeVariant]


class KeyValueTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    key_title: str = "Key"
    key_description: Optional[str] = None
    key_default: Any = None
    key_schema: dict[str, Any]
    value_title: str = "Value"
    value_description: Optional[str] = None
    value_default: Any = None
    value_schema: dict[str, Any]
    value_kind: FieldKind
    entry_schema: dict[str, Any]


class FieldKind(BaseModel):
    """Tagged kind of a form field.

    Only the attribute matching `type` is populated: `options` for enums,
    `inner` for arrays, `composite` for oneOf/anyOf and `key_value` for maps.
    """

    model_config = ConfigDict(frozen=True)

    type: KindType
    options: list[str] = []
    values: list[Any] = []
    inner: Optional[FieldKind] = None
    composite: Optional[CompositeSpec] = None
    key_value: Optional[KeyValueTemplate] = None

    @classmethod
    def scalar(cls, kind_type: KindType) -> FieldKind:
        return cls(type=kind_type)

    @classmethod
    def enum(cls, values: list[Any]) -> FieldKind:
        options = [v if isinstance(v, str) else json.dumps(v) for v in values]
        return cls(type=KindType.ENUM, options=options, values=list(values))

    @classmethod
    def array(cls, inner: FieldKind) -> FieldKind:
        return cls(type=KindType.ARRAY, inner=inner)

    @classmethod
    def of_composite(cls, composite: CompositeSpec) -> FieldKind:
        return cls(type=KindType.COMPOSITE, composite=composite)

    @classmethod
    def of_key_value(cls, template: KeyValueTemplate) -> FieldKind:
        return cls(type=KindType.KEY_VALUE, key_value=template)

    @property
    def is_scalar(self) -> bool:
        return self.type in SCALAR_KINDS

    def enum_value(self, index: int) -> Any:
        """Original JSON value behind the option label at `index`."""
        if index < len(self.values):
            return self.values[index]
        return self.options[index]

    def inner_is(self, *types: KindType) -> bool:
        return self.type == KindType.ARRAY and self.inner is not None and self.inner.type in types


class FieldSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    path: list[str]
    pointer: str
    title: str
    description: Optional[str] = None
    section_id: str
    kind: FieldKind
    required: bool = False
    default: Any = None
    metadata: dict[str, Any] = {}

    def display_label(self) -> str:
        if self.title.lower() == self.name.lower():
            return self.title
        return f"{self.title} ({self.name})"


class SectionSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: Optional[str] = None
    path: list[str] = []
    depth: int = 0
    fields: list[FieldSchema] = []
    children: list[SectionSchema] = []

    def iter_fields(self) -> Iterator[FieldSchema]:
        yield from self.fields
        for child in self.children:
            yield from child.iter_fields()


class RootSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: Optional[str] = None
    sections: list[SectionSchema]


class FormSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    description: Optional[str] = None
    roots: list[RootSchema]

    def iter_fields(self) -> Iterator[FieldSchema]:
        for root in self.roots:
            for section in root.sections:
                yield from section.iter_fields()


KeyValueTemplate.model_rebuild()
FieldKind.model_rebuild()
SectionSchema.model_rebuild()
