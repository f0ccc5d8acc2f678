from ...enums import KindType
from ...schema.models import FieldSchema
from .array_buffer import ArrayBufferComponent
from .base import FieldComponent
from .boolean import BoolComponent
from .composite import CompositeComponent
from .composite_list import CompositeListComponent
from .enum_select import EnumComponent
from .key_value import KeyValueComponent
from .multi_select import MultiSelectComponent
from .scalar_array import ScalarArrayComponent
from .text import TextComponent


def build_component(schema: FieldSchema) -> FieldComponent:
    """Pick the component matching the field's kind."""
    kind = schema.kind
    match kind.type:
        case KindType.STRING | KindType.INTEGER | KindType.NUMBER | KindType.JSON:
            return TextComponent(schema)
        case KindType.BOOLEAN:
            return BoolComponent(schema)
        case KindType.ENUM:
            return EnumComponent(kind.options, schema)
        case KindType.COMPOSITE:
            return CompositeComponent(schema)
        case KindType.KEY_VALUE:
            return KeyValueComponent(schema)
        case KindType.ARRAY if kind.inner_is(KindType.ENUM):
            return MultiSelectComponent(kind.inner, schema.default)
        case KindType.ARRAY if kind.inner_is(KindType.COMPOSITE):
            return CompositeListComponent(schema)
        case KindType.ARRAY if kind.inner is not None and kind.inner.is_scalar:
            return ScalarArrayComponent(schema)
        case _:
            return ArrayBufferComponent(schema)


__all__ = [
    "ArrayBufferComponent",
    "BoolComponent",
    "CompositeComponent",
    "CompositeListComponent",
    "EnumComponent",
    "FieldComponent",
    "KeyValueComponent",
    "MultiSelectComponent",
    "ScalarArrayComponent",
    "TextComponent",
    "build_component",
]
