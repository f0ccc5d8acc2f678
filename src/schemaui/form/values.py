"""Conversions between text buffers and JSON values."""

import json
import math
import re
from typing import Any, Optional

from ..enums import KindType
from ..errors import FieldCoercionError
from ..schema.models import FieldSchema

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
NUMBER_PATTERN = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")


def saturating_add(current: int, step: int) -> int:
    return max(INT64_MIN, min(INT64_MAX, current + step))


def format_number(value: float) -> str:
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return repr(value)


def string_value(contents: str, schema: FieldSchema) -> Optional[str]:
    if not contents and not schema.required:
        return None
    return contents


def integer_value(contents: str, schema: FieldSchema) -> Optional[int]:
    trimmed = contents.strip()
    if not trimmed:
        return None
    if not INTEGER_PATTERN.fullmatch(trimmed):
        raise FieldCoercionError(schema.pointer, "expected integer")
    value = int(trimmed)
    if not INT64_MIN <= value <= INT64_MAX:
        raise FieldCoercionError(schema.pointer, "integer out of range")
    return value


def number_value(contents: str, schema: FieldSchema) -> Optional[float | int]:
    trimmed = contents.strip()
    if not trimmed:
        return None
    if not NUMBER_PATTERN.fullmatch(trimmed):
        raise FieldCoercionError(schema.pointer, "expected number")
    number = float(trimmed)
    if not math.isfinite(number):
        raise FieldCoercionError(schema.pointer, "expected number")
    return number


def json_value(contents: str, schema: FieldSchema) -> Any:
    trimmed = contents.strip()
    if not trimmed:
        return None
    try:
        return json.loads(trimmed)
    except json.JSONDecodeError:
        raise FieldCoercionError(schema.pointer, "expected JSON value") from None


def json_array_value(contents: str, schema: FieldSchema) -> Optional[list]:
    trimmed = contents.strip()
    if not trimmed:
        return [] if schema.required else None
    try:
        parsed = json.loads(trimmed)
    except json.JSONDecodeError:
        parsed = None
    if not isinstance(parsed, list):
        raise FieldCoercionError(schema.pointer, "expected JSON array")
    return parsed


def adjust_numeric(buffer: str, kind: KindType, direction: int, fast: bool, tuning) -> Optional[str]:
    """Step the number held in `buffer`; returns the new text or None for non-numeric kinds."""
    if kind == KindType.INTEGER:
        trimmed = buffer.strip()
        current = int(trimmed) if INTEGER_PATTERN.fullmatch(trimmed) else 0
        return str(saturating_add(current, direction * tuning.step_int(fast)))
    if kind == KindType.NUMBER:
        trimmed = buffer.strip()
        current = float(trimmed) if NUMBER_PATTERN.fullmatch(trimmed) else 0.0
        return format_number(current + direction * tuning.step_float(fast))
    return None


def default_scalar(kind) -> Any:
    match kind.type:
        case KindType.STRING:
            return ""
        case KindType.INTEGER:
            return 0
        case KindType.NUMBER:
            return 0.0
        case KindType.BOOLEAN:
            return False
        case KindType.ENUM:
            return kind.options[0] if kind.options else None
        case _:
            return None
