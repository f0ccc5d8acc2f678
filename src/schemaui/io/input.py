"""Reading documents and deriving schemas from plain data."""

import copy
import errno
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional, TextIO

import tomlkit
import yaml
from tomlkit.exceptions import TOMLKitError

from ..consts import JSON_SCHEMA_DRAFT
from ..enums import DocumentFormat
from ..errors import DocumentException
from .formats import AVAILABLE_FORMATS, format_list

logger = logging.getLogger(__name__)

STDIN_SPEC = "-"


def parse_document(contents: str, fmt: DocumentFormat) -> Any:
    """Parse `contents` as `fmt` into plain Python values.

    Raises:
        DocumentException: If the text is not valid in that format.
    """
    try:
        match fmt:
            case DocumentFormat.JSON:
                return json.loads(contents)
            case DocumentFormat.YAML:
                return yaml.safe_load(contents)
            case DocumentFormat.TOML:
                return tomlkit.loads(contents).unwrap()
    except (ValueError, yaml.YAMLError, TOMLKitError) as e:
        raise DocumentException(f"failed to parse {fmt.value.upper()} document: {e}") from e
    raise DocumentException(f"unsupported format: {fmt}")


def parse_contents(contents: str, fmt: DocumentFormat, label: str) -> Any:
    """Parse with the hinted format first, then every other supported one."""
    try:
        return parse_document(contents, fmt)
    except DocumentException as primary:
        for candidate in AVAILABLE_FORMATS:
            if candidate == fmt:
                continue
            try:
                value = parse_document(contents, candidate)
            except DocumentException:
                continue
            logger.debug(f"Parsed {label} as {candidate.value} after {fmt.value} failed")
            return value
        raise DocumentException(
            f"failed to parse {label}: tried {format_list()} (first error: {primary})"
        ) from primary


def load_source(
    spec: str,
    fmt: DocumentFormat,
    label: str,
    stdin: Optional[TextIO] = None,
) -> Any:
    """Load a document from stdin (`-`), a file path, or inline text.

    A source naming no existing file is parsed as the document itself.
    """
    if spec == STDIN_SPEC:
        stream = stdin or sys.stdin
        try:
            contents = stream.read()
        except OSError as e:
            raise DocumentException(f"failed to read from stdin: {e}") from e
        return parse_contents(contents, fmt, label)

    path = Path(spec).expanduser()
    try:
        contents = path.read_text(encoding="utf-8")
    except (FileNotFoundError, NotADirectoryError):
        return parse_contents(spec, fmt, f"inline {label}")
    except OSError as e:
        if e.errno == errno.ENAMETOOLONG:
            return parse_contents(spec, fmt, f"inline {label}")
        raise DocumentException(f"failed to load {label} from {path}: {e}") from e
    logger.debug(f"Loaded {label} from {path}")
    return parse_contents(contents, fmt, label)


# ==================== Schema inference ====================


SCALAR_TYPES = ((bool, "boolean"), (int, "integer"), (float, "number"), (str, "string"))


def infer_schema(value: Any, with_defaults: bool = True) -> dict[str, Any]:
    """Schema describing `value`; item schemas of arrays never carry defaults."""
    if isinstance(value, list):
        return _array_schema(value, with_defaults)
    if isinstance(value, dict):
        return _object_schema(value, with_defaults)

    kind = "null" if value is None else next((name for cls, name in SCALAR_TYPES if isinstance(value, cls)), "string")
    schema: dict[str, Any] = {"type": kind}
    if with_defaults:
        schema["default"] = value
    return schema


def _object_schema(values: dict[str, Any], with_defaults: bool) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "object"}
    if with_defaults:
        schema["default"] = copy.deepcopy(values)
    schema["additionalProperties"] = True
    if values:
        schema["properties"] = {key: infer_schema(item, with_defaults) for key, item in values.items()}
        schema["required"] = list(values)
    return schema


def _array_schema(items: list[Any], with_defaults: bool) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "array"}
    if with_defaults:
        schema["default"] = copy.deepcopy(items)
    variants: list[dict[str, Any]] = []
    for item in items:
        candidate = infer_schema(item, with_defaults=False)
        if candidate not in variants:
            variants.append(candidate)
    if len(variants) == 1:
        schema["items"] = variants[0]
    elif variants:
        schema["items"] = {"anyOf": variants}
    return schema


def schema_from_data(value: Any) -> dict[str, Any]:
    """Infer a draft-07 schema whose defaults reproduce `value`.

    Example:
        >>> schema_from_data({"port": 8080})["properties"]["port"]
        {'type': 'integer', 'default': 8080}
    """
    schema = infer_schema(value)
    schema.setdefault("$schema", JSON_SCHEMA_DRAFT)
    return schema


def schema_with_defaults(schema: dict[str, Any], data: Any) -> dict[str, Any]:
    """Copy of `schema` with every value in `data` set as the matching property default."""
    result = copy.deepcopy(schema)
    _apply_defaults(result, data)
    return result


def _apply_defaults(schema: Any, value: Any) -> None:
    if not isinstance(schema, dict):
        return
    schema["default"] = copy.deepcopy(value)
    properties = schema.get("properties")
    if isinstance(value, dict) and isinstance(properties, dict):
        for key, item in value.items():
            if key in properties:
                _apply_defaults(properties[key], item)


def looks_like_json_schema(value: Any) -> bool:
    """Heuristic telling a JSON Schema apart from a plain config document."""
    if not isinstance(value, dict):
        return False
    properties = value.get("properties")
    if not isinstance(properties, dict) or not properties:
        return False
    if "$schema" in value or value.get("type") == "object":
        return True
    return any(
        isinstance(prop, dict) and any(key in prop for key in ("type", "properties", "items", "$ref"))
        for prop in properties.values()
    )
