from .formats import AVAILABLE_FORMATS, format_list, probe_format
from .input import (
    load_source,
    looks_like_json_schema,
    parse_contents,
    parse_document,
    schema_from_data,
    schema_with_defaults,
)
from .output import OutputDestination, OutputOptions, emit, serialize

__all__ = [
    "AVAILABLE_FORMATS",
    "OutputDestination",
    "OutputOptions",
    "emit",
    "format_list",
    "load_source",
    "looks_like_json_schema",
    "parse_contents",
    "parse_document",
    "probe_format",
    "schema_from_data",
    "schema_with_defaults",
    "serialize",
]
