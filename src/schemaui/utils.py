"""Utility functions for SchemaUI"""

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from .consts import SUMMARY_STRING_LIMIT

logger = logging.getLogger(__name__)


def canonicalify(p: Path | str) -> Path:
    return Path(p).expanduser().resolve()


def ensure_path(p: Path | str) -> Path:
    path = canonicalify(p)
    path.mkdir(parents=True, exist_ok=True)
    return path


def escape_pointer_segment(segment: str) -> str:
    """Escape one RFC-6901 reference token (`~` -> `~0`, `/` -> `~1`)."""
    return segment.replace("~", "~0").replace("/", "~1")


def unescape_pointer_segment(segment: str) -> str:
    return segment.replace("~1", "/").replace("~0", "~")


def pointer_from_path(path: Iterable[Any]) -> str:
    """Build a JSON pointer from path segments.

    Examples:
        >>> pointer_from_path(["a", "b/c"])
        '/a/b~1c'
        >>> pointer_from_path([])
        ''
    """
    return "".join(f"/{escape_pointer_segment(str(segment))}" for segment in path)


def join_pointer(prefix: str, pointer: str) -> str:
    if not pointer:
        return prefix
    if not pointer.startswith("/"):
        pointer = f"/{pointer}"
    return f"{prefix}{pointer}"


def pointer_for_key(pointer: str, key: str) -> str:
    return f"{pointer}/{escape_pointer_segment(key)}"


def prettify_label(raw: str) -> str:
    """Turn a property name into a human readable title.

    Underscores and dashes become spaces and the following character is
    upper-cased, as is the first character.

    Examples:
        >>> prettify_label("listen_port")
        'Listen Port'
    """
    chars = []
    upper_next = True
    for ch in raw:
        if ch in "_-":
            chars.append(" ")
            upper_next = True
        elif upper_next:
            chars.append(ch.upper())
            upper_next = False
        else:
            chars.append(ch)
    return "".join(chars).strip()


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]}…"


def summarize_value(value: Any, limit: int = SUMMARY_STRING_LIMIT) -> str:
    """Render a short, single-line summary of a JSON value for list panels."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return json.dumps(value)
    if isinstance(value, str):
        return f'"{truncate(value, limit)}"'
    if isinstance(value, list):
        return f"array({len(value)})"
    if isinstance(value, dict):
        return f"object({len(value)})"
    return str(value)


def value_to_text(value: Any) -> str:
    """Render a scalar for a text buffer; non-strings are JSON encoded."""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def insert_at_path(target: dict, path: list[str], value: Any) -> None:
    """Insert `value` into nested dicts, creating intermediate objects."""
    current = target
    for segment in path[:-1]:
        child = current.get(segment)
        if not isinstance(child, dict):
            child = {}
            current[segment] = child
        current = child
    if path:
        current[path[-1]] = value


def lookup_path(source: Any, path: list[str]) -> tuple[bool, Any]:
    current = source
    for segment in path:
        if not isinstance(current, dict) or segment not in current:
            return False, None
        current = current[segment]
    return True, current
