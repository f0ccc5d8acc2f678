"""Local `$ref` resolution and `allOf` merging."""

import copy
import logging
from contextlib import contextmanager
from typing import Any, Iterator
from urllib.parse import unquote

from ..consts import DEFINITIONS_REF_PREFIX, OBJECT_KEYWORDS
from ..errors import SchemaError
from ..utils import unescape_pointer_segment

logger = logging.getLogger(__name__)

MERGED_METADATA = ("type", "title", "description", "default")


def schema_as_dict(schema: Any) -> dict[str, Any]:
    """Normalise boolean schemas into their object form."""
    if schema is True:
        return {}
    if schema is False:
        return {"not": {}}
    if isinstance(schema, dict):
        return schema
    raise SchemaError(f"expected a schema object, found {type(schema).__name__}")


def has_object_content(schema: dict[str, Any]) -> bool:
    return any(keyword in schema for keyword in OBJECT_KEYWORDS)


class SchemaResolver:
    """Follows references inside one schema document.

    References currently being expanded are kept on a stack for as long as
    the caller stays inside :meth:`expand`, so re-entering one of them while
    descending into its children is reported as a cycle instead of recursing
    forever.
    """

    def __init__(self, document: dict[str, Any]):
        self.document = document
        self._expanding: list[str] = []

    @contextmanager
    def expand(self, schema: Any) -> Iterator[dict[str, Any]]:
        pushed: list[str] = []
        try:
            yield self._resolve(schema, pushed)
        finally:
            for _ in pushed:
                self._expanding.pop()

    def resolve_detached(self, schema: Any) -> dict[str, Any]:
        """Resolve `schema` without regard to the references being expanded.

        Used for composite branches: their forms are compiled on demand, so a
        branch pointing back at an enclosing definition is not a cycle here.
        """
        saved, self._expanding = self._expanding, []
        try:
            return self._resolve(schema, [])
        finally:
            self._expanding = saved

    def definitions_snapshot(self) -> dict[str, Any]:
        snapshot = {}
        for key in ("definitions", "$defs"):
            if isinstance(self.document.get(key), dict):
                snapshot[key] = copy.deepcopy(self.document[key])
        return snapshot

    def _resolve(self, schema: Any, pushed: list[str]) -> dict[str, Any]:
        current = schema_as_dict(schema)
        while "$ref" in current:
            reference = current["$ref"]
            if not isinstance(reference, str):
                raise SchemaError("$ref must be a string")
            if reference in self._expanding:
                raise SchemaError(f"cyclic $ref '{reference}'")
            self._expanding.append(reference)
            pushed.append(reference)
            logger.debug(f"Following reference {reference}")
            target = schema_as_dict(self._lookup(reference))
            overrides = {k: v for k, v in current.items() if k != "$ref"}
            current = {**target, **overrides} if overrides else target
        if "allOf" in current:
            current = self._merge_all_of(current, pushed)
        return current

    def _merge_all_of(self, schema: dict[str, Any], pushed: list[str]) -> dict[str, Any]:
        parts = schema.get("allOf")
        if not isinstance(parts, list):
            return schema
        resolved_parts = [self._resolve(part, pushed) for part in parts]
        if not any(has_object_content(part) for part in resolved_parts):
            return schema

        merged = {k: v for k, v in schema.items() if k != "allOf"}
        properties = dict(merged.get("properties") or {})
        pattern_properties = dict(merged.get("patternProperties") or {})
        required = list(merged.get("required") or [])
        for part in resolved_parts:
            for name, prop in (part.get("properties") or {}).items():
                properties.setdefault(name, prop)
            for pattern, prop in (part.get("patternProperties") or {}).items():
                pattern_properties.setdefault(pattern, prop)
            for name in part.get("required") or []:
                if name not in required:
                    required.append(name)
            for keyword in ("additionalProperties", "propertyNames", *MERGED_METADATA):
                if keyword not in merged and keyword in part:
                    merged[keyword] = part[keyword]

        if properties:
            merged["properties"] = properties
        if pattern_properties:
            merged["patternProperties"] = pattern_properties
        if required:
            merged["required"] = required
        return merged

    def _lookup(self, reference: str) -> Any:
        if reference.startswith(DEFINITIONS_REF_PREFIX):
            key = reference[len(DEFINITIONS_REF_PREFIX):]
            definitions = self.document.get("definitions") or {}
            if key not in definitions:
                raise SchemaError(f"definition '{key}' not found")
            return definitions[key]

        if reference.startswith("#"):
            fragment = unquote(reference[1:])
            if fragment and not fragment.startswith("/"):
                fragment = f"/{fragment}"
            target: Any = self.document
            for raw in fragment.split("/")[1:]:
                segment = unescape_pointer_segment(raw)
                if isinstance(target, dict) and segment in target:
                    target = target[segment]
                elif isinstance(target, list) and segment.isdigit() and int(segment) < len(target):
                    target = target[int(segment)]
                else:
                    raise SchemaError(f"reference '{reference}' not found")
            return target

        raise SchemaError(f"unsupported reference {reference}")
