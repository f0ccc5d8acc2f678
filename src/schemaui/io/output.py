"""Serializing the saved value to stdout and files."""

import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import tomlkit
import yaml
from tomlkit.exceptions import TOMLKitError

from ..enums import DocumentFormat
from ..errors import DocumentException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutputDestination:
    """A file path, or stdout when `path` is None."""

    path: Optional[Path] = None

    @classmethod
    def stdout(cls) -> "OutputDestination":
        return cls()

    @classmethod
    def file(cls, path: str | Path) -> "OutputDestination":
        return cls(Path(path))

    @property
    def is_stdout(self) -> bool:
        return self.path is None

    def __str__(self) -> str:
        return "stdout" if self.path is None else str(self.path)


@dataclass
class OutputOptions:
    format: DocumentFormat = DocumentFormat.JSON
    pretty: bool = True
    destinations: list[OutputDestination] = field(default_factory=lambda: [OutputDestination.stdout()])


def serialize(value: Any, options: OutputOptions) -> str:
    match options.format:
        case DocumentFormat.JSON:
            return json.dumps(value, indent=2 if options.pretty else None, ensure_ascii=False)
        case DocumentFormat.YAML:
            return yaml.safe_dump(value, sort_keys=False, allow_unicode=True).rstrip("\n")
        case DocumentFormat.TOML:
            if not isinstance(value, dict):
                raise DocumentException("TOML output requires an object at the top level")
            try:
                return tomlkit.dumps(value).rstrip("\n")
            except TOMLKitError as e:
                raise DocumentException(f"failed to serialize TOML: {e}") from e
    raise DocumentException(f"unsupported format: {options.format}")


def emit(value: Any, options: OutputOptions) -> None:
    """Write `value` to every destination, each followed by a newline."""
    if not options.destinations:
        return
    payload = serialize(value, options)
    for destination in options.destinations:
        if destination.is_stdout:
            sys.stdout.write(payload + "\n")
            sys.stdout.flush()
        else:
            try:
                destination.path.write_text(payload + "\n", encoding="utf-8")
            except OSError as e:
                raise DocumentException(f"failed to write to file {destination.path}: {e}") from e
        logger.info(f"Wrote {options.format.value} output to {destination}")
