from pathlib import Path
from typing import Optional

from ..enums import DocumentFormat

EXTENSION_FORMATS = {
    ".json": DocumentFormat.JSON,
    ".yaml": DocumentFormat.YAML,
    ".yml": DocumentFormat.YAML,
    ".toml": DocumentFormat.TOML,
}

AVAILABLE_FORMATS = [DocumentFormat.JSON, DocumentFormat.YAML, DocumentFormat.TOML]


def probe_format(path: str | Path) -> Optional[DocumentFormat]:
    """Format implied by the file extension of `path`, or None when unknown."""
    return EXTENSION_FORMATS.get(Path(path).suffix.lower())


def format_list() -> str:
    return ", ".join(fmt.value for fmt in AVAILABLE_FORMATS)
