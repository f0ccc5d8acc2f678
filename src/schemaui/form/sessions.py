"""Sub-form sessions handed out to overlay editors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .state import FormState


@dataclass
class CompositeEditorSession:
    variant_index: int
    title: str
    description: Optional[str]
    schema: dict[str, Any]
    form_state: FormState


@dataclass
class ArrayEditorSession:
    title: str
    description: Optional[str]
    schema: dict[str, Any]
    form_state: FormState


@dataclass
class KeyValueEditorSession:
    title: str
    description: Optional[str]
    schema: dict[str, Any]
    form_state: FormState


@dataclass
class EntryEditorContext:
    """A session opened on one entry of a repeatable field."""

    entry_index: int
    session: CompositeEditorSession | ArrayEditorSession | KeyValueEditorSession


@dataclass
class EntryPanel:
    entries: list[str]
    selected: int


@dataclass
class OverlayContext:
    """Presentation hints a component contributes to its overlay."""

    title: Optional[str] = None
    description: Optional[str] = None
    entry_panel: Optional[EntryPanel] = None
    instructions: Optional[str] = None


@dataclass
class CompositePopupData:
    options: list[str]
    selected: int
    multi: bool
    active: list[bool] = field(default_factory=list)


@dataclass
class CompositeVariantSummary:
    """Read-only listing of one active variant, shown under a collapsed field."""

    title: str
    description: Optional[str] = None
    lines: list[str] = field(default_factory=list)
