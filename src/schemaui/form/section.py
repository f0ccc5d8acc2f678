from dataclasses import dataclass, field
from typing import Optional

from ..schema.models import RootSchema, SectionSchema
from .field import FieldState


@dataclass
class SectionState:
    id: str
    title: str
    description: Optional[str] = None
    path: list[str] = field(default_factory=list)
    depth: int = 0
    fields: list[FieldState] = field(default_factory=list)

    @classmethod
    def collect(cls, section: SectionSchema, depth: int, acc: list["SectionState"]) -> None:
        """Flatten `section` and its children, depth first, into `acc`."""
        acc.append(
            cls(
                id=section.id,
                title=section.title,
                description=section.description,
                path=list(section.path),
                depth=depth,
                fields=[FieldState.from_schema(schema) for schema in section.fields],
            )
        )
        for child in section.children:
            cls.collect(child, depth + 1, acc)


@dataclass
class RootState:
    id: str
    title: str
    description: Optional[str] = None
    sections: list[SectionState] = field(default_factory=list)

    @classmethod
    def from_schema(cls, root: RootSchema) -> "RootState":
        sections: list[SectionState] = []
        for section in root.sections:
            SectionState.collect(section, 0, sections)
        return cls(id=root.id, title=root.title, description=root.description, sections=sections)

    def has_fields(self) -> bool:
        return any(section.fields for section in self.sections)
