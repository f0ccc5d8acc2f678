"""Tunable behaviour shared by every field component.

The active palette is process wide; the runtime installs the one coming
from the UI settings before building form state.
"""

from pydantic import BaseModel, Field

COLLECTION_OVERLAY_HINT = "Ctrl+N add • Ctrl+D remove • Ctrl+←/→ select • Ctrl+↑/↓ reorder"
COLLECTION_LIST_HINT = "(Ctrl+Left/Right select, Ctrl+E edit)"


class NumericTuning(BaseModel):
    integer_step: int = Field(default=1, ge=1)
    integer_fast_step: int | None = Field(default=10, ge=1)
    float_step: float = Field(default=1.0, gt=0)
    float_fast_step: float | None = Field(default=10.0, gt=0)

    def step_int(self, fast: bool) -> int:
        if fast and self.integer_fast_step is not None:
            return self.integer_fast_step
        return self.integer_step

    def step_float(self, fast: bool) -> float:
        if fast and self.float_fast_step is not None:
            return self.float_fast_step
        return self.float_step


class BoolTogglePresentation(BaseModel):
    true_label: str = "true"
    false_label: str = "false"
    toggle_with_space: bool = True
    toggle_with_arrows: bool = True

    def label(self, value: bool) -> str:
        return self.true_label if value else self.false_label


class EnumBehaviour(BaseModel):
    wrap_around: bool = True


class CollectionHints(BaseModel):
    overlay_instructions: str = COLLECTION_OVERLAY_HINT
    list_hint: str = COLLECTION_LIST_HINT


class CompositeHints(BaseModel):
    single_hint: str = " (Enter to choose)"
    multi_hint: str = " (Enter to toggle)"


class ComponentPalette(BaseModel):
    numeric: NumericTuning = Field(default_factory=NumericTuning)
    boolean: BoolTogglePresentation = Field(default_factory=BoolTogglePresentation)
    enum: EnumBehaviour = Field(default_factory=EnumBehaviour)
    collection: CollectionHints = Field(default_factory=CollectionHints)
    composite: CompositeHints = Field(default_factory=CompositeHints)


_palette = ComponentPalette()


def configure(palette: ComponentPalette | None) -> None:
    global _palette
    _palette = palette or ComponentPalette()


def palette() -> ComponentPalette:
    return _palette
