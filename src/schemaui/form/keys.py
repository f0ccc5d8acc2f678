from dataclasses import dataclass
from typing import Optional

from ..enums import KeyCode


@dataclass(frozen=True)
class KeyEvent:
    """One key press after translation from the terminal layer."""

    code: KeyCode
    char: Optional[str] = None
    ctrl: bool = False
    shift: bool = False
    alt: bool = False

    @classmethod
    def of_char(cls, char: str, ctrl: bool = False, shift: bool = False, alt: bool = False):
        return cls(KeyCode.CHAR, char=char, ctrl=ctrl, shift=shift, alt=alt)

    @classmethod
    def of(cls, code: KeyCode, ctrl: bool = False, shift: bool = False, alt: bool = False):
        return cls(code, ctrl=ctrl, shift=shift, alt=alt)

    def describe(self) -> str:
        parts = [name for name, on in (("Ctrl", self.ctrl), ("Alt", self.alt), ("Shift", self.shift)) if on]
        parts.append(self.char if self.code == KeyCode.CHAR and self.char else self.code.value.title())
        return "+".join(parts)
