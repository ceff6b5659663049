"""Core types."""

from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Selection:
    """Caret/selection range inside the text control."""
    start: int
    end: int

    @classmethod
    def caret(cls, pos: int) -> "Selection":
        return cls(pos, pos)


@dataclass(frozen=True, slots=True)
class EditorState:
    """Masked value plus caret, fed back to the control as controlled props."""
    masked_value: str
    selection: Selection

    def to_dict(self) -> dict:
        return {
            "value": self.masked_value,
            "selection": {"start": self.selection.start, "end": self.selection.end},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EditorState":
        sel = data.get("selection") or {}
        start = int(sel.get("start", 0))
        return cls(
            masked_value=data.get("value", ""),
            selection=Selection(start, int(sel.get("end", start))),
        )


class PhoneValidationError(ValueError):
    """Raised when a phone value fails submit-time validation."""
