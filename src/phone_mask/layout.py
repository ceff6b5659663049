"""Mask layouts — where the digits go and which characters are fixed.

A layout is a template string plus the ordered positions inside it that
may hold a digit.  Everything else in the template is punctuation and
never changes.
"""

from __future__ import annotations
import re
from dataclasses import dataclass, field

_NON_DIGITS = re.compile(r"[^0-9]")


def only_digits(text: str | None) -> str:
    """Strip everything but ASCII 0-9."""
    return _NON_DIGITS.sub("", text or "")


@dataclass(frozen=True)
class MaskLayout:
    """Fixed-width mask: template, digit slots and backspace-sensitive punctuation."""

    template: str
    digit_slots: tuple[int, ...]
    # None = every non-slot position before the last slot
    special_positions: frozenset[int] | None = None
    blank: str = " "
    _slot_set: frozenset[int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        slots = tuple(self.digit_slots)
        object.__setattr__(self, "digit_slots", slots)

        if not self.template:
            raise ValueError("template must not be empty")
        if len(self.blank) != 1:
            raise ValueError("blank must be a single character")
        if not slots:
            raise ValueError("layout needs at least one digit slot")
        if any(b <= a for a, b in zip(slots, slots[1:])):
            raise ValueError(f"digit slots must be strictly increasing: {slots}")
        for pos in slots:
            if not 0 <= pos < len(self.template):
                raise ValueError(f"digit slot {pos} outside template of length {len(self.template)}")
            if self.template[pos] != self.blank:
                raise ValueError(f"digit slot {pos} is not blank in template {self.template!r}")

        slot_set = frozenset(slots)
        object.__setattr__(self, "_slot_set", slot_set)

        if self.special_positions is None:
            special = frozenset(p for p in range(slots[-1]) if p not in slot_set)
        else:
            special = frozenset(self.special_positions)
            if special & slot_set:
                raise ValueError(f"special positions overlap digit slots: {sorted(special & slot_set)}")
        object.__setattr__(self, "special_positions", special)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def capacity(self) -> int:
        return len(self.digit_slots)

    @property
    def first_slot(self) -> int:
        return self.digit_slots[0]

    def is_slot(self, pos: int) -> bool:
        return pos in self._slot_set

    def render(self, digits: str) -> str:
        """Place digits left to right into a fresh template; unused slots stay blank."""
        chars = list(self.template)
        for slot, digit in zip(self.digit_slots, digits):
            chars[slot] = digit
        return "".join(chars)

    def extract_digits(self, masked: str) -> str:
        """Digits currently held by a masked value, in slot order."""
        return only_digits(masked)[: self.capacity]

    def next_slot_at_or_after(self, pos: int) -> int:
        """Skip the caret over punctuation to the next digit slot."""
        for slot in self.digit_slots:
            if slot >= pos:
                return slot
        return pos

    def to_dict(self) -> dict:
        return {
            "template": self.template,
            "digit_slots": list(self.digit_slots),
            "special_positions": sorted(self.special_positions),
            "blank": self.blank,
        }


# (XXX) XXX-XXXX — 10-digit US number, no country code
US_PHONE = MaskLayout(
    template="(   )    -    ",
    digit_slots=(1, 2, 3, 6, 7, 8, 10, 11, 12, 13),
    special_positions=frozenset({0, 4, 5, 9}),
)
