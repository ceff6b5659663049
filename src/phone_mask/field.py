"""Stateful phone field — one per form, owns the editor state.

Usage:

    phone = MaskedPhoneField.create()

    # On every change event from the text control
    state = phone.change(text)
    control.value, control.selection = state.masked_value, state.selection

    # On submit
    digits = phone.validate()     # raises PhoneValidationError
"""

from __future__ import annotations

from .editor import delete_backward, focus, format_for_editing, handle_change, initial_state, insert_text
from .layout import US_PHONE, MaskLayout
from .types import EditorState, Selection
from .validation import is_complete, validate_phone

BACKSPACE = "<"


class MaskedPhoneField:
    """Masked phone input bound to a single form."""

    __slots__ = ("_layout", "_state")

    def __init__(self, layout: MaskLayout = US_PHONE, *, stored: str | None = None) -> None:
        self._layout = layout
        self._state = initial_state(layout)
        if stored:
            self.load(stored)

    @classmethod
    def create(cls, layout: MaskLayout | None = None) -> "MaskedPhoneField":
        """Factory — empty field on the given layout (US by default)."""
        return cls(layout or US_PHONE)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def change(self, text: str) -> EditorState:
        """Apply the control's reported text."""
        self._state = handle_change(text, self._state, self._layout)
        return self._state

    def focus(self) -> EditorState:
        self._state = focus(self._state, self._layout)
        return self._state

    def load(self, stored: str | None) -> EditorState:
        """Seed the field from a saved phone number (edit forms)."""
        caret = initial_state(self._layout).selection
        self._state = EditorState(format_for_editing(stored, self._layout), caret)
        return self._state

    def reset(self) -> EditorState:
        self._state = initial_state(self._layout)
        return self._state

    def type(self, keys: str) -> list[EditorState]:
        """Replay keystrokes one at a time; ``<`` is backspace.

        Returns the state after each key.
        """
        states: list[EditorState] = []
        for key in keys:
            if key == BACKSPACE:
                text = delete_backward(self._state)
            else:
                text = insert_text(self._state, key)
            states.append(self.change(text))
        return states

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def layout(self) -> MaskLayout:
        return self._layout

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def value(self) -> str:
        return self._state.masked_value

    @property
    def selection(self) -> Selection:
        return self._state.selection

    @property
    def digits(self) -> str:
        return self._layout.extract_digits(self._state.masked_value)

    @property
    def is_complete(self) -> bool:
        return is_complete(self._state.masked_value, self._layout)

    def validate(self) -> str:
        """Digits for submission, or PhoneValidationError."""
        return validate_phone(self._state.masked_value, self._layout)
