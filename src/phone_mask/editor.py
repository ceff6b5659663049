"""Masked input editor — the main API.

The text control reports only the full string it now contains, never a
diff, so every change event is re-masked from scratch and the caret is
recomputed alongside it.  Callers feed both back into the control as its
controlled value and selection.

Usage:
    from phone_mask import handle_change, initial_state

    state = initial_state()                      # "(   )    -    ", caret 1
    state = handle_change("(5   )    -    ", state)
    print(state.masked_value)                    # "(5  )    -    "
    print(state.selection)                       # Selection(start=2, end=2)
"""

from __future__ import annotations
import logging

from .layout import US_PHONE, MaskLayout, only_digits
from .types import EditorState, Selection

logger = logging.getLogger(__name__)


def initial_state(layout: MaskLayout = US_PHONE) -> EditorState:
    """Empty field: bare template, caret on the first digit slot."""
    return EditorState(layout.template, Selection.caret(layout.first_slot))


def handle_change(
    raw_text: str,
    prior: EditorState,
    layout: MaskLayout = US_PHONE,
) -> EditorState:
    """Re-mask the control's text and place the caret.

    Never raises: anything the control reports degrades to a value that
    conforms to the layout's template.
    """
    raw_text = "" if raw_text is None else str(raw_text)
    caret = prior.selection.start

    # --- Backspace with the caret right after punctuation ---
    if len(raw_text) == len(prior.masked_value) - 1 and caret in layout.special_positions:
        left = [p for p in layout.digit_slots if p < caret]
        if left:
            prev_digit_pos = left[-1]
            chars = list(prior.masked_value)
            if prev_digit_pos < len(chars):
                chars[prev_digit_pos] = layout.blank
            digits = only_digits("".join(chars))
            logger.debug("backspace at punctuation %d, clearing slot %d", caret, prev_digit_pos)
            # Only one digit went away, so render() leaves the tail blank.
            return EditorState(layout.render(digits), Selection.caret(prev_digit_pos))

    # --- General re-mask ---
    digits = only_digits(raw_text)[: layout.capacity]
    masked = layout.render(digits)
    prior_count = len(only_digits(prior.masked_value))

    if not digits:
        pos = layout.first_slot
    elif len(digits) < prior_count:
        pos = layout.digit_slots[len(digits) - 1] + 1
    else:
        pos = layout.digit_slots[len(digits) - 1] + 1
        # Hop over ") " and "-" so the next keystroke lands in a slot
        if not layout.is_slot(pos) and pos < layout.digit_slots[-1]:
            pos = layout.next_slot_at_or_after(pos)

    logger.debug("re-masked %d digit(s), caret %d", len(digits), pos)
    return EditorState(masked, Selection.caret(pos))


def format_for_editing(stored: str | None, layout: MaskLayout = US_PHONE) -> str:
    """Mask a stored phone number so an edit form can start from it."""
    if not stored or stored == layout.template:
        return layout.template
    return layout.render(layout.extract_digits(stored))


def focus(state: EditorState, layout: MaskLayout = US_PHONE) -> EditorState:
    """Move the caret to the first empty digit slot when the field gains focus."""
    count = len(layout.extract_digits(state.masked_value))
    if count < layout.capacity:
        pos = layout.digit_slots[count]
    else:
        pos = layout.first_slot
    return EditorState(state.masked_value, Selection.caret(pos))


# ----------------------------------------------------------------------
# Native control emulation — what a text input reports after a keystroke
# ----------------------------------------------------------------------

def insert_text(state: EditorState, text: str) -> str:
    """Text the control holds after typing/pasting over the selection."""
    value = state.masked_value
    start, end = sorted((state.selection.start, state.selection.end))
    return value[:start] + text + value[end:]


def delete_backward(state: EditorState) -> str:
    """Text the control holds after one backspace."""
    value = state.masked_value
    start, end = sorted((state.selection.start, state.selection.end))
    if start != end:
        return value[:start] + value[end:]
    if start <= 0:
        return value
    return value[: start - 1] + value[start:]
