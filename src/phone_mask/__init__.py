"""phone-mask — caret-aware masked phone-number input editing."""

from .editor import handle_change, initial_state, format_for_editing, focus
from .field import MaskedPhoneField
from .layout import MaskLayout, US_PHONE, only_digits
from .validation import validate_phone, is_complete
from .config import build_layout, load_config, load_from_yaml
from .types import EditorState, Selection, PhoneValidationError

__all__ = [
    "handle_change", "initial_state", "format_for_editing", "focus",
    "MaskedPhoneField",
    "MaskLayout", "US_PHONE", "only_digits",
    "validate_phone", "is_complete",
    "build_layout", "load_config", "load_from_yaml",
    "EditorState", "Selection", "PhoneValidationError",
]
__version__ = "0.1.0"
