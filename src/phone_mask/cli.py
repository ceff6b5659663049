"""CLI interface for phone-mask — lets a host UI or a shell drive the editor.

Usage:
    # Apply one change event (stdin: JSON, stdout: new state as JSON)
    echo '{"text": "(5   )    -    ", "state": {"value": "(   )    -    ", "selection": {"start": 1, "end": 1}}}' | \
        python -m phone_mask.cli edit

    # Replay keystrokes from an empty field ("<" is backspace)
    python -m phone_mask.cli type 5551234567 --trace

    # Mask a stored number for an edit form
    echo '555.123.4567' | python -m phone_mask.cli format

    # Check a value before submitting (exit 1 when invalid)
    echo '(555) 123-4567' | python -m phone_mask.cli validate
"""

from __future__ import annotations
import argparse
import json
import logging
import os
import sys

from .config import build_layout, load_from_yaml, setup_logging
from .editor import format_for_editing, handle_change, initial_state
from .field import MaskedPhoneField
from .layout import MaskLayout
from .types import EditorState, PhoneValidationError
from .validation import validate_phone

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = os.environ.get("PHONE_MASK_CONFIG", "")


def _load_layout(args: argparse.Namespace) -> MaskLayout:
    if not args.config:
        setup_logging(args.log_level)
        return build_layout()
    cfg = load_from_yaml(args.config)
    setup_logging(args.log_level or cfg["log_level"])
    logger.info("loaded layout from %s", args.config)
    return build_layout(cfg)


def _emit(state: EditorState) -> None:
    json.dump(state.to_dict(), sys.stdout, ensure_ascii=False)
    sys.stdout.write("\n")


def cmd_edit(args: argparse.Namespace, layout: MaskLayout) -> int:
    """Apply one change event read from stdin."""
    body = json.loads(sys.stdin.read() or "{}")
    prior = EditorState.from_dict(body["state"]) if body.get("state") else initial_state(layout)
    _emit(handle_change(body.get("text", ""), prior, layout))
    return 0


def cmd_type(args: argparse.Namespace, layout: MaskLayout) -> int:
    """Replay keystrokes from an empty field."""
    field = MaskedPhoneField(layout)
    states = field.type(args.keys)
    if args.trace:
        for key, state in zip(args.keys, states):
            sys.stdout.write(f"{key!r:>5}  {state.masked_value!r}  caret={state.selection.start}\n")
    _emit(field.state)
    return 0


def cmd_format(args: argparse.Namespace, layout: MaskLayout) -> int:
    """Mask a stored phone number from stdin."""
    sys.stdout.write(format_for_editing(sys.stdin.read().strip(), layout) + "\n")
    return 0


def cmd_validate(args: argparse.Namespace, layout: MaskLayout) -> int:
    """Validate a phone value from stdin; print its digits."""
    value = sys.stdin.read().rstrip("\n")
    try:
        digits = validate_phone(value, layout)
    except PhoneValidationError as e:
        sys.stderr.write(f"{e}\n")
        return 1
    sys.stdout.write(digits + "\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="phone_mask",
        description="Masked phone-number input editing",
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="YAML layout config")
    parser.add_argument("--log-level", default=None, help="Logging level (default: WARNING)")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("edit", help="Apply one change event (JSON stdin)")
    p_type = sub.add_parser("type", help="Replay keystrokes, '<' is backspace")
    p_type.add_argument("keys", help="Keys to type, e.g. 555<51234567")
    p_type.add_argument("--trace", action="store_true", help="Print every intermediate state")
    sub.add_parser("format", help="Mask a stored phone number (stdin)")
    sub.add_parser("validate", help="Validate a phone value (stdin)")

    args = parser.parse_args(argv)
    layout = _load_layout(args)

    cmds = {
        "edit": cmd_edit,
        "type": cmd_type,
        "format": cmd_format,
        "validate": cmd_validate,
    }
    return cmds[args.command](args, layout)


if __name__ == "__main__":
    sys.exit(main())
