"""YAML/dict config loader for phone-mask.

Supports loading from a YAML file or a plain dict (for embedding in a
larger app config).

Example YAML:

    phone_mask:
      template: "(   )    -    "
      digit_slots: [1, 2, 3, 6, 7, 8, 10, 11, 12, 13]
      special_positions: [0, 4, 5, 9]    # optional, derived when omitted
      blank: " "
      log_level: INFO
"""

from __future__ import annotations
import logging
import os
import sys
from pathlib import Path
from typing import Any

import yaml

from .layout import US_PHONE, MaskLayout

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def load_config(data: dict[str, Any] | None) -> dict[str, Any]:
    """Normalize a config dict (from YAML or inline).

    Idempotent: a dict this function returned normalizes to itself.
    """
    data = data or {}
    # Support nested under "phone_mask" key or flat
    if "phone_mask" in data:
        data = data["phone_mask"] or {}

    template = data.get("template", US_PHONE.template)
    if "digit_slots" in data:
        slots = tuple(int(p) for p in data["digit_slots"])
    elif template == US_PHONE.template:
        slots = US_PHONE.digit_slots
    else:
        # Custom template without explicit slots: every blank is a slot
        blank = data.get("blank", " ")
        slots = tuple(i for i, ch in enumerate(template) if ch == blank)

    special = data.get("special_positions")
    if special is None and template == US_PHONE.template and slots == US_PHONE.digit_slots:
        special = sorted(US_PHONE.special_positions)

    return {
        "template": template,
        "digit_slots": slots,
        "special_positions": None if special is None else frozenset(int(p) for p in special),
        "blank": data.get("blank", " "),
        "log_level": data.get("log_level"),
    }


def load_from_yaml(path: str | Path) -> dict[str, Any]:
    """Load config from a YAML file."""
    with open(Path(path).expanduser()) as f:
        return load_config(yaml.safe_load(f))


def build_layout(config: dict[str, Any] | None = None) -> MaskLayout:
    """Create a MaskLayout from a config dict (raw or normalized)."""
    cfg = load_config(config)
    if (
        cfg["template"] == US_PHONE.template
        and cfg["digit_slots"] == US_PHONE.digit_slots
        and cfg["blank"] == US_PHONE.blank
        and cfg["special_positions"] in (None, US_PHONE.special_positions)
    ):
        return US_PHONE
    return MaskLayout(
        template=cfg["template"],
        digit_slots=cfg["digit_slots"],
        special_positions=cfg["special_positions"],
        blank=cfg["blank"],
    )


def setup_logging(level: str | int | None = None) -> None:
    """Configure the package logger: one stream handler on stderr."""
    if level is None:
        level = os.environ.get("PHONE_MASK_LOG_LEVEL", "WARNING")
    if isinstance(level, str):
        level = level.upper()

    logger = logging.getLogger("phone_mask")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
