"""Domain helpers for 32-bit ARGB color values."""
from __future__ import annotations

import re

from days.core.errors import ValidationError

ARGB_MASK = 0xFFFFFFFF
TRANSPARENT = 0x00000000

RED = 0xFFE53E3E
AMBER = 0xFFFFC107
GREEN = 0xFF4CAF50

_HEX_PATTERN = re.compile(r"#([0-9a-fA-F]{6}|[0-9a-fA-F]{8})")


def to_argb(value: int) -> int:
    """Keep only the low 32 bits, so sign-extended values map back to ARGB."""
    return int(value) & ARGB_MASK


def format_color(argb: int) -> str:
    return f"#{to_argb(argb):08X}"


def parse_color(value: str | None) -> int:
    """
    Parse "#AARRGGBB", "#RRGGBB" (opaque) or an integer literal such as
    "4293212990" or "0xFFE53E3E".
    """
    text = (value or "").strip()
    if not text:
        raise ValidationError("Color is required")
    if text.startswith("#"):
        match = _HEX_PATTERN.fullmatch(text)
        if not match:
            raise ValidationError(f"Invalid color: {value!r}")
        digits = match.group(1)
        if len(digits) == 6:
            digits = "FF" + digits
        return int(digits, 16)
    try:
        number = int(text, 0)
    except ValueError:
        raise ValidationError(f"Invalid color: {value!r}") from None
    if number < -(1 << 31) or number > ARGB_MASK:
        raise ValidationError(f"Color out of range: {value!r}")
    return to_argb(number)
