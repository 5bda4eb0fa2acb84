"""Unit conversion and colour parsing helpers."""

from __future__ import annotations

import math
import re

from passportkit.core.models import Color

SCREEN_DPI = 96
PRINT_DPI = 300

CM_PER_INCH = 2.54

_HEX_RE = re.compile(r"^#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})$", re.IGNORECASE)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties going up (matches canvas maths)."""
    return int(math.floor(value + 0.5))


def cm_to_pixels(cm: float, dpi: int) -> int:
    """Convert centimetres to pixels at the specified DPI."""
    return round_half_up(cm * dpi / CM_PER_INCH)


def inch_to_pixels(inch: float, dpi: int) -> int:
    """Convert inches to pixels at the specified DPI."""
    return round_half_up(inch * dpi)


def to_pixels(value: float, unit: str, dpi: int) -> int:
    if unit == "cm":
        return cm_to_pixels(value, dpi)
    if unit == "inch":
        return inch_to_pixels(value, dpi)
    raise ValueError(f"Unknown unit {unit!r}; expected 'cm' or 'inch'.")


def parse_hex_color(text: object) -> Color:
    """
    Parse "#RRGGBB" (case-insensitive, '#' optional) into a Color.

    Anything that does not parse yields white; this never raises.
    """
    if not isinstance(text, str):
        return Color.white()
    m = _HEX_RE.match(text.strip())
    if m is None:
        return Color.white()
    r, g, b = (int(part, 16) for part in m.groups())
    return Color(r, g, b)
