"""
Read-only reference tables: photo formats, paper sheets, background presets.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from passportkit.core.models import Color, PhysicalSize
from passportkit.core.units import parse_hex_color


@dataclass(frozen=True)
class PhotoFormat:
    id: str
    name: str
    country: str
    size: PhysicalSize


@dataclass(frozen=True)
class PaperLayout:
    id: str
    name: str
    size: PhysicalSize


PHOTO_FORMATS: Dict[str, PhotoFormat] = {
    p.id: p
    for p in (
        PhotoFormat("india-passport", "India Passport", "India", PhysicalSize(3.5, 4.5, "cm")),
        PhotoFormat("uk-passport", "UK Passport", "UK", PhysicalSize(3.5, 4.5, "cm")),
        PhotoFormat("us-passport", "US Passport", "USA", PhysicalSize(2, 2, "inch")),
        PhotoFormat("visa-photo", "Visa Photo", "Standard", PhysicalSize(2, 2, "inch")),
        PhotoFormat("pan-card", "PAN Card", "India", PhysicalSize(2.5, 2.5, "cm")),
    )
}

PAPER_LAYOUTS: Dict[str, PaperLayout] = {
    p.id: p
    for p in (
        PaperLayout("3r", "3R (L)", PhysicalSize(3.5, 5, "inch")),
        PaperLayout("4r", "4R", PhysicalSize(6, 4, "inch")),
        PaperLayout("5r", "5R (2L)", PhysicalSize(7, 5, "inch")),
        PaperLayout("a5", "A5", PhysicalSize(21, 14.85, "cm")),
        PaperLayout("a4", "A4", PhysicalSize(29.7, 21, "cm")),
        PaperLayout("letter", "Letter", PhysicalSize(8.5, 11, "inch")),
    )
}

# A few common ID-photo backdrops; any "#RRGGBB" works as well.
BACKGROUND_PRESETS: Dict[str, str] = {
    "white": "#FFFFFF",
    "snow": "#FFFAFA",
    "whitesmoke": "#F5F5F5",
    "gainsboro": "#DCDCDC",
    "lightgray": "#D3D3D3",
    "silver": "#C0C0C0",
    "aliceblue": "#F0F8FF",
    "lightblue": "#ADD8E6",
    "powderblue": "#B0E0E6",
    "skyblue": "#87CEEB",
    "dodgerblue": "#1E90FF",
    "royalblue": "#4169E1",
    "red": "#FF0000",
}


def get_photo_format(format_id: str) -> PhotoFormat:
    try:
        return PHOTO_FORMATS[format_id]
    except KeyError:
        raise ValueError(
            f"Unknown photo format {format_id!r}; choose from {', '.join(sorted(PHOTO_FORMATS))}."
        ) from None


def get_paper_layout(paper_id: str) -> PaperLayout:
    try:
        return PAPER_LAYOUTS[paper_id]
    except KeyError:
        raise ValueError(
            f"Unknown paper {paper_id!r}; choose from {', '.join(sorted(PAPER_LAYOUTS))}."
        ) from None


def resolve_background(value: str) -> Color:
    """Preset name or hex string -> Color (unparseable input falls back to white)."""
    key = value.strip().lower().replace(" ", "") if isinstance(value, str) else ""
    return parse_hex_color(BACKGROUND_PRESETS.get(key, value))
