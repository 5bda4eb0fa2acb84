"""
Sheet layout: tile copies of one photo onto a paper sheet.

The same routine serves the screen preview (96 DPI) and the print export
(300 DPI); only the pixel density changes.
"""

from __future__ import annotations

import logging
import math
from typing import List, Tuple

from PIL import Image, ImageDraw

from passportkit.core.imaging import new_canvas
from passportkit.core.models import Color, PhysicalSize, SheetLayout
from passportkit.core.units import PRINT_DPI, SCREEN_DPI, cm_to_pixels, round_half_up, to_pixels

logger = logging.getLogger(__name__)

GAP_CM = 0.3
BORDER_COLOR = "#e5e5e5"
BORDER_WIDTH = 1


def compute_sheet_layout(photo_size: PhysicalSize, paper_size: PhysicalSize, dpi: int) -> SheetLayout:
    """Grid of photo cells, with a fixed gap between neighbours, centred on the paper."""
    if dpi <= 0:
        raise ValueError("dpi must be > 0")

    paper_w = to_pixels(paper_size.width, paper_size.unit, dpi)
    paper_h = to_pixels(paper_size.height, paper_size.unit, dpi)
    cell_w = to_pixels(photo_size.width, photo_size.unit, dpi)
    cell_h = to_pixels(photo_size.height, photo_size.unit, dpi)
    gap = cm_to_pixels(GAP_CM, dpi)
    if cell_w <= 0 or cell_h <= 0:
        raise ValueError(f"Photo size rounds to zero pixels at {dpi} DPI")

    cols = max(0, math.floor((paper_w + gap) / (cell_w + gap)))
    rows = max(0, math.floor((paper_h + gap) / (cell_h + gap)))

    grid_w = cols * cell_w + max(0, cols - 1) * gap
    grid_h = rows * cell_h + max(0, rows - 1) * gap

    return SheetLayout(
        cols=cols,
        rows=rows,
        cell_width_px=cell_w,
        cell_height_px=cell_h,
        gap_px=gap,
        origin_x=(paper_w - grid_w) / 2.0,
        origin_y=(paper_h - grid_h) / 2.0,
        paper_width_px=paper_w,
        paper_height_px=paper_h,
        dpi=dpi,
    )


def cell_positions(layout: SheetLayout, copy_count: int) -> List[Tuple[int, int]]:
    """Top-left pixel of each placed cell, row-major, truncated to capacity."""
    placed = layout.placed_count(copy_count)
    positions: List[Tuple[int, int]] = []
    for i in range(placed):
        row, col = divmod(i, layout.cols)
        x = layout.origin_x + col * (layout.cell_width_px + layout.gap_px)
        y = layout.origin_y + row * (layout.cell_height_px + layout.gap_px)
        positions.append((round_half_up(x), round_half_up(y)))
    return positions


def center_crop_box(img_w: int, img_h: int, cell_w: int, cell_h: int) -> Tuple[float, float, float, float]:
    """Largest centred source box with the cell's aspect ratio, as (left, top, right, bottom)."""
    img_aspect = img_w / img_h
    cell_aspect = cell_w / cell_h
    if img_aspect > cell_aspect:
        src_w = img_h * cell_aspect
        left = (img_w - src_w) / 2.0
        return (left, 0.0, min(left + src_w, float(img_w)), float(img_h))
    src_h = img_w / cell_aspect
    top = (img_h - src_h) / 2.0
    return (0.0, top, float(img_w), min(top + src_h, float(img_h)))


def render_sheet(
    photo: Image.Image,
    photo_size: PhysicalSize,
    paper_size: PhysicalSize,
    copy_count: int,
    dpi: int,
) -> Image.Image:
    """
    Render `copy_count` copies of `photo` onto a white sheet at `dpi`.

    Requests beyond the sheet's capacity are truncated; zero copies gives a
    blank sheet. Returns an opaque RGB image sized to the paper.
    """
    if copy_count < 0:
        raise ValueError("copy_count must be >= 0")

    layout = compute_sheet_layout(photo_size, paper_size, dpi)
    sheet = new_canvas((layout.paper_width_px, layout.paper_height_px), Color.white())
    positions = cell_positions(layout, copy_count)
    logger.info(
        "Sheet %dx%d @ %d DPI: %dx%d grid, placing %d of %d requested",
        layout.paper_width_px, layout.paper_height_px, dpi,
        layout.cols, layout.rows, len(positions), copy_count,
    )
    if not positions:
        return sheet

    cell_w, cell_h = layout.cell_width_px, layout.cell_height_px
    box = center_crop_box(photo.width, photo.height, cell_w, cell_h)
    cell = photo.convert("RGB").resize((cell_w, cell_h), resample=Image.Resampling.LANCZOS, box=box)

    draw = ImageDraw.Draw(sheet)
    for x, y in positions:
        sheet.paste(cell, (x, y))
        draw.rectangle((x, y, x + cell_w - 1, y + cell_h - 1), outline=BORDER_COLOR, width=BORDER_WIDTH)
    return sheet


def render_preview(photo: Image.Image, photo_size: PhysicalSize, paper_size: PhysicalSize, copy_count: int) -> Image.Image:
    return render_sheet(photo, photo_size, paper_size, copy_count, SCREEN_DPI)


def render_print(photo: Image.Image, photo_size: PhysicalSize, paper_size: PhysicalSize, copy_count: int) -> Image.Image:
    return render_sheet(photo, photo_size, paper_size, copy_count, PRINT_DPI)
