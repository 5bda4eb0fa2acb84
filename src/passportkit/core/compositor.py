"""
Background compositor.

Puts a segmented subject on a solid colour and cleans up the matte edge in
three ordered passes. Every pass reads the original 8-bit mask alpha, never
the output of an earlier pass:

1. soft-edge smoothing   0.02 < a < 0.98, blend with the 8-neighbour mean
2. colour spill removal  0.15 <= a <= 0.92, pull green/gray casts to the new colour
3. fringe feathering     0.01 < a < 0.12, alpha boosted x3

The result is always fully opaque.
"""

from __future__ import annotations

import logging
from typing import Union

import cv2
import numpy as np
from PIL import Image

from passportkit.core.models import AlphaMask, Color, Cutout
from passportkit.core.units import parse_hex_color

logger = logging.getLogger(__name__)

SOFT_EDGE_LOW = 0.02
SOFT_EDGE_HIGH = 0.98
SELF_WEIGHT = 0.7
NEIGHBOUR_WEIGHT = 0.3
EDGE_GAMMA = 0.85

SPILL_LOW = 0.15
SPILL_HIGH = 0.92
SPILL_REDUCTION = 0.6
GREEN_DOMINANCE = 1.1
GRAY_TOLERANCE = 20
GRAY_MAX_ALPHA = 0.5

FRINGE_LOW = 0.01
FRINGE_HIGH = 0.12
FRINGE_BOOST = 3.0

# Mean of the 8 neighbours (centre excluded).
_NEIGHBOUR_KERNEL = np.array([[1, 1, 1], [1, 0, 1], [1, 1, 1]], dtype=np.float64) / 8.0


def _round(values: np.ndarray) -> np.ndarray:
    return np.clip(np.floor(values + 0.5), 0, 255)


def _interior(shape: tuple, inset: int) -> np.ndarray:
    region = np.zeros(shape, dtype=bool)
    h, w = shape
    if h > 2 * inset and w > 2 * inset:
        region[inset : h - inset, inset : w - inset] = True
    return region


def _blend(fg: np.ndarray, bg: np.ndarray, alpha: np.ndarray) -> np.ndarray:
    a = alpha[..., None]
    return _round(fg * a + bg * (1.0 - a))


def composite(
    cutout_image: Image.Image,
    mask: AlphaMask,
    bg_color: Union[Color, str],
) -> Image.Image:
    """
    Composite `cutout_image` over `bg_color` using `mask`.

    Returns a new RGBA image of the same size with alpha 255 everywhere.
    """
    if isinstance(bg_color, str):
        bg_color = parse_hex_color(bg_color)
    if tuple(cutout_image.size) != mask.size:
        raise ValueError(f"Mask {mask.size} does not match image {cutout_image.size}")

    fg = np.asarray(cutout_image.convert("RGB"), dtype=np.float64)
    bg = np.asarray(bg_color.as_tuple(), dtype=np.float64)
    alpha = mask.to_uint8().astype(np.float64) / 255.0
    h, w = alpha.shape

    # Plain source-over composite; the passes below only touch matte edges.
    out = _blend(fg, bg, alpha)

    # Pass 1: edge smoothing
    soft = _interior((h, w), 1) & (alpha > SOFT_EDGE_LOW) & (alpha < SOFT_EDGE_HIGH)
    if soft.any():
        neighbours = cv2.filter2D(alpha, -1, _NEIGHBOUR_KERNEL, borderType=cv2.BORDER_REPLICATE)
        smoothed = np.power(SELF_WEIGHT * alpha + NEIGHBOUR_WEIGHT * neighbours, EDGE_GAMMA)
        out[soft] = _blend(fg[soft], bg, smoothed[soft])

    # Pass 2: colour spill removal
    edge = _interior((h, w), 2) & (alpha >= SPILL_LOW) & (alpha <= SPILL_HIGH)
    if edge.any():
        r, g, b = out[..., 0], out[..., 1], out[..., 2]
        greenish = (g > r * GREEN_DOMINANCE) & (g > b * GREEN_DOMINANCE)
        grayish = (
            (np.abs(r - g) < GRAY_TOLERANCE)
            & (np.abs(g - b) < GRAY_TOLERANCE)
            & (np.abs(r - b) < GRAY_TOLERANCE)
        )
        spill = edge & (greenish | (grayish & (alpha < GRAY_MAX_ALPHA)))
        out[spill] = _round(out[spill] * (1.0 - SPILL_REDUCTION) + bg * SPILL_REDUCTION)

    # Pass 3: feather the faintest fringe
    fringe = (alpha > FRINGE_LOW) & (alpha < FRINGE_HIGH)
    if fringe.any():
        out[fringe] = _blend(fg[fringe], bg, alpha[fringe] * FRINGE_BOOST)

    logger.debug(
        "Composited %dx%d onto %s (soft=%d, fringe=%d)",
        w, h, bg_color.to_hex(), int(soft.sum()), int(fringe.sum()),
    )

    rgba = np.empty((h, w, 4), dtype=np.uint8)
    rgba[..., :3] = out.astype(np.uint8)
    rgba[..., 3] = 255
    return Image.fromarray(rgba, "RGBA")


def replace_background(cutout: Cutout, bg_color: Union[Color, str]) -> Image.Image:
    return composite(cutout.image, cutout.mask, bg_color)
