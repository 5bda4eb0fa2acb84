"""
Background segmentation: bound the working resolution, ask a segmentation
capability for a per-pixel mask, normalise it so 1 means foreground.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Tuple

import numpy as np
from PIL import Image

from passportkit.core.errors import SegmentationError
from passportkit.core.imaging import resize_rgba
from passportkit.core.models import AlphaMask, Cutout
from passportkit.core.units import round_half_up

logger = logging.getLogger(__name__)

MAX_WORKING_DIMENSION = 1024


class SegmentationCapability(Protocol):
    # True when predict() scores background membership rather than foreground.
    mask_is_background: bool

    def predict(self, image: Image.Image) -> Optional[np.ndarray]:
        ...


class RembgSegmenter:
    """rembg (U^2-Net / ONNX) person matte; returns a foreground mask."""

    mask_is_background = False

    def __init__(self, model_name: str = "u2net_human_seg"):
        self.model_name = model_name
        self._session = None

    def predict(self, image: Image.Image) -> Optional[np.ndarray]:
        try:
            from rembg import new_session, remove  # type: ignore
        except ImportError as e:
            raise SegmentationError("rembg is not installed. Run: pip install 'rembg[cpu]'") from e

        if self._session is None:
            # First use downloads the model; this can take a while.
            logger.info("Loading segmentation model %s", self.model_name)
            self._session = new_session(self.model_name)

        out = remove(image.convert("RGB"), session=self._session, only_mask=True)
        if out is None:
            return None
        return np.asarray(out)


def working_size(width: int, height: int, limit: int = MAX_WORKING_DIMENSION) -> Tuple[int, int]:
    """Downscaled size with the longer side at `limit`, or the input size if it fits."""
    if width <= limit and height <= limit:
        return width, height
    if width > height:
        return limit, max(1, round_half_up(height * limit / width))
    return max(1, round_half_up(width * limit / height)), limit


def to_working_resolution(image: Image.Image) -> Image.Image:
    size = working_size(image.width, image.height)
    if size == image.size:
        return image.convert("RGBA")
    return resize_rgba(image, size)


def _normalise_mask(raw: Optional[np.ndarray], width: int, height: int, invert: bool) -> AlphaMask:
    if raw is None:
        raise SegmentationError("Invalid segmentation result: no mask returned")
    arr = np.asarray(raw)
    if arr.size == 0:
        raise SegmentationError("Invalid segmentation result: empty mask")
    if arr.ndim == 3 and arr.shape[-1] in (1, 3, 4):
        arr = arr[..., 0] if arr.shape[-1] != 4 else arr[..., 3]
    if arr.size != width * height:
        raise SegmentationError(
            f"Invalid segmentation result: {arr.size} values for a {width}x{height} image"
        )
    arr = arr.reshape(height, width)

    if np.issubdtype(arr.dtype, np.integer) or arr.dtype == np.bool_:
        scale = 1.0 if arr.dtype == np.bool_ else 255.0
        values = arr.astype(np.float32) / scale
    else:
        values = arr.astype(np.float32)
    if not np.all(np.isfinite(values)):
        raise SegmentationError("Invalid segmentation result: non-finite values")

    values = np.clip(values, 0.0, 1.0)
    if invert:
        values = 1.0 - values
    return AlphaMask(values)


def cut_out(image: Image.Image, capability: Optional[SegmentationCapability] = None) -> Cutout:
    """
    Segment `image` and return the working-resolution image with its mask.

    The pair is what a caller keeps to re-colour the background later
    without segmenting again.
    """
    if capability is None:
        capability = RembgSegmenter()

    working = to_working_resolution(image)
    logger.info("Processing image: %dx%d", working.width, working.height)

    raw = capability.predict(working)
    mask = _normalise_mask(raw, working.width, working.height, invert=capability.mask_is_background)
    logger.info("Mask applied successfully")
    return Cutout(image=working, mask=mask)


def segment(image: Image.Image, capability: Optional[SegmentationCapability] = None) -> AlphaMask:
    """Foreground mask aligned to the (possibly downsized) working resolution."""
    return cut_out(image, capability).mask
