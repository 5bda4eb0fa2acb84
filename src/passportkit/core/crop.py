"""
Passport crop: place the located face at a fixed composition and render a
600 px wide image at the requested aspect ratio.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from PIL import Image

from passportkit.core.errors import FaceNotDetectedError
from passportkit.core.face import FaceDetector, locate_face
from passportkit.core.models import FaceBox
from passportkit.core.units import round_half_up

logger = logging.getLogger(__name__)

OUTPUT_WIDTH = 600
PASSPORT_ASPECT_RATIO = 3.5 / 4.5

FACE_HEIGHT_RATIO = 0.5  # face height / crop height
FACE_TOP_MARGIN = 0.15   # crop top -> face top, as a fraction of crop height


def output_size(target_aspect_ratio: float) -> Tuple[int, int]:
    return OUTPUT_WIDTH, round_half_up(OUTPUT_WIDTH / target_aspect_ratio)


def compute_crop_window(
    face: FaceBox,
    img_w: int,
    img_h: int,
    target_aspect_ratio: float,
) -> Tuple[float, float, float, float]:
    """
    Source rectangle (x, y, width, height) for the crop.

    The window is translated into the image, never distorted. When it is
    larger than the image it is shrunk to fit, width first and then height;
    for extreme source shapes this gives up on the face composition.
    """
    crop_h = face.height / FACE_HEIGHT_RATIO
    crop_w = crop_h * target_aspect_ratio

    face_cx, face_cy = face.center
    crop_x = face_cx - crop_w / 2.0
    crop_y = face_cy - crop_h * (FACE_TOP_MARGIN + FACE_HEIGHT_RATIO / 2.0)

    crop_x = max(0.0, min(crop_x, img_w - crop_w))
    crop_y = max(0.0, min(crop_y, img_h - crop_h))

    final_w, final_h = crop_w, crop_h
    if crop_w > img_w:
        final_w = float(img_w)
        final_h = img_w / target_aspect_ratio
        crop_x = 0.0

    if final_h > img_h:
        final_h = float(img_h)
        final_w = img_h * target_aspect_ratio
        crop_y = 0.0
        crop_x = max(0.0, (img_w - final_w) / 2.0)

    return crop_x, crop_y, final_w, final_h


def crop_to_passport(
    image: Image.Image,
    target_aspect_ratio: float = PASSPORT_ASPECT_RATIO,
    detector: Optional[FaceDetector] = None,
) -> Image.Image:
    """
    Crop around the detected face and scale to OUTPUT_WIDTH x round(OUTPUT_WIDTH / ratio).

    Raises FaceNotDetectedError if the face locator returns no face.
    """
    if target_aspect_ratio <= 0:
        raise ValueError("target_aspect_ratio must be > 0")

    face = locate_face(image, detector=detector)
    if face is None:
        raise FaceNotDetectedError("Could not detect face in the image")

    x, y, w, h = compute_crop_window(face, image.width, image.height, target_aspect_ratio)
    out_w, out_h = output_size(target_aspect_ratio)
    logger.info(
        "Cropping %.1fx%.1f at (%.1f, %.1f) -> %dx%d", w, h, x, y, out_w, out_h
    )
    box = (x, y, min(x + w, float(image.width)), min(y + h, float(image.height)))
    return image.resize((out_w, out_h), resample=Image.Resampling.LANCZOS, box=box)
