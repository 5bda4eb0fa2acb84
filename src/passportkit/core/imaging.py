"""
Decode, encode and resize helpers shared by the pipeline.

Every image handed to the core is an RGBA Pillow image. Helpers here never
modify their input; they return new images or bytes.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import os
from pathlib import Path
from typing import BinaryIO, Tuple, Union

import numpy as np
from PIL import Image, ImageOps

# OpenCV is used for resizing (fast, high-quality interpolation options)
import cv2

from passportkit.core.errors import CanvasContextError, ImageDecodeError
from passportkit.core.models import Color

logger = logging.getLogger(__name__)

ImageSource = Union[bytes, bytearray, str, "os.PathLike[str]", BinaryIO]

JPEG_QUALITY = 95


def _read_source(source: ImageSource) -> BinaryIO:
    if isinstance(source, (bytes, bytearray)):
        return io.BytesIO(bytes(source))
    if isinstance(source, str) and source.startswith("data:"):
        header, sep, payload = source.partition(",")
        if not sep or ";base64" not in header:
            raise ImageDecodeError("Unsupported data URL (expected base64 payload).")
        try:
            return io.BytesIO(base64.b64decode(payload, validate=True))
        except (binascii.Error, ValueError) as e:
            raise ImageDecodeError(f"Invalid base64 in data URL: {e}") from e
    if isinstance(source, (str, os.PathLike)):
        try:
            return io.BytesIO(Path(source).read_bytes())
        except OSError as e:
            raise ImageDecodeError(f"Could not read {source}: {e}") from e
    return source


def load_image(source: ImageSource) -> Image.Image:
    """
    Decode an image, apply EXIF orientation, return an RGBA Pillow image.

    Accepts raw bytes, a filesystem path, a file-like object, or a base64
    data URL. Raises ImageDecodeError for anything that does not decode.
    """
    fp = _read_source(source)
    try:
        img = Image.open(fp)
        img.load()
        img = ImageOps.exif_transpose(img)
        if img.mode != "RGBA":
            img = img.convert("RGBA")
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(f"Could not decode image: {e}") from e
    logger.debug("Decoded image %dx%d", img.width, img.height)
    return img


def new_canvas(size: Tuple[int, int], color: Color, mode: str = "RGB") -> Image.Image:
    """Allocate a solid canvas; resource failures surface as CanvasContextError."""
    w, h = size
    if w <= 0 or h <= 0:
        raise CanvasContextError(f"Cannot allocate a {w}x{h} canvas")
    fill = color.as_tuple() + ((255,) if mode == "RGBA" else ())
    try:
        return Image.new(mode, (w, h), fill)
    except (MemoryError, ValueError) as e:
        raise CanvasContextError(f"Could not allocate a {w}x{h} canvas: {e}") from e


def resize_rgba(img: Image.Image, size: Tuple[int, int]) -> Image.Image:
    """Resize an RGBA image with OpenCV (area for shrinking, Lanczos for growing)."""
    new_w, new_h = max(1, int(size[0])), max(1, int(size[1]))
    if (new_w, new_h) == img.size:
        return img.copy()
    arr = np.asarray(img.convert("RGBA"))
    shrinking = new_w < img.width or new_h < img.height
    interp = cv2.INTER_AREA if shrinking else cv2.INTER_LANCZOS4
    out = cv2.resize(arr, (new_w, new_h), interpolation=interp)
    return Image.fromarray(out, "RGBA")


def encode_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def encode_jpeg(img: Image.Image, quality: int = JPEG_QUALITY) -> bytes:
    buf = io.BytesIO()
    # JPEG has no alpha channel
    img.convert("RGB").save(buf, format="JPEG", quality=quality, optimize=True)
    return buf.getvalue()


def to_data_url(img: Image.Image, fmt: str = "PNG") -> str:
    fmt = fmt.upper()
    if fmt == "PNG":
        data, mime = encode_png(img), "image/png"
    elif fmt in ("JPG", "JPEG"):
        data, mime = encode_jpeg(img), "image/jpeg"
    else:
        raise ValueError(f"Unsupported format {fmt!r}; expected PNG or JPEG.")
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def save_image(img: Image.Image, path: Union[str, "os.PathLike[str]"]) -> Path:
    """Save as JPEG (quality 95) for .jpg/.jpeg paths, PNG otherwise."""
    out = Path(path)
    if out.suffix.lower() in (".jpg", ".jpeg"):
        out.write_bytes(encode_jpeg(img))
    else:
        out.write_bytes(encode_png(img))
    return out


def sheet_filename(paper_name: str, copies: int, ext: str = "png") -> str:
    return f"passport-photos-{paper_name}-{copies}pcs.{ext.lstrip('.')}"
