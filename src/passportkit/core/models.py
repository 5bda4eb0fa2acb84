from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:  # avoid importing Pillow at module import time
    from PIL import Image

UNITS = ("cm", "inch")


@dataclass(frozen=True)
class Color:
    """An opaque RGB colour, 0..255 per channel."""
    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for name in ("r", "g", "b"):
            v = getattr(self, name)
            if not (0 <= int(v) <= 255):
                raise ValueError(f"Color channel {name}={v} outside 0..255")

    @staticmethod
    def white() -> "Color":
        return Color(255, 255, 255)

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)

    def to_hex(self) -> str:
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"


@dataclass(frozen=True)
class PhysicalSize:
    """
    A physical width/height pair.

    unit:
        Either "cm" or "inch". Used for both photo formats and paper sheets.
    """
    width: float
    height: float
    unit: str = "cm"

    def __post_init__(self) -> None:
        if self.unit not in UNITS:
            raise ValueError(f"Unknown unit {self.unit!r}; expected one of {UNITS}.")
        if self.width <= 0 or self.height <= 0:
            raise ValueError("PhysicalSize width and height must be > 0")

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


@dataclass(frozen=True)
class FaceBox:
    """Axis-aligned face bounding box in source-image pixel coordinates."""
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    def contained_in(self, img_w: int, img_h: int) -> bool:
        return (
            self.width > 0
            and self.height > 0
            and self.x >= 0
            and self.y >= 0
            and self.x + self.width <= img_w
            and self.y + self.height <= img_h
        )

    def clipped(self, img_w: int, img_h: int) -> "FaceBox | None":
        """Clip to image bounds; None if nothing is left."""
        left = max(0.0, float(self.x))
        top = max(0.0, float(self.y))
        right = min(float(img_w), float(self.x + self.width))
        bottom = min(float(img_h), float(self.y + self.height))
        if right <= left or bottom <= top:
            return None
        return FaceBox(x=left, y=top, width=right - left, height=bottom - top)


@dataclass(frozen=True, eq=False)
class AlphaMask:
    """
    Per-pixel foreground confidence in [0, 1], shape (height, width).

    1 always means "keep as foreground".
    """
    values: np.ndarray

    def __post_init__(self) -> None:
        arr = np.asarray(self.values, dtype=np.float32)
        if arr.ndim != 2 or arr.size == 0:
            raise ValueError(f"AlphaMask must be a non-empty 2-D array, got shape {arr.shape}")
        if not np.all(np.isfinite(arr)):
            raise ValueError("AlphaMask values must be finite")
        arr = np.clip(arr, 0.0, 1.0)
        arr.setflags(write=False)
        object.__setattr__(self, "values", arr)

    @property
    def width(self) -> int:
        return int(self.values.shape[1])

    @property
    def height(self) -> int:
        return int(self.values.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def to_uint8(self) -> np.ndarray:
        """Quantise to 8-bit alpha, as stored in a PNG cutout."""
        return np.floor(self.values.astype(np.float64) * 255.0 + 0.5).astype(np.uint8)


@dataclass(frozen=True, eq=False)
class Cutout:
    """A working-resolution image and the mask aligned with it."""
    image: "Image.Image"
    mask: AlphaMask

    def __post_init__(self) -> None:
        if tuple(self.image.size) != self.mask.size:
            raise ValueError(
                f"Cutout image {self.image.size} and mask {self.mask.size} are not aligned"
            )


@dataclass(frozen=True)
class SheetLayout:
    """A computed photo grid for one paper sheet at one DPI."""
    cols: int
    rows: int
    cell_width_px: int
    cell_height_px: int
    gap_px: int
    origin_x: float
    origin_y: float
    paper_width_px: int
    paper_height_px: int
    dpi: int

    @property
    def capacity(self) -> int:
        return self.cols * self.rows

    def placed_count(self, copy_count: int) -> int:
        return max(0, min(copy_count, self.capacity))


@dataclass(frozen=True)
class ProcessingParams:
    """
    Parameters that control how a print sheet is generated.

    photo_format / paper:
        Catalog ids (see passportkit.core.catalog).
    copies:
        Requested number of photos on the sheet; truncated to sheet capacity.
    background:
        Hex colour ("#RRGGBB") or preset name for the replaced background.
    aspect_ratio:
        Width/height of the passport crop. Default 3.5/4.5.
    """
    photo_format: str = "india-passport"
    paper: str = "a4"
    copies: int = 8
    background: str = "#FFFFFF"
    aspect_ratio: float = 3.5 / 4.5
    remove_background: bool = True
    auto_crop: bool = True
