from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional

from PIL import Image

from passportkit.app.history import EditHistory
from passportkit.core.catalog import get_paper_layout, get_photo_format, resolve_background
from passportkit.core.compositor import replace_background
from passportkit.core.crop import crop_to_passport
from passportkit.core.face import FaceDetector
from passportkit.core.imaging import ImageSource, load_image
from passportkit.core.layout import render_preview, render_print
from passportkit.core.models import Cutout, ProcessingParams
from passportkit.core.segmentation import SegmentationCapability, cut_out

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    """
    Mutable state for a single edit session.

    Holds the cutout (working image + mask) from the first segmentation so
    that later background colour changes only re-run the compositor.
    """
    # Input
    original: Optional[Image.Image] = None

    # Current working photo (top of history)
    photo: Optional[Image.Image] = None

    # Cached segmentation result for cheap re-colouring
    cutout: Optional[Cutout] = None

    # Photos the cutout is valid for: the one it was cut from and its composites
    cutout_photos: List[Image.Image] = field(default_factory=list, repr=False)

    # User params
    params: ProcessingParams = field(default_factory=ProcessingParams)

    history: EditHistory = field(default_factory=EditHistory)

    # Pluggable capabilities (None -> defaults)
    segmenter: Optional[SegmentationCapability] = None
    detector: Optional[FaceDetector] = None

    def _require_photo(self) -> Image.Image:
        if self.photo is None:
            raise ValueError("Load a photo first.")
        return self.photo

    def _set_photo(self, photo: Image.Image) -> Image.Image:
        self.photo = photo
        self.history.push(photo)
        return photo

    def load(self, source: ImageSource) -> Image.Image:
        img = load_image(source)
        self.original = img
        self._drop_cutout()
        self.history.clear()
        return self._set_photo(img)

    def apply_background(self, color: Optional[str] = None) -> Image.Image:
        """
        Replace the background with `color` (default: params.background).

        Segments only when the cached cutout does not belong to the current photo.
        """
        photo = self._require_photo()
        if color is not None and color != self.params.background:
            self.params = replace(self.params, background=color)

        if not self._cutout_matches(photo):
            logger.info("No cached cutout for this photo, segmenting")
            self.cutout = cut_out(photo, self.segmenter)
            self.cutout_photos = [photo]

        result = replace_background(self.cutout, resolve_background(self.params.background))
        self.cutout_photos.append(result)
        return self._set_photo(result)

    def remove_background(self, color: Optional[str] = None) -> Image.Image:
        return self.apply_background(color)

    def _cutout_matches(self, photo: Image.Image) -> bool:
        return self.cutout is not None and any(p is photo for p in self.cutout_photos)

    def _drop_cutout(self) -> None:
        self.cutout = None
        self.cutout_photos = []

    def auto_crop(self, aspect_ratio: Optional[float] = None) -> Image.Image:
        photo = self._require_photo()
        ratio = aspect_ratio if aspect_ratio is not None else self.params.aspect_ratio
        cropped = crop_to_passport(photo, ratio, detector=self.detector)
        # The cached cutout no longer matches the photo geometry.
        self._drop_cutout()
        return self._set_photo(cropped)

    def undo(self) -> Optional[Image.Image]:
        snapshot = self.history.undo()
        if snapshot is not None:
            self.photo = snapshot
        return snapshot

    def redo(self) -> Optional[Image.Image]:
        snapshot = self.history.redo()
        if snapshot is not None:
            self.photo = snapshot
        return snapshot

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def preview_sheet(self) -> Image.Image:
        return render_preview(self._require_photo(), *self._sheet_args())

    def export_sheet(self) -> Image.Image:
        return render_print(self._require_photo(), *self._sheet_args())

    def _sheet_args(self):
        fmt = get_photo_format(self.params.photo_format)
        paper = get_paper_layout(self.params.paper)
        return fmt.size, paper.size, self.params.copies

    def reset(self) -> None:
        """Clear all session state (used by a Reset button)."""
        self.original = None
        self.photo = None
        self._drop_cutout()
        self.history.clear()
        self.params = ProcessingParams()  # restore defaults
