from __future__ import annotations


class PassportKitError(Exception):
    """Base class for errors raised by the compositing pipeline."""


class ImageDecodeError(PassportKitError):
    """The input bytes could not be decoded into an image."""


class SegmentationError(PassportKitError):
    """The segmentation capability returned a missing or malformed mask."""


class FaceNotDetectedError(PassportKitError):
    """No face could be located for the passport crop."""


class CanvasContextError(PassportKitError):
    """A render surface could not be allocated."""
