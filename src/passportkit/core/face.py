"""
Face locator: a platform detector when one is available, otherwise a fixed
upper-centre heuristic. locate_face() never raises.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import numpy as np
from PIL import Image

from passportkit.core.models import FaceBox

logger = logging.getLogger(__name__)


class FaceDetector(Protocol):
    def detect(self, image: Image.Image) -> Optional[FaceBox]:
        ...


class PlatformDetector:
    """MediaPipe face detection; returns the single best detection."""

    def __init__(self, min_detection_confidence: float = 0.5, model_selection: int = 1):
        self.min_detection_confidence = min_detection_confidence
        self.model_selection = model_selection

    @staticmethod
    def is_available() -> bool:
        try:
            import mediapipe as mp  # type: ignore
        except ImportError:
            return False
        return hasattr(mp, "solutions") and hasattr(mp.solutions, "face_detection")

    def detect(self, image: Image.Image) -> Optional[FaceBox]:
        import mediapipe as mp  # type: ignore

        # MediaPipe expects RGB numpy array
        rgb = np.ascontiguousarray(np.asarray(image.convert("RGB")))
        h, w = rgb.shape[:2]

        with mp.solutions.face_detection.FaceDetection(
            model_selection=self.model_selection,
            min_detection_confidence=self.min_detection_confidence,
        ) as detector:
            results = detector.process(rgb)

        if not results.detections:
            return None

        best = max(results.detections, key=lambda d: d.score[0] if d.score else 0.0)
        rel = best.location_data.relative_bounding_box
        box = FaceBox(x=rel.xmin * w, y=rel.ymin * h, width=rel.width * w, height=rel.height * h)
        return box.clipped(w, h)


class HeuristicFallback:
    """Assume the face sits in the upper-centre of the frame."""

    WIDTH_RATIO = 0.4
    HEIGHT_RATIO = 0.35
    TOP_RATIO = 0.1

    def detect(self, image: Image.Image) -> FaceBox:
        w, h = image.size
        face_w = w * self.WIDTH_RATIO
        face_h = h * self.HEIGHT_RATIO
        return FaceBox(x=(w - face_w) / 2.0, y=h * self.TOP_RATIO, width=face_w, height=face_h)


def default_detector() -> Optional[FaceDetector]:
    """Capability probe: the platform detector if its dependency is importable."""
    return PlatformDetector() if PlatformDetector.is_available() else None


def locate_face(image: Image.Image, detector: Optional[FaceDetector] = None) -> Optional[FaceBox]:
    """
    Bounding box of the dominant face, or None if the detector found none.

    With no detector (or any detector error) the heuristic box is returned.
    """
    if detector is None:
        detector = default_detector()
    if detector is None:
        logger.info("Face detector not available, using fallback")
        return HeuristicFallback().detect(image)

    try:
        box = detector.detect(image)
    except Exception as e:
        logger.warning("Face detection error, using fallback: %s", e)
        return HeuristicFallback().detect(image)

    if box is not None:
        box = box.clipped(image.width, image.height)
    logger.debug("Face box: %s", box)
    return box
