import sys
import types
import unittest
from unittest.mock import patch

from tests._test_path import SRC  # noqa: F401

from passportkit.core import face as f
from passportkit.core.models import FaceBox

from tests.fakes import BrokenDetector, FixedDetector, detection, mediapipe_module, solid


class TestHeuristicFallback(unittest.TestCase):
    def test_box_values(self):
        box = f.HeuristicFallback().detect(solid(1000, 800))
        self.assertAlmostEqual(box.width, 400.0)
        self.assertAlmostEqual(box.height, 280.0)
        self.assertAlmostEqual(box.x, 300.0)
        self.assertAlmostEqual(box.y, 80.0)

    def test_box_contained_for_any_size(self):
        for w, h in [(1, 1), (3, 7), (600, 771), (4000, 300), (17, 9000)]:
            box = f.HeuristicFallback().detect(solid(w, h))
            self.assertTrue(box.contained_in(w, h), (w, h, box))


class TestLocateFace(unittest.TestCase):
    def test_uses_detector_result(self):
        img = solid(200, 200)
        det = FixedDetector(FaceBox(50, 40, 60, 80))
        self.assertEqual(f.locate_face(img, det), FaceBox(50, 40, 60, 80))
        self.assertEqual(det.calls, 1)

    def test_detector_box_is_clipped(self):
        img = solid(100, 100)
        box = f.locate_face(img, FixedDetector(FaceBox(80, -10, 40, 50)))
        self.assertEqual(box, FaceBox(80.0, 0.0, 20.0, 40.0))

    def test_no_face_returns_none(self):
        self.assertIsNone(f.locate_face(solid(100, 100), FixedDetector(None)))

    def test_detector_error_falls_back(self):
        img = solid(100, 200)
        with self.assertLogs("passportkit.core.face", level="WARNING"):
            box = f.locate_face(img, BrokenDetector())
        self.assertEqual(box, f.HeuristicFallback().detect(img))

    def test_unavailable_platform_falls_back(self):
        img = solid(50, 50)
        with patch.object(f.PlatformDetector, "is_available", staticmethod(lambda: False)):
            box = f.locate_face(img)
        self.assertEqual(box, f.HeuristicFallback().detect(img))


class TestPlatformDetector(unittest.TestCase):
    def test_best_detection_converted_to_pixels(self):
        calls = []
        mp = mediapipe_module(
            [detection(0.6, 0.0, 0.0, 0.25, 0.25), detection(0.9, 0.5, 0.25, 0.25, 0.5)], calls
        )
        with patch.dict(sys.modules, {"mediapipe": mp}):
            box = f.PlatformDetector().detect(solid(200, 100))
        self.assertEqual(box, FaceBox(100.0, 25.0, 50.0, 50.0))
        self.assertEqual(calls[0], (1, 0.5))
        self.assertEqual(calls[1], (100, 200, 3))

    def test_box_clipped_to_image(self):
        mp = mediapipe_module([detection(0.9, 0.75, -0.25, 0.5, 0.5)])
        with patch.dict(sys.modules, {"mediapipe": mp}):
            box = f.PlatformDetector().detect(solid(200, 100))
        self.assertEqual(box, FaceBox(150.0, 0.0, 50.0, 25.0))

    def test_box_outside_image_is_no_face(self):
        mp = mediapipe_module([detection(0.9, 1.5, 0.25, 0.25, 0.25)])
        with patch.dict(sys.modules, {"mediapipe": mp}):
            self.assertIsNone(f.PlatformDetector().detect(solid(200, 100)))
            self.assertIsNone(f.locate_face(solid(200, 100)))

    def test_no_detections(self):
        with patch.dict(sys.modules, {"mediapipe": mediapipe_module(None)}):
            self.assertIsNone(f.PlatformDetector().detect(solid(50, 50)))

    def test_availability_check(self):
        with patch.dict(sys.modules, {"mediapipe": mediapipe_module([])}):
            self.assertTrue(f.PlatformDetector.is_available())
            self.assertIsInstance(f.default_detector(), f.PlatformDetector)
        with patch.dict(sys.modules, {"mediapipe": None}):
            self.assertFalse(f.PlatformDetector.is_available())
            self.assertIsNone(f.default_detector())
        with patch.dict(sys.modules, {"mediapipe": types.ModuleType("mediapipe")}):
            self.assertFalse(f.PlatformDetector.is_available())

    def test_locate_face_uses_platform_when_available(self):
        mp = mediapipe_module([detection(0.8, 0.25, 0.25, 0.5, 0.5)])
        with patch.dict(sys.modules, {"mediapipe": mp}):
            box = f.locate_face(solid(400, 400))
        self.assertEqual(box, FaceBox(100.0, 100.0, 200.0, 200.0))
