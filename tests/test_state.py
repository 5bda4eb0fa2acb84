import io
import unittest

from PIL import Image

from tests._test_path import SRC  # noqa: F401

from passportkit.app.state import AppState
from passportkit.core.errors import ImageDecodeError
from passportkit.core.models import FaceBox, ProcessingParams

from tests.fakes import FakeSegmenter, FixedDetector


def _portrait_bytes(size=(400, 500)):
    buf = io.BytesIO()
    Image.new("RGB", size, (90, 140, 200)).save(buf, format="PNG")
    return buf.getvalue()


class TestAppState(unittest.TestCase):
    def setUp(self):
        self.seg = FakeSegmenter()
        self.state = AppState(segmenter=self.seg, detector=FixedDetector(FaceBox(150, 100, 100, 120)))
        self.state.load(_portrait_bytes())

    def test_load(self):
        self.assertEqual(self.state.photo.size, (400, 500))
        self.assertIs(self.state.original, self.state.photo)
        self.assertFalse(self.state.can_undo)

    def test_load_failure_keeps_previous_photo(self):
        photo = self.state.photo
        with self.assertRaises(ImageDecodeError):
            self.state.load(b"garbage")
        self.assertIs(self.state.photo, photo)

    def test_background_change_reuses_cutout(self):
        white = self.state.apply_background("#FFFFFF")
        blue = self.state.apply_background("#0000FF")
        self.assertEqual(self.seg.calls, 1)
        self.assertEqual(white.getpixel((0, 0)), (255, 255, 255, 255))
        self.assertEqual(blue.getpixel((0, 0)), (0, 0, 255, 255))
        self.assertEqual(self.state.params.background, "#0000FF")
        # foreground keeps the subject colour
        self.assertEqual(blue.getpixel((200, 250)), (90, 140, 200, 255))

    def test_crop_invalidates_cutout(self):
        self.state.remove_background()
        cropped = self.state.auto_crop()
        self.assertEqual(cropped.size, (600, 771))
        self.assertIsNone(self.state.cutout)
        self.state.apply_background("#FF0000")
        self.assertEqual(self.seg.calls, 2)
        self.assertEqual(self.state.photo.size, (600, 771))

    def test_undo_past_crop_segments_the_current_photo(self):
        original = self.state.photo
        self.state.auto_crop()
        self.state.apply_background("#FFFFFF")
        self.state.undo()
        self.assertIs(self.state.undo(), original)

        blue = self.state.apply_background("#0000FF")
        self.assertEqual(blue.size, (400, 500))
        self.assertEqual(self.seg.calls, 2)
        self.assertEqual(blue.getpixel((0, 0)), (0, 0, 255, 255))

    def test_undo_to_composite_reuses_cutout(self):
        self.state.apply_background("#FFFFFF")
        self.state.apply_background("#FF0000")
        self.state.undo()
        green = self.state.apply_background("#00FF00")
        self.assertEqual(self.seg.calls, 1)
        self.assertEqual(green.getpixel((0, 0)), (0, 255, 0, 255))

    def test_remove_background_takes_colour(self):
        out = self.state.remove_background("#00FF00")
        self.assertEqual(self.state.params.background, "#00FF00")
        self.assertEqual(out.getpixel((0, 0)), (0, 255, 0, 255))

    def test_undo_redo(self):
        first = self.state.photo
        self.state.apply_background("#FF0000")
        self.assertTrue(self.state.can_undo)
        self.assertIs(self.state.undo(), first)
        self.assertIs(self.state.photo, first)
        self.assertTrue(self.state.can_redo)
        self.state.redo()
        self.assertEqual(self.state.photo.getpixel((0, 0)), (255, 0, 0, 255))

    def test_sheets(self):
        preview = self.state.preview_sheet()
        export = self.state.export_sheet()
        self.assertEqual(preview.size, (1123, 794))
        self.assertEqual(export.size, (3508, 2480))

    def test_reset_clears_fields_and_restores_defaults(self):
        self.state.apply_background("#FF0000")
        self.state.params = ProcessingParams(copies=2)

        self.state.reset()

        self.assertIsNone(self.state.original)
        self.assertIsNone(self.state.photo)
        self.assertIsNone(self.state.cutout)
        self.assertEqual(len(self.state.history), 0)
        self.assertEqual(self.state.params, ProcessingParams())
        with self.assertRaises(ValueError):
            self.state.preview_sheet()
