import unittest

from tests._test_path import SRC  # noqa: F401

from passportkit.core.models import Color
from passportkit.core.units import (
    cm_to_pixels,
    inch_to_pixels,
    parse_hex_color,
    round_half_up,
    to_pixels,
)


class TestUnitConversion(unittest.TestCase):
    def test_exact_conversions(self):
        self.assertEqual(cm_to_pixels(2.54, 300), 300)
        self.assertEqual(inch_to_pixels(1, 96), 96)

    def test_passport_and_a4_at_screen_dpi(self):
        self.assertEqual(cm_to_pixels(3.5, 96), 132)
        self.assertEqual(cm_to_pixels(4.5, 96), 170)
        self.assertEqual(cm_to_pixels(29.7, 96), 1123)
        self.assertEqual(cm_to_pixels(21, 96), 794)
        self.assertEqual(cm_to_pixels(0.3, 96), 11)

    def test_ties_round_up(self):
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(3.5), 4)
        self.assertEqual(round_half_up(2.49), 2)

    def test_to_pixels_dispatch(self):
        self.assertEqual(to_pixels(2, "inch", 300), 600)
        self.assertEqual(to_pixels(2.54, "cm", 96), 96)
        with self.assertRaises(ValueError):
            to_pixels(1, "mm", 96)


class TestParseHexColor(unittest.TestCase):
    def test_valid(self):
        self.assertEqual(parse_hex_color("#00FF00"), Color(0, 255, 0))
        self.assertEqual(parse_hex_color("00ff00"), Color(0, 255, 0))
        self.assertEqual(parse_hex_color("#AdD8e6"), Color(173, 216, 230))

    def test_invalid_defaults_to_white(self):
        for bad in ("not-a-color", "", "#FFF", "#GGGGGG", "#1234567", None, 123):
            self.assertEqual(parse_hex_color(bad), Color(255, 255, 255), bad)
