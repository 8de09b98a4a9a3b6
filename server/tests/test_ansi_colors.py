from pathlib import Path
import sys
import unittest

SERVER_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(SERVER_DIR))

from ansi_colors import (
    Rgb,
    resolve_basic,
    resolve_bright,
    resolve_palette,
    resolve_truecolor,
)


class PaletteTests(unittest.TestCase):
    def test_low_indices_match_basic_and_bright(self):
        for i in range(8):
            self.assertEqual(resolve_palette(i), resolve_basic(i))
            self.assertEqual(resolve_palette(i + 8), resolve_bright(i))

    def test_cube_red(self):
        self.assertEqual(resolve_palette(196), Rgb(255, 0, 0))

    def test_cube_start_and_end(self):
        self.assertEqual(resolve_palette(16), Rgb(0, 0, 0))
        self.assertEqual(resolve_palette(17), Rgb(0, 0, 95))
        self.assertEqual(resolve_palette(231), Rgb(255, 255, 255))

    def test_grayscale_ramp(self):
        self.assertEqual(resolve_palette(232), Rgb(8, 8, 8))
        self.assertEqual(resolve_palette(244), Rgb(128, 128, 128))
        self.assertEqual(resolve_palette(255), Rgb(238, 238, 238))

    def test_out_of_range_index_is_clamped(self):
        self.assertEqual(resolve_palette(-3), resolve_palette(0))
        self.assertEqual(resolve_palette(999), resolve_palette(255))


class BasicColorTests(unittest.TestCase):
    def test_basic_and_bright_values(self):
        self.assertEqual(resolve_basic(1), Rgb(128, 0, 0))
        self.assertEqual(resolve_basic(7), Rgb(192, 192, 192))
        self.assertEqual(resolve_bright(0), Rgb(128, 128, 128))
        self.assertEqual(resolve_bright(4), Rgb(0, 0, 255))


class TrueColorTests(unittest.TestCase):
    def test_identity(self):
        self.assertEqual(resolve_truecolor(10, 20, 30), Rgb(10, 20, 30))

    def test_channels_clamped(self):
        self.assertEqual(resolve_truecolor(-1, 300, 128), Rgb(0, 255, 128))

    def test_hex(self):
        self.assertEqual(Rgb(255, 0, 16).hex, "#ff0010")


if __name__ == "__main__":
    unittest.main()
