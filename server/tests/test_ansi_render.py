from io import StringIO
from pathlib import Path
import sys
import unittest

from rich.console import Console
from rich.measure import Measurement
from rich.panel import Panel

SERVER_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(SERVER_DIR))

from ansi_parser import Decoration, Style
from ansi_colors import Rgb
from ansi_render import AnsiLine, pane_preview, sanitize, tail_lines, to_rich_style


def make_console(width=40):
    return Console(file=StringIO(), width=width, color_system="truecolor", force_terminal=True)


class ToRichStyleTests(unittest.TestCase):
    def test_colors_and_decorations(self):
        style = to_rich_style(Style(
            fg=Rgb(10, 20, 30),
            bg=Rgb(255, 0, 0),
            decoration=Decoration.BOLD | Decoration.UNDERLINE,
        ))
        self.assertEqual(style.color.triplet, (10, 20, 30))
        self.assertEqual(style.bgcolor.triplet, (255, 0, 0))
        self.assertTrue(style.bold)
        self.assertTrue(style.underline)
        self.assertIsNone(style.italic)
        self.assertIsNone(style.dim)

    def test_default_style_sets_nothing(self):
        style = to_rich_style(Style())
        self.assertIsNone(style.color)
        self.assertIsNone(style.bgcolor)
        self.assertIsNone(style.bold)


class AnsiLineTests(unittest.TestCase):
    def test_renders_segments_and_line_break(self):
        console = make_console()
        segments = list(console.render(AnsiLine("\x1b[31mhello", 20)))
        self.assertEqual("".join(s.text for s in segments), " hello\n")
        hello = next(s for s in segments if s.text == "hello")
        self.assertEqual(hello.style.color.triplet, (128, 0, 0))

    def test_truncates_to_own_width(self):
        console = make_console()
        segments = list(console.render(AnsiLine("abcdefghij", 5)))
        self.assertEqual("".join(s.text for s in segments), " abcd\n")

    def test_truncates_to_available_width(self):
        console = make_console()
        options = console.options.update_width(4)
        segments = list(console.render(AnsiLine("abcdefghij", 50), options))
        self.assertEqual("".join(s.text for s in segments), " abc\n")

    def test_malformed_escape_is_not_written_raw(self):
        console = make_console()
        segments = list(console.render(AnsiLine("ab\x1b[1", 20)))
        text = "".join(s.text for s in segments)
        self.assertEqual(text, " ab\ufffd[1\n")
        self.assertNotIn("\x1b", text)

    def test_sanitize_keeps_width(self):
        self.assertEqual(sanitize("a\x07b\x7f"), "a\ufffdb\ufffd")
        self.assertEqual(sanitize("plain"), "plain")

    def test_measure(self):
        console = make_console()
        measurement = Measurement.get(console, console.options, AnsiLine("x", 12))
        self.assertEqual(measurement, Measurement(0, 12))


class TailLinesTests(unittest.TestCase):
    def test_bottom_lines_ignoring_final_newline(self):
        self.assertEqual(tail_lines("a\nb\nc\n", 2), ["b", "c"])

    def test_short_capture(self):
        self.assertEqual(tail_lines("a\nb", 10), ["a", "b"])

    def test_zero_height(self):
        self.assertEqual(tail_lines("a\nb", 0), [])


class PanePreviewTests(unittest.TestCase):
    def test_placeholder_for_blank_capture(self):
        console = Console(file=StringIO(), width=40)
        with console.capture() as capture:
            console.print(pane_preview("  \n", 30, 5))
        self.assertIn("No pane content available", capture.get())

    def test_preview_inside_panel(self):
        console = Console(file=StringIO(), width=40)
        captured = "old\n\x1b[1mnew line\x1b[0m\nprompt $\n"
        with console.capture() as capture:
            console.print(Panel(pane_preview(captured, 20, 2)))
        out = capture.get()
        self.assertNotIn("old", out)
        self.assertIn("new line", out)
        self.assertIn("prompt $", out)


if __name__ == "__main__":
    unittest.main()
