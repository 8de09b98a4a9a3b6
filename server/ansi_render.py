"""Rich renderables for captured pane output."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.color import Color
from rich.console import Group
from rich.measure import Measurement
from rich.segment import Segment
from rich.style import Style
from rich.text import Text

from ansi_parser import LINE_BREAK, Decoration, render_line
from ansi_parser import Style as AnsiStyle

if TYPE_CHECKING:
    from rich.console import Console, ConsoleOptions, RenderResult

_PLACEHOLDER = " No pane content available"

# C0 controls and DEL left over from malformed escapes; one cell each
_CONTROL_TABLE = {code: "\ufffd" for code in [*range(0x20), 0x7F]}


def sanitize(text: str) -> str:
    """Replace control characters so they are shown, not executed."""
    return text.translate(_CONTROL_TABLE)


def to_rich_style(style: AnsiStyle) -> Style:
    """Convert a parser style snapshot to a Rich Style.

    Unset attributes stay None so they inherit from the enclosing layout.
    """
    deco = style.decoration
    return Style(
        color=Color.from_rgb(*style.fg) if style.fg is not None else None,
        bgcolor=Color.from_rgb(*style.bg) if style.bg is not None else None,
        bold=True if Decoration.BOLD in deco else None,
        dim=True if Decoration.DIM in deco else None,
        italic=True if Decoration.ITALIC in deco else None,
        underline=True if Decoration.UNDERLINE in deco else None,
    )


class AnsiLine:
    """One raw capture line, truncated to ``max_width`` cells when rendered."""

    def __init__(self, raw: str, max_width: int) -> None:
        self.raw = raw
        self.max_width = max_width

    def __rich_measure__(self, console: Console, options: ConsoleOptions) -> Measurement:
        return Measurement(0, self.max_width)

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        width = min(self.max_width, options.max_width)
        for seg in render_line(self.raw, width):
            if seg is LINE_BREAK:
                yield Segment.line()
            else:
                yield Segment(sanitize(seg.text), to_rich_style(seg.style))


def tail_lines(captured: str, height: int) -> list[str]:
    """Return the bottom ``height`` lines of a capture.

    tmux terminates its output with a newline; that one trailing empty line
    is not counted.
    """
    if height <= 0:
        return []
    lines = captured.split("\n")
    if captured.endswith("\n"):
        lines.pop()
    return lines[-height:]


def pane_preview(captured: str | None, width: int, height: int) -> Group:
    """Build a bottom-anchored preview of a pane capture."""
    if not captured or not captured.strip():
        return Group(Text(_PLACEHOLDER, style="grey50"))
    return Group(*(AnsiLine(line, width) for line in tail_lines(captured, height)))
