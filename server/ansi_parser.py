"""ANSI SGR escape sequence parser.

Turns one raw line from ``tmux capture-pane -e`` into width-bounded styled
segments:
  [Segment(" "), Segment("hello", Style(fg=Rgb(0, 128, 0))), ..., LINE_BREAK]

Only SGR sequences (final byte ``m``) change the style. Every other CSI
sequence is recognized and skipped. Nothing here raises: malformed input
degrades to literal text.
"""

from __future__ import annotations

import enum
import string
from dataclasses import dataclass
from typing import Any, Iterator, NamedTuple, Sequence, Union

from ansi_colors import (
    Rgb,
    clamp,
    resolve_basic,
    resolve_bright,
    resolve_palette,
    resolve_truecolor,
)

_CSI_PREFIX = "\x1b["
_PARAM_CHARS = frozenset("0123456789;")
_FINAL_CHARS = frozenset(string.ascii_letters)
_SGR_FINAL = "m"

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


class Decoration(enum.Flag):
    NONE = 0
    BOLD = enum.auto()
    DIM = enum.auto()
    ITALIC = enum.auto()
    UNDERLINE = enum.auto()


@dataclass(frozen=True)
class Style:
    """Immutable snapshot of the SGR state at the time a segment was emitted."""

    fg: Rgb | None = None
    bg: Rgb | None = None
    decoration: Decoration = Decoration.NONE

    def to_run(self, text: str) -> dict[str, Any]:
        """Build a compact run dict, omitting unset fields."""
        run: dict[str, Any] = {"t": text}
        if self.fg is not None:
            run["fg"] = self.fg.hex
        if self.bg is not None:
            run["bg"] = self.bg.hex
        if Decoration.BOLD in self.decoration:
            run["b"] = True
        if Decoration.DIM in self.decoration:
            run["d"] = True
        if Decoration.ITALIC in self.decoration:
            run["i"] = True
        if Decoration.UNDERLINE in self.decoration:
            run["u"] = True
        return run


DEFAULT_STYLE = Style()


class StyleState:
    __slots__ = ("fg", "bg", "decoration")

    def __init__(self) -> None:
        self.fg: Rgb | None = None
        self.bg: Rgb | None = None
        self.decoration: Decoration = Decoration.NONE

    def reset(self) -> None:
        self.fg = None
        self.bg = None
        self.decoration = Decoration.NONE

    def snapshot(self) -> Style:
        return Style(self.fg, self.bg, self.decoration)


class Segment(NamedTuple):
    text: str
    style: Style = DEFAULT_STYLE


LINE_BREAK = Segment("\n")
_PADDING = Segment(" ")


class Literal(NamedTuple):
    text: str
    start: int
    end: int


class Csi(NamedTuple):
    params: tuple[int, ...]
    final: str
    start: int
    end: int


Token = Union[Literal, Csi]


def parse_params(text: str) -> tuple[int, ...]:
    """Split a CSI parameter string on ``;``.

    An empty string means no parameters. Anything that is not a 32-bit
    decimal integer (including an empty field) reads as 0, so ``1;;4``
    resets between the bold and the underline.
    """
    if not text:
        return ()
    params = []
    for part in text.split(";"):
        try:
            value = int(part)
        except ValueError:
            value = 0
        if not _INT32_MIN <= value <= _INT32_MAX:
            value = 0
        params.append(value)
    return tuple(params)


def scan(line: str) -> Iterator[Token]:
    """Split a line into literal runs and CSI sequences, left to right.

    A CSI is ESC ``[``, any run of digits and semicolons, then one ASCII
    letter. An ESC ``[`` that does not complete that shape is left inside
    the surrounding literal text.
    """
    n = len(line)
    lit_start = 0
    pos = 0
    while True:
        start = line.find(_CSI_PREFIX, pos)
        if start < 0:
            break
        end = start + len(_CSI_PREFIX)
        while end < n and line[end] in _PARAM_CHARS:
            end += 1
        if end >= n or line[end] not in _FINAL_CHARS:
            pos = start + 1
            continue
        if start > lit_start:
            yield Literal(line[lit_start:start], lit_start, start)
        yield Csi(
            parse_params(line[start + len(_CSI_PREFIX):end]),
            line[end],
            start,
            end + 1,
        )
        lit_start = pos = end + 1
    if lit_start < n:
        yield Literal(line[lit_start:], lit_start, n)


def _extended_color(params: Sequence[int], i: int) -> tuple[Rgb | None, int]:
    """Decode ``38;5;N`` / ``38;2;R;G;B`` starting at ``params[i]``.

    Returns the color (None if the form is incomplete or unknown) and the
    index of the last parameter consumed.
    """
    last = len(params) - 1
    mode = params[i + 1] if i < last else None
    if mode == 5:
        if i + 2 <= last:
            return resolve_palette(clamp(params[i + 2])), i + 2
        return None, last
    if mode == 2:
        if i + 4 <= last:
            return resolve_truecolor(params[i + 2], params[i + 3], params[i + 4]), i + 4
        return None, last
    return None, i


def apply_sgr(state: StyleState, params: Sequence[int]) -> None:
    """Apply SGR parameter codes to the current state."""
    if not params:
        state.reset()
        return
    i = 0
    while i < len(params):
        p = params[i]
        if p == 0:
            state.reset()
        elif p == 1:
            state.decoration |= Decoration.BOLD
        elif p == 2:
            state.decoration |= Decoration.DIM
        elif p == 3:
            state.decoration |= Decoration.ITALIC
        elif p == 4:
            state.decoration |= Decoration.UNDERLINE
        elif p == 22:
            state.decoration &= ~(Decoration.BOLD | Decoration.DIM)
        elif p == 23:
            state.decoration &= ~Decoration.ITALIC
        elif p == 24:
            state.decoration &= ~Decoration.UNDERLINE
        elif 30 <= p <= 37:
            state.fg = resolve_basic(p - 30)
        elif p == 38:  # extended fg
            color, i = _extended_color(params, i)
            if color is not None:
                state.fg = color
        elif p == 39:
            state.fg = None
        elif 40 <= p <= 47:
            state.bg = resolve_basic(p - 40)
        elif p == 48:  # extended bg
            color, i = _extended_color(params, i)
            if color is not None:
                state.bg = color
        elif p == 49:
            state.bg = None
        elif 90 <= p <= 97:
            state.fg = resolve_bright(p - 90)
        elif 100 <= p <= 107:
            state.bg = resolve_bright(p - 100)
        i += 1


def render_line(raw: str, max_width: int) -> Iterator[Segment]:
    """Render one raw line into styled segments, ending with ``LINE_BREAK``.

    The first segment is a single padding space, so at most
    ``max_width - 1`` characters of the line's text are emitted. With no
    room left after the padding cell (``max_width <= 1``) nothing but the
    line break is emitted, so a padding space never appears without text
    room behind it. Width is counted in characters; wide and combining
    characters are not special. Each call starts from the default style.
    """
    if max_width <= 1:
        yield LINE_BREAK
        return

    yield _PADDING
    budget = max_width - 1
    state = StyleState()
    visual_width = 0

    for token in scan(raw):
        if visual_width >= budget:
            break
        if isinstance(token, Literal):
            text = token.text[:budget - visual_width]
            if text:
                yield Segment(text, state.snapshot())
                visual_width += len(text)
        elif token.final == _SGR_FINAL:
            apply_sgr(state, token.params)

    yield LINE_BREAK


def strip_ansi(raw: str) -> str:
    """Return a line's literal text with all recognized CSI sequences removed."""
    return "".join(t.text for t in scan(raw) if isinstance(t, Literal))


def render_runs(raw: str, max_width: int) -> list[list[dict[str, Any]]]:
    """Render multi-line raw terminal output into run dicts.

    Returns a list of lines, each line a list of run dicts. Lines are
    rendered independently; style does not carry across newlines.
    """
    result: list[list[dict[str, Any]]] = []
    for line in raw.split("\n"):
        result.append([
            seg.style.to_run(seg.text)
            for seg in render_line(line, max_width)
            if seg is not LINE_BREAK
        ])
    return result
