"""Color resolution for ANSI SGR color codes.

Every form a color can take in an SGR sequence (basic 30-37, bright 90-97,
256-color palette index, 24-bit RGB) resolves to a concrete ``Rgb`` value.
Resolution is total: out-of-range inputs are clamped, never rejected.
"""

from __future__ import annotations

from typing import NamedTuple


class Rgb(NamedTuple):
    r: int
    g: int
    b: int

    @property
    def hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


# black, maroon, green, olive, navy, purple, teal, silver
_BASIC = (
    Rgb(0, 0, 0), Rgb(128, 0, 0), Rgb(0, 128, 0), Rgb(128, 128, 0),
    Rgb(0, 0, 128), Rgb(128, 0, 128), Rgb(0, 128, 128), Rgb(192, 192, 192),
)

# grey, red, lime, yellow, blue, fuchsia, aqua, white
_BRIGHT = (
    Rgb(128, 128, 128), Rgb(255, 0, 0), Rgb(0, 255, 0), Rgb(255, 255, 0),
    Rgb(0, 0, 255), Rgb(255, 0, 255), Rgb(0, 255, 255), Rgb(255, 255, 255),
)


def clamp(value: int, low: int = 0, high: int = 255) -> int:
    return max(low, min(high, value))


def resolve_basic(index: int) -> Rgb:
    return _BASIC[clamp(index, 0, 7)]


def resolve_bright(index: int) -> Rgb:
    return _BRIGHT[clamp(index, 0, 7)]


def _cube_channel(coord: int) -> int:
    return 0 if coord == 0 else 55 + 40 * coord


def resolve_palette(index: int) -> Rgb:
    """Convert a 256-color index to RGB.

    0-7 are the basic colors, 8-15 the bright ones, 16-231 a 6x6x6 cube
    and 232-255 a 24-step grayscale ramp.
    """
    n = clamp(index)
    if n < 8:
        return _BASIC[n]
    if n < 16:
        return _BRIGHT[n - 8]
    if n < 232:
        n -= 16
        return Rgb(
            _cube_channel(n // 36),
            _cube_channel((n // 6) % 6),
            _cube_channel(n % 6),
        )
    v = 8 + 10 * (n - 232)
    return Rgb(v, v, v)


def resolve_truecolor(r: int, g: int, b: int) -> Rgb:
    return Rgb(clamp(r), clamp(g), clamp(b))
