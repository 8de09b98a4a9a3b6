#!/usr/bin/env python3
"""Print a tmux pane capture inside a rich panel."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from rich.console import Console
from rich.panel import Panel

from ansi_render import pane_preview
from tmux_bridge import capture_pane, get_pane_info

# panel border (2) plus panel padding (2)
_CHROME_WIDTH = 4
_MIN_WIDTH = 20


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("target", nargs="?", help="tmux target (session, window or pane)")
    parser.add_argument("--lines", type=int, default=500, help="scrollback rows to capture")
    parser.add_argument("--width", type=int, help="content width (default: terminal width)")
    parser.add_argument("--height", type=int, help="rows to show (default: terminal height)")
    parser.add_argument("-v", "--verbose", action="store_true", help="log tmux calls")
    return parser.parse_args(argv)


async def _capture(target: str | None, lines: int) -> tuple[str, str | None]:
    raw = await capture_pane(target=target, lines=lines)
    try:
        title = (await get_pane_info(target=target)).session_name
    except RuntimeError:
        title = None
    return raw, title


def main(argv: list[str] | None = None, console: Console | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    console = console or Console()

    try:
        raw, title = asyncio.run(_capture(args.target, args.lines))
    except (RuntimeError, ValueError) as exc:
        print(f"panelens-preview: {exc}", file=sys.stderr)
        return 1

    width = args.width or max(_MIN_WIDTH, console.width - _CHROME_WIDTH)
    height = args.height or max(1, console.height - 2)
    console.print(Panel(
        pane_preview(raw, width, height),
        title=title,
        width=width + _CHROME_WIDTH,
    ))
    return 0


if __name__ == "__main__":
    sys.exit(main())
