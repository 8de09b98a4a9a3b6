"""Safe async wrappers around the tmux calls that feed the renderer."""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import datetime

logger = logging.getLogger(__name__)

_TARGET_RE = re.compile(r"^[a-zA-Z0-9_:.\-%]+$")
_TIMEOUT = 5.0


def _validate_target(target: str | None) -> str | None:
    if target is None:
        return None
    if not _TARGET_RE.match(target):
        raise ValueError(f"Invalid tmux target: {target!r}")
    return target


async def _run(*args: str) -> str:
    logger.debug("running %s", " ".join(args))
    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        logger.warning("%s not found", args[0])
        raise RuntimeError(f"{args[0]} not found")
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=_TIMEOUT)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        logger.warning("%s timed out after %.1fs", " ".join(args[:2]), _TIMEOUT)
        raise RuntimeError(f"{args[0]} timed out")
    if proc.returncode != 0:
        msg = stderr.decode().strip() if stderr else f"tmux exited {proc.returncode}"
        logger.warning("%s failed: %s", args[1] if len(args) > 1 else args[0], msg)
        raise RuntimeError(msg)
    return stdout.decode()


async def capture_pane(target: str | None = None, lines: int = 500) -> str:
    """Capture pane content with ANSI escapes preserved.

    -S starts the capture ``lines`` rows above the visible region, -e keeps
    the escapes and -J joins wrapped lines.
    """
    _validate_target(target)
    cmd = ["tmux", "capture-pane", "-e", "-p", "-J", "-S", f"-{lines}"]
    if target:
        cmd.extend(["-t", target])
    return await _run(*cmd)


@dataclass
class PaneInfo:
    session_name: str
    window_index: int
    window_name: str
    pane_id: str
    pane_width: int | None = None


async def get_pane_info(target: str | None = None) -> PaneInfo:
    """Get info about the current or specified tmux pane."""
    _validate_target(target)
    fmt = "#{session_name}\t#{window_index}\t#{window_name}\t#{pane_id}\t#{pane_width}"
    cmd = ["tmux", "display-message", "-p"]
    if target:
        cmd.extend(["-t", target])
    cmd.append(fmt)
    out = (await _run(*cmd)).rstrip("\n")
    parts = out.split("\t")
    if len(parts) < 4:
        raise RuntimeError(f"Unexpected tmux display-message output: {out!r}")
    try:
        win_idx = int(parts[1])
    except ValueError:
        win_idx = 0
    width = None
    if len(parts) > 4 and parts[4].isdigit():
        width = int(parts[4])
    return PaneInfo(
        session_name=parts[0],
        window_index=win_idx,
        window_name=parts[2],
        pane_id=parts[3],
        pane_width=width,
    )


@dataclass
class SessionInfo:
    name: str
    windows: int
    attached: bool
    created: datetime | None = None
    current_path: str | None = None


async def list_sessions() -> list[SessionInfo]:
    """List all tmux sessions, newest first."""
    fmt = "\t".join((
        "#{session_name}",
        "#{session_created}",
        "#{session_attached}",
        "#{session_windows}",
        "#{pane_current_path}",
    ))
    out = await _run("tmux", "list-sessions", "-F", fmt)
    sessions: list[SessionInfo] = []
    for line in out.split("\n"):
        if not line:
            continue
        parts = line.split("\t")
        if len(parts) < 4:
            continue
        try:
            win_count = int(parts[3])
        except ValueError:
            win_count = 0
        try:
            created = datetime.fromtimestamp(int(parts[1]))
        except (ValueError, OverflowError, OSError):
            created = None
        sessions.append(SessionInfo(
            name=parts[0],
            windows=win_count,
            attached=parts[2] != "0",
            created=created,
            current_path=parts[4] if len(parts) > 4 and parts[4] else None,
        ))
    sessions.sort(key=lambda s: s.created or datetime.min, reverse=True)
    return sessions


async def has_tmux() -> bool:
    """Check if the tmux binary is available."""
    try:
        await _run("tmux", "-V")
        return True
    except RuntimeError:
        return False
