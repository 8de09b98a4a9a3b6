"""panelens FastAPI server: renders tmux captures into styled runs."""

from __future__ import annotations

import hashlib
import logging
import os
import socket
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from ansi_parser import render_runs
from tmux_bridge import capture_pane, get_pane_info, has_tmux, list_sessions

logger = logging.getLogger(__name__)

app = FastAPI(title="panelens", version="1.0.0")
_security = HTTPBearer()

TOKEN = os.environ.get("PL_TOKEN", "changeme")
HOST = os.environ.get("PL_HOST", "127.0.0.1")
PORT = int(os.environ.get("PL_PORT", "8787"))
LOG_LEVEL = os.environ.get("PL_LOG_LEVEL", "INFO").upper()
DEFAULT_WIDTH = int(os.environ.get("PL_DEFAULT_WIDTH", "120"))

if TOKEN == "changeme":
    import sys

    print(
        "\n\033[1;31mFATAL: PL_TOKEN is set to 'changeme'.\033[0m\n"
        "Generate a secure token:  python3 -c \"import secrets; print(secrets.token_urlsafe(32))\"\n"
        "Then set it:  export PL_TOKEN=<your-token>\n",
        file=sys.stderr,
    )
    sys.exit(1)


def _verify(creds: HTTPAuthorizationCredentials = Depends(_security)) -> str:
    if creds.credentials != TOKEN:
        raise HTTPException(status_code=401, detail="Invalid token")
    return creds.credentials


class PaneOut(BaseModel):
    session: str
    winIndex: int
    winName: str
    paneId: str
    width: Optional[int] = None


class CaptureOut(BaseModel):
    raw: str
    hash: str
    width: int
    pane: Optional[PaneOut] = None
    parsed_lines: list[list[dict[str, Any]]]
    ts: datetime


class SessionOut(BaseModel):
    name: str
    windows: int
    attached: bool
    created: Optional[datetime] = None
    path: Optional[str] = None


class SessionsOut(BaseModel):
    sessions: list[SessionOut]


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "hostname": socket.gethostname(),
        "tmux": await has_tmux(),
    }


@app.get("/capture", response_model=CaptureOut)
async def capture(
    _: str = Depends(_verify),
    lines: int = Query(default=80, ge=1, le=500),
    width: Optional[int] = Query(default=None, ge=1, le=1000),
    target: Optional[str] = Query(default=None),
):
    try:
        raw = await capture_pane(target=target, lines=lines)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except RuntimeError as exc:
        raise HTTPException(status_code=502, detail=str(exc))

    try:
        pane = await get_pane_info(target=target)
    except (RuntimeError, ValueError):
        logger.info("no pane info for target %r", target)
        pane = None

    if width is None:
        width = pane.pane_width if pane and pane.pane_width else DEFAULT_WIDTH

    content_hash = hashlib.sha256(raw.encode()).hexdigest()[:16]
    parsed = render_runs(raw, width)

    # Strip trailing empty lines to avoid dead space on the client
    while parsed and all(run.get("t", "").strip() == "" for run in parsed[-1]):
        parsed.pop()

    return CaptureOut(
        raw=raw,
        hash=content_hash,
        width=width,
        pane=PaneOut(
            session=pane.session_name,
            winIndex=pane.window_index,
            winName=pane.window_name,
            paneId=pane.pane_id,
            width=pane.pane_width,
        ) if pane else None,
        parsed_lines=parsed,
        ts=datetime.now(timezone.utc),
    )


@app.get("/sessions", response_model=SessionsOut)
async def sessions(_: str = Depends(_verify)):
    try:
        sess_list = await list_sessions()
    except RuntimeError as exc:
        raise HTTPException(status_code=502, detail=str(exc))

    return SessionsOut(sessions=[
        SessionOut(
            name=s.name,
            windows=s.windows,
            attached=s.attached,
            created=s.created,
            path=s.current_path,
        )
        for s in sess_list
    ])


def run() -> None:
    import uvicorn

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=HOST, port=PORT)


if __name__ == "__main__":
    run()
