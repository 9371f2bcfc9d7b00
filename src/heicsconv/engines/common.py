from __future__ import annotations

from pathlib import Path
from typing import Any
import logging
import subprocess
import time

__all__ = [
    "run_command",
]

logger = logging.getLogger(__name__)


def run_command(
    cmd: list[str],
    *,
    engine: str,
    cwd: Path | None = None,
    timeout: float | None = None,
) -> dict[str, Any]:
    """Execute *cmd* and return heicsconv-style metadata.

    The helper blocks until *cmd* completes. Output is decoded as UTF-8 with
    undecodable bytes replaced, so odd bytes in FFmpeg diagnostics never turn
    an ordinary failed attempt into an error. A non-zero exit status is
    reported, not raised: for the conversion core a failed command is an
    expected outcome that selects the next stream hypothesis.

    Parameters
    ----------
    cmd
        Full command as a list of strings (preferred over shell=True).
    engine
        Human-readable engine key, e.g. "ffmpeg"; used as the log prefix.
    cwd
        Working directory; engines point this at their private storage so
        relative logical names resolve inside it.
    timeout
        Optional hard timeout (seconds); *None* disables the limit. A
        timeout propagates as :class:`subprocess.TimeoutExpired`.

    Returns
    -------
    dict
        Metadata dict with the keys ``returncode``, ``render_ms``,
        ``engine``, ``command`` and ``stderr``.
    """
    start = time.perf_counter()
    completed = subprocess.run(
        cmd,
        capture_output=True,
        encoding="utf-8",
        errors="replace",
        timeout=timeout,
        cwd=cwd,
    )
    duration_ms = int((time.perf_counter() - start) * 1000)

    stderr = completed.stderr or ""
    for line in stderr.splitlines():
        if line.strip():
            logger.debug("[%s] %s", engine, line)

    return {
        "returncode": completed.returncode,
        "render_ms": duration_ms,
        "engine": engine,
        "command": " ".join(cmd),
        "stderr": stderr.strip(),
    }
