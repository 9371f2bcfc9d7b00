from __future__ import annotations

import logging
import shutil
import tempfile
import threading
from pathlib import Path

from ..config import DEFAULT_ENGINE_CONFIG, EngineConfig
from ..error_handling import (
    EngineAcquisitionError,
    EngineBusyError,
    EngineClosedError,
    EngineError,
    error_context,
)
from ..system_tools import discover_tool
from .common import run_command

__all__ = [
    "FFmpegEngine",
    "FFmpegEngineFactory",
]

logger = logging.getLogger(__name__)

# Prepended to every command; keeps stderr to the actual diagnostics.
_BASE_ARGS = ["-hide_banner", "-nostdin"]


class FFmpegEngine:
    """FFmpeg subprocess engine backed by a private scratch directory.

    Logical names map to files directly inside the directory and every
    command runs with it as the working directory. Instances are single-use:
    once closed the directory is gone and every call raises.
    """

    def __init__(
        self,
        binary: str,
        *,
        work_dir: Path | None = None,
        timeout: float | None = None,
    ) -> None:
        self.binary = binary
        self.timeout = timeout
        self._root = Path(tempfile.mkdtemp(prefix="heicsconv-", dir=work_dir))
        self._lock = threading.Lock()
        self._closed = False
        logger.debug("Created FFmpeg engine storage at %s", self._root)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def closed(self) -> bool:
        return self._closed

    def _path(self, name: str) -> Path:
        self._ensure_open()
        if not name or Path(name).name != name or name in (".", ".."):
            raise EngineError(f"Invalid logical name: {name!r}")
        return self._root / name

    def _ensure_open(self) -> None:
        if self._closed:
            raise EngineClosedError("FFmpeg engine instance has already been closed")

    # ------------------------------------------------------------------
    # FrameEngine protocol
    # ------------------------------------------------------------------

    def stage(self, name: str, data: bytes) -> None:
        path = self._path(name)
        with error_context("stage engine input", EngineError, context={"name": name}, logger=logger):
            path.write_bytes(data)

    def run(self, arguments: list[str]) -> int:
        self._ensure_open()
        if not self._lock.acquire(blocking=False):
            raise EngineBusyError("FFmpeg engine is already running a command")
        try:
            cmd = [self.binary, *_BASE_ARGS, *arguments]
            with error_context("run ffmpeg", EngineError, logger=logger):
                meta = run_command(cmd, engine="FFmpeg", cwd=self._root, timeout=self.timeout)
            logger.debug(
                "FFmpeg exited with %s after %sms", meta["returncode"], meta["render_ms"]
            )
            return meta["returncode"]
        finally:
            self._lock.release()

    def retrieve(self, name: str) -> bytes:
        path = self._path(name)
        if not path.is_file():
            raise EngineError(f"No entry named '{name}' in engine storage")
        return path.read_bytes()

    def remove(self, name: str) -> None:
        path = self._path(name)
        with error_context("remove engine entry", EngineError, context={"name": name}, logger=logger):
            path.unlink()

    def list_names(self) -> list[str]:
        self._ensure_open()
        return sorted(p.name for p in self._root.iterdir() if p.is_file())

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        shutil.rmtree(self._root, ignore_errors=True)
        logger.debug("Discarded FFmpeg engine storage at %s", self._root)


class FFmpegEngineFactory:
    """Hands out a new :class:`FFmpegEngine` per session."""

    def __init__(self, engine_config: EngineConfig | None = None) -> None:
        self.engine_config = engine_config or DEFAULT_ENGINE_CONFIG

    def acquire(self) -> FFmpegEngine:
        info = discover_tool("ffmpeg", self.engine_config)
        try:
            info.require()
        except RuntimeError as e:
            raise EngineAcquisitionError(
                "FFmpeg is not available", cause=e, context={"tool": info.name}
            ) from e

        work_dir = Path(self.engine_config.WORK_DIR) if self.engine_config.WORK_DIR else None
        try:
            engine = FFmpegEngine(
                info.name, work_dir=work_dir, timeout=self.engine_config.RUN_TIMEOUT
            )
        except OSError as e:
            raise EngineAcquisitionError(
                "Could not create engine storage", cause=e, context={"work_dir": work_dir}
            ) from e

        logger.info("Acquired FFmpeg engine (%s, version %s)", info.name, info.version or "unknown")
        return engine
