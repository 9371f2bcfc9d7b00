"""File I/O and logging setup helpers."""

from __future__ import annotations

import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path

from .config import DEFAULT_CONVERSION_CONFIG
from .error_handling import ValidationError

__all__ = [
    "atomic_write_bytes",
    "default_output_path",
    "read_container",
    "setup_logging",
]


def setup_logging(log_level: str = "INFO", log_dir: Path | None = None) -> logging.Logger:
    """Set up logging configuration for heicsconv.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Optional directory for a timestamped log file

    Returns:
        Configured package logger
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        handlers.append(logging.FileHandler(log_dir / f"heicsconv_{timestamp}.log"))

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )

    return logging.getLogger("heicsconv")


def read_container(path: Path) -> bytes:
    """Read an input container after checking its suffix."""
    accepted = DEFAULT_CONVERSION_CONFIG.ACCEPTED_SUFFIXES
    if path.suffix.lower() not in accepted:
        raise ValidationError(
            f"Unsupported input '{path.name}': expected a {' or '.join(accepted)} file",
            context={"path": str(path)},
        )
    if not path.is_file():
        raise ValidationError(f"Input file not found: {path}", context={"path": str(path)})
    return path.read_bytes()


def default_output_path(input_path: Path, extension: str) -> Path:
    """``sticker.heics`` → ``sticker.<extension>`` beside the input."""
    return input_path.with_suffix(f".{extension}")


def atomic_write_bytes(target_path: Path, data: bytes) -> None:
    """Write *data* to *target_path* via a temporary file and rename.

    A crash never leaves a truncated file at *target_path*.
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="wb",
        dir=target_path.parent,
        delete=False,
        suffix=f".tmp_{target_path.name}",
    ) as temp_file:
        try:
            temp_file.write(data)
            temp_file.flush()
        except BaseException:
            temp_file.close()
            os.unlink(temp_file.name)
            raise

    os.replace(temp_file.name, target_path)
