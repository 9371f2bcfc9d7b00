"""Catalog of supported animated output formats."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .error_handling import ValidationError

__all__ = [
    "FormatDescriptor",
    "OutputFormat",
    "describe",
    "parse_format",
]


class OutputFormat(Enum):
    """Animated raster formats that keep transparency."""

    GIF = "gif"
    APNG = "apng"
    WEBP = "webp"


@dataclass(frozen=True, slots=True)
class FormatDescriptor:
    """File-level attributes of an :class:`OutputFormat`."""

    extension: str
    mime_type: str
    label: str
    description: str


_CATALOG: dict[OutputFormat, FormatDescriptor] = {
    OutputFormat.GIF: FormatDescriptor("gif", "image/gif", "GIF", "256 colors, wide support"),
    OutputFormat.APNG: FormatDescriptor("png", "image/png", "APNG", "Lossless, full color"),
    OutputFormat.WEBP: FormatDescriptor("webp", "image/webp", "WebP", "Best compression"),
}


def describe(fmt: OutputFormat) -> FormatDescriptor:
    return _CATALOG[fmt]


def parse_format(name: str | OutputFormat) -> OutputFormat:
    """Return the :class:`OutputFormat` for *name* (case-insensitive)."""
    if isinstance(name, OutputFormat):
        return name
    try:
        return OutputFormat(name.strip().lower())
    except ValueError as e:
        choices = ", ".join(f.value for f in OutputFormat)
        raise ValidationError(
            f"Unknown output format '{name}' (expected one of: {choices})", cause=e
        ) from e
