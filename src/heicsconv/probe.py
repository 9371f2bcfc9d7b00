"""Read back basic facts about a produced animation."""

from __future__ import annotations

import io
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from .error_handling import ValidationError

__all__ = ["OutputInfo", "inspect_output"]


@dataclass(frozen=True, slots=True)
class OutputInfo:
    format: str
    width: int
    height: int
    frame_count: int
    has_transparency: bool
    loop: int | None


def _has_transparency(img: Image.Image) -> bool:
    if img.mode in ("RGBA", "LA", "PA"):
        return True
    return "transparency" in img.info


def inspect_output(data: bytes) -> OutputInfo:
    """Describe encoded GIF/APNG/WebP *data* using Pillow.

    Raises:
        ValidationError: If Pillow cannot identify the data.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            return OutputInfo(
                format=img.format or "unknown",
                width=img.width,
                height=img.height,
                frame_count=getattr(img, "n_frames", 1),
                has_transparency=_has_transparency(img),
                loop=img.info.get("loop"),
            )
    except (UnidentifiedImageError, OSError) as e:
        raise ValidationError("Output is not a readable image", cause=e) from e
