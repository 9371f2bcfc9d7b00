"""Filter-graph and encoder argument construction for FFmpeg.

Everything here is pure: identical inputs always give identical argument
lists and nothing touches an engine.

Two shapes of command are produced:

* **alpha path**: the selected color/alpha sub-streams are combined with
  ``alphamerge`` inside ``-filter_complex``, pre-filters are inlined after the
  merge (scale, then fps) and the format's tail stages follow;
* **plain path**: used by the no-alpha hypothesis; pre-filters run as a
  ``-vf`` chain (fps, then scale) followed by the format's plain tail.

The two pre-filter orders differ and each path keeps its own.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .config import DEFAULT_CONVERSION_CONFIG
from .formats import OutputFormat
from .models import PreprocessOptions, StreamHypothesis

__all__ = [
    "ArgumentBuilder",
    "FORMAT_TAILS",
    "FormatTail",
    "build_arguments",
    "build_frame_export_arguments",
    "prefilter_clauses",
]

ArgumentBuilder = Callable[
    [OutputFormat, StreamHypothesis, PreprocessOptions, str, str], list[str]
]


@dataclass(frozen=True, slots=True)
class FormatTail:
    """Format-specific stages appended after the shared part of a graph."""

    alpha_stages: str | None
    plain_stages: str | None
    alpha_args: tuple[str, ...]
    plain_args: tuple[str, ...]


_APNG_ARGS = ("-f", "apng", "-plays", "0")
_WEBP_ARGS = ("-c:v", "libwebp", "-lossless", "1", "-loop", "0")

FORMAT_TAILS: dict[OutputFormat, FormatTail] = {
    OutputFormat.GIF: FormatTail(
        alpha_stages=(
            "split[s0][s1];"
            "[s0]palettegen=reserve_transparent=1[p];"
            "[s1][p]paletteuse=dither=none"
        ),
        plain_stages="split[s0][s1];[s0]palettegen[p];[s1][p]paletteuse",
        alpha_args=("-gifflags", "+transdiff"),
        plain_args=(),
    ),
    OutputFormat.APNG: FormatTail(
        alpha_stages=None,
        plain_stages=None,
        alpha_args=_APNG_ARGS,
        plain_args=_APNG_ARGS,
    ),
    OutputFormat.WEBP: FormatTail(
        alpha_stages=None,
        plain_stages=None,
        alpha_args=_WEBP_ARGS,
        plain_args=_WEBP_ARGS,
    ),
}


def _scale_clause(max_dimension: int) -> str:
    # Bounds the longer side without ever upscaling.
    return (
        f"scale='min({max_dimension},iw)':'min({max_dimension},ih)'"
        ":force_original_aspect_ratio=decrease"
    )


def _fps_clause(fps: int) -> str:
    return f"fps={fps}"


def prefilter_clauses(options: PreprocessOptions, *, merged: bool) -> list[str]:
    """Return the pre-filter clauses for *options* in path-specific order.

    ``merged=True`` gives the order used after an alpha merge (scale, fps);
    ``merged=False`` the order of the plain chain (fps, scale). No options
    means an empty list, never an empty clause.
    """
    if not options.any_enabled:
        return []

    cfg = DEFAULT_CONVERSION_CONFIG
    scale = _scale_clause(cfg.MAX_DIMENSION) if options.constrain_to_128px else None
    fps = _fps_clause(cfg.CAPPED_FPS) if options.cap_frame_rate_10 else None

    ordered = [scale, fps] if merged else [fps, scale]
    return [clause for clause in ordered if clause]


def _alpha_graph(
    hypothesis: StreamHypothesis, options: PreprocessOptions, tail: FormatTail
) -> str:
    stages = [f"{hypothesis.selector}alphamerge"]
    stages.extend(prefilter_clauses(options, merged=True))
    if tail.alpha_stages:
        stages.append(tail.alpha_stages)
    return ",".join(stages)


def _plain_chain(options: PreprocessOptions, tail: FormatTail) -> str | None:
    stages = prefilter_clauses(options, merged=False)
    if tail.plain_stages:
        stages.append(tail.plain_stages)
    return ",".join(stages) if stages else None


def build_arguments(
    fmt: OutputFormat,
    hypothesis: StreamHypothesis,
    options: PreprocessOptions,
    input_name: str,
    output_name: str,
) -> list[str]:
    """Build the full engine argument list for one conversion attempt.

    The binary name is not included; engines prepend it themselves.
    """
    tail = FORMAT_TAILS[fmt]
    args = ["-i", input_name]

    if hypothesis.merges_alpha:
        args.extend(["-filter_complex", _alpha_graph(hypothesis, options, tail)])
        args.extend(tail.alpha_args)
    else:
        chain = _plain_chain(options, tail)
        if chain is not None:
            args.extend(["-vf", chain])
        args.extend(tail.plain_args)

    args.extend(["-y", output_name])
    return args


def build_frame_export_arguments(
    hypothesis: StreamHypothesis,
    input_name: str,
    frame_pattern: str | None = None,
) -> list[str]:
    """Arguments that dump every frame as an RGBA PNG numbered from zero."""
    pattern = frame_pattern or DEFAULT_CONVERSION_CONFIG.FRAME_PATTERN
    if hypothesis.merges_alpha:
        graph = ["-filter_complex", f"{hypothesis.selector}alphamerge,format=rgba"]
    else:
        graph = ["-vf", "format=rgba"]

    return ["-i", input_name, *graph, "-start_number", "0", "-y", pattern]

