"""Value objects shared by the conversion core."""

from __future__ import annotations

from dataclasses import dataclass, field

from .formats import FormatDescriptor, OutputFormat

__all__ = [
    "HYPOTHESES",
    "NO_ALPHA",
    "ConversionAttempt",
    "ConversionRequest",
    "ConversionResult",
    "PreprocessOptions",
    "StreamHypothesis",
]


@dataclass(frozen=True, slots=True)
class PreprocessOptions:
    """Optional reductions applied before the format-specific stages."""

    constrain_to_128px: bool = False
    cap_frame_rate_10: bool = False

    @property
    def any_enabled(self) -> bool:
        return self.constrain_to_128px or self.cap_frame_rate_10


@dataclass(frozen=True, slots=True)
class StreamHypothesis:
    """Guess at which video sub-streams hold color and alpha.

    Both indices are ``None`` for the fallback that ignores transparency.
    """

    color: int | None
    alpha: int | None

    @property
    def merges_alpha(self) -> bool:
        return self.color is not None and self.alpha is not None

    @property
    def selector(self) -> str:
        """Filter-graph input pads, e.g. ``[0:v:2][0:v:3]``."""
        if not self.merges_alpha:
            return ""
        return f"[0:v:{self.color}][0:v:{self.alpha}]"

    def __str__(self) -> str:
        if not self.merges_alpha:
            return "no-alpha"
        return f"({self.color},{self.alpha})"


NO_ALPHA = StreamHypothesis(color=None, alpha=None)

# Authoring tools disagree on track order; most stickers put color/alpha on 2/3.
HYPOTHESES: tuple[StreamHypothesis, ...] = (
    StreamHypothesis(color=2, alpha=3),
    StreamHypothesis(color=0, alpha=1),
    NO_ALPHA,
)


@dataclass(frozen=True, slots=True)
class ConversionRequest:
    """Everything the caller chooses for one conversion."""

    format: OutputFormat = OutputFormat.GIF
    options: PreprocessOptions = field(default_factory=PreprocessOptions)


@dataclass(frozen=True, slots=True)
class ConversionAttempt:
    """One engine invocation and the exit status it reported."""

    hypothesis: StreamHypothesis
    arguments: tuple[str, ...]
    exit_code: int

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


@dataclass(slots=True)
class ConversionResult:
    """Outcome of a fallback run.

    ``data`` stays ``None`` until the session reads the output back; an
    exhausted run never gets any.
    """

    descriptor: FormatDescriptor
    attempts: list[ConversionAttempt] = field(default_factory=list)
    hypothesis: StreamHypothesis | None = None
    data: bytes | None = None

    @property
    def succeeded(self) -> bool:
        return self.hypothesis is not None
