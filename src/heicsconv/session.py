"""End-to-end conversion sessions.

A session owns exactly one engine instance for the duration of one request:

    IDLE → ACQUIRING → STAGING → CONVERTING → FINALIZING → SUCCEEDED
                 ↘          ↘           ↘            ↘
                                 FAILED

Terminal states fall back to IDLE when the next request starts, and that
request gets a brand-new engine. Staged entries still present in engine
storage are removed on every exit path; a failed removal is logged and never
changes the result.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from enum import Enum
from typing import TypeVar

from .config import DEFAULT_CONVERSION_CONFIG, ConversionConfig
from .engines.base import EngineFactory, FrameEngine
from .engines.ffmpeg import FFmpegEngineFactory
from .engines.lifecycle import EngineLifecycle
from .error_handling import (
    ConversionExhaustedError,
    EngineError,
    InvalidStateTransitionError,
    error_context,
    log_info_with_context,
    safe_operation,
)
from .fallback import FallbackStrategy
from .formats import OutputFormat, describe, parse_format
from .models import ConversionRequest, ConversionResult, PreprocessOptions

__all__ = [
    "ConversionSession",
    "ProgressCallback",
    "SessionState",
    "convert",
]

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]
T = TypeVar("T")


class SessionState(str, Enum):
    IDLE = "idle"
    ACQUIRING = "acquiring"
    STAGING = "staging"
    CONVERTING = "converting"
    FINALIZING = "finalizing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TERMINAL_STATES = frozenset({SessionState.SUCCEEDED, SessionState.FAILED})

_TRANSITIONS: dict[SessionState, frozenset[SessionState]] = {
    SessionState.IDLE: frozenset({SessionState.ACQUIRING}),
    SessionState.ACQUIRING: frozenset({SessionState.STAGING, SessionState.FAILED}),
    SessionState.STAGING: frozenset({SessionState.CONVERTING, SessionState.FAILED}),
    SessionState.CONVERTING: frozenset({SessionState.FINALIZING, SessionState.FAILED}),
    SessionState.FINALIZING: frozenset({SessionState.SUCCEEDED, SessionState.FAILED}),
    SessionState.SUCCEEDED: frozenset({SessionState.IDLE}),
    SessionState.FAILED: frozenset({SessionState.IDLE}),
}


def _frame_name_regex(pattern: str) -> re.Pattern[str]:
    """Turn an image2 pattern such as ``frame_%03d.png`` into a matcher."""
    head, sep, tail = pattern.partition("%")
    if not sep:
        return re.compile(re.escape(pattern))
    tail = re.sub(r"^\d*d", "", tail)
    return re.compile(rf"{re.escape(head)}(\d+){re.escape(tail)}")


class ConversionSession:
    """Drive one conversion at a time against a fresh engine.

    Args:
        factory: Source of engine instances (FFmpeg by default).
        strategy: Hypothesis loop to run (default priority order).
        config: Logical names and pre-processing constants.
        on_progress: Optional ``(percent, label)`` callback.
    """

    def __init__(
        self,
        factory: EngineFactory | None = None,
        strategy: FallbackStrategy | None = None,
        config: ConversionConfig | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.lifecycle = EngineLifecycle(factory or FFmpegEngineFactory())
        self.strategy = strategy or FallbackStrategy()
        self.config = config or DEFAULT_CONVERSION_CONFIG
        self.on_progress = on_progress
        self.state = SessionState.IDLE
        self.history: list[SessionState] = [SessionState.IDLE]

    # ------------------------------------------------------------------
    # State handling
    # ------------------------------------------------------------------

    def _transition(self, target: SessionState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidStateTransitionError(self.state.value, target.value)
        logger.debug("Session %s -> %s", self.state.value, target.value)
        self.state = target
        self.history.append(target)

    def _begin(self) -> None:
        if self.state in TERMINAL_STATES:
            self._transition(SessionState.IDLE)
        if self.state is not SessionState.IDLE:
            raise InvalidStateTransitionError(self.state.value, SessionState.ACQUIRING.value)
        self.history = [SessionState.IDLE]
        self._transition(SessionState.ACQUIRING)

    def _report(self, percent: int, label: str) -> None:
        if self.on_progress is not None:
            self.on_progress(percent, label)

    def _cleanup(self, engine: FrameEngine, names: Iterable[str]) -> None:
        for name in names:
            safe_operation(
                lambda name=name: engine.remove(name),
                f"remove staged entry '{name}'",
                logger=logger,
            )

    def _discard_staged(
        self, engine: FrameEngine, cleanup_names: Callable[[FrameEngine], list[str]]
    ) -> None:
        names = safe_operation(
            lambda: cleanup_names(engine), "list staged entries", default_return=[], logger=logger
        )
        candidates = [self.config.INPUT_NAME, *names]
        present = safe_operation(
            lambda: set(engine.list_names()), "list engine storage", logger=logger
        )
        if present is not None:
            candidates = [name for name in candidates if name in present]
        self._cleanup(engine, candidates)

    def _run(
        self,
        input_bytes: bytes,
        work: Callable[[FrameEngine], T],
        cleanup_names: Callable[[FrameEngine], list[str]],
    ) -> T:
        self._begin()
        try:
            with self.lifecycle.engine_session() as engine:
                try:
                    self._transition(SessionState.STAGING)
                    self._report(10, "Loading file...")
                    with error_context(
                        "stage input container",
                        EngineError,
                        context={"name": self.config.INPUT_NAME, "bytes": len(input_bytes)},
                        logger=logger,
                    ):
                        engine.stage(self.config.INPUT_NAME, input_bytes)

                    return work(engine)
                finally:
                    self._discard_staged(engine, cleanup_names)
        except BaseException:
            if self.state not in TERMINAL_STATES:
                self._transition(SessionState.FAILED)
            raise

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def convert(
        self, input_bytes: bytes, request: ConversionRequest | None = None
    ) -> ConversionResult:
        """Convert *input_bytes* and return a result carrying the output bytes.

        Raises:
            EngineAcquisitionError: No engine instance could be obtained.
            ConversionExhaustedError: Every stream hypothesis failed.
        """
        request = request or ConversionRequest()
        descriptor = describe(request.format)
        output_name = self.config.output_name(descriptor.extension)

        def work(engine: FrameEngine) -> ConversionResult:
            self._transition(SessionState.CONVERTING)
            self._report(30, "Converting...")
            result = self.strategy.execute(
                engine, self.config.INPUT_NAME, output_name, request
            )
            self._report(80, "Converting...")

            if not result.succeeded:
                self._transition(SessionState.FAILED)
                raise ConversionExhaustedError(
                    f"Conversion to {descriptor.label} failed for every stream layout",
                    attempts=result.attempts,
                    context={"format": request.format.value, "attempts": len(result.attempts)},
                )

            self._transition(SessionState.FINALIZING)
            self._report(80, "Finalizing...")
            result.data = engine.retrieve(output_name)
            self._transition(SessionState.SUCCEEDED)
            self._report(100, "Done")

            log_info_with_context(
                f"Converted to {descriptor.label}",
                context={
                    "hypothesis": str(result.hypothesis),
                    "attempts": len(result.attempts),
                    "bytes": len(result.data),
                },
                logger=logger,
            )
            return result

        return self._run(input_bytes, work, lambda engine: [output_name])

    def export_frames(self, input_bytes: bytes) -> list[tuple[str, bytes]]:
        """Dump every frame of the container as an RGBA PNG.

        Returns ``(name, png_bytes)`` pairs in frame order.

        Raises:
            EngineAcquisitionError: No engine instance could be obtained.
            ConversionExhaustedError: Every stream hypothesis failed.
        """
        pattern = self.config.FRAME_PATTERN
        matcher = _frame_name_regex(pattern)

        def frame_names(engine: FrameEngine) -> list[str]:
            matches = [(matcher.fullmatch(n), n) for n in engine.list_names()]
            found = [(int(m.group(1)) if m.groups() else 0, n) for m, n in matches if m]
            return [n for _, n in sorted(found)]

        def discard_partial(engine: FrameEngine) -> None:
            self._cleanup(engine, frame_names(engine))

        def work(engine: FrameEngine) -> list[tuple[str, bytes]]:
            self._transition(SessionState.CONVERTING)
            self._report(30, "Extracting frames...")
            hypothesis, attempts = self.strategy.execute_frames(
                engine,
                self.config.INPUT_NAME,
                pattern,
                discard_partial=lambda: discard_partial(engine),
            )
            self._report(80, "Extracting frames...")

            if hypothesis is None:
                self._transition(SessionState.FAILED)
                raise ConversionExhaustedError(
                    "Frame export failed for every stream layout",
                    attempts=attempts,
                    context={"attempts": len(attempts)},
                )

            self._transition(SessionState.FINALIZING)
            self._report(80, "Finalizing...")
            frames = [(name, engine.retrieve(name)) for name in frame_names(engine)]
            self._transition(SessionState.SUCCEEDED)
            self._report(100, "Done")
            logger.info("Exported %d frames using stream hypothesis %s", len(frames), hypothesis)
            return frames

        return self._run(input_bytes, work, frame_names)


def convert(
    input_bytes: bytes,
    fmt: OutputFormat | str = OutputFormat.GIF,
    options: PreprocessOptions | None = None,
    *,
    factory: EngineFactory | None = None,
    on_progress: ProgressCallback | None = None,
) -> ConversionResult:
    """One-shot conversion with a throwaway session."""
    request = ConversionRequest(
        format=parse_format(fmt), options=options or PreprocessOptions()
    )
    session = ConversionSession(factory=factory, on_progress=on_progress)
    return session.convert(input_bytes, request)
