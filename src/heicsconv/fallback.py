"""Ordered stream-hypothesis fallback.

Containers written by different tools put the color and alpha tracks at
different sub-stream indices, and nothing in the file says which layout is
used. Each known layout is tried in priority order; a failing engine exit
status only means "wrong guess" and moves on to the next one.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from .engines.base import FrameEngine
from .filter_graph import ArgumentBuilder, build_arguments, build_frame_export_arguments
from .formats import describe
from .models import (
    HYPOTHESES,
    ConversionAttempt,
    ConversionRequest,
    ConversionResult,
    StreamHypothesis,
)

__all__ = ["FallbackStrategy"]

logger = logging.getLogger(__name__)


class FallbackStrategy:
    """Run one attempt per hypothesis until the engine reports success."""

    def __init__(
        self,
        hypotheses: Sequence[StreamHypothesis] = HYPOTHESES,
        builder: ArgumentBuilder = build_arguments,
    ) -> None:
        if not hypotheses:
            raise ValueError("At least one stream hypothesis is required")
        self.hypotheses = tuple(hypotheses)
        self.builder = builder

    def _run_until_success(
        self,
        engine: FrameEngine,
        make_args: Callable[[StreamHypothesis], list[str]],
        before_attempt: Callable[[], None] | None = None,
    ) -> tuple[StreamHypothesis | None, list[ConversionAttempt]]:
        attempts: list[ConversionAttempt] = []

        for hypothesis in self.hypotheses:
            if before_attempt is not None:
                before_attempt()
            arguments = make_args(hypothesis)
            logger.debug("Trying stream hypothesis %s: %s", hypothesis, " ".join(arguments))

            exit_code = engine.run(arguments)
            attempts.append(ConversionAttempt(hypothesis, tuple(arguments), exit_code))

            if exit_code == 0:
                logger.info(
                    "Stream hypothesis %s succeeded (attempt %d)", hypothesis, len(attempts)
                )
                return hypothesis, attempts

            logger.info("Stream hypothesis %s failed (exit %s)", hypothesis, exit_code)

        return None, attempts

    def execute(
        self,
        engine: FrameEngine,
        input_name: str,
        output_name: str,
        request: ConversionRequest,
    ) -> ConversionResult:
        """Convert the already-staged *input_name* into *output_name*.

        Returns a result whose ``succeeded`` is False once every hypothesis
        has failed; output bytes are never read here.
        """
        hypothesis, attempts = self._run_until_success(
            engine,
            lambda h: self.builder(request.format, h, request.options, input_name, output_name),
        )
        return ConversionResult(
            descriptor=describe(request.format),
            attempts=attempts,
            hypothesis=hypothesis,
        )

    def execute_frames(
        self,
        engine: FrameEngine,
        input_name: str,
        frame_pattern: str,
        discard_partial: Callable[[], None] | None = None,
    ) -> tuple[StreamHypothesis | None, list[ConversionAttempt]]:
        """Same loop, but each attempt dumps RGBA PNG frames.

        *discard_partial* runs before every attempt so frames left behind by
        a failed guess never mix with the next one.
        """
        return self._run_until_success(
            engine,
            lambda h: build_frame_export_arguments(h, input_name, frame_pattern),
            before_attempt=discard_partial,
        )
