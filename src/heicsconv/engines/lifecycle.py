"""Single-use lifetime management for engine instances."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from ..error_handling import EngineAcquisitionError, HeicsConvError, safe_operation
from .base import EngineFactory, FrameEngine

__all__ = ["EngineLifecycle"]

logger = logging.getLogger(__name__)


class EngineLifecycle:
    """Acquire one engine per session and discard it afterwards.

    Engines are never pooled or handed out twice; concurrent sessions are
    fine as long as each goes through :meth:`engine_session`.
    """

    def __init__(self, factory: EngineFactory) -> None:
        self.factory = factory

    def acquire(self) -> FrameEngine:
        try:
            engine = self.factory.acquire()
        except HeicsConvError as e:
            if isinstance(e, EngineAcquisitionError):
                raise
            raise EngineAcquisitionError(
                "Engine acquisition failed", cause=e, context=e.context
            ) from e
        except Exception as e:
            raise EngineAcquisitionError("Engine acquisition failed", cause=e) from e

        return engine

    def release(self, engine: FrameEngine) -> None:
        safe_operation(engine.close, "close engine instance", logger=logger)

    @contextmanager
    def engine_session(self) -> Iterator[FrameEngine]:
        """Yield a fresh engine and close it however the block exits."""
        engine = self.acquire()
        try:
            yield engine
        finally:
            self.release(engine)
