"""Protocols for the external frame-processing engine.

The conversion core only ever talks to these two interfaces, so tests can
drive it with an in-memory stub and production code with FFmpeg.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

__all__ = ["EngineFactory", "FrameEngine"]


@runtime_checkable
class FrameEngine(Protocol):
    """A single-use engine instance with its own addressable storage.

    An instance must not be shared between sessions: stream-index bookkeeping
    can leak from one invocation into the next.
    """

    def stage(self, name: str, data: bytes) -> None:
        """Write *data* into storage under *name*."""
        ...

    def run(self, arguments: list[str]) -> int:
        """Execute one command and block until it exits; 0 means success."""
        ...

    def retrieve(self, name: str) -> bytes:
        """Read *name* back out of storage; raise EngineError if missing."""
        ...

    def remove(self, name: str) -> None:
        ...

    def list_names(self) -> list[str]:
        ...

    def close(self) -> None:
        """Release the instance; it must not be used afterwards."""
        ...


@runtime_checkable
class EngineFactory(Protocol):
    """Produces a fresh :class:`FrameEngine` for every session."""

    def acquire(self) -> FrameEngine:
        ...
