"""Sink abstraction for NDJSON output.

Provides:
- ``Sink``                 - abstract base class every concrete sink implements.
- ``SinkUnavailableError`` - raised by ``connect`` when output cannot be written.

A sink receives already-serialised, newline-terminated lines; it owns
buffering and durability, never serialisation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

__all__ = ["Sink", "SinkUnavailableError"]


class SinkUnavailableError(RuntimeError):
    """The output destination cannot be opened or written to."""


class Sink(ABC):
    """Abstract base class for all sinks.

    Concrete sinks must implement ``connect``, ``write``, ``flush`` and
    ``close``.
    """

    @property
    def description(self) -> str:
        """Human-readable destination, used in log and banner lines."""
        return type(self).__name__

    @abstractmethod
    async def connect(self) -> None:
        """Open resources.  Raises :class:`SinkUnavailableError` on failure."""

    @abstractmethod
    async def write(self, lines: list[bytes]) -> None:
        """Append newline-terminated *lines* to the sink's buffer."""

    @abstractmethod
    async def flush(self) -> None:
        """Push buffered bytes to the underlying destination."""

    @abstractmethod
    async def close(self) -> None:
        """Release resources.  Must be safe to call more than once."""

    def size(self) -> int | None:
        """Total size of the destination in bytes, or ``None`` if unknown."""
        return None
