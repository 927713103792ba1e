"""Console sink - streams NDJSON lines to stdout (or any text stream).

Useful for piping records straight into another process::

    sensor-gen -o - --rate 100 | jq .value
"""

from __future__ import annotations

import sys
from typing import IO

from sensor_gen.sinks.base import Sink, SinkUnavailableError

__all__ = ["ConsoleSink"]


class ConsoleSink(Sink):
    """Writes NDJSON lines to a text stream (``sys.stdout`` by default).

    Parameters:
        stream: Writable text file-like object.  The sink does not own it
                and never closes it.
    """

    def __init__(self, *, stream: IO[str] | None = None) -> None:
        self._stream = stream or sys.stdout

    @property
    def description(self) -> str:
        return getattr(self._stream, "name", "<stream>")

    async def connect(self) -> None:
        try:
            writable = self._stream.writable()
        except (OSError, ValueError) as err:
            raise SinkUnavailableError(f"Output stream is unavailable: {err}") from err
        if not writable:
            raise SinkUnavailableError("Output stream is not writable")

    async def write(self, lines: list[bytes]) -> None:
        for line in lines:
            self._stream.write(line.decode("utf-8"))

    async def flush(self) -> None:
        self._stream.flush()

    async def close(self) -> None:
        """Flush only - we do not own the stream."""
        if not self._stream.closed:
            self._stream.flush()
