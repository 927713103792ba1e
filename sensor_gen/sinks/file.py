"""File sink - writes NDJSON lines to a single local file.

The file is opened either truncate-and-create (default) or append, behind
a 1 MiB write buffer.  The emission loop flushes after every batch so a
``tail -f`` of the file sees data within one tick.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

from sensor_gen.sinks.base import Sink, SinkUnavailableError

__all__ = ["BUFFER_SIZE", "FileSink"]

logger = logging.getLogger("sensor_gen.sinks.file")

BUFFER_SIZE = 1024 * 1024


class FileSink(Sink):
    """Write NDJSON lines to *path*.

    Parameters:
        path: Output file.  Its parent directory must already exist.
        append: Keep existing content and add after it instead of
                truncating.
        buffer_size: Size of the in-process write buffer in bytes.
    """

    def __init__(
        self,
        path: str | Path = "output.jsonl",
        *,
        append: bool = False,
        buffer_size: int = BUFFER_SIZE,
    ) -> None:
        self._path = Path(path)
        self._append = append
        self._buffer_size = buffer_size
        self._file: io.BufferedWriter | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def append(self) -> bool:
        return self._append

    @property
    def description(self) -> str:
        return str(self._path)

    async def connect(self) -> None:
        mode = "ab" if self._append else "wb"
        try:
            self._file = open(self._path, mode, buffering=self._buffer_size)  # noqa: SIM115
        except OSError as err:
            verb = "opening" if self._append else "creating"
            raise SinkUnavailableError(f"Error {verb} file {self._path}: {err}") from err
        logger.info(
            "FileSink %s %s",
            "appending to" if self._append else "writing",
            self._path,
        )

    async def write(self, lines: list[bytes]) -> None:
        if self._file is None or self._file.closed:
            raise RuntimeError("FileSink is not connected")
        self._file.writelines(lines)

    async def flush(self) -> None:
        if self._file and not self._file.closed:
            self._file.flush()

    async def close(self) -> None:
        if self._file and not self._file.closed:
            self._file.close()
            logger.debug("Closed file: %s", self._path)
        self._file = None

    def size(self) -> int | None:
        try:
            return self._path.stat().st_size
        except OSError:
            return None
