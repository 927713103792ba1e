"""Run statistics - cumulative counters and the final report."""

from __future__ import annotations

import time

from pydantic import BaseModel

__all__ = ["FinalStats", "RunStatistics"]

_MIB = 1024 * 1024


class RunStatistics:
    """Mutable counters for one run.

    Only the emission path mutates these, so no locking is needed.
    Times are ``time.monotonic()`` values.
    """

    def __init__(self, started_at: float | None = None) -> None:
        self.started_at = time.monotonic() if started_at is None else started_at
        self.last_report_at = self.started_at
        self.total = 0
        self.dropped = 0
        self.bytes_written = 0

    def elapsed(self, now: float | None = None) -> float:
        return (time.monotonic() if now is None else now) - self.started_at

    def average_rate(self, now: float | None = None) -> float:
        elapsed = self.elapsed(now)
        return self.total / elapsed if elapsed > 0 else 0.0

    def report_due(self, interval_s: float, now: float | None = None) -> bool:
        now = time.monotonic() if now is None else now
        return now - self.last_report_at >= interval_s

    def mark_reported(self, now: float | None = None) -> None:
        self.last_report_at = time.monotonic() if now is None else now


class FinalStats(BaseModel):
    """Summary reported once the run has stopped.

    Attributes:
        total: Records written.
        dropped: Records skipped because they could not be serialised.
        elapsed_s: Wall time from start to stop.
        average_rate: ``total / elapsed_s`` (0 when no time elapsed).
        file_size: Size of the output file in bytes, ``None`` for streams.
        avg_record_bytes: Bytes written this run per record (0 when empty).
    """

    model_config = {"frozen": True}

    total: int
    dropped: int = 0
    elapsed_s: float
    average_rate: float
    file_size: int | None = None
    avg_record_bytes: float

    @classmethod
    def from_run(
        cls,
        stats: RunStatistics,
        *,
        file_size: int | None = None,
        now: float | None = None,
    ) -> FinalStats:
        elapsed = stats.elapsed(now)
        return cls(
            total=stats.total,
            dropped=stats.dropped,
            elapsed_s=elapsed,
            average_rate=stats.total / elapsed if elapsed > 0 else 0.0,
            file_size=file_size,
            avg_record_bytes=stats.bytes_written / stats.total if stats.total else 0.0,
        )

    def format_report(self) -> str:
        """Render the multi-line block printed when the run ends."""
        lines = [
            "",
            "--- Final Stats ---",
            f"Total entries: {self.total}",
            f"Duration: {self.elapsed_s:.3f}s",
            f"Average rate: {self.average_rate:.0f} entries/sec",
        ]
        if self.file_size is not None:
            lines.append(f"File size: {self.file_size / _MIB:.2f} MB")
        lines.append(f"Avg entry size: {self.avg_record_bytes:.0f} bytes")
        if self.dropped:
            lines.append(f"Dropped entries: {self.dropped}")
        return "\n".join(lines)
