"""Paced emission - batch sizing and writing one batch per timer tick.

A target rate is turned into a fixed batch size and a fixed tick interval
so that per-record scheduling is never needed::

    batch_size    = clamp(min(1000, rate), 1)
    tick_interval = batch_size / rate            (seconds, float division)

At ``rate=50000`` that is 1000 records every 20 ms; at ``rate=100`` it is
100 records once a second.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel

from sensor_gen.generator import ReadingSynthesizer
from sensor_gen.sinks.base import Sink
from sensor_gen.stats import RunStatistics

__all__ = ["MAX_BATCH_SIZE", "BatchEmitter", "BatchPlan"]

logger = logging.getLogger("sensor_gen.emitter")

MAX_BATCH_SIZE = 1000


class BatchPlan(BaseModel):
    """How many records to emit per tick and how often ticks fire."""

    model_config = {"frozen": True}

    rate: int
    batch_size: int
    tick_interval: float

    @classmethod
    def for_rate(cls, rate: int, max_batch_size: int = MAX_BATCH_SIZE) -> BatchPlan:
        if rate <= 0:
            raise ValueError(f"rate must be a positive number of records/sec, got {rate}")
        batch_size = max(1, min(max_batch_size, rate))
        return cls(rate=rate, batch_size=batch_size, tick_interval=batch_size / rate)


class BatchEmitter:
    """Synthesises, serialises and writes one batch at a time.

    Each record becomes one compact JSON line.  A record that fails to
    serialise is dropped and counted; it never aborts the batch.  Write
    and flush errors propagate to the caller.
    """

    def __init__(
        self,
        synthesizer: ReadingSynthesizer,
        sink: Sink,
        stats: RunStatistics,
        batch_size: int,
    ) -> None:
        self.synthesizer = synthesizer
        self.sink = sink
        self.stats = stats
        self.batch_size = batch_size

    async def emit(self) -> int:
        """Write one batch, flush it, and return how many records were written."""
        lines: list[bytes] = []
        for _ in range(self.batch_size):
            reading = self.synthesizer.synthesize()
            try:
                lines.append(reading.to_json().encode("utf-8") + b"\n")
            except (TypeError, ValueError) as exc:
                self.stats.dropped += 1
                logger.debug("Dropping unserialisable reading %s: %s", reading.sensor_id, exc)

        await self.sink.write(lines)
        # Flush every batch so the file is observable within one tick.
        await self.sink.flush()

        self.stats.total += len(lines)
        self.stats.bytes_written += sum(len(line) for line in lines)
        return len(lines)
