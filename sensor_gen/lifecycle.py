"""Lifecycle controller - runs the paced emission loop until a deadline
or a stop request, then flushes and reports.

States::

    IDLE --run--> RUNNING --deadline / stop signal--> STOPPING --flush--> STOPPED

The loop waits on whichever comes first: the next tick of the rate timer
or the stop event (set by SIGINT/SIGTERM or :meth:`SensorGenerator.stop`).
A batch, once started, is written and flushed before the stop event is
looked at again, so partial batches never reach the output.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
import threading
from collections.abc import Callable
from enum import StrEnum

from sensor_gen.config import GeneratorConfig
from sensor_gen.emitter import BatchEmitter, BatchPlan
from sensor_gen.generator import ReadingSynthesizer
from sensor_gen.sinks.base import Sink
from sensor_gen.stats import FinalStats, RunStatistics

__all__ = ["LifecycleState", "SensorGenerator"]

logger = logging.getLogger("sensor_gen")

_STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)

# Tolerance for float drift between the tick schedule and the deadline.
_DEADLINE_SLACK = 1e-6


class LifecycleState(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


class SensorGenerator:
    """Drives a :class:`ReadingSynthesizer` into a :class:`Sink` at a target rate.

    Example::

        from sensor_gen import GeneratorConfig, SensorGenerator
        from sensor_gen.sinks import FileSink

        config = GeneratorConfig(rate=5000, duration_s=10, verbose=True)
        gen = SensorGenerator(config, FileSink("pipeline.jsonl"))
        final = gen.run()
        print(final.format_report())

    Parameters:
        config:
            Rate, optional duration, verbosity and seed for the run.
        sink:
            Destination for NDJSON lines.  Connected when the run starts.
        synthesizer:
            Record source; built from ``config.seed`` and
            ``config.anomaly_probability`` when omitted.
        handle_signals:
            Install SIGINT/SIGTERM handlers that request a graceful stop.
        on_start:
            Called once the sink is open, before the first tick.  The CLI
            prints its banner here so open errors are reported first.
    """

    def __init__(
        self,
        config: GeneratorConfig,
        sink: Sink,
        *,
        synthesizer: ReadingSynthesizer | None = None,
        handle_signals: bool = True,
        on_start: Callable[[], None] | None = None,
    ) -> None:
        self.config = config
        self.sink = sink
        self.synthesizer = synthesizer or ReadingSynthesizer(
            seed=config.seed,
            anomaly_probability=config.anomaly_probability,
        )
        self.plan = BatchPlan.for_rate(config.rate)
        self.stats: RunStatistics | None = None
        self._handle_signals = handle_signals
        self._on_start = on_start
        self._state = LifecycleState.IDLE
        self._loop: asyncio.AbstractEventLoop | None = None
        self._stop_event: asyncio.Event | None = None
        self._stop_requested = False

    @property
    def state(self) -> LifecycleState:
        return self._state

    # ------------------------------------------------------------------
    # Stop requests
    # ------------------------------------------------------------------

    def stop(self) -> None:
        """Request a graceful stop.  Safe to call from any thread."""
        self._stop_requested = True
        loop, event = self._loop, self._stop_event
        if loop is not None and event is not None and not loop.is_closed():
            loop.call_soon_threadsafe(event.set)

    def _on_signal(self, sig: signal.Signals) -> None:
        logger.info("Received %s - stopping", sig.name)
        if self._stop_event is not None:
            self._stop_event.set()

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self) -> FinalStats | None:
        """Blocking entry point - starts an event loop and returns final stats.

        Works inside environments that already have a running event loop
        (Jupyter, IPython) by running in a dedicated thread.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None and loop.is_running():
            result: list[FinalStats | None] = [None]
            exc: list[BaseException | None] = [None]

            def _target() -> None:
                try:
                    result[0] = asyncio.run(self.run_async())
                except KeyboardInterrupt:
                    logger.info("Interrupted by user")
                except BaseException as e:
                    exc[0] = e

            t = threading.Thread(target=_target, daemon=True)
            t.start()
            t.join()
            if exc[0] is not None:
                raise exc[0]
            return result[0]

        try:
            return asyncio.run(self.run_async())
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
            return None

    async def run_async(self) -> FinalStats:
        """Async entry point - runs inside an existing event loop."""
        if self._state is not LifecycleState.IDLE:
            raise RuntimeError(f"SensorGenerator cannot be run from state '{self._state}'")

        # Raises SinkUnavailableError before anything is generated.
        await self.sink.connect()
        if self._on_start is not None:
            self._on_start()

        loop = asyncio.get_running_loop()
        self._loop = loop
        self._stop_event = asyncio.Event()
        if self._stop_requested:
            self._stop_event.set()

        installed: list[signal.Signals] = []
        if self._handle_signals:
            # NotImplementedError: Windows.  RuntimeError/ValueError: not the main thread.
            for sig in _STOP_SIGNALS:
                with contextlib.suppress(NotImplementedError, RuntimeError, ValueError):
                    loop.add_signal_handler(sig, self._on_signal, sig)
                    installed.append(sig)

        plan = self.plan
        stats = self.stats = RunStatistics()
        emitter = BatchEmitter(self.synthesizer, self.sink, stats, plan.batch_size)
        duration_s = self.config.duration_s
        # Ticks fall at start + n * interval; one landing exactly on the deadline still emits.
        start = loop.time()
        deadline = start + duration_s if duration_s is not None else None
        tick = 1

        logger.info(
            "Starting generator -> %s: %d records/sec, batch %d every %.3fs, duration %s",
            self.sink.description,
            plan.rate,
            plan.batch_size,
            plan.tick_interval,
            f"{duration_s}s" if duration_s is not None else "unlimited",
        )
        self._state = LifecycleState.RUNNING

        try:
            while True:
                next_tick = start + tick * plan.tick_interval
                if deadline is not None and next_tick > deadline + _DEADLINE_SLACK:
                    # No tick left inside the duration; sit out the remainder.
                    await self._wait_until(deadline)
                    if self._stop_event.is_set():
                        logger.info("Stop signal received - shutting down")
                    else:
                        logger.info("Duration reached (%.1fs) - stopping", duration_s)
                    break

                await self._wait_until(next_tick)
                if self._stop_event.is_set():
                    logger.info("Stop signal received - shutting down")
                    break

                await emitter.emit()

                # Fixed-rate schedule; ticks missed by a slow batch are skipped.
                tick += 1
                now = loop.time()
                if start + tick * plan.tick_interval <= now:
                    upcoming = int((now - start) // plan.tick_interval) + 1
                    logger.debug("Batch overran its interval - skipped %d ticks", upcoming - tick)
                    tick = upcoming

                if self.config.verbose and stats.report_due(self.config.report_interval_s):
                    logger.info(
                        "  %d entries written (%.0f/sec avg)",
                        stats.total,
                        stats.average_rate(),
                    )
                    stats.mark_reported()
        except asyncio.CancelledError:
            logger.info("Generator cancelled")
        finally:
            self._state = LifecycleState.STOPPING
            for sig in installed:
                loop.remove_signal_handler(sig)
            try:
                await self.sink.flush()
            finally:
                await self.sink.close()

        final = FinalStats.from_run(stats, file_size=self.sink.size())
        self._state = LifecycleState.STOPPED
        logger.info(
            "Generator stopped: %d entries in %.3fs (%.0f/sec avg)",
            final.total,
            final.elapsed_s,
            final.average_rate,
        )
        return final

    async def _wait_until(self, when: float) -> None:
        """Block until *when* (loop time) or until a stop is requested."""
        assert self._stop_event is not None
        timeout = max(0.0, when - asyncio.get_running_loop().time())
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(self._stop_event.wait(), timeout=timeout)
