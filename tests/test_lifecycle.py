"""Tests for sensor_gen.lifecycle - SensorGenerator run, stop and reporting."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import signal
import sys
from pathlib import Path

import pytest

from sensor_gen.config import GeneratorConfig
from sensor_gen.lifecycle import LifecycleState, SensorGenerator
from sensor_gen.sinks.base import Sink, SinkUnavailableError
from sensor_gen.sinks.file import FileSink

# -----------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------


def _read_lines(path: Path) -> list[dict]:
    raw = path.read_bytes()
    assert raw == b"" or raw.endswith(b"\n"), "file ends with a partial line"
    return [json.loads(line) for line in raw.splitlines()]


class _FailingFlushSink(Sink):
    def __init__(self) -> None:
        self.closed = False

    async def connect(self) -> None:
        pass

    async def write(self, lines: list[bytes]) -> None:
        pass

    async def flush(self) -> None:
        raise OSError("disk full")

    async def close(self) -> None:
        self.closed = True


# -----------------------------------------------------------------------
# Duration-bounded runs
# -----------------------------------------------------------------------


class TestDurationRuns:
    """Runs that end when the deadline passes."""

    @pytest.mark.asyncio
    async def test_count_converges_to_rate_times_duration(self, tmp_path: Path) -> None:
        path = tmp_path / "out.jsonl"
        config = GeneratorConfig(rate=2000, duration_s=1.0, seed=1)
        gen = SensorGenerator(config, FileSink(path), handle_signals=False)
        final = await gen.run_async()

        assert abs(final.total - 2000) <= gen.plan.batch_size
        assert final.total % gen.plan.batch_size == 0
        assert len(_read_lines(path)) == final.total
        assert gen.state is LifecycleState.STOPPED

    @pytest.mark.asyncio
    async def test_rate_100_one_second(self, tmp_path: Path) -> None:
        path = tmp_path / "out.jsonl"
        config = GeneratorConfig(rate=100, duration_s=1.0)
        gen = SensorGenerator(config, FileSink(path), handle_signals=False)
        loop = asyncio.get_running_loop()
        started = loop.time()
        final = await gen.run_async()

        assert gen.plan.batch_size == 100
        assert final.total == 100
        assert len(_read_lines(path)) == 100
        assert loop.time() - started < 1.5

    @pytest.mark.asyncio
    async def test_tick_on_deadline_is_emitted(self, tmp_path: Path) -> None:
        path = tmp_path / "out.jsonl"
        config = GeneratorConfig(rate=10, duration_s=1.0)
        final = await SensorGenerator(config, FileSink(path), handle_signals=False).run_async()

        assert final.total == 10
        assert len(_read_lines(path)) == 10

    @pytest.mark.asyncio
    async def test_duration_shorter_than_one_tick(self, tmp_path: Path) -> None:
        path = tmp_path / "out.jsonl"
        config = GeneratorConfig(rate=10, duration_s=0.3)
        loop = asyncio.get_running_loop()
        started = loop.time()
        final = await SensorGenerator(config, FileSink(path), handle_signals=False).run_async()

        assert final.total == 0
        assert path.read_bytes() == b""
        assert 0.2 <= loop.time() - started < 0.9

    @pytest.mark.asyncio
    async def test_rate_50000_two_seconds(self, tmp_path: Path) -> None:
        path = tmp_path / "out.jsonl"
        config = GeneratorConfig(rate=50_000, duration_s=2.0, seed=3)
        gen = SensorGenerator(config, FileSink(path), handle_signals=False)
        final = await gen.run_async()

        assert gen.plan.batch_size == 1000
        assert gen.plan.tick_interval == pytest.approx(0.02)
        assert abs(final.total - 100_000) <= 1000
        assert len(_read_lines(path)) == final.total

    @pytest.mark.asyncio
    async def test_final_stats_figures(self, tmp_path: Path) -> None:
        path = tmp_path / "out.jsonl"
        config = GeneratorConfig(rate=4000, duration_s=0.6, seed=2)
        final = await SensorGenerator(config, FileSink(path), handle_signals=False).run_async()

        assert final.total > 0
        assert 0.5 <= final.elapsed_s < 1.0
        assert final.average_rate == pytest.approx(final.total / final.elapsed_s)
        assert final.file_size == path.stat().st_size
        assert final.avg_record_bytes == pytest.approx(final.file_size / final.total)
        assert final.dropped == 0

    def test_sync_run(self, tmp_path: Path) -> None:
        path = tmp_path / "out.jsonl"
        config = GeneratorConfig(rate=4000, duration_s=0.3)
        final = SensorGenerator(config, FileSink(path)).run()
        assert final is not None
        assert len(_read_lines(path)) == final.total


# -----------------------------------------------------------------------
# Stop requests
# -----------------------------------------------------------------------


class TestStop:
    """External stop: programmatic and OS signals."""

    @pytest.mark.asyncio
    async def test_stop_mid_run(self, tmp_path: Path) -> None:
        path = tmp_path / "out.jsonl"
        config = GeneratorConfig(rate=4000)  # no duration - runs until stopped
        gen = SensorGenerator(config, FileSink(path), handle_signals=False)

        asyncio.get_running_loop().call_later(0.6, gen.stop)
        final = await gen.run_async()

        lines = _read_lines(path)
        assert final.total > 0
        assert final.total == len(lines)
        assert final.total % gen.plan.batch_size == 0
        assert gen.state is LifecycleState.STOPPED

    @pytest.mark.asyncio
    async def test_stop_is_prompt(self, tmp_path: Path) -> None:
        """A stop arriving between ticks is not delayed until the next tick."""
        config = GeneratorConfig(rate=10)  # batch 10, one tick per second
        gen = SensorGenerator(config, FileSink(tmp_path / "out.jsonl"), handle_signals=False)

        loop = asyncio.get_running_loop()
        loop.call_later(0.1, gen.stop)
        started = loop.time()
        final = await gen.run_async()

        assert loop.time() - started < 0.9
        assert final.total == 0

    @pytest.mark.asyncio
    async def test_stop_before_run(self, tmp_path: Path) -> None:
        path = tmp_path / "out.jsonl"
        gen = SensorGenerator(GeneratorConfig(rate=1000), FileSink(path), handle_signals=False)
        gen.stop()
        final = await gen.run_async()
        assert final.total == 0
        assert path.read_bytes() == b""

    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.platform == "win32", reason="loop signal handlers need POSIX")
    async def test_sigterm_is_graceful(self, tmp_path: Path) -> None:
        path = tmp_path / "out.jsonl"
        gen = SensorGenerator(GeneratorConfig(rate=4000), FileSink(path))

        asyncio.get_running_loop().call_later(0.6, os.kill, os.getpid(), signal.SIGTERM)
        final = await gen.run_async()

        assert final.total == len(_read_lines(path))
        assert gen.state is LifecycleState.STOPPED

    @pytest.mark.asyncio
    async def test_cannot_run_twice(self, tmp_path: Path) -> None:
        gen = SensorGenerator(GeneratorConfig(rate=1000), FileSink(tmp_path / "o.jsonl"), handle_signals=False)
        gen.stop()
        await gen.run_async()
        with pytest.raises(RuntimeError):
            await gen.run_async()


# -----------------------------------------------------------------------
# Errors
# -----------------------------------------------------------------------


class TestErrors:
    """Fatal conditions surface to the caller."""

    @pytest.mark.asyncio
    async def test_unavailable_sink_fails_before_generation(self, tmp_path: Path) -> None:
        started: list[bool] = []
        sink = FileSink(tmp_path / "missing" / "out.jsonl")
        gen = SensorGenerator(
            GeneratorConfig(rate=1000, duration_s=0.5),
            sink,
            handle_signals=False,
            on_start=lambda: started.append(True),
        )
        with pytest.raises(SinkUnavailableError):
            await gen.run_async()
        assert started == []
        assert gen.state is LifecycleState.IDLE
        assert gen.stats is None

    @pytest.mark.asyncio
    async def test_flush_failure_is_fatal_and_closes_sink(self) -> None:
        sink = _FailingFlushSink()
        gen = SensorGenerator(GeneratorConfig(rate=1000, duration_s=2.0), sink, handle_signals=False)
        with pytest.raises(OSError):
            await gen.run_async()
        assert sink.closed


# -----------------------------------------------------------------------
# Output modes and progress reporting
# -----------------------------------------------------------------------


class TestOutput:
    """Append mode and verbose progress."""

    @pytest.mark.asyncio
    async def test_append_preserves_existing(self, tmp_path: Path) -> None:
        path = tmp_path / "out.jsonl"
        prefix = b'{"previous":"run"}\n'
        path.write_bytes(prefix)

        config = GeneratorConfig(rate=2000, duration_s=0.6, append=True)
        final = await SensorGenerator(config, FileSink(path, append=True), handle_signals=False).run_async()

        raw = path.read_bytes()
        assert raw.startswith(prefix)
        assert len(raw[len(prefix):].splitlines()) == final.total

    @pytest.mark.asyncio
    async def test_overwrite_discards_existing(self, tmp_path: Path) -> None:
        path = tmp_path / "out.jsonl"
        path.write_bytes(b'{"previous":"run"}\n')

        config = GeneratorConfig(rate=2000, duration_s=0.6)
        final = await SensorGenerator(config, FileSink(path), handle_signals=False).run_async()

        lines = _read_lines(path)
        assert len(lines) == final.total
        assert all("previous" not in line for line in lines)

    @pytest.mark.asyncio
    async def test_verbose_progress(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger="sensor_gen")
        config = GeneratorConfig(rate=4000, duration_s=0.8, verbose=True, report_interval_s=0.1)
        await SensorGenerator(config, FileSink(tmp_path / "o.jsonl"), handle_signals=False).run_async()
        assert "entries written" in caplog.text

    @pytest.mark.asyncio
    async def test_quiet_by_default(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger="sensor_gen")
        config = GeneratorConfig(rate=4000, duration_s=0.6, report_interval_s=0.1)
        await SensorGenerator(config, FileSink(tmp_path / "o.jsonl"), handle_signals=False).run_async()
        assert "entries written" not in caplog.text

    @pytest.mark.asyncio
    async def test_seeded_runs_replay(self, tmp_path: Path) -> None:
        outputs = []
        for name in ("a.jsonl", "b.jsonl"):
            path = tmp_path / name
            gen = SensorGenerator(GeneratorConfig(rate=100, seed=9), FileSink(path), handle_signals=False)
            asyncio.get_running_loop().call_later(1.3, gen.stop)
            await gen.run_async()
            outputs.append([(r["sensor_id"], r["value"]) for r in _read_lines(path)])
        assert outputs[0] == outputs[1]
        assert len(outputs[0]) == 100

    @pytest.mark.asyncio
    async def test_on_start_runs_after_connect(self, tmp_path: Path) -> None:
        path = tmp_path / "out.jsonl"
        seen: list[bool] = []
        gen = SensorGenerator(
            GeneratorConfig(rate=1000, duration_s=0.1),
            FileSink(path),
            handle_signals=False,
            on_start=lambda: seen.append(path.exists()),
        )
        await gen.run_async()
        assert seen == [True]
