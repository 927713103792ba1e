"""Tests for sensor_gen.stats - RunStatistics and FinalStats."""

from __future__ import annotations

from sensor_gen.stats import FinalStats, RunStatistics


class TestRunStatistics:
    """Counters, elapsed time and report pacing."""

    def test_initial_state(self) -> None:
        stats = RunStatistics(started_at=100.0)
        assert stats.total == 0
        assert stats.dropped == 0
        assert stats.last_report_at == 100.0

    def test_average_rate(self) -> None:
        stats = RunStatistics(started_at=100.0)
        stats.total = 500
        assert stats.average_rate(now=102.0) == 250.0

    def test_average_rate_zero_elapsed(self) -> None:
        stats = RunStatistics(started_at=100.0)
        stats.total = 500
        assert stats.average_rate(now=100.0) == 0.0

    def test_report_due(self) -> None:
        stats = RunStatistics(started_at=100.0)
        assert not stats.report_due(5.0, now=104.9)
        assert stats.report_due(5.0, now=105.0)
        stats.mark_reported(now=105.0)
        assert not stats.report_due(5.0, now=109.0)
        assert stats.report_due(5.0, now=110.5)


class TestFinalStats:
    """Final report figures and zero guards."""

    def test_from_run(self) -> None:
        stats = RunStatistics(started_at=10.0)
        stats.total = 1000
        stats.bytes_written = 250_000
        final = FinalStats.from_run(stats, file_size=300_000, now=12.0)
        assert final.total == 1000
        assert final.elapsed_s == 2.0
        assert final.average_rate == 500.0
        assert final.avg_record_bytes == 250.0
        assert final.file_size == 300_000

    def test_zero_records_and_zero_elapsed(self) -> None:
        stats = RunStatistics(started_at=10.0)
        final = FinalStats.from_run(stats, now=10.0)
        assert final.average_rate == 0.0
        assert final.avg_record_bytes == 0.0

    def test_format_report_file(self) -> None:
        final = FinalStats(
            total=2000,
            elapsed_s=2.0,
            average_rate=1000.0,
            file_size=2 * 1024 * 1024,
            avg_record_bytes=300.0,
        )
        report = final.format_report()
        assert "--- Final Stats ---" in report
        assert "Total entries: 2000" in report
        assert "Average rate: 1000 entries/sec" in report
        assert "File size: 2.00 MB" in report
        assert "Avg entry size: 300 bytes" in report
        assert "Dropped" not in report

    def test_format_report_stream_with_drops(self) -> None:
        final = FinalStats(total=10, dropped=2, elapsed_s=1.0, average_rate=10.0, avg_record_bytes=100.0)
        report = final.format_report()
        assert "File size" not in report
        assert "Dropped entries: 2" in report
