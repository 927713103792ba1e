#!/usr/bin/env python3
"""Rate scenarios -- watch batch pacing converge on a target throughput,
then stop a run early from another thread.

Directly runnable (no external services required). Output files land in
``./output/rate_scenarios``.

Usage::

    python examples/rate_scenarios_example.py           # Case 1 (default)
    python examples/rate_scenarios_example.py --case 2   # High rate, 1000-record batches
    python examples/rate_scenarios_example.py --case 3   # Early stop, line count check
"""

from __future__ import annotations

import argparse
import logging
import threading
from pathlib import Path

OUTPUT_DIR = Path("./output/rate_scenarios")


def _run(rate: int, duration_s: float | None, name: str, stop_after_s: float | None = None) -> None:
    from sensor_gen import GeneratorConfig, SensorGenerator
    from sensor_gen.sinks import FileSink

    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    path = OUTPUT_DIR / name

    config = GeneratorConfig(rate=rate, duration_s=duration_s, verbose=True, report_interval_s=1.0)
    gen = SensorGenerator(config, FileSink(path))

    print(f"  Target rate:    {rate} records/sec")
    print(f"  Batch size:     {gen.plan.batch_size}")
    print(f"  Tick interval:  {gen.plan.tick_interval * 1000:.1f} ms")
    print(f"  Output:         {path}\n")

    if stop_after_s is not None:
        threading.Timer(stop_after_s, gen.stop).start()

    final = gen.run()
    if final is None:
        return
    print(final.format_report())

    lines = sum(1 for _ in path.open("rb"))
    print(f"\n  Lines in file:  {lines} (expected {rate * (duration_s or stop_after_s or 0):.0f}"
          f" +/- {gen.plan.batch_size})")


# ---------------------------------------------------------------------------
# Case 1: low rate, one batch per second
# ---------------------------------------------------------------------------


def run_case_1() -> None:
    """rate=100 for 3 seconds -> 100 records once a second."""
    print("=== Case 1: rate=100, 3s ===\n")
    _run(rate=100, duration_s=3.0, name="case1.jsonl")


# ---------------------------------------------------------------------------
# Case 2: high rate, capped batch size
# ---------------------------------------------------------------------------


def run_case_2() -> None:
    """rate=50000 for 2 seconds -> 1000 records every 20 ms."""
    print("=== Case 2: rate=50000, 2s ===\n")
    _run(rate=50_000, duration_s=2.0, name="case2.jsonl")


# ---------------------------------------------------------------------------
# Case 3: stopped from another thread
# ---------------------------------------------------------------------------


def run_case_3() -> None:
    """No duration; a timer thread requests a stop after 2.5 seconds.

    The final stats total always equals the number of complete lines.
    """
    print("=== Case 3: rate=5000, stopped after 2.5s ===\n")
    _run(rate=5000, duration_s=None, name="case3.jsonl", stop_after_s=2.5)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main() -> None:
    parser = argparse.ArgumentParser(description="Rate scenario examples")
    parser.add_argument("--case", type=int, default=1, choices=[1, 2, 3],
                        help="Which scenario to run (default: 1)")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)-30s %(levelname)-7s %(message)s")

    cases = {1: run_case_1, 2: run_case_2, 3: run_case_3}
    cases[args.case]()


if __name__ == "__main__":
    main()
