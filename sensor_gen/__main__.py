"""CLI entry point for the sensor generator.

Usage::

    sensor-gen run -o pipeline.jsonl --rate 5000 -d 30s -v
    sensor-gen --rate 100 --append -o pipeline.jsonl
    sensor-gen run --config sensor-gen.yaml
    sensor-gen run -o - --rate 10 | jq .
    sensor-gen list-sensors
    sensor-gen init-config --output sensor-gen.yaml
"""

from __future__ import annotations

import argparse
import logging
import sys
import textwrap
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sensor_gen.config import GeneratorConfig

# ---------------------------------------------------------------------------
# Sample YAML config template for init-config
# ---------------------------------------------------------------------------
_SAMPLE_CONFIG = """\
# Sensor generator configuration
# Command-line flags override anything set here.

generator:
  output: output.jsonl          # "-" writes to stdout
  append: false                 # true keeps existing file content
  rate: 10000                   # target records per second
  # duration: 5m                # optional: 90, 500ms, 30s, 5m, 1h30m (default: until Ctrl+C)
  verbose: false                # progress line every 5 seconds
  # seed: 42                    # optional: replayable output
  anomaly_probability: 0.02     # chance of an over-range reading
  log_level: INFO               # DEBUG, INFO, WARNING, ERROR
"""

_KNOWN_COMMANDS = {"run", "list-sensors", "init-config"}


# ======================================================================
# Main entry point
# ======================================================================


def main(argv: list[str] | None = None) -> None:
    epilog = textwrap.dedent("""\
        examples:
          sensor-gen run -o pipeline.jsonl --rate 5000 -d 30s -v
          sensor-gen --rate 100 --append -o pipeline.jsonl
          sensor-gen run --config sensor-gen.yaml
          sensor-gen list-sensors
          sensor-gen init-config --output sensor-gen.yaml
    """)

    parser = argparse.ArgumentParser(
        prog="sensor-gen",
        description="Generate synthetic pipeline sensor readings as NDJSON at a target rate.",
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", title="commands")

    # -- run ---------------------------------------------------------------
    run_parser = subparsers.add_parser(
        "run",
        help="Generate readings until the duration elapses or Ctrl+C.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              sensor-gen run -o pipeline.jsonl --rate 5000 -d 30s
              sensor-gen run --config sensor-gen.yaml -v
        """),
    )
    run_parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to YAML config file. Flags given on the command line take precedence.",
    )
    run_parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Output file path, '-' for stdout (default: output.jsonl).",
    )
    run_parser.add_argument(
        "--rate",
        type=int,
        default=None,
        help="Target entries per second (default: 10000).",
    )
    run_parser.add_argument(
        "--duration",
        "-d",
        type=str,
        default=None,
        help="Duration to run, e.g. 30s, 5m, 1h30m (default: 0 = until Ctrl+C).",
    )
    run_parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=None,
        help="Log progress stats every 5 seconds.",
    )
    run_parser.add_argument(
        "--append",
        action="store_true",
        default=None,
        help="Append to an existing file instead of overwriting.",
    )
    run_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed the random source for replayable output.",
    )
    run_parser.add_argument(
        "--anomaly-probability",
        type=float,
        default=None,
        help="Chance of an over-range reading per record (default: 0.02).",
    )
    run_parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO).",
    )

    # -- list-sensors ------------------------------------------------------
    subparsers.add_parser(
        "list-sensors",
        help="List the built-in sensor types, units and ranges.",
    )

    # -- init-config -------------------------------------------------------
    init_parser = subparsers.add_parser(
        "init-config",
        help="Generate a sample YAML configuration file.",
    )
    init_parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Write config to this file instead of stdout.",
    )

    # Bare flags (e.g. `sensor-gen --rate 100 -d 10s`) imply the run command.
    raw_args = argv if argv is not None else sys.argv[1:]
    if raw_args and raw_args[0] not in _KNOWN_COMMANDS and raw_args[0] not in ("-h", "--help"):
        raw_args = ["run", *list(raw_args)]

    args = parser.parse_args(raw_args)

    if args.command is None:
        parser.print_help()
        return

    # -- Dispatch ----------------------------------------------------------
    if args.command == "run":
        _cmd_run(args)
    elif args.command == "list-sensors":
        _cmd_list_sensors()
    elif args.command == "init-config":
        _cmd_init_config(args.output)
    else:
        parser.print_help()


# ======================================================================
# Command implementations
# ======================================================================


def _build_config(args: argparse.Namespace) -> GeneratorConfig:
    """Merge the optional YAML file with command-line overrides."""
    from sensor_gen.config import GeneratorConfig, load_yaml_config

    base = load_yaml_config(args.config) if args.config else GeneratorConfig()
    overrides = {
        "output": args.output,
        "rate": args.rate,
        "duration_s": args.duration,
        "verbose": args.verbose,
        "append": args.append,
        "seed": args.seed,
        "anomaly_probability": args.anomaly_probability,
        "log_level": args.log_level,
    }
    merged = base.model_dump()
    merged.update({key: value for key, value in overrides.items() if value is not None})
    return GeneratorConfig(**merged)


def _cmd_run(args: argparse.Namespace) -> None:
    """Execute the generator."""
    logging.basicConfig(
        level=getattr(logging, args.log_level or "INFO"),
        format="%(asctime)s %(name)-30s %(levelname)-7s %(message)s",
        datefmt="%H:%M:%S",
    )

    from sensor_gen.lifecycle import SensorGenerator
    from sensor_gen.sinks import ConsoleSink, FileSink, SinkUnavailableError

    try:
        config = _build_config(args)
    except (FileNotFoundError, ValueError) as err:
        print(f"Error: {err}", file=sys.stderr)
        sys.exit(2)

    logging.getLogger().setLevel(getattr(logging, config.log_level, logging.INFO))

    if config.to_stdout:
        sink = ConsoleSink()
        # Records own stdout; human-readable output moves to stderr.
        out = sys.stderr
        target = "stdout"
    else:
        sink = FileSink(config.output, append=config.append)
        out = sys.stdout
        target = f"{config.output} ({'appending' if config.append else 'overwriting'})"

    def _print_banner() -> None:
        print(f"Generating sensor data to {target} at ~{config.rate} entries/sec", file=out)
        if config.duration_s is not None:
            print(f"Duration: {config.duration_s:g}s", file=out)
        print("Press Ctrl+C to stop...", file=out)

    generator = SensorGenerator(config, sink, on_start=_print_banner)
    try:
        final = generator.run()
    except SinkUnavailableError as err:
        print(err, file=sys.stderr)
        sys.exit(1)
    except OSError as err:
        print(f"Error writing output: {err}", file=sys.stderr)
        sys.exit(1)

    if final is not None:
        print(final.format_report(), file=out)


# -- list-sensors -----------------------------------------------------------


def _cmd_list_sensors() -> None:
    from sensor_gen.profiles import DEFAULT_REGISTRY

    registry = DEFAULT_REGISTRY
    print(f"\n{'Type':<16} {'Unit':<12} {'Min':>10} {'Max':>10}")
    print("-" * 51)
    for profile in registry.profiles:
        print(
            f"{profile.kind:<16} {profile.unit:<12} "
            f"{profile.min_value:>10.2f} {profile.max_value:>10.2f}"
        )
    print("-" * 51)
    print(f"{'TOTAL':<16} {len(registry.profiles):>7}")
    print(f"\nPipelines: {', '.join(registry.pipeline_ids)}")
    print()


# -- init-config ------------------------------------------------------------


def _cmd_init_config(output_path: str | None) -> None:
    if output_path:
        from pathlib import Path

        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        Path(output_path).write_text(_SAMPLE_CONFIG)
        print(f"Sample config written to {output_path}")
    else:
        print(_SAMPLE_CONFIG)


# ======================================================================
if __name__ == "__main__":
    main()
