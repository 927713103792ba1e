"""Run configuration and the optional YAML config file.

The YAML file has a single ``generator`` section::

    generator:
      output: ./pipeline.jsonl
      append: false
      rate: 5000            # records per second
      duration: 2m          # optional: 90, 500ms, 30s, 5m, 1h30m
      verbose: true
      seed: 42              # optional: replayable output
      anomaly_probability: 0.02
      log_level: INFO

Command-line flags override values loaded from the file.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

__all__ = ["GeneratorConfig", "load_yaml_config", "parse_duration"]

logger = logging.getLogger("sensor_gen.config")

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(text: str | float | int | None) -> float | None:
    """Convert a duration to seconds.

    Accepts bare numbers (seconds) and unit strings that may be chained,
    e.g. ``"500ms"``, ``"30s"``, ``"5m"``, ``"1h30m"``.  ``None``, ``""``
    and zero all mean *no limit* and return ``None``.
    """
    if text is None:
        return None
    if isinstance(text, (int, float)):
        seconds = float(text)
    else:
        raw = text.strip().lower()
        if not raw:
            return None
        try:
            seconds = float(raw)
        except ValueError:
            pos = 0
            seconds = 0.0
            for match in _DURATION_PART.finditer(raw):
                if match.start() != pos:
                    break
                seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
                pos = match.end()
            if pos != len(raw) or pos == 0:
                raise ValueError(f"Invalid duration: {text!r}") from None
    if seconds < 0:
        raise ValueError(f"Duration must not be negative: {text!r}")
    return seconds or None


class GeneratorConfig(BaseModel):
    """Settings for one generation run.

    Attributes:
        output: Output file path, ``"-"`` for stdout.
        append: Append to an existing file instead of truncating it.
        rate: Target records per second.
        duration_s: Stop after this many seconds; ``None`` runs until stopped.
        verbose: Log a progress line every ``report_interval_s`` seconds.
        seed: Seed for the random source; ``None`` is non-reproducible.
        anomaly_probability: Per-record chance of an over-range value.
        report_interval_s: Minimum wall time between progress lines.
        log_level: Logging level string.
    """

    model_config = {"frozen": True}

    output: str = "output.jsonl"
    append: bool = False
    rate: int = Field(default=10_000, gt=0)
    duration_s: float | None = None
    verbose: bool = False
    seed: int | None = None
    anomaly_probability: float = Field(default=0.02, ge=0.0, le=1.0)
    report_interval_s: float = Field(default=5.0, gt=0)
    log_level: str = "INFO"

    @field_validator("duration_s", mode="before")
    @classmethod
    def _normalise_duration(cls, value: Any) -> float | None:
        return parse_duration(value)

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def to_stdout(self) -> bool:
        return self.output == "-"


def load_yaml_config(path: str | Path) -> GeneratorConfig:
    """Load and validate a YAML configuration file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with path.open("r") as fh:
        raw: dict[str, Any] = yaml.safe_load(fh) or {}

    section = dict(raw.get("generator") or {})
    if "duration" in section:
        section["duration_s"] = section.pop("duration")

    config = GeneratorConfig(**section)
    logger.info(
        "Loaded config: output=%s rate=%d/s duration=%s",
        config.output,
        config.rate,
        f"{config.duration_s}s" if config.duration_s else "unlimited",
    )
    return config
