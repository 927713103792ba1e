"""Sensor generator - synthesise pipeline telemetry as NDJSON at a target rate.

Quick start::

    from sensor_gen import GeneratorConfig, SensorGenerator
    from sensor_gen.sinks import FileSink

    config = GeneratorConfig(rate=1000, duration_s=10)
    final = SensorGenerator(config, FileSink("output.jsonl")).run()
    print(final.format_report())
"""

from __future__ import annotations

from sensor_gen.config import GeneratorConfig, load_yaml_config
from sensor_gen.emitter import BatchEmitter, BatchPlan
from sensor_gen.generator import ReadingSynthesizer, synthesize
from sensor_gen.lifecycle import LifecycleState, SensorGenerator
from sensor_gen.models import Location, SensorReading
from sensor_gen.profiles import DEFAULT_REGISTRY, ProfileRegistry, SensorTypeProfile
from sensor_gen.stats import FinalStats, RunStatistics

__all__ = [
    "DEFAULT_REGISTRY",
    "BatchEmitter",
    "BatchPlan",
    "FinalStats",
    "GeneratorConfig",
    "LifecycleState",
    "Location",
    "ProfileRegistry",
    "ReadingSynthesizer",
    "RunStatistics",
    "SensorGenerator",
    "SensorReading",
    "SensorTypeProfile",
    "load_yaml_config",
    "synthesize",
]

__version__ = "0.1.0"
