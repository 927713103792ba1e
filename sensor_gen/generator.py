"""Reading synthesizer - produces one ``SensorReading`` per call.

Every choice (kind, pipeline, status, alert level) is a uniform pick from
the registry's tables; the tables' own repetition carries the skew.  The
random source is injected so a run can be replayed from a seed.
"""

from __future__ import annotations

import logging
import random

from sensor_gen.models import Location, SensorReading, rfc3339_nano
from sensor_gen.profiles import DEFAULT_REGISTRY, ProfileRegistry

__all__ = ["ANOMALY_PROBABILITY", "ReadingSynthesizer", "synthesize"]

logger = logging.getLogger("sensor_gen.generator")

ANOMALY_PROBABILITY = 0.02
# Anomalies exceed the profile maximum by up to this fraction of it.
ANOMALY_OVERSHOOT = 0.2
ANOMALY_ALERT_LEVEL = "medium"


def synthesize(
    rng: random.Random,
    registry: ProfileRegistry = DEFAULT_REGISTRY,
    anomaly_probability: float = ANOMALY_PROBABILITY,
) -> SensorReading:
    """Build one reading from *registry*, consuming entropy from *rng* only."""
    profile = rng.choice(registry.profiles)
    pipeline_id = rng.choice(registry.pipeline_ids)
    status = rng.choice(registry.statuses)
    alert_level = rng.choice(registry.alert_levels)

    value = profile.min_value + rng.random() * (profile.max_value - profile.min_value)
    if rng.random() < anomaly_probability:
        value = profile.max_value + rng.random() * profile.max_value * ANOMALY_OVERSHOOT
        if not alert_level:
            alert_level = ANOMALY_ALERT_LEVEL

    # Every field is drawn from the registry tables, so validation is skipped.
    return SensorReading.model_construct(
        sensor_id=f"SNS-{profile.kind[:3]}-{rng.randrange(10000):04d}",
        timestamp=rfc3339_nano(),
        kind=profile.kind,
        value=value,
        unit=profile.unit,
        location=Location.model_construct(
            # Roughly the US oil/gas regions
            latitude=25.0 + rng.random() * 20,
            longitude=-105.0 + rng.random() * 15,
            mile_post=rng.random() * 500,
        ),
        pipeline_id=pipeline_id,
        status=status,
        quality_score=0.85 + rng.random() * 0.15,
        alert_level=alert_level,
    )


class ReadingSynthesizer:
    """Owns a random source and a registry, producing readings on demand.

    Parameters:
        registry:
            Lookup tables to draw from (defaults to ``DEFAULT_REGISTRY``).
        rng:
            Random source to consume.  Each synthesizer should own its
            own; sharing one across producers breaks per-path replay.
        seed:
            Used to build a private ``random.Random`` when *rng* is not
            given.  ``None`` seeds from system entropy.
        anomaly_probability:
            Per-reading chance of an over-range anomaly.
    """

    def __init__(
        self,
        registry: ProfileRegistry = DEFAULT_REGISTRY,
        *,
        rng: random.Random | None = None,
        seed: int | None = None,
        anomaly_probability: float = ANOMALY_PROBABILITY,
    ) -> None:
        if not 0.0 <= anomaly_probability <= 1.0:
            raise ValueError(f"anomaly_probability must be within [0, 1], got {anomaly_probability}")
        self.registry = registry
        self.rng = rng if rng is not None else random.Random(seed)
        self.anomaly_probability = anomaly_probability
        logger.debug(
            "ReadingSynthesizer initialised with %d sensor kinds (seed=%s, anomaly_probability=%.3f)",
            len(registry.profiles),
            seed,
            anomaly_probability,
        )

    def synthesize(self) -> SensorReading:
        return synthesize(self.rng, self.registry, self.anomaly_probability)

    def synthesize_batch(self, count: int) -> list[SensorReading]:
        """Return *count* fresh readings, each with its own timestamp."""
        return [self.synthesize() for _ in range(count)]
