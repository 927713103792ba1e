"""Record models for the sensor generator.

Defines ``SensorReading`` - the record written as one NDJSON line - and
its nested ``Location``.  Python attribute names are descriptive; the
JSON keys (aliases) match the established output schema::

    {"sensor_id": "SNS-pre-0042", "timestamp": "2024-05-01T12:00:00.123456789Z",
     "type": "pressure", "value": 812.4, "unit": "psi",
     "location": {"lat": 31.2, "lon": -101.7, "mile_post": 221.9},
     "pipeline_id": "PIPE-TX-001", "status": "normal",
     "quality_score": 0.97, "alert_level": "low"}

``alert_level`` is omitted from the JSON object when empty.
"""

from __future__ import annotations

import time
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, Field

__all__ = ["Location", "SensorReading", "rfc3339_nano"]

_NANOS_PER_SECOND = 1_000_000_000


@lru_cache(maxsize=4)
def _second_prefix(secs: int) -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(secs))


def rfc3339_nano(ns: int | None = None) -> str:
    """Format an epoch timestamp in nanoseconds as RFC3339 UTC.

    Trailing zeros of the fractional part are trimmed, and the fraction is
    dropped entirely on a whole second (``2024-05-01T12:00:00Z``).
    """
    if ns is None:
        ns = time.time_ns()
    secs, nanos = divmod(ns, _NANOS_PER_SECOND)
    base = _second_prefix(secs)
    if not nanos:
        return f"{base}Z"
    return f"{base}.{nanos:09d}".rstrip("0") + "Z"


class Location(BaseModel):
    """Geographic position of a sensor along a pipeline."""

    model_config = {"frozen": True, "populate_by_name": True}

    latitude: float = Field(alias="lat")
    longitude: float = Field(alias="lon")
    mile_post: float


class SensorReading(BaseModel):
    """A single synthesized pipeline sensor reading.

    Attributes:
        sensor_id: ``SNS-<kind prefix>-<4 digits>``; not globally unique.
        timestamp: RFC3339 UTC string with nanosecond precision.
        kind: Sensor kind from the registry (JSON key ``type``).
        value: Reading, normally within the kind's profile range.
        unit: Engineering unit taken from the kind's profile.
        location: Where along the pipeline the sensor sits.
        pipeline_id: Pipeline identifier from the registry.
        status: Operational status, e.g. ``"normal"``.
        quality_score: Signal quality in ``[0.85, 1.0)``.
        alert_level: ``"low"``, ``"medium"``, ``"high"`` or ``""`` (no alert).
    """

    model_config = {"frozen": True, "populate_by_name": True}

    sensor_id: str
    timestamp: str
    kind: str = Field(alias="type")
    value: float
    unit: str
    location: Location
    pipeline_id: str
    status: str
    quality_score: float
    alert_level: str = ""

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-shaped ``dict`` (aliased keys, empty alert dropped)."""
        exclude = None if self.alert_level else {"alert_level"}
        return self.model_dump(by_alias=True, exclude=exclude)

    def to_json(self) -> str:
        """Return a compact single-line JSON string."""
        exclude = None if self.alert_level else {"alert_level"}
        return self.model_dump_json(by_alias=True, exclude=exclude)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SensorReading:
        return cls.model_validate(data)

    @classmethod
    def from_json(cls, line: str | bytes) -> SensorReading:
        """Parse one NDJSON line back into a reading."""
        return cls.model_validate_json(line)
