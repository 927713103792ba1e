"""Static catalog of pipeline sensor types and the labels attached to readings.

Defines ``SensorTypeProfile`` and the immutable ``ProfileRegistry`` that the
synthesizer draws from, and builds ``DEFAULT_REGISTRY`` once at import time.

Status and alert-level skew is encoded by repetition: a value listed four
times is four times as likely to be picked as a value listed once.
"""

from __future__ import annotations

from pydantic import BaseModel, model_validator

__all__ = [
    "DEFAULT_REGISTRY",
    "ProfileRegistry",
    "SensorTypeProfile",
]


class SensorTypeProfile(BaseModel):
    """Nominal range and unit for one kind of sensor."""

    model_config = {"frozen": True}

    kind: str
    unit: str
    min_value: float
    max_value: float

    @model_validator(mode="after")
    def _check_range(self) -> SensorTypeProfile:
        if self.min_value > self.max_value:
            raise ValueError(
                f"Profile '{self.kind}': min_value {self.min_value} exceeds max_value {self.max_value}"
            )
        return self


class ProfileRegistry(BaseModel):
    """Read-only lookup tables handed to the synthesizer.

    Attributes:
        profiles: Sensor type definitions, one per distinct kind.
        pipeline_ids: Pipeline identifiers a reading can be attributed to.
        statuses: Weighted status list (repetition = weight).
        alert_levels: Weighted alert list; ``""`` means no alert.
    """

    model_config = {"frozen": True}

    profiles: tuple[SensorTypeProfile, ...]
    pipeline_ids: tuple[str, ...]
    statuses: tuple[str, ...]
    alert_levels: tuple[str, ...]

    @model_validator(mode="after")
    def _check_tables(self) -> ProfileRegistry:
        for name in ("profiles", "pipeline_ids", "statuses", "alert_levels"):
            if not getattr(self, name):
                raise ValueError(f"ProfileRegistry.{name} must not be empty")
        kinds = [p.kind for p in self.profiles]
        if len(set(kinds)) != len(kinds):
            raise ValueError(f"Duplicate sensor kinds in registry: {kinds}")
        return self

    @property
    def kinds(self) -> list[str]:
        return [p.kind for p in self.profiles]

    def profile_for(self, kind: str) -> SensorTypeProfile:
        """Return the profile for *kind*; raises ``KeyError`` if unknown."""
        for profile in self.profiles:
            if profile.kind == kind:
                return profile
        raise KeyError(f"Unknown sensor kind '{kind}'")


DEFAULT_REGISTRY = ProfileRegistry(
    profiles=(
        SensorTypeProfile(kind="pressure", unit="psi", min_value=200, max_value=1500),
        SensorTypeProfile(kind="temperature", unit="fahrenheit", min_value=-20, max_value=180),
        SensorTypeProfile(kind="flow_rate", unit="bbl/hr", min_value=0, max_value=50000),
        SensorTypeProfile(kind="vibration", unit="mm/s", min_value=0, max_value=25),
        SensorTypeProfile(kind="corrosion", unit="mpy", min_value=0, max_value=50),
        SensorTypeProfile(kind="humidity", unit="percent", min_value=0, max_value=100),
        SensorTypeProfile(kind="gas_detector", unit="ppm", min_value=0, max_value=1000),
        SensorTypeProfile(kind="valve_position", unit="percent", min_value=0, max_value=100),
    ),
    pipeline_ids=(
        "PIPE-TX-001",
        "PIPE-TX-002",
        "PIPE-OK-001",
        "PIPE-LA-001",
        "PIPE-NM-001",
        "PIPE-CO-001",
        "PIPE-WY-001",
        "PIPE-ND-001",
    ),
    statuses=("normal", "normal", "normal", "normal", "warning", "maintenance"),
    alert_levels=("", "", "", "", "", "low", "medium", "high"),
)
