"""Hourly weather/marine observation record and series validation."""

import math
import numbers
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd
from loguru import logger

from ..exceptions import InvalidObservation

# camelCase names used by the fetch collaborator and the JSON layer
_CAMEL_TO_FIELD = {
    "windSpeed": "wind_speed",
    "windGusts": "wind_gusts",
    "windDirection": "wind_direction",
    "waveHeight": "wave_height",
    "wavePeriod": "wave_period",
    "swellDirection": "swell_direction",
}

MARINE_FIELDS = ("wave_height", "wave_period", "swell_direction")


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool) and math.isfinite(value)


@dataclass(frozen=True)
class Observation:
    """
    One hourly observation for a location.

    timestamp is a millisecond epoch. Values are validated on construction;
    a malformed record raises InvalidObservation.
    """

    timestamp: int
    temperature: float
    wind_speed: float
    wind_gusts: float
    wind_direction: float
    humidity: float
    wave_height: Optional[float] = None
    wave_period: Optional[float] = None
    swell_direction: Optional[float] = None

    def __post_init__(self):
        if not _is_number(self.timestamp):
            raise InvalidObservation(f"timestamp must be a finite number, got {self.timestamp!r}")
        object.__setattr__(self, "timestamp", int(self.timestamp))

        for name in ("temperature", "wind_speed", "wind_gusts", "wind_direction", "humidity"):
            value = getattr(self, name)
            if not _is_number(value):
                raise InvalidObservation(
                    f"{name} must be a finite number at {self.timestamp}, got {value!r}"
                )
        for name in MARINE_FIELDS:
            value = getattr(self, name)
            if value is not None and not _is_number(value):
                raise InvalidObservation(
                    f"{name} must be a finite number or None at {self.timestamp}, got {value!r}"
                )

        if self.wind_speed < 0 or self.wind_gusts < 0:
            raise InvalidObservation(f"Negative wind speed at {self.timestamp}")
        if not 0.0 <= self.wind_direction <= 360.0:
            raise InvalidObservation(
                f"wind_direction out of range [0, 360] at {self.timestamp}: {self.wind_direction}"
            )
        if not 0.0 <= self.humidity <= 100.0:
            raise InvalidObservation(
                f"humidity out of range [0, 100] at {self.timestamp}: {self.humidity}"
            )
        if self.swell_direction is not None and not 0.0 <= self.swell_direction <= 360.0:
            raise InvalidObservation(
                f"swell_direction out of range [0, 360] at {self.timestamp}: {self.swell_direction}"
            )
        if self.wave_height is not None and self.wave_height < 0:
            raise InvalidObservation(f"Negative wave_height at {self.timestamp}")
        if self.wave_period is not None and self.wave_period < 0:
            raise InvalidObservation(f"Negative wave_period at {self.timestamp}")

    @property
    def has_marine(self) -> bool:
        return all(getattr(self, name) is not None for name in MARINE_FIELDS)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Observation":
        """Build from a dict with camelCase or snake_case keys; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = _CAMEL_TO_FIELD.get(key, key)
            if name in known:
                kwargs[name] = value
        missing = [
            name
            for name in ("timestamp", "temperature", "wind_speed", "wind_gusts", "wind_direction", "humidity")
            if name not in kwargs
        ]
        if missing:
            raise InvalidObservation(f"Observation missing fields: {missing}")
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def validate_series(
    observations: Sequence[Observation],
    include_marine: bool = False,
) -> List[Observation]:
    """
    Check a series before it enters the numeric pipeline.

    Returns the observations sorted by timestamp. Raises InvalidObservation on
    non-Observation items, duplicate timestamps, or missing marine values when
    marine features are requested.
    """
    for i, obs in enumerate(observations):
        if not isinstance(obs, Observation):
            raise InvalidObservation(f"Item {i} is not an Observation: {type(obs).__name__}")

    ordered = sorted(observations, key=lambda o: o.timestamp)
    for prev, curr in zip(ordered, ordered[1:]):
        if curr.timestamp == prev.timestamp:
            raise InvalidObservation(f"Duplicate observation timestamp: {curr.timestamp}")

    if include_marine:
        missing = [o.timestamp for o in ordered if not o.has_marine]
        if missing:
            raise InvalidObservation(
                f"Marine features requested but {len(missing)} observations lack wave data "
                f"(first at {missing[0]})"
            )

    return ordered


def observations_from_records(records: Iterable[Dict[str, Any]]) -> List[Observation]:
    return [Observation.from_dict(r) for r in records]


def observations_to_frame(observations: Sequence[Observation]) -> pd.DataFrame:
    """Tabular view of a series, sorted by timestamp."""
    columns = [f.name for f in fields(Observation)]
    df = pd.DataFrame([o.to_dict() for o in observations], columns=columns)
    return df.sort_values("timestamp").reset_index(drop=True)


def observations_from_frame(df: pd.DataFrame) -> List[Observation]:
    """
    Convert a frame with Observation columns into records.

    NaN marine values become None; rows with NaN or out-of-range core values
    raise InvalidObservation.
    """
    df = df.sort_values("timestamp").reset_index(drop=True)
    observations = []
    for row in df.to_dict(orient="records"):
        for name in MARINE_FIELDS:
            if name in row and row[name] is not None and pd.isna(row[name]):
                row[name] = None
        observations.append(Observation.from_dict(row))
    logger.debug(f"Converted {len(observations)} rows to observations")
    return observations
