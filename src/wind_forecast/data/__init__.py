"""Observation model and data providers."""

from .observation import (
    MARINE_FIELDS,
    Observation,
    observations_from_frame,
    observations_from_records,
    observations_to_frame,
    validate_series,
)
from .providers import (
    IWeatherProvider,
    OpenMeteoProvider,
    frame_to_observations,
    get_provider,
    split_observations,
)

__all__ = [
    "MARINE_FIELDS",
    "Observation",
    "validate_series",
    "observations_from_records",
    "observations_to_frame",
    "observations_from_frame",
    "IWeatherProvider",
    "OpenMeteoProvider",
    "frame_to_observations",
    "split_observations",
    "get_provider",
]
