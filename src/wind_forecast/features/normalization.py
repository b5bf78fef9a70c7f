"""
Feature encoding and standardization.

Observations are encoded into a fixed column layout (directions as sin/cos
pairs), standardized with statistics computed once from the training series,
and decoded back into physical values after prediction.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import numpy as np
from loguru import logger

from ..data.observation import Observation
from .directions import components_to_direction, direction_to_components

STD_EPSILON = 1e-8

CORE_COLUMNS = [
    "temperature",
    "wind_speed",
    "wind_gusts",
    "wind_dir_sin",
    "wind_dir_cos",
    "humidity",
]
MARINE_COLUMNS = [
    "wave_height",
    "wave_period",
    "swell_dir_sin",
    "swell_dir_cos",
]


def get_feature_columns(include_marine: bool = False) -> List[str]:
    """Encoded column layout for the model input."""
    return CORE_COLUMNS + (MARINE_COLUMNS if include_marine else [])


@dataclass(frozen=True)
class NormalizationStats:
    """Per-column mean and std (epsilon included) of the encoded training series."""

    mean: np.ndarray
    std: np.ndarray
    columns: List[str] = field(default_factory=lambda: list(CORE_COLUMNS))

    @property
    def n_features(self) -> int:
        return len(self.columns)

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {
            col: {"mean": float(m), "std": float(s)}
            for col, m, s in zip(self.columns, self.mean, self.std)
        }


def encode_observations(
    observations: Sequence[Observation],
    include_marine: bool = False,
) -> np.ndarray:
    """
    Encode observations into an (N, F) float64 matrix.

    Args:
        observations: Chronologically ordered observations
        include_marine: Append wave/swell columns (all observations must carry them)

    Returns:
        Matrix with columns given by get_feature_columns(include_marine)
    """
    rows = []
    for obs in observations:
        wind_sin, wind_cos = direction_to_components(obs.wind_direction)
        row = [
            obs.temperature,
            obs.wind_speed,
            obs.wind_gusts,
            wind_sin,
            wind_cos,
            obs.humidity,
        ]
        if include_marine:
            swell_sin, swell_cos = direction_to_components(obs.swell_direction)
            row.extend([obs.wave_height, obs.wave_period, swell_sin, swell_cos])
        rows.append(row)

    n_cols = len(get_feature_columns(include_marine))
    return np.asarray(rows, dtype=np.float64).reshape(len(rows), n_cols)


def compute_stats(series: np.ndarray, include_marine: bool = False) -> NormalizationStats:
    """
    Compute standardization statistics from an encoded training series.

    Args:
        series: (N, F) encoded matrix
        include_marine: Whether the marine columns are present

    Returns:
        NormalizationStats with std = population std + STD_EPSILON
    """
    series = np.asarray(series, dtype=np.float64)
    columns = get_feature_columns(include_marine)
    if series.ndim != 2 or series.shape[1] != len(columns) or series.shape[0] == 0:
        raise ValueError(
            f"Expected non-empty (N, {len(columns)}) series, got shape {series.shape}"
        )

    mean = series.mean(axis=0)
    std = series.std(axis=0) + STD_EPSILON

    logger.info(f"Computed normalization stats over {series.shape[0]} rows, {len(columns)} columns")
    return NormalizationStats(mean=mean, std=std, columns=columns)


def normalize(vector: np.ndarray, stats: NormalizationStats) -> np.ndarray:
    """Standardize an (F,) vector or (N, F) matrix."""
    return (np.asarray(vector, dtype=np.float64) - stats.mean) / stats.std


def denormalize(vector: np.ndarray, stats: NormalizationStats) -> np.ndarray:
    """Exact inverse of normalize() for the same stats."""
    return np.asarray(vector, dtype=np.float64) * stats.std + stats.mean


def decode_vector(vector: np.ndarray, include_marine: bool = False) -> Dict[str, float]:
    """
    Turn one encoded (denormalized) row into physical values.

    Directions are rebuilt from their sin/cos pair and wrapped into [0, 360).
    No range clamping is applied here.
    """
    columns = get_feature_columns(include_marine)
    values = dict(zip(columns, np.asarray(vector, dtype=np.float64).tolist()))

    decoded = {
        "temperature": values["temperature"],
        "wind_speed": values["wind_speed"],
        "wind_gusts": values["wind_gusts"],
        "wind_direction": components_to_direction(values["wind_dir_sin"], values["wind_dir_cos"]),
        "humidity": values["humidity"],
    }
    if include_marine:
        decoded["wave_height"] = values["wave_height"]
        decoded["wave_period"] = values["wave_period"]
        decoded["swell_direction"] = components_to_direction(
            values["swell_dir_sin"], values["swell_dir_cos"]
        )
    return decoded


def encode_values(values: Dict[str, float], include_marine: bool = False) -> np.ndarray:
    """Inverse of decode_vector(): physical values back to one encoded row."""
    wind_sin, wind_cos = direction_to_components(values["wind_direction"])
    row = [
        values["temperature"],
        values["wind_speed"],
        values["wind_gusts"],
        wind_sin,
        wind_cos,
        values["humidity"],
    ]
    if include_marine:
        swell_sin, swell_cos = direction_to_components(values["swell_direction"])
        row.extend([values["wave_height"], values["wave_period"], swell_sin, swell_cos])
    return np.asarray(row, dtype=np.float64)
