"""
Circular handling for direction-valued features.

A 0-360 degree angle is not continuous under affine scaling (359 and 1 are
neighbours). Directions enter the model as a (sin, cos) pair and are
reconstructed with atan2.
"""

from typing import Tuple, Union

import numpy as np

ArrayLike = Union[float, np.ndarray]

COMPASS_POINTS = [
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
]


def wrap_degrees(degrees: ArrayLike) -> ArrayLike:
    """Wrap angle(s) into [0, 360)."""
    wrapped = np.mod(np.asarray(degrees, dtype=np.float64), 360.0)
    # np.mod can round tiny negatives up to exactly 360.0
    wrapped = np.where(wrapped >= 360.0, 0.0, wrapped)
    if np.ndim(wrapped) == 0:
        return float(wrapped)
    return wrapped


def direction_to_components(degrees: ArrayLike) -> Tuple[ArrayLike, ArrayLike]:
    """Encode angle(s) in degrees as (sin, cos)."""
    radians = np.deg2rad(np.asarray(degrees, dtype=np.float64))
    return np.sin(radians), np.cos(radians)


def components_to_direction(sin_component: ArrayLike, cos_component: ArrayLike) -> ArrayLike:
    """Decode (sin, cos) back to degrees in [0, 360)."""
    degrees = np.rad2deg(np.arctan2(sin_component, cos_component))
    return wrap_degrees(degrees)


def compass_point(degrees: float) -> str:
    """16-point compass label for a direction, e.g. 200 -> 'SSW'."""
    index = int(round(wrap_degrees(degrees) / 22.5)) % 16
    return COMPASS_POINTS[index]
