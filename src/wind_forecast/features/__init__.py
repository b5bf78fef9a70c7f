"""Feature encoding, normalization and sequence windowing."""

from .directions import compass_point, components_to_direction, direction_to_components, wrap_degrees
from .normalization import (
    NormalizationStats,
    compute_stats,
    decode_vector,
    denormalize,
    encode_observations,
    encode_values,
    get_feature_columns,
    normalize,
)
from .sequences import count_windows, create_sequences, label_timestamps

__all__ = [
    "wrap_degrees",
    "direction_to_components",
    "components_to_direction",
    "compass_point",
    "NormalizationStats",
    "get_feature_columns",
    "encode_observations",
    "encode_values",
    "compute_stats",
    "normalize",
    "denormalize",
    "decode_vector",
    "count_windows",
    "create_sequences",
    "label_timestamps",
]
