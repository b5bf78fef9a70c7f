"""Evaluation metrics module."""

from .metrics import (
    ModelMetrics,
    TimeSeriesPoint,
    compute_metrics,
    compute_variable_metrics,
    confidence_intervals,
    error_distribution,
    r2,
    time_series,
)

__all__ = [
    "ModelMetrics",
    "TimeSeriesPoint",
    "compute_metrics",
    "compute_variable_metrics",
    "confidence_intervals",
    "error_distribution",
    "r2",
    "time_series",
]
