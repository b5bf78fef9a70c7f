"""
Accuracy metrics for held-out validation pairs.

Deterministic point-forecast metrics (RMSE, MAE, R²), scaled confidence
intervals and an absolute-error histogram.
"""

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np
from loguru import logger
from sklearn.metrics import mean_absolute_error, mean_squared_error

Z_95 = 1.96

# Interval width relative to the wind-speed RMSE
CONFIDENCE_INTERVAL_SCALES: Dict[str, float] = {
    "wind_speed": 1.0,
    "wind_gusts": 1.3,
    "wind_direction": 10.0,
}


@dataclass
class TimeSeriesPoint:
    """One held-out (actual, predicted) pair at its target hour."""

    timestamp: int
    actual: float
    predicted: float


@dataclass
class ModelMetrics:
    """Accuracy report for a trained model."""

    rmse: float
    mae: float
    r2_score: float
    confidence_intervals: Dict[str, float]
    sample_size: int
    training_loss: List[float] = field(default_factory=list)
    validation_loss: List[float] = field(default_factory=list)
    error_distribution: List[float] = field(default_factory=list)
    actuals: List[float] = field(default_factory=list)
    predictions: List[float] = field(default_factory=list)
    wind_speed_data: List[TimeSeriesPoint] = field(default_factory=list)
    wind_direction_data: List[TimeSeriesPoint] = field(default_factory=list)
    wave_height_data: List[TimeSeriesPoint] = field(default_factory=list)
    validation_strategy: str = "holdout"
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _as_pairs(actuals: Sequence[float], predictions: Sequence[float]):
    y_true = np.asarray(actuals, dtype=np.float64).ravel()
    y_pred = np.asarray(predictions, dtype=np.float64).ravel()
    if y_true.shape != y_pred.shape:
        raise ValueError(
            f"actuals and predictions differ in length: {y_true.size} vs {y_pred.size}"
        )
    if y_true.size == 0:
        raise ValueError("Cannot compute metrics on empty inputs")
    if not (np.all(np.isfinite(y_true)) and np.all(np.isfinite(y_pred))):
        raise ValueError("actuals and predictions must be finite")
    return y_true, y_pred


def r2(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """
    Coefficient of determination.

    When actuals are constant (SS_tot == 0) R² is 1.0 for a perfect fit and
    NaN otherwise.
    """
    ss_res = float(np.sum((y_true - y_pred) ** 2))
    ss_tot = float(np.sum((y_true - np.mean(y_true)) ** 2))
    if ss_tot == 0.0:
        return 1.0 if ss_res == 0.0 else float("nan")
    return 1.0 - ss_res / ss_tot


def confidence_intervals(
    rmse: float,
    scales: Optional[Mapping[str, float]] = None,
) -> Dict[str, float]:
    """±1.96·rmse half-widths per variable."""
    scales = CONFIDENCE_INTERVAL_SCALES if scales is None else scales
    return {name: Z_95 * rmse * scale for name, scale in scales.items()}


def error_distribution(
    y_true: np.ndarray,
    y_pred: np.ndarray,
    bin_width: float = 0.5,
) -> List[float]:
    """
    Histogram of absolute errors, as percentages.

    Bins of bin_width cover [0, ceil(max |error|)); at least one bin. The
    largest errors fall in the last bin. Bins sum to 100.
    """
    if bin_width <= 0:
        raise ValueError(f"bin_width must be > 0, got {bin_width}")

    errors = np.abs(y_pred - y_true)
    upper = math.ceil(float(errors.max()))
    n_bins = max(1, int(math.ceil(upper / bin_width)))

    indices = np.minimum((errors // bin_width).astype(int), n_bins - 1)
    counts = np.bincount(indices, minlength=n_bins)
    return (counts / errors.size * 100.0).tolist()


def time_series(
    timestamps: Sequence[int],
    actuals: Sequence[float],
    predictions: Sequence[float],
) -> List[TimeSeriesPoint]:
    """Zip timestamps with (actual, predicted) pairs for an actual-vs-predicted view."""
    if not (len(timestamps) == len(actuals) == len(predictions)):
        raise ValueError(
            f"timestamps, actuals and predictions differ in length: "
            f"{len(timestamps)}, {len(actuals)}, {len(predictions)}"
        )
    return [
        TimeSeriesPoint(timestamp=int(t), actual=float(a), predicted=float(p))
        for t, a, p in zip(timestamps, actuals, predictions)
    ]


def compute_metrics(
    actuals: Sequence[float],
    predictions: Sequence[float],
    training_loss: Sequence[float] = (),
    validation_loss: Sequence[float] = (),
    bin_width: float = 0.5,
    interval_scales: Optional[Mapping[str, float]] = None,
    timestamps: Optional[Sequence[int]] = None,
    variable_pairs: Optional[Mapping[str, Sequence[Sequence[float]]]] = None,
) -> ModelMetrics:
    """
    Compute accuracy statistics from validation (actual, predicted) pairs.

    Args:
        actuals: Observed values
        predictions: Predicted values, same length
        training_loss: Per-epoch training loss, carried into the report
        validation_loss: Per-epoch validation loss, carried into the report
        bin_width: Error histogram bin width (variable units)
        interval_scales: Per-variable interval scale factors
        timestamps: Target timestamp of each pair; enables the per-variable series
        variable_pairs: Per-variable (actuals, predictions), aligned with timestamps

    Returns:
        ModelMetrics
    """
    y_true, y_pred = _as_pairs(actuals, predictions)

    rmse = float(np.sqrt(mean_squared_error(y_true, y_pred)))
    mae = float(mean_absolute_error(y_true, y_pred))
    r2_value = r2(y_true, y_pred)

    metrics = ModelMetrics(
        rmse=rmse,
        mae=mae,
        r2_score=r2_value,
        confidence_intervals=confidence_intervals(rmse, interval_scales),
        sample_size=int(y_true.size),
        training_loss=[float(v) for v in training_loss],
        validation_loss=[float(v) for v in validation_loss],
        error_distribution=error_distribution(y_true, y_pred, bin_width),
        actuals=y_true.tolist(),
        predictions=y_pred.tolist(),
    )

    if timestamps is not None:
        variable_pairs = variable_pairs or {}
        metrics.wind_speed_data = time_series(timestamps, y_true, y_pred)
        if "wind_direction" in variable_pairs:
            metrics.wind_direction_data = time_series(timestamps, *variable_pairs["wind_direction"])
        if "wave_height" in variable_pairs:
            metrics.wave_height_data = time_series(timestamps, *variable_pairs["wave_height"])

    logger.info(
        f"Metrics: rmse={rmse:.4f}, mae={mae:.4f}, r2={r2_value:.4f}, n={metrics.sample_size}"
    )
    return metrics


def compute_variable_metrics(
    variable_pairs: Mapping[str, Sequence[Sequence[float]]],
    bin_width: float = 0.5,
) -> Dict[str, ModelMetrics]:
    """compute_metrics() for every (actuals, predictions) pair in a mapping."""
    results = {}
    for name, (actual, predicted) in variable_pairs.items():
        y_true, y_pred = _as_pairs(actual, predicted)
        if name.endswith("direction"):
            # Angular error: 350 vs 10 is 20 degrees apart
            diff = (y_pred - y_true + 180.0) % 360.0 - 180.0
            y_pred = y_true + diff
        results[name] = compute_metrics(y_true, y_pred, bin_width=bin_width)
    return results
