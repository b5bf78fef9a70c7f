"""
Wind Forecast

Short-horizon weather and marine forecasting from recent hourly observations
using a small feed-forward regressor trained on the fly.
"""

__version__ = "0.1.0"

from . import data, evaluation, features, models
from .cancellation import CancellationToken
from .config import PERFORMANCE_PRESETS, ModelConfig
from .data import Observation
from .evaluation import ModelMetrics, compute_metrics
from .exceptions import (
    DataFetchError,
    ForecastError,
    InsufficientData,
    InvalidObservation,
    ModelNotTrained,
    TrainingCancelled,
    TrainingDivergence,
    WindForecastError,
)
from .models import PredictionChunk, TrainingProgress, TrainingResult, predict_next_hours, train_model
from .session import ForecastSession

__all__ = [
    "data",
    "features",
    "models",
    "evaluation",
    "CancellationToken",
    "ModelConfig",
    "PERFORMANCE_PRESETS",
    "Observation",
    "ModelMetrics",
    "compute_metrics",
    "PredictionChunk",
    "TrainingProgress",
    "TrainingResult",
    "train_model",
    "predict_next_hours",
    "ForecastSession",
    "WindForecastError",
    "InsufficientData",
    "InvalidObservation",
    "ModelNotTrained",
    "TrainingDivergence",
    "TrainingCancelled",
    "DataFetchError",
    "ForecastError",
]
