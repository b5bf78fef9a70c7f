"""Models module."""

from .base import TrainedModel, TrainingProgress
from .predictor import PredictionChunk, confidence_label, predict_next_hours
from .regressor import WeatherRegressor, select_hidden_sizes
from .training import TrainingResult, WeatherTrainer, train_model

__all__ = [
    "TrainedModel",
    "TrainingProgress",
    "WeatherRegressor",
    "select_hidden_sizes",
    "WeatherTrainer",
    "TrainingResult",
    "train_model",
    "PredictionChunk",
    "confidence_label",
    "predict_next_hours",
]
