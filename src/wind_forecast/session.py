"""
Forecast session: the single owner of a trained model and its stats.

A session runs at most one training at a time. Starting a new run (new
location or new config) cancels the one in flight, waits for it to unwind
and releases its model before training again.
"""

import threading
from typing import List, Optional, Sequence

from loguru import logger

from .cancellation import CancellationToken
from .config import ModelConfig, resolve_device
from .data.observation import Observation
from .evaluation.metrics import ModelMetrics, compute_metrics
from .exceptions import ModelNotTrained
from .models.base import ProgressCallback, TrainedModel
from .models.predictor import PredictionChunk, predict_next_hours
from .models.training import TrainingResult, train_model


class ForecastSession:
    """
    Scoped train/predict/dispose lifecycle.

    Use as a context manager so the model is released on every exit path:

        with ForecastSession(config) as session:
            result = session.train(history, on_progress=print)
            chunks = session.predict(history, horizon=24)
    """

    def __init__(self, config: Optional[ModelConfig] = None, device: Optional[str] = None):
        self.config = (config or ModelConfig()).validate()
        self.device = resolve_device(device)
        self._model: Optional[TrainedModel] = None
        self._token = CancellationToken()
        self._state_lock = threading.Lock()
        self._run_lock = threading.Lock()
        self._closed = False

    def __enter__(self) -> "ForecastSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def is_trained(self) -> bool:
        model = self._model
        return model is not None and model.is_usable

    @property
    def model(self) -> Optional[TrainedModel]:
        return self._model

    def invalidate(self, reason: str = "invalidated") -> CancellationToken:
        """
        Cancel any running training and release the current model.

        Returns the fresh token that replaced the cancelled one.
        """
        with self._state_lock:
            self._token.cancel(reason)
            token = self._token = CancellationToken()
        # Wait for the cancelled run to reach its next check and unwind
        with self._run_lock:
            with self._state_lock:
                model, self._model = self._model, None
            if model is not None:
                model.dispose()
        return token

    def reconfigure(self, config: ModelConfig) -> None:
        """Switch config; the current model no longer matches and is dropped."""
        self.invalidate("config changed")
        self.config = config.validate()

    def train(
        self,
        observations: Sequence[Observation],
        on_progress: Optional[ProgressCallback] = None,
    ) -> TrainingResult:
        """
        Train a fresh model, replacing (and cancelling) any previous one.

        On failure the session is left untrained.
        """
        self._ensure_open()
        token = self.invalidate("superseded by a new training run")

        with self._run_lock:
            token.raise_if_cancelled("queued training")
            result = train_model(
                observations,
                self.config,
                on_progress=on_progress,
                cancel_token=token,
                device=self.device,
            )
            with self._state_lock:
                if token.cancelled:
                    result.model.dispose()
                    token.raise_if_cancelled("training")
                self._model = result.model

        logger.info("Session model trained")
        return result

    def predict(
        self,
        recent_observations: Sequence[Observation],
        horizon: int,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[PredictionChunk]:
        """Forecast with the session's model; raises ModelNotTrained if there is none."""
        self._ensure_open()
        with self._state_lock:
            token = self._token
        with self._run_lock:
            model = self._model
            if model is None:
                raise ModelNotTrained("Session has no trained model")
            return predict_next_hours(
                model,
                recent_observations,
                horizon,
                on_progress=on_progress,
                cancel_token=token,
            )

    def evaluate(self, result: TrainingResult) -> ModelMetrics:
        return compute_metrics(
            result.actuals,
            result.predictions,
            training_loss=result.training_loss,
            validation_loss=result.validation_loss,
            timestamps=result.timestamps,
            variable_pairs=result.variable_pairs,
        )

    def close(self) -> None:
        """Cancel outstanding work and release the model. Idempotent."""
        if self._closed:
            return
        self.invalidate("session closed")
        self._closed = True
        logger.info("Forecast session closed")

    def _ensure_open(self) -> None:
        if self._closed:
            raise ModelNotTrained("Session is closed")
