"""
Autoregressive multi-step forecasting.

Each step standardizes the current window with the training stats, predicts
the next hour, clamps it to physical ranges and feeds it back into the window.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import torch
from loguru import logger

from ..cancellation import CancellationToken, check_cancelled
from ..config import HOUR_MS
from ..data.observation import Observation, validate_series
from ..exceptions import ForecastError, InsufficientData, ModelNotTrained
from ..features.directions import wrap_degrees
from ..features.normalization import (
    decode_vector,
    denormalize,
    encode_observations,
    encode_values,
    normalize,
)
from .base import ProgressCallback, TrainedModel, TrainingProgress, emit_progress, tensor_scope


@dataclass
class PredictionChunk:
    """One forecast hour [start_time, end_time) with its confidence."""

    start_time: int
    end_time: int
    temperature: float
    wind_speed: float
    wind_gusts: float
    wind_direction: float
    humidity: float
    confidence: float
    wave_height: Optional[float] = None
    wave_period: Optional[float] = None
    swell_direction: Optional[float] = None

    @property
    def confidence_label(self) -> str:
        return confidence_label(self.confidence)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["confidence_label"] = self.confidence_label
        return data


def confidence_label(confidence: float) -> str:
    """Bucket a confidence score: high (>= 0.7), medium (>= 0.4) or low."""
    if confidence >= 0.7:
        return "high"
    if confidence >= 0.4:
        return "medium"
    return "low"


def clamp_values(values: Dict[str, float]) -> Dict[str, float]:
    """
    Clamp decoded values to physically valid ranges.

    Speeds >= 0, gusts >= speed, humidity in [0, 100], wave height/period >= 0,
    directions wrapped into [0, 360).
    """
    clamped = dict(values)
    clamped["wind_speed"] = max(0.0, float(values["wind_speed"]))
    clamped["wind_gusts"] = max(float(values["wind_gusts"]), clamped["wind_speed"])
    clamped["wind_direction"] = wrap_degrees(values["wind_direction"])
    clamped["humidity"] = min(100.0, max(0.0, float(values["humidity"])))
    if "wave_height" in values:
        clamped["wave_height"] = max(0.0, float(values["wave_height"]))
        clamped["wave_period"] = max(0.0, float(values["wave_period"]))
        clamped["swell_direction"] = wrap_degrees(values["swell_direction"])
    return clamped


def chunk_confidence(step: int, decay_rate: float) -> float:
    return max(0.0, 1.0 - step * decay_rate)


def predict_next_hours(
    model: Optional[TrainedModel],
    recent_observations: Sequence[Observation],
    horizon: int,
    on_progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> List[PredictionChunk]:
    """
    Forecast the next `horizon` hours by autoregressive rollout.

    Args:
        model: Trained model handle from train_model()
        recent_observations: At least time_steps observations; the last
            time_steps (by timestamp) form the initial window
        horizon: Number of hourly chunks to produce
        on_progress: Optional progress callback ('predicting' stage)
        cancel_token: Checked before every rollout step

    Returns:
        Exactly `horizon` contiguous chunks, the first starting one hour after
        the last observation. All or nothing: any failure raises.
    """
    if model is None or not isinstance(model, TrainedModel):
        raise ModelNotTrained("No trained model: call train_model() first")
    model.require_usable()

    horizon = int(horizon)
    if horizon < 1:
        raise ValueError(f"horizon must be >= 1, got {horizon}")

    config = model.config
    time_steps = config.time_steps
    if len(recent_observations) < time_steps:
        raise InsufficientData(
            f"Need at least {time_steps} recent observations for prediction, "
            f"got {len(recent_observations)}"
        )

    ordered = validate_series(recent_observations, config.include_marine)[-time_steps:]
    last_timestamp = ordered[-1].timestamp
    window = encode_observations(ordered, config.include_marine)
    n_features = window.shape[1]

    emit_progress(
        on_progress,
        TrainingProgress(
            current_epoch=config.epochs,
            total_epochs=config.epochs,
            loss=0.0,
            stage="predicting",
            progress=1.0,
        ),
    )

    chunks: List[PredictionChunk] = []
    with tensor_scope(model.device):
        for step in range(horizon):
            check_cancelled(cancel_token, f"rollout step {step + 1}/{horizon}")

            inputs = normalize(window, model.stats).astype(np.float32).reshape(1, -1)
            output = model.network.predict(torch.from_numpy(inputs).to(model.device))
            next_step = output.cpu().numpy().reshape(-1)[:n_features]

            if not np.all(np.isfinite(next_step)):
                raise ForecastError(f"Non-finite model output at rollout step {step + 1}")

            values = clamp_values(
                decode_vector(denormalize(next_step, model.stats), config.include_marine)
            )

            start_time = last_timestamp + (step + 1) * HOUR_MS
            chunks.append(
                PredictionChunk(
                    start_time=start_time,
                    end_time=start_time + HOUR_MS,
                    temperature=values["temperature"],
                    wind_speed=values["wind_speed"],
                    wind_gusts=values["wind_gusts"],
                    wind_direction=values["wind_direction"],
                    humidity=values["humidity"],
                    confidence=chunk_confidence(step, config.decay_rate),
                    wave_height=values.get("wave_height"),
                    wave_period=values.get("wave_period"),
                    swell_direction=values.get("swell_direction"),
                )
            )

            # Slide: drop the oldest row, append the clamped prediction
            window = np.vstack([window[1:], encode_values(values, config.include_marine)])

    logger.info(
        f"Generated {len(chunks)} forecast chunks from {time_steps}-hour window, "
        f"final confidence={chunks[-1].confidence:.2f}"
    )
    return chunks
