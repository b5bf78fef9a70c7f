"""
FastAPI application for short-horizon wind and marine forecasting.

Every request trains a fresh model on the supplied (or fetched) history,
rolls it forward and reports held-out accuracy. Nothing is persisted.
"""

import math
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from fastapi import FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from wind_forecast import __version__
from wind_forecast.config import DEVICE, ModelConfig
from wind_forecast.data import (
    Observation,
    get_provider,
    observations_from_records,
    split_observations,
)
from wind_forecast.exceptions import (
    DataFetchError,
    InsufficientData,
    InvalidObservation,
    ModelNotTrained,
    WindForecastError,
)
from wind_forecast.session import ForecastSession

from .schemas import (
    ChunkOut,
    ForecastRequest,
    ForecastResponse,
    HealthResponse,
    LocationForecastRequest,
    LocationForecastResponse,
    MetricsOut,
    ModelOptions,
    ObservationIn,
)

# Initialize FastAPI app
app = FastAPI(
    title="Wind Forecast API",
    description="Short-horizon weather and marine forecasts from recent hourly observations",
    version=__version__,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger.info(f"API initialized with device: {DEVICE}")


def build_config(options: ModelOptions) -> ModelConfig:
    """ModelConfig from a request: preset defaults, then explicit fields."""
    return ModelConfig.from_preset(
        options.performance_preset,
        use_light_model=options.use_light_model,
        time_steps=options.time_steps,
        prediction_steps=options.prediction_steps,
        epochs=options.epochs,
        batch_size=options.batch_size,
        learning_rate=options.learning_rate,
        include_marine=options.include_marine,
    )


def to_http_error(error: Exception) -> HTTPException:
    """Map engine exceptions to HTTP status codes."""
    if isinstance(error, (InsufficientData, InvalidObservation, ValueError)):
        status_code = 400
    elif isinstance(error, ModelNotTrained):
        status_code = 409
    elif isinstance(error, DataFetchError):
        status_code = 502
    else:
        status_code = 500
    return HTTPException(status_code=status_code, detail=str(error))


def _finite_or_none(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


def run_forecast(
    observations: Sequence[Observation],
    config: ModelConfig,
    horizon: int,
) -> Dict[str, Any]:
    """Train, predict and evaluate in one scoped session. Blocking."""
    start = time.time()
    with ForecastSession(config, device=DEVICE) as session:
        result = session.train(observations)
        chunks = session.predict(observations, horizon)
        metrics = session.evaluate(result)
    training_time = time.time() - start

    metrics_out = MetricsOut(
        **{**metrics.to_dict(), "r2_score": _finite_or_none(metrics.r2_score)}
    )

    logger.info(
        f"Forecast complete: {len(chunks)} chunks, rmse={metrics.rmse:.4f}, "
        f"time={training_time:.1f}s"
    )
    return {
        "horizon": horizon,
        "chunks": [ChunkOut(**chunk.to_dict()) for chunk in chunks],
        "metrics": metrics_out,
        "config": config.to_dict(),
        "training_time": training_time,
    }


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint."""
    return {
        "message": "Wind Forecast API",
        "version": __version__,
        "docs": "/docs",
    }


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        device=DEVICE,
    )


@app.post("/forecast", response_model=ForecastResponse, tags=["Forecast"])
async def forecast(request: ForecastRequest):
    """
    Forecast the next hours from supplied observations.

    Trains on the full history, forecasts `horizon` hours past the last
    observation and returns hold-out metrics.
    """
    try:
        logger.info(
            f"Forecast request: {len(request.observations)} observations, "
            f"preset={request.performance_preset}, horizon={request.horizon}"
        )
        config = build_config(request)
        observations = observations_from_records(o.model_dump() for o in request.observations)
        payload = await run_in_threadpool(run_forecast, observations, config, request.horizon)
        return ForecastResponse(**payload)

    except (WindForecastError, ValueError) as e:
        logger.error(f"Error in forecast endpoint: {e}")
        raise to_http_error(e)


@app.post("/forecast/location", response_model=LocationForecastResponse, tags=["Forecast"])
async def forecast_location(request: LocationForecastRequest):
    """
    Forecast a location from Open-Meteo history.

    The provider's own forecast for the same hours is returned alongside for
    comparison.
    """
    try:
        logger.info(
            f"Location forecast request: lat={request.latitude}, lon={request.longitude}, "
            f"preset={request.performance_preset}, horizon={request.horizon}"
        )
        config = build_config(request)
        provider = get_provider("open-meteo", past_days=request.past_days)
        observations = await run_in_threadpool(
            provider.fetch_observations, request.latitude, request.longitude
        )
        historical, upcoming = split_observations(observations)

        payload = await run_in_threadpool(run_forecast, historical, config, request.horizon)
        provider_forecast: List[ObservationIn] = [
            ObservationIn(**o.to_dict()) for o in upcoming[: request.horizon]
        ]

        return LocationForecastResponse(
            **payload,
            latitude=request.latitude,
            longitude=request.longitude,
            observations_used=len(historical),
            provider_forecast=provider_forecast,
        )

    except (WindForecastError, ValueError) as e:
        logger.error(f"Error in location forecast endpoint: {e}")
        raise to_http_error(e)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
