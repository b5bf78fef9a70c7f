"""Pydantic schemas for API requests and responses."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

_CAMEL_FIELDS = {
    "windSpeed": "wind_speed",
    "windGusts": "wind_gusts",
    "windDirection": "wind_direction",
    "waveHeight": "wave_height",
    "wavePeriod": "wave_period",
    "swellDirection": "swell_direction",
    "performancePreset": "performance_preset",
    "useLightModel": "use_light_model",
    "timeSteps": "time_steps",
    "predictionSteps": "prediction_steps",
    "batchSize": "batch_size",
    "learningRate": "learning_rate",
    "includeMarine": "include_marine",
}


def _snake_case_keys(data):
    if isinstance(data, dict):
        return {_CAMEL_FIELDS.get(key, key): value for key, value in data.items()}
    return data


class ObservationIn(BaseModel):
    """One hourly observation (camelCase or snake_case keys)."""

    timestamp: int = Field(..., description="Millisecond epoch")
    temperature: float
    wind_speed: float = Field(..., ge=0)
    wind_gusts: float = Field(..., ge=0)
    wind_direction: float = Field(..., ge=0, le=360)
    humidity: float = Field(..., ge=0, le=100)
    wave_height: Optional[float] = Field(None, ge=0)
    wave_period: Optional[float] = Field(None, ge=0)
    swell_direction: Optional[float] = Field(None, ge=0, le=360)

    @model_validator(mode="before")
    @classmethod
    def normalize_fields(cls, data):
        return _snake_case_keys(data)


class ModelOptions(BaseModel):
    """Model settings shared by the forecast requests. Unset fields use the preset."""

    performance_preset: str = Field("balanced", description="'fast', 'balanced' or 'accurate'")
    use_light_model: bool = Field(False, description="Use the two-layer light network")
    time_steps: Optional[int] = Field(None, ge=1, description="Input window length (hours)")
    prediction_steps: Optional[int] = Field(None, ge=1, description="Trained horizon (hours)")
    epochs: Optional[int] = Field(None, ge=1, description="Training epochs")
    batch_size: Optional[int] = Field(None, ge=1, description="Batch size")
    learning_rate: Optional[float] = Field(None, gt=0, description="Learning rate")
    include_marine: bool = Field(False, description="Train on wave features too")
    horizon: int = Field(24, ge=1, le=168, description="Forecast hours")

    @model_validator(mode="before")
    @classmethod
    def normalize_fields(cls, data):
        return _snake_case_keys(data)


class ForecastRequest(ModelOptions):
    """Request schema for forecasting from supplied observations."""

    observations: List[ObservationIn] = Field(..., description="Hourly history, any order")


class LocationForecastRequest(ModelOptions):
    """Request schema for forecasting a location from Open-Meteo data."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    past_days: int = Field(7, ge=1, le=92, description="History to train on (days)")


class ChunkOut(BaseModel):
    """One forecast hour."""

    start_time: int
    end_time: int
    temperature: float
    wind_speed: float
    wind_gusts: float
    wind_direction: float
    humidity: float
    confidence: float
    confidence_label: str
    wave_height: Optional[float] = None
    wave_period: Optional[float] = None
    swell_direction: Optional[float] = None


class SeriesPointOut(BaseModel):
    """Held-out actual vs predicted value at one target hour."""

    timestamp: int
    actual: float
    predicted: float


class MetricsOut(BaseModel):
    """Accuracy report for the trained model."""

    rmse: float
    mae: float
    # NaN when the held-out actuals are constant
    r2_score: Optional[float] = None
    confidence_intervals: Dict[str, float]
    sample_size: int
    training_loss: List[float]
    validation_loss: List[float]
    error_distribution: List[float]
    actuals: List[float] = Field(default_factory=list, description="Held-out wind speed")
    predictions: List[float] = Field(default_factory=list)
    wind_speed_data: List[SeriesPointOut] = Field(default_factory=list)
    wind_direction_data: List[SeriesPointOut] = Field(default_factory=list)
    wave_height_data: List[SeriesPointOut] = Field(default_factory=list)
    validation_strategy: str
    timestamp: str


class ForecastResponse(BaseModel):
    """Response schema for forecasts."""

    horizon: int
    chunks: List[ChunkOut]
    metrics: MetricsOut
    config: Dict
    training_time: Optional[float] = None


class LocationForecastResponse(ForecastResponse):
    """Forecast for a location alongside the provider's own forecast."""

    latitude: float
    longitude: float
    observations_used: int
    provider_forecast: List[ObservationIn] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str
    device: str
