"""
Pytest fixtures for wind forecast tests.
"""
import numpy as np
import pytest

from wind_forecast.config import HOUR_MS, ModelConfig
from wind_forecast.data import Observation
from wind_forecast.models import train_model

# 2023-11-14T23:00:00Z, on the hour
BASE_TIMESTAMP = 1_700_002_800_000


def make_observations(n, start=BASE_TIMESTAMP, marine=False, seed=0):
    """Hourly series with a daily cycle plus a little noise."""
    rng = np.random.default_rng(seed)
    observations = []
    for i in range(n):
        phase = 2 * np.pi * i / 24
        wind_speed = 12.0 + 4.0 * np.sin(phase) + rng.normal(0, 0.5)
        marine_values = {}
        if marine:
            marine_values = {
                "wave_height": 1.2 + 0.3 * np.sin(phase),
                "wave_period": 7.0 + 0.5 * np.cos(phase),
                "swell_direction": (250.0 + 15.0 * np.sin(phase)) % 360,
            }
        observations.append(
            Observation(
                timestamp=start + i * HOUR_MS,
                temperature=15.0 + 5.0 * np.sin(phase),
                wind_speed=max(0.0, wind_speed),
                wind_gusts=max(0.0, wind_speed) * 1.4 + 1.0,
                wind_direction=(200.0 + 40.0 * np.sin(phase)) % 360,
                humidity=65.0 + 20.0 * np.cos(phase),
                **marine_values,
            )
        )
    return observations


@pytest.fixture
def hourly_observations():
    """40 hourly observations."""
    return make_observations(40)


@pytest.fixture
def marine_observations():
    """40 hourly observations with wave data."""
    return make_observations(40, marine=True)


@pytest.fixture
def tiny_config():
    """Small, fast config: T=16, H=4, two epochs."""
    return ModelConfig(time_steps=16, prediction_steps=4, epochs=2, batch_size=8, seed=0)


@pytest.fixture(scope="module")
def trained():
    """A model trained once per test module on 40 observations."""
    config = ModelConfig(time_steps=16, prediction_steps=4, epochs=2, batch_size=8, seed=0)
    observations = make_observations(40)
    result = train_model(observations, config, device="cpu")
    yield result, observations
    result.dispose()
