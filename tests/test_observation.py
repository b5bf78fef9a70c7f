"""Tests for the observation record and series validation."""

import math

import pytest

from wind_forecast.data import (
    Observation,
    observations_from_frame,
    observations_to_frame,
    validate_series,
)
from wind_forecast.exceptions import InvalidObservation

from conftest import BASE_TIMESTAMP, make_observations

VALID = {
    "timestamp": BASE_TIMESTAMP,
    "temperature": 14.5,
    "wind_speed": 10.0,
    "wind_gusts": 15.0,
    "wind_direction": 220.0,
    "humidity": 70.0,
}


def test_valid_observation():
    obs = Observation(**VALID)
    assert obs.timestamp == BASE_TIMESTAMP
    assert isinstance(obs.timestamp, int)
    assert obs.has_marine is False


def test_float_timestamp_is_cast_to_int():
    obs = Observation(**{**VALID, "timestamp": float(BASE_TIMESTAMP)})
    assert obs.timestamp == BASE_TIMESTAMP
    assert isinstance(obs.timestamp, int)


@pytest.mark.parametrize(
    "field,value",
    [
        ("wind_speed", -1.0),
        ("wind_gusts", -0.1),
        ("wind_direction", 361.0),
        ("wind_direction", -5.0),
        ("humidity", 101.0),
        ("temperature", math.nan),
        ("temperature", math.inf),
        ("humidity", "wet"),
        ("wind_speed", True),
    ],
)
def test_invalid_values_raise(field, value):
    with pytest.raises(InvalidObservation):
        Observation(**{**VALID, field: value})


def test_invalid_marine_values_raise():
    with pytest.raises(InvalidObservation):
        Observation(**VALID, wave_height=-0.5, wave_period=6.0, swell_direction=200.0)
    with pytest.raises(InvalidObservation):
        Observation(**VALID, wave_height=1.0, wave_period=6.0, swell_direction=400.0)


def test_boundary_directions_are_valid():
    assert Observation(**{**VALID, "wind_direction": 0.0}).wind_direction == 0.0
    assert Observation(**{**VALID, "wind_direction": 360.0}).wind_direction == 360.0


def test_from_dict_accepts_camel_case():
    obs = Observation.from_dict(
        {
            "timestamp": BASE_TIMESTAMP,
            "temperature": 12.0,
            "windSpeed": 8.0,
            "windGusts": 11.0,
            "windDirection": 90.0,
            "humidity": 55.0,
            "waveHeight": 1.1,
            "wavePeriod": 6.5,
            "swellDirection": 260.0,
            "source": "ignored",
        }
    )
    assert obs.wind_speed == 8.0
    assert obs.swell_direction == 260.0
    assert obs.has_marine is True


def test_from_dict_missing_field_raises():
    data = dict(VALID)
    del data["humidity"]
    with pytest.raises(InvalidObservation, match="humidity"):
        Observation.from_dict(data)


def test_to_dict_round_trip():
    obs = Observation(**VALID)
    assert Observation.from_dict(obs.to_dict()) == obs


def test_validate_series_sorts_by_timestamp():
    observations = make_observations(5)
    ordered = validate_series(list(reversed(observations)))
    assert [o.timestamp for o in ordered] == [o.timestamp for o in observations]


def test_validate_series_rejects_duplicates():
    observations = make_observations(3)
    with pytest.raises(InvalidObservation, match="Duplicate"):
        validate_series(observations + [observations[1]])


def test_validate_series_rejects_non_observations():
    with pytest.raises(InvalidObservation):
        validate_series(make_observations(2) + [dict(VALID)])


def test_validate_series_requires_marine_when_requested():
    with pytest.raises(InvalidObservation, match="wave data"):
        validate_series(make_observations(3), include_marine=True)
    assert len(validate_series(make_observations(3, marine=True), include_marine=True)) == 3


def test_frame_conversion_maps_nan_marine_to_none():
    df = observations_to_frame(make_observations(3))
    assert df["wave_height"].isna().all()

    observations = observations_from_frame(df)
    assert len(observations) == 3
    assert all(o.wave_height is None for o in observations)


def test_frame_conversion_rejects_nan_core_values():
    df = observations_to_frame(make_observations(3))
    df.loc[1, "wind_speed"] = float("nan")
    with pytest.raises(InvalidObservation):
        observations_from_frame(df)
