"""Tests for direction encoding, normalization stats and the normalizer."""

import numpy as np
import pytest

from wind_forecast.features import (
    compass_point,
    components_to_direction,
    compute_stats,
    decode_vector,
    denormalize,
    direction_to_components,
    encode_observations,
    encode_values,
    get_feature_columns,
    normalize,
    wrap_degrees,
)
from wind_forecast.features.normalization import STD_EPSILON

from conftest import make_observations


@pytest.mark.parametrize("degrees,expected", [(0, 0.0), (360, 0.0), (370, 10.0), (-10, 350.0)])
def test_wrap_degrees(degrees, expected):
    assert wrap_degrees(degrees) == pytest.approx(expected)


def test_direction_components_round_trip():
    degrees = np.array([0.0, 1.0, 90.0, 180.0, 270.0, 359.0])
    sin_c, cos_c = direction_to_components(degrees)
    np.testing.assert_allclose(components_to_direction(sin_c, cos_c), degrees, atol=1e-9)


def test_neighbouring_directions_are_close_when_encoded():
    a = np.array(direction_to_components(359.0))
    b = np.array(direction_to_components(1.0))
    assert np.linalg.norm(a - b) < 0.05


@pytest.mark.parametrize(
    "degrees,label", [(0, "N"), (350, "N"), (45, "NE"), (200, "SSW"), (270, "W")]
)
def test_compass_point(degrees, label):
    assert compass_point(degrees) == label


def test_encode_observations_shape():
    observations = make_observations(10, marine=True)
    assert encode_observations(observations).shape == (10, len(get_feature_columns()))
    assert encode_observations(observations, include_marine=True).shape == (
        10,
        len(get_feature_columns(include_marine=True)),
    )


def test_compute_stats_population_std_with_epsilon():
    series = encode_observations(make_observations(30))
    stats = compute_stats(series)

    np.testing.assert_allclose(stats.mean, series.mean(axis=0))
    np.testing.assert_allclose(stats.std, series.std(axis=0) + STD_EPSILON)
    assert stats.n_features == series.shape[1]


def test_constant_column_does_not_divide_by_zero():
    series = encode_observations(make_observations(10))
    series[:, 0] = 7.0
    stats = compute_stats(series)

    assert stats.std[0] == pytest.approx(STD_EPSILON)
    assert np.all(np.isfinite(normalize(series, stats)))
    np.testing.assert_allclose(normalize(series, stats)[:, 0], 0.0)


def test_compute_stats_rejects_bad_shapes():
    with pytest.raises(ValueError):
        compute_stats(np.empty((0, len(get_feature_columns()))))
    with pytest.raises(ValueError):
        compute_stats(np.ones((5, 3)))


def test_normalize_denormalize_inverse():
    series = encode_observations(make_observations(25))
    stats = compute_stats(series)

    standardized = normalize(series, stats)
    np.testing.assert_allclose(standardized.mean(axis=0), 0.0, atol=1e-9)
    np.testing.assert_allclose(denormalize(standardized, stats), series, rtol=1e-10, atol=1e-10)
    np.testing.assert_allclose(denormalize(normalize(series[3], stats), stats), series[3])


def test_decode_vector_rebuilds_physical_values():
    observation = make_observations(1, marine=True)[0]
    row = encode_observations([observation], include_marine=True)[0]
    values = decode_vector(row, include_marine=True)

    assert values["wind_speed"] == pytest.approx(observation.wind_speed)
    assert values["wind_direction"] == pytest.approx(observation.wind_direction)
    assert values["swell_direction"] == pytest.approx(observation.swell_direction)
    np.testing.assert_allclose(encode_values(values, include_marine=True), row)


def test_stats_to_dict_lists_every_column():
    stats = compute_stats(encode_observations(make_observations(12)))
    summary = stats.to_dict()

    assert list(summary) == get_feature_columns()
    assert summary["wind_speed"]["std"] > 0
