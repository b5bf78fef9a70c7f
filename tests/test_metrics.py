"""Tests for accuracy metrics."""

import math

import numpy as np
import pytest

from wind_forecast.evaluation import (
    compute_metrics,
    compute_variable_metrics,
    confidence_intervals,
    error_distribution,
    time_series,
)


def test_perfect_predictions():
    metrics = compute_metrics([1.0, 2.0, 3.0], [1.0, 2.0, 3.0])

    assert metrics.rmse == 0.0
    assert metrics.mae == 0.0
    assert metrics.r2_score == 1.0
    assert metrics.sample_size == 3
    assert metrics.validation_strategy == "holdout"
    assert sum(metrics.error_distribution) == pytest.approx(100.0)


def test_known_errors():
    metrics = compute_metrics([1.0, 2.0, 3.0, 4.0], [2.0, 2.0, 3.0, 2.0])

    assert metrics.mae == pytest.approx(0.75)
    assert metrics.rmse == pytest.approx(math.sqrt(5.0 / 4.0))
    # SS_res = 5, SS_tot = 5
    assert metrics.r2_score == pytest.approx(0.0)


def test_constant_actuals_r2():
    assert compute_metrics([5.0, 5.0, 5.0], [5.0, 5.0, 5.0]).r2_score == 1.0
    assert math.isnan(compute_metrics([5.0, 5.0, 5.0], [4.0, 5.0, 6.0]).r2_score)


def test_confidence_intervals_scale_with_rmse():
    intervals = confidence_intervals(2.0)
    assert intervals["wind_speed"] == pytest.approx(1.96 * 2.0)
    assert intervals["wind_gusts"] == pytest.approx(1.96 * 2.0 * 1.3)
    assert intervals["wind_direction"] == pytest.approx(1.96 * 2.0 * 10.0)

    metrics = compute_metrics([0.0, 0.0], [1.0, -1.0])
    assert metrics.confidence_intervals["wind_speed"] == pytest.approx(1.96)


def test_error_distribution_bins():
    y_true = np.zeros(4)
    y_pred = np.array([0.2, 0.7, 1.4, 0.3])
    bins = error_distribution(y_true, y_pred, bin_width=0.5)

    # errors up to 1.4 -> ceil 2 -> 4 bins of 0.5
    assert len(bins) == 4
    assert bins == pytest.approx([50.0, 25.0, 25.0, 0.0])
    assert sum(bins) == pytest.approx(100.0)


def test_error_distribution_zero_errors_has_one_bin():
    assert error_distribution(np.ones(3), np.ones(3)) == [100.0]


def test_losses_are_carried():
    metrics = compute_metrics([1.0, 2.0], [1.5, 2.5], training_loss=[0.5, 0.2], validation_loss=[0.6])
    assert metrics.training_loss == [0.5, 0.2]
    assert metrics.validation_loss == [0.6]
    assert metrics.to_dict()["actuals"] == [1.0, 2.0]


@pytest.mark.parametrize(
    "actuals,predictions",
    [([], []), ([1.0, 2.0], [1.0]), ([1.0, float("nan")], [1.0, 2.0])],
)
def test_invalid_inputs_raise(actuals, predictions):
    with pytest.raises(ValueError):
        compute_metrics(actuals, predictions)


def test_direction_errors_wrap():
    results = compute_variable_metrics(
        {
            "wind_direction": ([350.0, 10.0], [10.0, 350.0]),
            "wind_speed": ([5.0, 6.0], [5.0, 7.0]),
        }
    )
    assert results["wind_direction"].mae == pytest.approx(20.0)
    assert results["wind_speed"].mae == pytest.approx(0.5)


def test_series_follow_timestamps():
    timestamps = [1000, 2000, 3000]
    pairs = {
        "wind_direction": ([10.0, 20.0, 30.0], [12.0, 18.0, 33.0]),
        "wave_height": ([1.0, 1.1, 1.2], [0.9, 1.2, 1.2]),
    }
    metrics = compute_metrics(
        [5.0, 6.0, 7.0], [5.5, 6.0, 6.5], timestamps=timestamps, variable_pairs=pairs
    )

    assert [p.timestamp for p in metrics.wind_speed_data] == timestamps
    assert [p.predicted for p in metrics.wind_speed_data] == [5.5, 6.0, 6.5]
    assert [p.actual for p in metrics.wind_direction_data] == [10.0, 20.0, 30.0]
    assert [p.predicted for p in metrics.wave_height_data] == [0.9, 1.2, 1.2]
    assert metrics.to_dict()["wind_speed_data"][0] == {
        "timestamp": 1000,
        "actual": 5.0,
        "predicted": 5.5,
    }


def test_series_empty_without_timestamps():
    metrics = compute_metrics([5.0, 6.0], [5.0, 6.5])

    assert metrics.actuals == [5.0, 6.0]
    assert metrics.predictions == [5.0, 6.5]
    assert metrics.wind_speed_data == []
    assert metrics.wind_direction_data == []
    assert metrics.wave_height_data == []


def test_time_series_length_mismatch():
    with pytest.raises(ValueError):
        time_series([1000, 2000], [1.0], [1.0])
