"""Tests for sliding-window sequence creation."""

import numpy as np
import pytest

from wind_forecast.exceptions import InsufficientData
from wind_forecast.features import count_windows, create_sequences, label_timestamps


@pytest.mark.parametrize(
    "n_rows,time_steps,horizon,expected",
    [(40, 16, 4, 21), (20, 16, 4, 1), (19, 16, 4, 0), (10, 16, 4, 0), (5, 2, 1, 3)],
)
def test_count_windows(n_rows, time_steps, horizon, expected):
    assert count_windows(n_rows, time_steps, horizon) == expected


def test_create_sequences_shapes_and_content():
    n_rows, n_features = 40, 6
    matrix = np.arange(n_rows * n_features, dtype=np.float64).reshape(n_rows, n_features)

    inputs, labels = create_sequences(matrix, time_steps=16, horizon=4)

    assert inputs.shape == (21, 16 * n_features)
    assert labels.shape == (21, 4 * n_features)
    assert inputs.dtype == np.float32
    np.testing.assert_array_equal(inputs[0], matrix[0:16].reshape(-1))
    np.testing.assert_array_equal(labels[0], matrix[16:20].reshape(-1))
    np.testing.assert_array_equal(inputs[-1], matrix[20:36].reshape(-1))
    np.testing.assert_array_equal(labels[-1], matrix[36:40].reshape(-1))


def test_single_step_horizon():
    matrix = np.arange(10, dtype=np.float64).reshape(10, 1)
    inputs, labels = create_sequences(matrix, time_steps=3, horizon=1)

    assert len(inputs) == 7
    np.testing.assert_array_equal(labels.ravel(), np.arange(3, 10))


def test_too_short_series_raises():
    with pytest.raises(InsufficientData):
        create_sequences(np.zeros((19, 6)), time_steps=16, horizon=4)


def test_label_timestamps_align_with_labels():
    timestamps = [1000 * i for i in range(40)]
    times = label_timestamps(timestamps, time_steps=16, horizon=4)

    assert times.shape == (21, 4)
    assert times[0].tolist() == [16000, 17000, 18000, 19000]
    assert times[-1].tolist() == [36000, 37000, 38000, 39000]

    with pytest.raises(InsufficientData):
        label_timestamps(timestamps[:19], time_steps=16, horizon=4)
