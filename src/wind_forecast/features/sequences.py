"""Sliding-window sequence creation for the regression model."""

from typing import Sequence, Tuple

import numpy as np
from loguru import logger

from ..exceptions import InsufficientData


def count_windows(n_rows: int, time_steps: int, horizon: int) -> int:
    """Number of (input, label) pairs a series of n_rows yields."""
    return max(0, n_rows - time_steps - horizon + 1)


def create_sequences(
    matrix: np.ndarray,
    time_steps: int,
    horizon: int,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Slice a standardized series into flattened input windows and labels.

    Uses a sliding context window of time_steps rows to predict the next
    horizon rows. horizon=1 gives single-step training pairs; the trainer uses
    horizon=prediction_steps (direct multi-step labels).

    Args:
        matrix: (N, F) chronologically sorted standardized features
        time_steps: Input window length T
        horizon: Label length H

    Returns:
        Tuple of (inputs, labels):
            - inputs: (M, T*F) flattened windows [i, i+T)
            - labels: (M, H*F) flattened targets [i+T, i+T+H)
        where M = N - T - H + 1.
    """
    n_rows = int(np.shape(matrix)[0])
    n_windows = count_windows(n_rows, time_steps, horizon)
    if n_windows <= 0:
        raise InsufficientData(
            f"Series too short. Need at least {time_steps + horizon} rows "
            f"(time_steps={time_steps} + horizon={horizon}), got {n_rows}"
        )

    matrix = np.asarray(matrix, dtype=np.float32)
    n_features = matrix.shape[1]

    inputs = np.empty((n_windows, time_steps * n_features), dtype=np.float32)
    labels = np.empty((n_windows, horizon * n_features), dtype=np.float32)

    for i in range(n_windows):
        inputs[i] = matrix[i : i + time_steps].reshape(-1)
        labels[i] = matrix[i + time_steps : i + time_steps + horizon].reshape(-1)

    logger.info(
        f"Created {n_windows} sequences: time_steps={time_steps}, horizon={horizon}, "
        f"features={n_features}"
    )

    return inputs, labels


def label_timestamps(timestamps: Sequence[int], time_steps: int, horizon: int) -> np.ndarray:
    """
    Target timestamp of every label row, aligned with create_sequences().

    Returns:
        (M, H) int64 array; row i holds timestamps[i+T : i+T+H]
    """
    timestamps = np.asarray(timestamps, dtype=np.int64)
    n_windows = count_windows(len(timestamps), time_steps, horizon)
    if n_windows <= 0:
        raise InsufficientData(
            f"Series too short. Need at least {time_steps + horizon} timestamps, "
            f"got {len(timestamps)}"
        )
    return np.stack(
        [timestamps[i + time_steps : i + time_steps + horizon] for i in range(n_windows)]
    )
