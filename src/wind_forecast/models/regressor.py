"""
Feed-forward regressor for hourly weather sequences.

Maps a flattened window of time_steps encoded observations to the next
prediction_steps encoded observations (direct multi-step output). The
predictor uses the first output step and rolls forward autoregressively.
"""

from typing import Sequence, Tuple

import torch
import torch.nn as nn
from loguru import logger

LIGHT_HIDDEN: Tuple[int, ...] = (32, 64)
STANDARD_HIDDEN: Tuple[int, ...] = (64, 128, 64)
ACCURATE_HIDDEN: Tuple[int, ...] = (128, 256, 128)


def select_hidden_sizes(use_light_model: bool, performance_preset: str) -> Tuple[int, ...]:
    """Hidden layer widths for a config."""
    if use_light_model:
        return LIGHT_HIDDEN
    if performance_preset == "accurate":
        return ACCURATE_HIDDEN
    return STANDARD_HIDDEN


class WeatherRegressor(nn.Module):
    """
    Deterministic MLP regressor over flattened observation windows.

    Architecture:
    - Linear + ReLU blocks, widths from select_hidden_sizes()
    - Dropout after each hidden block (standard model only)
    - Linear output head, prediction_steps * n_features values

    Training:
    - MSE regression loss on standardized targets

    Inference:
    - predict() runs in eval mode without gradients
    """

    def __init__(
        self,
        n_features: int,
        time_steps: int,
        prediction_steps: int,
        hidden_sizes: Sequence[int] = STANDARD_HIDDEN,
        dropout: float = 0.2,
    ):
        """
        Initialize regressor.

        Args:
            n_features: Encoded columns per observation
            time_steps: Input window length
            prediction_steps: Output horizon length
            hidden_sizes: Width of each hidden layer
            dropout: Dropout rate (0 disables)
        """
        super().__init__()

        if n_features < 1 or time_steps < 1 or prediction_steps < 1:
            raise ValueError(
                f"Invalid regressor shape: n_features={n_features}, "
                f"time_steps={time_steps}, prediction_steps={prediction_steps}"
            )

        self.n_features = n_features
        self.time_steps = time_steps
        self.prediction_steps = prediction_steps
        self.input_size = n_features * time_steps
        self.output_size = n_features * prediction_steps

        layers = []
        in_size = self.input_size
        for width in hidden_sizes:
            layers.append(nn.Linear(in_size, width))
            layers.append(nn.ReLU())
            if dropout > 0:
                layers.append(nn.Dropout(dropout))
            in_size = width
        self.hidden = nn.Sequential(*layers)
        self.output_layer = nn.Linear(in_size, self.output_size)

        logger.info(
            f"Initialized WeatherRegressor: input={self.input_size}, "
            f"hidden={list(hidden_sizes)}, dropout={dropout}, output={self.output_size}"
        )

    def forward(self, inputs: torch.Tensor) -> torch.Tensor:
        """
        Args:
            inputs: (batch, time_steps * n_features)

        Returns:
            (batch, prediction_steps * n_features)
        """
        return self.output_layer(self.hidden(inputs))

    def predict(self, inputs: torch.Tensor) -> torch.Tensor:
        """Forward pass in eval mode with gradients disabled."""
        self.eval()
        with torch.no_grad():
            return self.forward(inputs.to(dtype=torch.float32))

    def parameter_count(self) -> int:
        return sum(p.numel() for p in self.parameters())
