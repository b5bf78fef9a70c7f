"""Model configuration, performance presets and process settings."""

import os
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Optional

import torch

# Process settings (environment overrides)
DEVICE = os.getenv("WIND_FORECAST_DEVICE", "cuda" if torch.cuda.is_available() else "cpu")
SEED = int(os.getenv("WIND_FORECAST_SEED", 42))
OPEN_METEO_URL = os.getenv("OPEN_METEO_URL", "https://api.open-meteo.com/v1/forecast")
OPEN_METEO_MARINE_URL = os.getenv(
    "OPEN_METEO_MARINE_URL", "https://marine-api.open-meteo.com/v1/marine"
)
HTTP_TIMEOUT = float(os.getenv("WIND_FORECAST_HTTP_TIMEOUT", 15))

HOUR_MS = 3_600_000

PERFORMANCE_PRESETS: Dict[str, Dict[str, Any]] = {
    # fewer epochs, larger batch, shorter window
    "fast": {"epochs": 5, "batch_size": 32, "time_steps": 12, "decay_rate": 0.04},
    "balanced": {"epochs": 10, "batch_size": 16, "time_steps": 16, "decay_rate": 0.035},
    "accurate": {"epochs": 25, "batch_size": 8, "time_steps": 24, "decay_rate": 0.03},
}


@dataclass
class ModelConfig:
    """
    Configuration for one training + prediction run.

    epochs, batch_size, time_steps and decay_rate left as None take the
    values of performance_preset.
    """

    time_steps: Optional[int] = None  # input window length, hours
    prediction_steps: int = 4  # trained horizon, hours
    epochs: Optional[int] = None
    batch_size: Optional[int] = None
    learning_rate: float = 1e-3
    performance_preset: str = "balanced"
    use_light_model: bool = False
    validation_split: float = 0.1
    decay_rate: Optional[float] = None  # confidence lost per forecast hour
    dropout: float = 0.2
    seed: int = SEED
    include_marine: bool = False

    def __post_init__(self):
        if self.performance_preset not in PERFORMANCE_PRESETS:
            raise ValueError(
                f"Unknown performance preset: {self.performance_preset}. "
                f"Available: {list(PERFORMANCE_PRESETS.keys())}"
            )
        for name, value in PERFORMANCE_PRESETS[self.performance_preset].items():
            if getattr(self, name) is None:
                setattr(self, name, value)

    @classmethod
    def from_preset(cls, preset: str = "balanced", **overrides) -> "ModelConfig":
        """
        Build a config from a performance preset.

        Args:
            preset: 'fast', 'balanced' or 'accurate'
            **overrides: Explicit field values, applied over the preset

        Returns:
            Validated ModelConfig
        """
        values = {k: v for k, v in overrides.items() if v is not None}
        return cls(performance_preset=preset, **values).validate()

    def validate(self) -> "ModelConfig":
        if self.performance_preset not in PERFORMANCE_PRESETS:
            raise ValueError(f"Unknown performance preset: {self.performance_preset}")
        for name in ("time_steps", "prediction_steps", "epochs", "batch_size"):
            if int(getattr(self, name)) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}")
        if not self.learning_rate > 0:
            raise ValueError(f"learning_rate must be > 0, got {self.learning_rate}")
        if not 0.0 <= self.validation_split < 1.0:
            raise ValueError(f"validation_split must be in [0, 1), got {self.validation_split}")
        if not 0.0 <= self.decay_rate <= 1.0:
            raise ValueError(f"decay_rate must be in [0, 1], got {self.decay_rate}")
        if not 0.0 <= self.dropout < 1.0:
            raise ValueError(f"dropout must be in [0, 1), got {self.dropout}")
        return self

    def with_overrides(self, **overrides) -> "ModelConfig":
        values = {k: v for k, v in overrides.items() if v is not None}
        preset = values.get("performance_preset", self.performance_preset)
        if preset != self.performance_preset:
            # Switching preset re-derives the preset fields not given explicitly
            for name in PERFORMANCE_PRESETS.get(preset, {}):
                values.setdefault(name, None)
        return replace(self, **values).validate()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def resolve_device(device: Optional[str] = None) -> str:
    """Return the requested device, falling back to the process default."""
    return device or DEVICE
