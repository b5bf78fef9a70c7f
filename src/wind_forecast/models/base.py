"""Trained-model handle and scoped release of tensor resources."""

from contextlib import contextmanager
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Iterator, Optional

import torch
from loguru import logger

from ..config import ModelConfig
from ..exceptions import ModelNotTrained
from ..features.normalization import NormalizationStats
from .regressor import WeatherRegressor


@contextmanager
def tensor_scope(device: str) -> Iterator[None]:
    """
    Scope for tensor work.

    Cached device memory is returned on every exit path, including exceptions.
    """
    try:
        yield
    finally:
        if str(device).startswith("cuda") and torch.cuda.is_available():
            torch.cuda.empty_cache()


def release_network(network: Optional[WeatherRegressor]) -> None:
    """Drop parameter storage of a network so its buffers can be freed."""
    if network is None:
        return
    for param in network.parameters():
        param.grad = None
        param.data = torch.empty(0, device=param.device)


@dataclass
class TrainedModel:
    """
    Handle for a trained network and the stats fixed at training time.

    Owned by one session; call dispose() when done. A disposed handle raises
    ModelNotTrained on use.
    """

    network: Optional[WeatherRegressor]
    stats: Optional[NormalizationStats]
    config: ModelConfig
    device: str = "cpu"

    @property
    def is_usable(self) -> bool:
        return self.network is not None and self.stats is not None

    def require_usable(self) -> None:
        if not self.is_usable:
            raise ModelNotTrained("Model has been disposed or was never trained")

    def dispose(self) -> None:
        if self.network is None and self.stats is None:
            return
        with tensor_scope(self.device):
            release_network(self.network)
            self.network = None
            self.stats = None
        logger.info("Disposed trained model")


@dataclass
class TrainingProgress:
    """Progress event for the reporting collaborator. Never stored."""

    current_epoch: int
    total_epochs: int
    loss: float
    stage: str  # 'initializing', 'training', 'predicting'
    progress: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


ProgressCallback = Callable[[TrainingProgress], None]


def emit_progress(on_progress: Optional[ProgressCallback], progress: TrainingProgress) -> None:
    if on_progress is not None:
        on_progress(progress)
