"""Training utilities for the weather regressor with MSE regression loss."""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import torch
import torch.nn.functional as F
from loguru import logger
from torch.utils.data import DataLoader, TensorDataset
from tqdm import tqdm

from ..cancellation import CancellationToken, check_cancelled
from ..config import ModelConfig, resolve_device
from ..data.observation import Observation, validate_series
from ..exceptions import InsufficientData, TrainingDivergence
from ..features.normalization import (
    NormalizationStats,
    compute_stats,
    decode_vector,
    denormalize,
    encode_observations,
    normalize,
)
from ..features.sequences import count_windows, create_sequences, label_timestamps
from .base import (
    ProgressCallback,
    TrainedModel,
    TrainingProgress,
    emit_progress,
    release_network,
    tensor_scope,
)
from .predictor import clamp_values
from .regressor import WeatherRegressor, select_hidden_sizes

PAIR_VARIABLES = ("temperature", "wind_speed", "wind_gusts", "wind_direction", "humidity")
MARINE_PAIR_VARIABLES = ("wave_height", "wave_period", "swell_direction")


def set_seed(seed: int) -> None:
    """Seed torch and numpy for reproducible weights, dropout and shuffling."""
    torch.manual_seed(seed)
    np.random.seed(seed)
    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(seed)


class WeatherTrainer:
    """
    Trainer for WeatherRegressor with MSE regression loss.

    Handles the epoch loop, validation, progress reporting, divergence
    detection and cooperative cancellation.
    """

    def __init__(
        self,
        model: WeatherRegressor,
        device: str = "cpu",
        seed: int = 42,
    ):
        """
        Initialize trainer.

        Args:
            model: WeatherRegressor instance
            device: 'cuda' or 'cpu'
            seed: Seed for the shuffling generator
        """
        self.model = model.to(device)
        self.device = device
        self.seed = seed
        self.generator = torch.Generator().manual_seed(seed)

        logger.info(f"Initialized WeatherTrainer on device: {device}, torch={torch.__version__}")

    def train(
        self,
        train_data: Dict[str, np.ndarray],
        val_data: Optional[Dict[str, np.ndarray]],
        config: ModelConfig,
        on_progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Dict[str, List[float]]:
        """
        Train the model.

        Args:
            train_data: Dict with 'inputs' (N, T*F) and 'labels' (N, H*F)
            val_data: Validation data (same format), or None
            config: ModelConfig (epochs, batch_size, learning_rate)
            on_progress: Called after every epoch with a TrainingProgress
            cancel_token: Checked before every epoch

        Returns:
            History dict with 'train_loss', 'val_loss' and 'epoch' lists
        """
        epochs = config.epochs

        train_loader = self._create_dataloader(train_data, config.batch_size, shuffle=True)
        val_loader = None
        if val_data is not None:
            val_loader = self._create_dataloader(val_data, config.batch_size, shuffle=False)

        optimizer = torch.optim.Adam(self.model.parameters(), lr=config.learning_rate)

        history = {
            "train_loss": [],
            "val_loss": [],
            "epoch": [],
        }

        logger.info(f"Starting training for {epochs} epochs")

        for epoch in range(epochs):
            check_cancelled(cancel_token, f"epoch {epoch + 1}/{epochs}")

            train_loss = self._train_epoch(train_loader, optimizer, epoch, epochs)
            history["train_loss"].append(train_loss)

            if val_loader is not None:
                val_loss = self._validate_epoch(val_loader)
                if not math.isfinite(val_loss):
                    raise TrainingDivergence(
                        f"Validation loss became non-finite at epoch {epoch + 1}"
                    )
                history["val_loss"].append(val_loss)
                logger.info(
                    f"Epoch {epoch + 1}/{epochs} - "
                    f"Train Loss: {train_loss:.6f}, Val Loss: {val_loss:.6f}"
                )
            else:
                logger.info(f"Epoch {epoch + 1}/{epochs} - Train Loss: {train_loss:.6f}")

            history["epoch"].append(epoch + 1)

            emit_progress(
                on_progress,
                TrainingProgress(
                    current_epoch=epoch + 1,
                    total_epochs=epochs,
                    loss=train_loss,
                    stage="training",
                    progress=(epoch + 1) / epochs,
                ),
            )

        logger.info("Training complete")
        return history

    def _train_epoch(
        self,
        train_loader: DataLoader,
        optimizer: torch.optim.Optimizer,
        epoch: int,
        epochs: int,
    ) -> float:
        """Run one training epoch with MSE loss."""
        self.model.train()
        total_loss = 0.0
        n_samples = 0

        for inputs, labels in tqdm(train_loader, desc=f"Epoch {epoch + 1}/{epochs}", leave=False):
            inputs = inputs.to(self.device)
            labels = labels.to(self.device)

            predictions = self.model(inputs)
            loss = F.mse_loss(predictions, labels)

            if not torch.isfinite(loss):
                raise TrainingDivergence(f"Training loss became non-finite at epoch {epoch + 1}")

            optimizer.zero_grad()
            loss.backward()

            # Gradient clipping to prevent exploding gradients
            torch.nn.utils.clip_grad_norm_(self.model.parameters(), max_norm=10.0)

            optimizer.step()

            total_loss += loss.item() * inputs.size(0)
            n_samples += inputs.size(0)

        return total_loss / max(n_samples, 1)

    def _validate_epoch(self, val_loader: DataLoader) -> float:
        """Run validation epoch with MSE loss."""
        self.model.eval()
        total_loss = 0.0
        n_samples = 0

        with torch.no_grad():
            for inputs, labels in val_loader:
                inputs = inputs.to(self.device)
                labels = labels.to(self.device)

                predictions = self.model(inputs)
                loss = F.mse_loss(predictions, labels)

                total_loss += loss.item() * inputs.size(0)
                n_samples += inputs.size(0)

        return total_loss / max(n_samples, 1)

    def predict_windows(self, inputs: np.ndarray) -> np.ndarray:
        """Model outputs (standardized) for a batch of flattened windows."""
        tensor = torch.from_numpy(np.asarray(inputs, dtype=np.float32)).to(self.device)
        return self.model.predict(tensor).cpu().numpy()

    def _create_dataloader(
        self,
        data: Dict[str, np.ndarray],
        batch_size: int,
        shuffle: bool,
    ) -> DataLoader:
        """Create PyTorch DataLoader from numpy arrays."""
        inputs = torch.FloatTensor(data["inputs"])
        labels = torch.FloatTensor(data["labels"])

        dataset = TensorDataset(inputs, labels)
        return DataLoader(
            dataset,
            batch_size=batch_size,
            shuffle=shuffle,
            generator=self.generator if shuffle else None,
        )


@dataclass
class TrainingResult:
    """Output of train_model()."""

    model: TrainedModel
    training_loss: List[float]
    validation_loss: List[float]
    actuals: List[float]
    predictions: List[float]
    variable_pairs: Dict[str, Tuple[List[float], List[float]]] = field(default_factory=dict)
    # Target timestamp of each pair, same order as actuals/predictions
    timestamps: List[int] = field(default_factory=list)

    def dispose(self) -> None:
        self.model.dispose()


def split_windows(
    inputs: np.ndarray,
    labels: np.ndarray,
    validation_split: float,
) -> Tuple[Dict[str, np.ndarray], Optional[Dict[str, np.ndarray]]]:
    """
    Hold out the last validation_split fraction of windows.

    At least one window is held out when two or more exist and the split is
    non-zero. Returns (train_data, val_data); val_data is None when nothing is
    held out.
    """
    n_windows = len(inputs)
    n_val = int(n_windows * validation_split)
    if n_val == 0 and n_windows >= 2 and validation_split > 0:
        n_val = 1

    if n_val == 0:
        return {"inputs": inputs, "labels": labels}, None

    n_train = n_windows - n_val
    train_data = {"inputs": inputs[:n_train], "labels": labels[:n_train]}
    val_data = {"inputs": inputs[n_train:], "labels": labels[n_train:]}

    logger.info(f"Window split: train={n_train}, val={n_val} (validation_split={validation_split})")
    return train_data, val_data


def held_out_pairs(
    labels: np.ndarray,
    outputs: np.ndarray,
    stats: NormalizationStats,
    include_marine: bool = False,
) -> Dict[str, Tuple[List[float], List[float]]]:
    """
    Physical (actual, predicted) values per variable for held-out windows.

    Both arrays are (M, H*F) standardized; every horizon step of every window
    contributes one pair. Predictions are clamped the way forecasts are.
    """
    n_features = stats.n_features
    actual_rows = denormalize(np.asarray(labels).reshape(-1, n_features), stats)
    predicted_rows = denormalize(np.asarray(outputs).reshape(-1, n_features), stats)

    variables = PAIR_VARIABLES + (MARINE_PAIR_VARIABLES if include_marine else ())
    pairs: Dict[str, Tuple[List[float], List[float]]] = {v: ([], []) for v in variables}

    for actual_row, predicted_row in zip(actual_rows, predicted_rows):
        actual = decode_vector(actual_row, include_marine)
        predicted = clamp_values(decode_vector(predicted_row, include_marine))
        for name in variables:
            pairs[name][0].append(float(actual[name]))
            pairs[name][1].append(float(predicted[name]))

    return pairs


def train_model(
    observations: Sequence[Observation],
    config: Optional[ModelConfig] = None,
    on_progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
    device: Optional[str] = None,
) -> TrainingResult:
    """
    Train a fresh model on an observation series.

    Structural checks (config, window count, observation validity) run before
    any tensor is allocated. On any failure the network is released and
    nothing is returned.

    Args:
        observations: Historical observations (sorted here by timestamp)
        config: ModelConfig; defaults to the balanced preset
        on_progress: Receives 'initializing' then one 'training' event per epoch
        cancel_token: Cooperative cancellation, checked at epoch boundaries
        device: Torch device; defaults to the process setting

    Returns:
        TrainingResult with the model handle, loss curves and held-out
        wind-speed (actual, predicted) pairs
    """
    config = (config or ModelConfig()).validate()

    n_windows = count_windows(len(observations), config.time_steps, config.prediction_steps)
    if n_windows <= 0:
        raise InsufficientData(
            f"Insufficient data: need at least {config.time_steps + config.prediction_steps} "
            f"observations (time_steps={config.time_steps} + "
            f"prediction_steps={config.prediction_steps}), got {len(observations)}"
        )

    ordered = validate_series(observations, config.include_marine)
    device = resolve_device(device)

    emit_progress(
        on_progress,
        TrainingProgress(
            current_epoch=0,
            total_epochs=config.epochs,
            loss=0.0,
            stage="initializing",
            progress=0.0,
        ),
    )
    check_cancelled(cancel_token, "initialization")

    logger.info(
        f"Training on {len(ordered)} observations: preset={config.performance_preset}, "
        f"light={config.use_light_model}, time_steps={config.time_steps}, "
        f"prediction_steps={config.prediction_steps}, device={device}"
    )

    encoded = encode_observations(ordered, config.include_marine)
    stats = compute_stats(encoded, config.include_marine)
    inputs, labels = create_sequences(
        normalize(encoded, stats), config.time_steps, config.prediction_steps
    )
    train_data, val_data = split_windows(inputs, labels, config.validation_split)
    target_times = label_timestamps(
        [o.timestamp for o in ordered], config.time_steps, config.prediction_steps
    )

    network: Optional[WeatherRegressor] = None
    with tensor_scope(device):
        try:
            set_seed(config.seed)
            network = WeatherRegressor(
                n_features=stats.n_features,
                time_steps=config.time_steps,
                prediction_steps=config.prediction_steps,
                hidden_sizes=select_hidden_sizes(config.use_light_model, config.performance_preset),
                dropout=0.0 if config.use_light_model else config.dropout,
            )
            logger.info(f"Network has {network.parameter_count():,} trainable parameters")
            trainer = WeatherTrainer(network, device=device, seed=config.seed)
            history = trainer.train(train_data, val_data, config, on_progress, cancel_token)

            if val_data is None:
                logger.warning("No windows held out; reporting fit on the training windows")
                eval_data = train_data
                history["val_loss"] = list(history["train_loss"])
            else:
                eval_data = val_data

            outputs = trainer.predict_windows(eval_data["inputs"])
            if not np.all(np.isfinite(outputs)):
                raise TrainingDivergence("Trained model produced non-finite validation outputs")
            pairs = held_out_pairs(eval_data["labels"], outputs, stats, config.include_marine)
            eval_times = target_times[-len(eval_data["labels"]) :].reshape(-1)
        except BaseException:
            release_network(network)
            raise

    model = TrainedModel(network=network, stats=stats, config=config, device=device)
    actuals, predictions = pairs["wind_speed"]

    logger.info(
        f"Training finished: epochs={len(history['train_loss'])}, "
        f"final_train_loss={history['train_loss'][-1]:.6f}, held_out_pairs={len(actuals)}"
    )

    return TrainingResult(
        model=model,
        training_loss=[float(v) for v in history["train_loss"]],
        validation_loss=[float(v) for v in history["val_loss"]],
        actuals=actuals,
        predictions=predictions,
        variable_pairs=pairs,
        timestamps=[int(t) for t in eval_times],
    )
