"""
Regression Model Wrapper.

A small feed-forward network mapping (latitude, longitude, year) to a
concentration.  This is a demonstration model: no train/test split, no
accuracy guarantee.  Inputs and targets are z-score normalized with
statistics stored alongside the weights, so a cached model predicts in
original units after reloading.

State machine::

    UNINITIALIZED -> LOADING  -> READY
    UNINITIALIZED -> TRAINING -> READY -> TRAINING (retrain) -> READY

Only one training run may be in flight per instance; overlapping calls
raise ``TrainingInProgressError``.  While retraining, predictions keep
using the previous network.
"""

import hashlib
import logging
import threading
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np
import torch
import torch.nn as nn
import torch.optim as optim

from config import (
    LEARNING_RATE,
    MODEL_HIDDEN_UNITS,
    MODEL_INPUT_FEATURES,
    MODEL_SCHEMA_VERSION,
    TRAINING_BATCH_SIZE,
    TRAINING_EPOCHS,
)
from data.model_store import ModelStore, deserialize_model, serialize_model
from errors import (
    IncompatibleModelError,
    InsufficientDataError,
    ModelNotFoundError,
    ModelNotReadyError,
    TrainingCancelledError,
    TrainingInProgressError,
)
from models.observation import Observation

LOGGER = logging.getLogger(__name__)

INPUT_DIM = len(MODEL_INPUT_FEATURES)
OUTPUT_DIM = 1

EpochCallback = Callable[[int, int, float], None]


class ModelState(Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    TRAINING = "training"
    READY = "ready"


class ConcentrationNet(nn.Module):
    """Dense ReLU network: INPUT_DIM -> hidden... -> 1 (linear output)."""

    def __init__(self, input_dim: int = INPUT_DIM, hidden_units: Sequence[int] = MODEL_HIDDEN_UNITS):
        super().__init__()
        layers: List[nn.Module] = []
        width = input_dim
        for units in hidden_units:
            layers.append(nn.Linear(width, units))
            layers.append(nn.ReLU())
            width = units
        layers.append(nn.Linear(width, OUTPUT_DIM))
        self.layers = nn.Sequential(*layers)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return self.layers(x)


def observations_to_arrays(observations: Sequence[Observation]) -> Tuple[np.ndarray, np.ndarray]:
    """Build (N, 3) features [lat, lon, year] and (N, 1) targets."""
    features = np.array(
        [[o.latitude, o.longitude, float(o.year)] for o in observations],
        dtype=np.float64,
    ).reshape(-1, INPUT_DIM)
    targets = np.array(
        [[o.concentration] for o in observations], dtype=np.float64
    ).reshape(-1, OUTPUT_DIM)
    return features, targets


def _safe_std(values: np.ndarray) -> np.ndarray:
    std = values.std(axis=0)
    # Constant columns (e.g. a single survey year) would divide by zero
    return np.where(std > 1e-12, std, 1.0)


def dataset_fingerprint(observations: Sequence[Observation]) -> str:
    """Stable digest of the training data (values and order).

    Two observation sets share a fingerprint only if they would produce
    identical training arrays.
    """
    return _fingerprint_arrays(*observations_to_arrays(observations))


def _fingerprint_arrays(features: np.ndarray, targets: np.ndarray) -> str:
    digest = hashlib.sha256()
    digest.update(str(features.shape[0]).encode("ascii"))
    digest.update(np.ascontiguousarray(features, dtype=np.float64).tobytes())
    digest.update(np.ascontiguousarray(targets, dtype=np.float64).tobytes())
    return digest.hexdigest()


class RegressionModel:
    """Trainable, persistable concentration predictor.

    Args:
        store: Blob store used by ``save`` / ``load``.
        seed: If given, weight init and batch shuffling are reproducible.
        epochs: Number of passes over the data per training run.
        batch_size: Mini-batch size.
        hidden_units: Widths of the hidden layers.
        learning_rate: Adam step size.
    """

    def __init__(
        self,
        store: Optional[ModelStore] = None,
        seed: Optional[int] = None,
        epochs: int = TRAINING_EPOCHS,
        batch_size: int = TRAINING_BATCH_SIZE,
        hidden_units: Sequence[int] = MODEL_HIDDEN_UNITS,
        learning_rate: float = LEARNING_RATE,
    ):
        self.store = store
        self.seed = seed
        self.epochs = epochs
        self.batch_size = batch_size
        self.hidden_units = tuple(hidden_units)
        self.learning_rate = learning_rate

        self.state = ModelState.UNINITIALIZED
        self.loss_history: List[float] = []
        self.data_fingerprint: Optional[str] = None

        self._net: Optional[ConcentrationNet] = None
        self._feature_mean = np.zeros(INPUT_DIM)
        self._feature_std = np.ones(INPUT_DIM)
        self._target_mean = np.zeros(OUTPUT_DIM)
        self._target_std = np.ones(OUTPUT_DIM)

        self._train_lock = threading.Lock()
        self._cancel = threading.Event()

    @property
    def is_ready(self) -> bool:
        return self._net is not None

    # -- training -----------------------------------------------------------

    def train(
        self,
        observations: Sequence[Observation],
        on_epoch_end: Optional[EpochCallback] = None,
    ) -> "RegressionModel":
        """Fit a fresh network on *observations*.

        Args:
            observations: Cleaned observations.
            on_epoch_end: Called as ``on_epoch_end(epoch, total_epochs, loss)``
                after each epoch, with 1-based *epoch* and mean batch MSE
                in normalized units.

        Returns:
            self, for chaining.

        Raises:
            InsufficientDataError: If *observations* is empty.
            TrainingInProgressError: If another run is in flight.
            TrainingCancelledError: If ``cancel()`` was called mid-run.
        """
        if not self._train_lock.acquire(blocking=False):
            raise TrainingInProgressError()
        previous_state = self.state
        try:
            if len(observations) == 0:
                raise InsufficientDataError()
            self._cancel.clear()
            self.state = ModelState.TRAINING
            self._fit(observations, on_epoch_end)
            self.state = ModelState.READY
            return self
        except BaseException:
            self.state = previous_state
            raise
        finally:
            self._train_lock.release()

    def _fit(self, observations: Sequence[Observation], on_epoch_end: Optional[EpochCallback]) -> None:
        features, targets = observations_to_arrays(observations)
        feature_mean, feature_std = features.mean(axis=0), _safe_std(features)
        target_mean, target_std = targets.mean(axis=0), _safe_std(targets)

        xs = torch.tensor((features - feature_mean) / feature_std, dtype=torch.float32)
        ys = torch.tensor((targets - target_mean) / target_std, dtype=torch.float32)

        generator = torch.Generator()
        if self.seed is not None:
            torch.manual_seed(self.seed)
            generator.manual_seed(self.seed)
        else:
            generator.seed()

        net = ConcentrationNet(INPUT_DIM, self.hidden_units)
        optimizer = optim.Adam(net.parameters(), lr=self.learning_rate)
        loss_fn = nn.MSELoss()
        n = xs.shape[0]
        history: List[float] = []

        LOGGER.info("Training on %d samples for %d epochs", n, self.epochs)
        net.train()
        for epoch in range(self.epochs):
            if self._cancel.is_set():
                LOGGER.info("Training cancelled before epoch %d", epoch + 1)
                raise TrainingCancelledError()

            perm = torch.randperm(n, generator=generator)
            epoch_loss = 0.0
            for start in range(0, n, self.batch_size):
                idx = perm[start:start + self.batch_size]
                optimizer.zero_grad()
                loss = loss_fn(net(xs[idx]), ys[idx])
                loss.backward()
                optimizer.step()
                epoch_loss += loss.item() * len(idx)

            mean_loss = epoch_loss / n
            history.append(mean_loss)
            LOGGER.debug("Epoch %d/%d loss=%.6f", epoch + 1, self.epochs, mean_loss)
            if on_epoch_end is not None:
                on_epoch_end(epoch + 1, self.epochs, mean_loss)

        # Publish only after the run completed
        net.eval()
        self._net = net
        self._feature_mean, self._feature_std = feature_mean, feature_std
        self._target_mean, self._target_std = target_mean, target_std
        self.loss_history = history
        self.data_fingerprint = _fingerprint_arrays(features, targets)
        LOGGER.info("Training complete, final loss %.6f", history[-1] if history else float("nan"))

    def cancel(self) -> None:
        """Abandon an in-flight training run at the next epoch boundary."""
        self._cancel.set()

    # -- inference ----------------------------------------------------------

    def predict(self, points) -> np.ndarray:
        """Batched forward pass.

        Args:
            points: Sequence or (N, 3) array of [lat, lon, year].

        Returns:
            (N,) array of predicted concentrations in original units.

        Raises:
            ModelNotReadyError: If no network has been trained or loaded.
        """
        net = self._net
        if net is None:
            raise ModelNotReadyError()

        inputs = np.asarray(points, dtype=np.float64).reshape(-1, INPUT_DIM)
        if inputs.shape[0] == 0:
            return np.zeros(0)

        xs = torch.tensor((inputs - self._feature_mean) / self._feature_std, dtype=torch.float32)
        with torch.no_grad():
            out = net(xs).numpy().astype(np.float64)
        return (out * self._target_std + self._target_mean)[:, 0]

    # -- persistence --------------------------------------------------------

    def to_payload(self) -> dict:
        if self._net is None:
            raise ModelNotReadyError()
        return {
            "schema_version": MODEL_SCHEMA_VERSION,
            "input_dim": INPUT_DIM,
            "output_dim": OUTPUT_DIM,
            "hidden_units": list(self.hidden_units),
            "state_dict": self._net.state_dict(),
            "feature_mean": torch.tensor(self._feature_mean),
            "feature_std": torch.tensor(self._feature_std),
            "target_mean": torch.tensor(self._target_mean),
            "target_std": torch.tensor(self._target_std),
            "loss_history": list(self.loss_history),
            "data_fingerprint": self.data_fingerprint or "",
        }

    def load_payload(self, payload: dict) -> None:
        """Restore weights from a payload, validating its shape.

        Raises:
            IncompatibleModelError: If the payload's schema, input or
                output dimensionality differ from the current ones, or
                the weights do not fit the stored architecture.
        """
        input_dim = payload.get("input_dim")
        output_dim = payload.get("output_dim")
        if (
            payload.get("schema_version") != MODEL_SCHEMA_VERSION
            or input_dim != INPUT_DIM
            or output_dim != OUTPUT_DIM
        ):
            raise IncompatibleModelError(
                f"Cached model has schema {payload.get('schema_version')} with "
                f"{input_dim} -> {output_dim} features; expected schema "
                f"{MODEL_SCHEMA_VERSION} with {INPUT_DIM} -> {OUTPUT_DIM}."
            )
        try:
            hidden_units = tuple(int(u) for u in payload["hidden_units"])
            net = ConcentrationNet(INPUT_DIM, hidden_units)
            net.load_state_dict(payload["state_dict"])
            feature_mean = payload["feature_mean"].numpy().astype(np.float64)
            feature_std = payload["feature_std"].numpy().astype(np.float64)
            target_mean = payload["target_mean"].numpy().astype(np.float64)
            target_std = payload["target_std"].numpy().astype(np.float64)
        except (KeyError, RuntimeError, AttributeError, TypeError, ValueError) as exc:
            raise IncompatibleModelError(f"Cached model weights are unusable: {exc}") from exc

        net.eval()
        self._net = net
        self.hidden_units = hidden_units
        self._feature_mean, self._feature_std = feature_mean, feature_std
        self._target_mean, self._target_std = target_mean, target_std
        self.loss_history = [float(v) for v in payload.get("loss_history", [])]
        self.data_fingerprint = payload.get("data_fingerprint") or None

    def save(self, key: str) -> None:
        """Persist the current network under *key* (overwrites)."""
        if self.store is None:
            raise ValueError("RegressionModel has no store configured")
        self.store.put(key, serialize_model(self.to_payload()))
        LOGGER.info("Model saved under %r", key)

    def load(self, key: str, expected_fingerprint: Optional[str] = None) -> "RegressionModel":
        """Restore a network saved under *key*.

        With *expected_fingerprint*, a model trained on different data is
        rejected as incompatible and the current network is kept.

        Raises:
            ModelNotFoundError: If nothing is stored under *key*.
            IncompatibleModelError: If the stored model does not match the
                expected input/output shape or cannot be decoded,
                or was trained on data other than *expected_fingerprint*.
            TrainingInProgressError: If a training run is in flight.
        """
        if self.store is None:
            raise ValueError("RegressionModel has no store configured")
        if not self._train_lock.acquire(blocking=False):
            raise TrainingInProgressError()
        previous_state = self.state
        try:
            self.state = ModelState.LOADING
            blob = self.store.get(key)
            if blob is None:
                raise ModelNotFoundError(f"No cached model under {key!r}.")
            try:
                payload = deserialize_model(blob)
            except ValueError as exc:
                raise IncompatibleModelError(str(exc)) from exc
            if expected_fingerprint is not None and payload.get("data_fingerprint") != expected_fingerprint:
                raise IncompatibleModelError(
                    f"Cached model under {key!r} was trained on a different dataset."
                )
            self.load_payload(payload)
            self.state = ModelState.READY
            LOGGER.info("Model loaded from %r", key)
            return self
        except BaseException:
            self.state = previous_state
            raise
        finally:
            self._train_lock.release()
