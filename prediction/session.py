"""
Prediction session lifecycle.

A ``PredictionSession`` owns the state of one data session: the cleaned
observations, their bounding box and the regression model.  Stages run
in order (load data -> ensure model -> predict) and each returns a
``StageStatus`` instead of raising, so a failing stage degrades to "no
data to render" or "showing stale result".

After ``dispose()`` an in-flight training run is abandoned and nothing
is written to the model store.
"""

import logging
from typing import List, Optional, Tuple

from config import DEFAULT_YEAR, GRID_STEP_DEG, MODEL_CACHE_KEY
from data.loader import available_years, load_observations
from data.model_store import MemoryModelStore, ModelStore
from errors import (
    IncompatibleModelError,
    InsufficientDataError,
    ModelNotFoundError,
    PipelineError,
    StageStatus,
    status_for_error,
)
from models.observation import BoundingBox, Observation
from models.regression import EpochCallback, RegressionModel, dataset_fingerprint
from prediction.scenario import ProgressCallback, ScenarioResult, predict_scenario

LOGGER = logging.getLogger(__name__)


class PredictionSession:
    """Explicit owner of {observations, bounding box, model}.

    Args:
        store: Model blob store; defaults to an in-memory store.
        cache_key: Versioned key for the cached model.
        default_year: Year assigned to rows without one.
        model: Pre-built model (mainly for tests); otherwise one is
            created with *seed*.
        seed: Optional seed for reproducible training.
    """

    def __init__(
        self,
        store: Optional[ModelStore] = None,
        cache_key: str = MODEL_CACHE_KEY,
        default_year: int = DEFAULT_YEAR,
        model: Optional[RegressionModel] = None,
        seed: Optional[int] = None,
    ):
        self.store = store if store is not None else MemoryModelStore()
        self.cache_key = cache_key
        self.default_year = default_year
        self.model = model if model is not None else RegressionModel(store=self.store, seed=seed)
        if self.model.store is None:
            self.model.store = self.store

        self.observations: List[Observation] = []
        self.bounding_box: Optional[BoundingBox] = None
        self.years: List[int] = []
        self.last_result: Optional[ScenarioResult] = None
        self.status = StageStatus("Loading data...")
        self._disposed = False

    @classmethod
    def create(cls, **kwargs) -> "PredictionSession":
        return cls(**kwargs)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """End the session: abandon training and drop held data."""
        if self._disposed:
            return
        self._disposed = True
        self.model.cancel()
        self.observations = []
        self.bounding_box = None
        self.last_result = None
        LOGGER.info("Session disposed")

    def _set_status(self, status: StageStatus) -> StageStatus:
        self.status = status
        if not status.ok:
            LOGGER.warning("Stage failed: %s", status.message)
        return status

    def _check_alive(self) -> Optional[StageStatus]:
        if self._disposed:
            return StageStatus("Session has been disposed.", ok=False, recoverable=False)
        return None

    # -- stages ---------------------------------------------------------------

    def load_data(self, source, **loader_kwargs) -> StageStatus:
        """Load and clean *source*, replacing the current observation set."""
        dead = self._check_alive()
        if dead:
            return dead
        loader_kwargs.setdefault("default_year", self.default_year)
        try:
            observations = load_observations(source, **loader_kwargs)
            return self.set_observations(observations)
        except PipelineError as exc:
            return self._set_status(status_for_error(exc))

    def set_observations(self, observations: List[Observation]) -> StageStatus:
        """Publish a new observation set and its derived bounding box."""
        dead = self._check_alive()
        if dead:
            return dead
        try:
            box = BoundingBox.from_observations(observations)
        except InsufficientDataError as exc:
            self.observations, self.bounding_box, self.years = [], None, []
            return self._set_status(status_for_error(exc))

        self.observations = list(observations)
        self.bounding_box = box
        self.years = available_years(self.observations, include=self.default_year)
        return self._set_status(StageStatus(f"Loaded {len(self.observations)} observations."))

    def ensure_model(self, on_epoch_end: Optional[EpochCallback] = None) -> StageStatus:
        """Make the model ready: load the cached blob or train and cache.

        A cache miss or an incompatible cached model falls back to
        training; the incompatibility is logged, not surfaced.  A model
        trained on other observations counts as incompatible.
        """
        dead = self._check_alive()
        if dead:
            return dead
        fingerprint = dataset_fingerprint(self.observations)
        if self.model.is_ready and self.model.data_fingerprint == fingerprint:
            return self._set_status(StageStatus("Model is ready."))

        try:
            self.model.load(self.cache_key, expected_fingerprint=fingerprint)
            return self._set_status(StageStatus("Model loaded from cache."))
        except ModelNotFoundError:
            LOGGER.info("No cached model under %r; training now", self.cache_key)
        except IncompatibleModelError as exc:
            LOGGER.warning("Discarding cached model: %s", exc)
        except PipelineError as exc:
            return self._set_status(status_for_error(exc))

        return self.retrain(on_epoch_end=on_epoch_end)

    def retrain(self, on_epoch_end: Optional[EpochCallback] = None) -> StageStatus:
        """Train on the current observations and cache the result.

        The previous model stays active if training fails or is rejected.
        """
        dead = self._check_alive()
        if dead:
            return dead
        try:
            self.model.train(self.observations, on_epoch_end=on_epoch_end)
        except PipelineError as exc:
            return self._set_status(status_for_error(exc))

        if self._disposed:
            LOGGER.info("Session disposed during training; not caching model")
            return StageStatus("Session has been disposed.", ok=False, recoverable=False)

        try:
            self.model.save(self.cache_key)
            message = "Training complete. Model saved."
        except OSError as exc:
            LOGGER.error("Error saving model: %s", exc)
            message = "Training complete, but the model could not be saved."
        return self._set_status(StageStatus(message))

    def predict(
        self,
        base_year: float,
        elapsed_years: float,
        tactic,
        step_degrees: float = GRID_STEP_DEG,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Tuple[Optional[ScenarioResult], StageStatus]:
        """Run a scenario; on failure the previous result is kept.

        Returns:
            (result, status).  *result* is the new result, or the last
            good one (possibly None) when the stage failed.
        """
        dead = self._check_alive()
        if dead:
            return None, dead
        if self.bounding_box is None:
            return self.last_result, self._set_status(status_for_error(InsufficientDataError()))
        try:
            result = predict_scenario(
                self.model,
                self.bounding_box,
                base_year=base_year,
                elapsed_years=elapsed_years,
                tactic=tactic,
                step_degrees=step_degrees,
                on_progress=on_progress,
            )
        except PipelineError as exc:
            return self.last_result, self._set_status(status_for_error(exc))
        except KeyError as exc:
            return self.last_result, self._set_status(
                StageStatus(str(exc.args[0]) if exc.args else "Unknown tactic", ok=False)
            )

        if self._disposed:
            return None, StageStatus("Session has been disposed.", ok=False, recoverable=False)

        self.last_result = result
        months = round(float(elapsed_years) * 12)
        return result, self._set_status(StageStatus(
            f"AI heatmap for year {base_year} + {months} months with tactic "
            f"'{result.tactic_id}' generated!"
        ))
