"""
Prediction Orchestrator.

Combines grid sampling, batched model inference and mitigation into a
single scenario prediction:

    target_year = base_year + elapsed_years
    grid        = sample_grid(box, step)
    raw         = model.predict([lat, lon, target_year] for each grid point)
    adjusted    = apply_mitigation(raw, tactic, lat, lon, elapsed_years)

The running maximum of adjusted values is tracked in the same pass that
applies mitigation, for colour-scale domain construction.  Points whose
adjusted value is not positive are dropped from the rendered set.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Union

import numpy as np

from config import GRID_STEP_DEG, PROGRESS_INFERENCE_DONE, PROGRESS_INPUTS_READY
from models.mitigation import MitigationTactic, apply_mitigation, get_tactic
from models.observation import BoundingBox
from prediction.grid import sample_grid

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]


@dataclass(frozen=True)
class PredictionPoint:
    latitude: float
    longitude: float
    raw_value: float
    adjusted_value: float


@dataclass
class ScenarioResult:
    """Output of ``predict_scenario``.

    ``points`` holds only points with a positive adjusted value;
    ``grid_size`` counts every point that was sent to the model.
    """

    points: List[PredictionPoint]
    max_adjusted_value: float
    target_year: float
    tactic_id: str
    grid_size: int = 0
    metadata: Dict = field(default_factory=dict)

    def to_render(self) -> dict:
        """Return the shape consumed by heatmap widgets.

        ``{"points": [{"latitude", "longitude", "value"}, ...],
           "domain": {"minValue": 0.0, "maxValue": max}}``
        """
        return {
            "points": [
                {"latitude": p.latitude, "longitude": p.longitude, "value": p.adjusted_value}
                for p in self.points
            ],
            "domain": {"minValue": 0.0, "maxValue": self.max_adjusted_value},
        }


def build_inference_inputs(grid: np.ndarray, target_year: float) -> np.ndarray:
    """Append *target_year* to every (lat, lon) grid row -> (N, 3)."""
    years = np.full((grid.shape[0], 1), float(target_year))
    return np.hstack([grid.reshape(-1, 2), years])


def predict_scenario(
    model,
    box: BoundingBox,
    base_year: float,
    elapsed_years: float,
    tactic: Union[str, MitigationTactic],
    step_degrees: float = GRID_STEP_DEG,
    on_progress: Optional[ProgressCallback] = None,
) -> ScenarioResult:
    """Predict mitigated concentrations over a grid for a future year.

    Args:
        model: Anything with ``predict(points) -> sequence of float``,
            typically a ready ``RegressionModel``.
        box: Region to sample.
        base_year: Year the scenario starts from.
        elapsed_years: Time offset; also drives mitigation decay.
        tactic: Mitigation tactic or its id.
        step_degrees: Grid spacing in degrees.
        on_progress: Called as ``on_progress(percent, message)`` once the
            inputs are built and once inference is done.

    Returns:
        ScenarioResult with positive points and their maximum.

    Raises:
        ModelNotReadyError: Propagated from ``model.predict``.
        KeyError: If *tactic* is an unknown id.
    """
    resolved = get_tactic(tactic)
    target_year = float(base_year) + float(elapsed_years)

    grid = sample_grid(box, step_degrees)
    inputs = build_inference_inputs(grid, target_year)
    if on_progress is not None:
        on_progress(PROGRESS_INPUTS_READY, f"Built {len(inputs)} inference inputs")

    raw_values = np.asarray(model.predict(inputs), dtype=float).reshape(-1)
    if on_progress is not None:
        on_progress(PROGRESS_INFERENCE_DONE, "Inference complete")

    points: List[PredictionPoint] = []
    max_value = 0.0
    for (lat, lon), raw in zip(grid, raw_values):
        adjusted = apply_mitigation(float(raw), resolved, float(lat), float(lon), elapsed_years)
        if adjusted <= 0:
            continue
        if adjusted > max_value:
            max_value = adjusted
        points.append(PredictionPoint(float(lat), float(lon), float(raw), adjusted))

    LOGGER.info(
        "Scenario %s year %.2f: %d/%d points kept, max %.3f",
        resolved.id, target_year, len(points), len(grid), max_value,
    )
    return ScenarioResult(
        points=points,
        max_adjusted_value=max_value,
        target_year=target_year,
        tactic_id=resolved.id,
        grid_size=len(grid),
        metadata={"base_year": base_year, "elapsed_years": elapsed_years, "step_degrees": step_degrees},
    )
