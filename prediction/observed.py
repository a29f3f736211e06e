"""
Views over the observed (not predicted) survey data.

These back the raw heatmap, the observed-value mitigation simulator, the
single-point prediction form and the data preview table.  Each takes the
cleaned observations held by the main page's session.
"""

import logging
from typing import List, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from config import LATITUDE_RANGE, LONGITUDE_RANGE, PREVIEW_ROWS
from models.mitigation import MitigationTactic, apply_mitigation, get_tactic
from models.observation import Observation

LOGGER = logging.getLogger(__name__)

PREVIEW_COLUMNS = ["year", "latitude", "longitude", "concentration"]


def observation_points(observations: Sequence[Observation]) -> Tuple[List[dict], float]:
    """Heatmap points for the raw observations and their maximum value."""
    points = [
        {"latitude": o.latitude, "longitude": o.longitude, "value": o.concentration}
        for o in observations
    ]
    max_value = max((p["value"] for p in points), default=0.0)
    return points, max_value


def mitigate_observations(
    observations: Sequence[Observation],
    tactic: Union[str, MitigationTactic],
    elapsed_years: float = 0.0,
) -> Tuple[List[dict], float]:
    """Apply *tactic* to every observed value.

    Points mitigated to zero are dropped, and the maximum is taken over
    the adjusted values so the colour domain follows the tactic.

    Raises:
        KeyError: If *tactic* is not a known tactic id.
    """
    t = get_tactic(tactic)
    points = []
    max_value = 0.0
    for o in observations:
        value = apply_mitigation(o.concentration, t, o.latitude, o.longitude, elapsed_years)
        if value <= 0:
            continue
        points.append({"latitude": o.latitude, "longitude": o.longitude, "value": value})
        max_value = max(max_value, value)
    LOGGER.debug("Tactic %s kept %d of %d observations", t.id, len(points), len(observations))
    return points, max_value


def predict_point(model, latitude: float, longitude: float, year: float) -> float:
    """Predicted concentration at one location, floored at zero.

    Raises:
        ValueError: If the coordinates are outside the valid ranges.
        ModelNotReadyError: If *model* has no trained network.
    """
    if not LATITUDE_RANGE[0] <= latitude <= LATITUDE_RANGE[1]:
        raise ValueError(f"latitude out of range: {latitude}")
    if not LONGITUDE_RANGE[0] <= longitude <= LONGITUDE_RANGE[1]:
        raise ValueError(f"longitude out of range: {longitude}")
    value = model.predict(np.array([[latitude, longitude, float(year)]]))[0]
    return max(0.0, float(value))


def preview_frame(observations: Sequence[Observation], n: int = PREVIEW_ROWS) -> pd.DataFrame:
    """The first *n* observations as a table."""
    rows = [
        (o.year, o.latitude, o.longitude, o.concentration)
        for o in list(observations)[: max(n, 0)]
    ]
    return pd.DataFrame(rows, columns=PREVIEW_COLUMNS)
