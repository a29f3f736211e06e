"""
Mock Data for the Microplastics Mitigation Viewer.

Provides synthetic microplastics observations and monthly records so the
app and tests can run without the survey CSVs.  Designed to be swapped
out for the real Level 3 datasets.
"""

import numpy as np
from typing import Dict, List, Optional

from config import DEFAULT_YEAR, MONTH_LABELS
from models.observation import Observation

# Ocean "hotspots": (lat, lon, peak pieces/km2, spread in degrees)
HOTSPOTS = [
    (32.0, -140.0, 250000.0, 12.0),   # North Pacific gyre
    (-30.0, -100.0, 60000.0, 15.0),   # South Pacific gyre
    (30.0, -45.0, 90000.0, 12.0),     # North Atlantic gyre
    (-28.0, -15.0, 40000.0, 12.0),    # South Atlantic gyre
    (-25.0, 80.0, 70000.0, 14.0),     # Indian Ocean gyre
    (38.0, 18.0, 120000.0, 6.0),      # Mediterranean
]


def hotspot_concentration(lat: np.ndarray, lon: np.ndarray, year: np.ndarray) -> np.ndarray:
    """Smooth synthetic concentration field with a mild upward trend.

    Returns pieces/km2, always >= 0.
    """
    field = np.full(np.shape(lat), 500.0)
    for h_lat, h_lon, peak, spread in HOTSPOTS:
        d2 = (lat - h_lat) ** 2 + (lon - h_lon) ** 2
        field = field + peak * np.exp(-d2 / (2.0 * spread ** 2))
    trend = 1.0 + 0.04 * (np.asarray(year, dtype=float) - 2015.0)
    return np.maximum(field * trend, 0.0)


def get_observations(
    n: int = 400,
    years: Optional[List[int]] = None,
    seed: int = 42,
) -> List[Observation]:
    """
    Return synthetic observations scattered over the world ocean.

    Args:
        n: Number of observations.
        years: Survey years to draw from (default 2012-2020 plus the
            default year).
        seed: RNG seed; the same seed gives the same observations.

    Returns:
        List of Observation objects with lognormal measurement noise.
    """
    rng = np.random.default_rng(seed)
    if years is None:
        years = list(range(2012, 2021)) + [DEFAULT_YEAR]

    lat = rng.uniform(-60.0, 60.0, n)
    lon = rng.uniform(-180.0, 180.0, n)
    yr = rng.choice(years, size=n)
    conc = hotspot_concentration(lat, lon, yr) * rng.lognormal(0.0, 0.3, n)

    return [
        Observation(
            latitude=round(float(la), 3),
            longitude=round(float(lo), 3),
            year=int(y),
            concentration=round(float(c), 2),
        )
        for la, lo, y, c in zip(lat, lon, yr, conc)
    ]


def get_monthly_rows(n: int = 120, seed: int = 7) -> List[Dict[str, object]]:
    """
    Return synthetic monthly rows shaped like the Level 3pm dataset.

    Each dict has 'latitude', 'longitude' and one value per month label.
    About 5% of month cells are the -9999 sentinel.
    """
    rng = np.random.default_rng(seed)
    lat = rng.uniform(-60.0, 60.0, n)
    lon = rng.uniform(-180.0, 180.0, n)
    base = hotspot_concentration(lat, lon, np.full(n, 2015)) / 1e5

    rows = []
    for i in range(n):
        row: Dict[str, object] = {"latitude": float(lat[i]), "longitude": float(lon[i])}
        for m, label in enumerate(MONTH_LABELS):
            seasonal = 1.0 + 0.3 * np.sin(2 * np.pi * (m + lon[i] / 30.0) / 12.0)
            value = float(base[i] * seasonal)
            row[label] = -9999.0 if rng.random() < 0.05 else round(value, 4)
        rows.append(row)
    return rows
