"""
Grid Sampler.

Generates evenly spaced (lat, lon) query points over a bounding box for
batched model inference.
"""

import math

import numpy as np

from config import GRID_STEP_DEG
from models.observation import BoundingBox


def axis_points(lo: float, hi: float, step: float) -> np.ndarray:
    """Inclusive points from floor(lo) to ceil(hi) spaced by *step*.

    A degenerate axis (lo == hi) yields exactly one point, floor(lo).
    """
    if step <= 0:
        raise ValueError(f"step must be > 0, got {step}")
    start = math.floor(lo)
    if lo == hi:
        return np.array([float(start)])
    stop = math.ceil(hi)
    # Small tolerance so an exact multiple of step lands on the end point
    count = int(math.floor((stop - start) / step + 1e-9)) + 1
    return start + step * np.arange(count, dtype=float)


def sample_grid(box: BoundingBox, step_degrees: float = GRID_STEP_DEG) -> np.ndarray:
    """Sample the box on a regular lat/lon grid.

    Ordering is longitude-major, latitude-minor: all latitudes for the
    first longitude, then all latitudes for the next, and so on.  The
    output is fully determined by *box* and *step_degrees*.

    Smaller steps raise resolution but the number of points, and hence
    inference cost, grows quadratically (see ``estimate_grid_size``).

    Args:
        box: Region to cover.
        step_degrees: Grid spacing in degrees (applied to both axes).

    Returns:
        (N, 2) float array of [latitude, longitude] rows.
    """
    lats = axis_points(box.min_lat, box.max_lat, step_degrees)
    lons = axis_points(box.min_lon, box.max_lon, step_degrees)
    lon_grid, lat_grid = np.meshgrid(lons, lats, indexing="ij")
    return np.column_stack([lat_grid.ravel(), lon_grid.ravel()])


def estimate_grid_size(box: BoundingBox, step_degrees: float = GRID_STEP_DEG) -> int:
    """Number of points ``sample_grid`` would produce."""
    return (
        len(axis_points(box.min_lat, box.max_lat, step_degrees))
        * len(axis_points(box.min_lon, box.max_lon, step_degrees))
    )
