"""
Observation and bounding-box data models.

An Observation is one validated microplastics measurement.  The
BoundingBox summarizes a whole observation set and drives grid sampling.
"""

import math
from dataclasses import dataclass
from typing import Iterable

from config import LATITUDE_RANGE, LONGITUDE_RANGE
from errors import InsufficientDataError


@dataclass(frozen=True)
class Observation:
    """A single cleaned microplastics measurement.

    Args:
        latitude: Degrees north, in [-90, 90].
        longitude: Degrees east, in [-180, 180].
        year: Sampling year.
        concentration: Concentration measure (e.g. pieces/km2), >= 0.
    """

    latitude: float
    longitude: float
    year: int
    concentration: float

    def __post_init__(self):
        lat_lo, lat_hi = LATITUDE_RANGE
        lon_lo, lon_hi = LONGITUDE_RANGE
        if not lat_lo <= self.latitude <= lat_hi:
            raise ValueError(f"latitude out of range: {self.latitude}")
        if not lon_lo <= self.longitude <= lon_hi:
            raise ValueError(f"longitude out of range: {self.longitude}")
        if not math.isfinite(self.concentration) or self.concentration < 0:
            raise ValueError(f"concentration must be >= 0, got {self.concentration}")


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned lat/lon/year range covering an observation set."""

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float
    min_year: int
    max_year: int

    @classmethod
    def from_observations(cls, observations: Iterable[Observation]) -> "BoundingBox":
        """Compute the box with a single pass over *observations*.

        Raises:
            InsufficientDataError: If *observations* is empty.
        """
        it = iter(observations)
        try:
            first = next(it)
        except StopIteration:
            raise InsufficientDataError(
                "Cannot compute a bounding box from an empty observation set."
            ) from None

        min_lat = max_lat = first.latitude
        min_lon = max_lon = first.longitude
        min_year = max_year = first.year
        for obs in it:
            min_lat = min(min_lat, obs.latitude)
            max_lat = max(max_lat, obs.latitude)
            min_lon = min(min_lon, obs.longitude)
            max_lon = max(max_lon, obs.longitude)
            min_year = min(min_year, obs.year)
            max_year = max(max_year, obs.year)

        return cls(
            min_lat=min_lat,
            max_lat=max_lat,
            min_lon=min_lon,
            max_lon=max_lon,
            min_year=min_year,
            max_year=max_year,
        )
