"""
Monthly microplastics datasets (Level 3pm / Level 3wm style).

Each row is a location with one column per month.  Rows with invalid
coordinates are dropped; individual month cells holding the sentinel or
non-numeric text become missing, so a location can appear in some
months and not others.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from config import (
    LATITUDE_COLUMN,
    LATITUDE_RANGE,
    LONGITUDE_COLUMN,
    LONGITUDE_RANGE,
    MONTH_LABELS,
    MONTHLY_BANNER_MARKERS,
)
from data.loader import parse_number, parse_table, read_source_text, strip_banner_lines
from errors import DataLoadError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonthlyRecord:
    latitude: float
    longitude: float
    values: Dict[str, Optional[float]]


@dataclass
class MonthlyFrame:
    """One month's renderable points and colour-scale maximum."""

    month: str
    points: List[dict]
    max_value: float


class MonthlyTable:
    """Cleaned monthly records with per-month frame extraction.

    Args:
        records: Cleaned records.
        months: Month labels, in playback order.
    """

    def __init__(self, records: List[MonthlyRecord], months: Sequence[str] = MONTH_LABELS):
        self.records = records
        self.months = list(months)

    def __len__(self) -> int:
        return len(self.records)

    def frame(self, month: str) -> MonthlyFrame:
        """Points with a value for *month* and the month's max value."""
        if month not in self.months:
            raise KeyError(f"Unknown month: {month!r}")
        points = []
        max_value = 0.0
        for rec in self.records:
            value = rec.values.get(month)
            if value is None:
                continue
            points.append({"latitude": rec.latitude, "longitude": rec.longitude, "value": value})
            if value > max_value:
                max_value = value
        return MonthlyFrame(month=month, points=points, max_value=max_value)

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[dict],
        latitude_column: str = "latitude",
        longitude_column: str = "longitude",
        months: Sequence[str] = MONTH_LABELS,
    ) -> "MonthlyTable":
        """Clean raw rows (string or numeric cells) into a table."""
        records = []
        for row in rows:
            lat = parse_number(row.get(latitude_column))
            lon = parse_number(row.get(longitude_column))
            if lat is None or lon is None:
                continue
            if not (LATITUDE_RANGE[0] <= lat <= LATITUDE_RANGE[1]
                    and LONGITUDE_RANGE[0] <= lon <= LONGITUDE_RANGE[1]):
                continue
            values = {m: parse_number(row.get(m)) for m in months}
            records.append(MonthlyRecord(latitude=lat, longitude=lon, values=values))
        return cls(records, months)


def load_monthly_table(
    source,
    dataset: str = "pm",
    latitude_column: str = LATITUDE_COLUMN,
    longitude_column: str = LONGITUDE_COLUMN,
    months: Sequence[str] = MONTH_LABELS,
) -> MonthlyTable:
    """Load a monthly CSV.

    Args:
        source: Path or file-like object.
        dataset: Key into ``MONTHLY_BANNER_MARKERS`` ("pm" or "wm"),
            selecting which banner lines to strip.

    Raises:
        DataLoadError: If the source cannot be read or parsed, or has
            no coordinate columns.
    """
    markers = MONTHLY_BANNER_MARKERS.get(dataset)
    if markers is None:
        raise ValueError(f"Unknown monthly dataset: {dataset!r}")

    frame = parse_table(strip_banner_lines(read_source_text(source), markers))
    missing = [c for c in (latitude_column, longitude_column) if c not in frame.columns]
    if missing:
        raise DataLoadError(f"Monthly data is missing required columns: {missing}")

    absent_months = [m for m in months if m not in frame.columns]
    if absent_months:
        LOGGER.warning("Monthly data has no column for %s", absent_months)

    table = MonthlyTable.from_rows(
        frame.to_dict(orient="records"),
        latitude_column=latitude_column,
        longitude_column=longitude_column,
        months=months,
    )
    LOGGER.info("Loaded %d monthly records (%s)", len(table), dataset)
    return table
