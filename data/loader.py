"""
CSV ingestion and cleaning for microplastics datasets.

Turns raw delimited text into validated ``Observation`` objects.  All
sentinel (-9999) detection happens here; downstream code receives only
clean values and never re-checks for sentinels.
"""

import io
import logging
import math
import os
from typing import Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd

from config import (
    BANNER_MARKERS,
    CONCENTRATION_COLUMN,
    DEFAULT_YEAR,
    LATITUDE_COLUMN,
    LATITUDE_RANGE,
    LONGITUDE_COLUMN,
    LONGITUDE_RANGE,
    SENTINEL_VALUE,
    YEAR_COLUMN,
)
from errors import DataLoadError
from models.observation import Observation

LOGGER = logging.getLogger(__name__)

Source = Union[str, os.PathLike, io.IOBase]


def read_source_text(source) -> str:
    """Read the full text of a path or file-like object.

    Bytes are decoded as UTF-8 (with a BOM, if present, removed).

    Raises:
        DataLoadError: If the source cannot be opened or decoded.
    """
    try:
        if isinstance(source, (str, os.PathLike)):
            with open(source, "rb") as f:
                raw = f.read()
        else:
            if hasattr(source, "seek"):
                source.seek(0)
            raw = source.read()
    except OSError as exc:
        raise DataLoadError(f"Could not read data source {source!r}: {exc}") from exc

    if isinstance(raw, bytes):
        try:
            return raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise DataLoadError(f"Data source is not UTF-8 text: {exc}") from exc
    return raw


def strip_banner_lines(text: str, markers: Sequence[str] = BANNER_MARKERS) -> str:
    """Remove every line containing one of *markers*.

    The datasets carry description rows (e.g. ``-9999: No data``) right
    under the column header; they are dropped before parsing.
    """
    lines = text.splitlines()
    kept = [line for line in lines if not any(m in line for m in markers)]
    removed = len(lines) - len(kept)
    if removed:
        LOGGER.debug("Stripped %d banner line(s)", removed)
    return "\n".join(kept)


def parse_table(text: str) -> pd.DataFrame:
    """Parse delimited text with a header row into an all-string frame.

    Raises:
        DataLoadError: If the text is empty or not parseable as a table.
    """
    try:
        frame = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            skipinitialspace=True,
        )
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as exc:
        raise DataLoadError(f"Data source is not a delimited table: {exc}") from exc

    frame.columns = [str(c).strip() for c in frame.columns]
    return frame


def parse_number(value) -> Optional[float]:
    """Parse *value* as a finite float that is not the sentinel.

    Returns None for blanks, non-numeric text, NaN/inf and -9999.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number) or number == SENTINEL_VALUE:
        return None
    return number


def clean_record(
    record: Dict[str, str],
    latitude_column: str = LATITUDE_COLUMN,
    longitude_column: str = LONGITUDE_COLUMN,
    concentration_column: str = CONCENTRATION_COLUMN,
    year_column: str = YEAR_COLUMN,
    default_year: int = DEFAULT_YEAR,
) -> Optional[Observation]:
    """Validate one raw record, returning None if it must be excluded.

    A record is rejected when latitude, longitude or concentration is
    missing, non-numeric or the sentinel; when a coordinate is outside
    its geographic range; when the concentration is negative; or when a
    year is present but invalid.  A missing or blank year gets
    *default_year*.
    """
    lat = parse_number(record.get(latitude_column))
    lon = parse_number(record.get(longitude_column))
    conc = parse_number(record.get(concentration_column))
    if lat is None or lon is None or conc is None:
        return None

    if not LATITUDE_RANGE[0] <= lat <= LATITUDE_RANGE[1]:
        return None
    if not LONGITUDE_RANGE[0] <= lon <= LONGITUDE_RANGE[1]:
        return None
    if conc < 0:
        return None

    raw_year = record.get(year_column)
    # Short rows come back from pandas as NaN rather than ""
    if raw_year is None or pd.isna(raw_year) or not str(raw_year).strip():
        year = default_year
    else:
        year_value = parse_number(raw_year)
        if year_value is None or not year_value.is_integer():
            return None
        year = int(year_value)

    return Observation(latitude=lat, longitude=lon, year=year, concentration=conc)


def clean_records(
    records: Iterable[Dict[str, str]],
    default_year: int = DEFAULT_YEAR,
    **columns,
) -> List[Observation]:
    """Apply ``clean_record`` to each record, preserving source order."""
    cleaned = []
    rejected = 0
    for i, record in enumerate(records):
        obs = clean_record(record, default_year=default_year, **columns)
        if obs is None:
            rejected += 1
            LOGGER.debug("Filtering out row %d due to invalid data: %s", i, record)
            continue
        cleaned.append(obs)
    LOGGER.info("Cleaned data: %d valid rows, %d rejected", len(cleaned), rejected)
    return cleaned


def load_observations(
    source: Source,
    latitude_column: str = LATITUDE_COLUMN,
    longitude_column: str = LONGITUDE_COLUMN,
    concentration_column: str = CONCENTRATION_COLUMN,
    year_column: str = YEAR_COLUMN,
    default_year: int = DEFAULT_YEAR,
    banner_markers: Sequence[str] = BANNER_MARKERS,
) -> List[Observation]:
    """Load and clean a microplastics CSV.

    Args:
        source: Path to a CSV file, or a readable file-like object
            (text or bytes, e.g. a Streamlit upload).
        latitude_column: Header of the latitude column.
        longitude_column: Header of the longitude column.
        concentration_column: Header of the concentration column.
        year_column: Header of the optional year column.
        default_year: Year assigned to rows without one.
        banner_markers: Substrings identifying metadata lines to strip.

    Returns:
        Valid observations in source order (may be empty).

    Raises:
        DataLoadError: If the source cannot be read or parsed, or lacks
            one of the required columns.
    """
    text = read_source_text(source)
    frame = parse_table(strip_banner_lines(text, banner_markers))

    required = [latitude_column, longitude_column, concentration_column]
    missing = [c for c in required if c not in frame.columns]
    if missing:
        raise DataLoadError(f"Data source is missing required columns: {missing}")
    records = frame.to_dict(orient="records")
    LOGGER.info("Parsed %d raw rows", len(records))

    return clean_records(
        records,
        default_year=default_year,
        latitude_column=latitude_column,
        longitude_column=longitude_column,
        concentration_column=concentration_column,
        year_column=year_column,
    )


def available_years(
    observations: Iterable[Observation],
    include: Optional[int] = DEFAULT_YEAR,
) -> List[int]:
    """Sorted unique years in *observations*, plus *include* if given."""
    years = {obs.year for obs in observations}
    if include is not None:
        years.add(include)
    return sorted(years)
