"""
Abstract Data Provider interface for pluggable data sources.

Allows swapping synthetic data for the real survey CSVs without
changing downstream code.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from config import DEFAULT_YEAR
from data.loader import load_observations
from data.monthly import MonthlyTable, load_monthly_table
from models.observation import Observation


class DataProvider(ABC):
    """Abstract base class for data sources.

    **Immutability contract:** Observations are frozen dataclasses and the
    provider returns a fresh list on every call, so callers may reorder
    or filter the list without affecting other callers.
    """

    @abstractmethod
    def get_observations(self) -> List[Observation]:
        """Return cleaned observations in source order."""
        ...

    @abstractmethod
    def get_monthly_table(self) -> Optional[MonthlyTable]:
        """Return the monthly dataset, or None if the provider has none."""
        ...


class MockDataProvider(DataProvider):
    """Wraps the synthetic generators in mock_data.py."""

    def __init__(self, n: int = 400, seed: int = 42):
        self.n = n
        self.seed = seed

    def get_observations(self) -> List[Observation]:
        from data.mock_data import get_observations
        return get_observations(n=self.n, seed=self.seed)

    def get_monthly_table(self) -> Optional[MonthlyTable]:
        from data.mock_data import get_monthly_rows
        return MonthlyTable.from_rows(get_monthly_rows(seed=self.seed))


class FileDataProvider(DataProvider):
    """Load survey data from CSV files on disk.

    Args:
        observations_path: Path to a Level 3 style CSV.
        monthly_path: Optional path to a monthly (Level 3pm/3wm) CSV.
        monthly_dataset: "pm" or "wm", selecting the banner markers.
        default_year: Year assigned to rows without one.

    Raises:
        DataLoadError: If a file cannot be read or parsed.
    """

    def __init__(
        self,
        observations_path: str,
        monthly_path: Optional[str] = None,
        monthly_dataset: str = "pm",
        default_year: int = DEFAULT_YEAR,
    ):
        self._observations = load_observations(observations_path, default_year=default_year)
        if monthly_path:
            self._monthly = load_monthly_table(monthly_path, dataset=monthly_dataset)
        else:
            self._monthly = None

    def get_observations(self) -> List[Observation]:
        return list(self._observations)

    def get_monthly_table(self) -> Optional[MonthlyTable]:
        return self._monthly
