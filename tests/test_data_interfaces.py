"""Tests for the abstract data layer."""

import pytest

from data.interfaces import DataProvider, FileDataProvider, MockDataProvider
from data.mock_data import get_observations, hotspot_concentration
from data.monthly import MonthlyTable
from errors import DataLoadError
from models.observation import Observation


class TestMockData:
    def test_same_seed_same_data(self):
        assert get_observations(n=20, seed=3) == get_observations(n=20, seed=3)

    def test_observations_valid(self):
        observations = get_observations(n=100)
        assert len(observations) == 100
        assert all(isinstance(o, Observation) for o in observations)
        assert all(o.concentration >= 0 for o in observations)

    def test_hotspot_peaks_near_gyre(self):
        import numpy as np
        gyre = hotspot_concentration(np.array([32.0]), np.array([-140.0]), np.array([2015]))
        open_sea = hotspot_concentration(np.array([-60.0]), np.array([0.0]), np.array([2015]))
        assert gyre[0] > 100 * open_sea[0]


class TestMockDataProvider:
    def test_implements_interface(self):
        assert isinstance(MockDataProvider(), DataProvider)

    def test_get_observations(self):
        observations = MockDataProvider(n=30).get_observations()
        assert len(observations) == 30

    def test_returns_fresh_list(self):
        provider = MockDataProvider(n=10)
        first = provider.get_observations()
        first.clear()
        assert len(provider.get_observations()) == 10

    def test_get_monthly_table(self):
        table = MockDataProvider().get_monthly_table()
        assert isinstance(table, MonthlyTable)
        assert len(table) > 0


class TestFileDataProvider:
    def test_bundled_samples(self, sample_csv_path, sample_monthly_path):
        provider = FileDataProvider(sample_csv_path, monthly_path=sample_monthly_path)
        assert isinstance(provider, DataProvider)
        assert len(provider.get_observations()) == 23
        assert len(provider.get_monthly_table()) == 6

    def test_monthly_optional(self, sample_csv_path):
        assert FileDataProvider(sample_csv_path).get_monthly_table() is None

    def test_default_year_forwarded(self, sample_csv_path):
        provider = FileDataProvider(sample_csv_path, default_year=2030)
        assert sum(1 for o in provider.get_observations() if o.year == 2030) == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataLoadError):
            FileDataProvider(str(tmp_path / "nope.csv"))
