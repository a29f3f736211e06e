"""Shared fixtures for the Microplastics Mitigation Viewer test suite."""

import sys
import os
import pytest

# Ensure project root is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from models.observation import BoundingBox, Observation


SAMPLES_DIR = os.path.join(os.path.dirname(__file__), "..", "data", "samples")


@pytest.fixture
def sample_csv_path():
    """The bundled Level 3 sample file (23 valid rows of 27)."""
    return os.path.join(SAMPLES_DIR, "level3_sample.csv")


@pytest.fixture
def sample_monthly_path():
    """The bundled Level 3pm sample file (6 valid locations)."""
    return os.path.join(SAMPLES_DIR, "level3pm_sample.csv")


@pytest.fixture
def few_observations():
    """A handful of clean observations spanning two hemispheres."""
    return [
        Observation(latitude=10.0, longitude=-20.0, year=2015, concentration=100.0),
        Observation(latitude=-5.0, longitude=30.0, year=2016, concentration=250.0),
        Observation(latitude=40.0, longitude=5.0, year=2017, concentration=50.0),
        Observation(latitude=-30.0, longitude=-60.0, year=2018, concentration=400.0),
    ]


@pytest.fixture
def mock_observations():
    """200 synthetic observations (fixed seed)."""
    from data.mock_data import get_observations
    return get_observations(n=200, seed=1)


@pytest.fixture
def small_box():
    """A 20 x 20 degree box."""
    return BoundingBox(
        min_lat=-10.0, max_lat=10.0,
        min_lon=-10.0, max_lon=10.0,
        min_year=2015, max_year=2018,
    )


class ConstantModel:
    """Stands in for a trained model: predicts *value* everywhere."""

    def __init__(self, value):
        self.value = value
        self.calls = []

    def predict(self, points):
        import numpy as np
        self.calls.append(len(points))
        return np.full(len(points), float(self.value))


@pytest.fixture
def constant_model():
    return ConstantModel


def make_csv(rows, header=None):
    """Build Level 3 style CSV text from (year, lat, lon, conc) tuples."""
    header = header or '"year","latitude (degree: N+, S-)","longitude (degree: E+, W-)","Level 3p (pieces/km2)"'
    lines = [header]
    for row in rows:
        lines.append(",".join("" if v is None else str(v) for v in row))
    return "\n".join(lines) + "\n"


@pytest.fixture
def csv_text():
    return make_csv
