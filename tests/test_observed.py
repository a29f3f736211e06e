"""Tests for the observed-data views (raw map, simulator, point query, preview)."""

import pytest

from config import PREVIEW_ROWS
from models.observation import Observation
from prediction.observed import (
    PREVIEW_COLUMNS,
    mitigate_observations,
    observation_points,
    predict_point,
    preview_frame,
)


class TestObservationPoints:
    def test_points_and_max(self, few_observations):
        points, max_value = observation_points(few_observations)
        assert len(points) == 4
        assert points[0] == {"latitude": 10.0, "longitude": -20.0, "value": 100.0}
        assert max_value == 400.0

    def test_empty(self):
        assert observation_points([]) == ([], 0.0)


class TestMitigateObservations:
    def test_no_mitigation_keeps_values(self, few_observations):
        points, max_value = mitigate_observations(few_observations, "none")
        assert [p["value"] for p in points] == [100.0, 250.0, 50.0, 400.0]
        assert max_value == 400.0

    def test_global_ban_halves_everything(self, few_observations):
        points, max_value = mitigate_observations(few_observations, "globalban")
        assert [p["value"] for p in points] == pytest.approx([50.0, 125.0, 25.0, 200.0])
        assert max_value == pytest.approx(200.0)

    def test_max_recomputed_after_regional_tactic(self, few_observations):
        # Only (-30, -60) is offshore: 400 -> 280 after one year
        points, max_value = mitigate_observations(few_observations, "openocean", elapsed_years=1.0)
        assert [p["value"] for p in points] == pytest.approx([100.0, 250.0, 50.0, 280.0])
        assert max_value == pytest.approx(280.0)

    def test_per_year_tactic_needs_a_whole_year(self, few_observations):
        points, _ = mitigate_observations(few_observations, "river", elapsed_years=0.5)
        assert [p["value"] for p in points] == [100.0, 250.0, 50.0, 400.0]

    def test_zero_values_dropped(self):
        points, max_value = mitigate_observations([Observation(0.0, 0.0, 2020, 0.0)], "none")
        assert points == []
        assert max_value == 0.0

    def test_unknown_tactic(self, few_observations):
        with pytest.raises(KeyError):
            mitigate_observations(few_observations, "not-a-tactic")


class TestPredictPoint:
    def test_single_query(self, constant_model):
        model = constant_model(8.0)
        assert predict_point(model, 10.0, 20.0, 2025) == 8.0
        assert model.calls == [1]

    def test_negative_prediction_floored(self, constant_model):
        assert predict_point(constant_model(-3.0), 0.0, 0.0, 2025) == 0.0

    @pytest.mark.parametrize("lat, lon", [(91.0, 0.0), (0.0, -181.0)])
    def test_out_of_range_rejected(self, constant_model, lat, lon):
        model = constant_model(1.0)
        with pytest.raises(ValueError):
            predict_point(model, lat, lon, 2025)
        assert model.calls == []


class TestPreviewFrame:
    def test_first_rows(self, few_observations):
        frame = preview_frame(few_observations, 2)
        assert list(frame.columns) == PREVIEW_COLUMNS
        assert len(frame) == 2
        assert frame.iloc[1]["concentration"] == 250.0

    def test_default_row_limit(self, mock_observations):
        assert len(preview_frame(mock_observations)) == PREVIEW_ROWS

    def test_short_input_shows_everything(self, few_observations):
        assert len(preview_frame(few_observations, 100)) == 4

    def test_empty(self):
        frame = preview_frame([])
        assert frame.empty
        assert list(frame.columns) == PREVIEW_COLUMNS
