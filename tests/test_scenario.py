"""Tests for the prediction orchestrator."""

import numpy as np
import pytest

from config import PROGRESS_INFERENCE_DONE, PROGRESS_INPUTS_READY
from errors import ModelNotReadyError
from models.observation import BoundingBox
from models.regression import RegressionModel
from prediction.scenario import build_inference_inputs, predict_scenario


class TestBuildInferenceInputs:
    def test_appends_year_column(self):
        grid = np.array([[1.0, 2.0], [3.0, 4.0]])
        inputs = build_inference_inputs(grid, 2026.5)
        np.testing.assert_array_equal(inputs, [[1.0, 2.0, 2026.5], [3.0, 4.0, 2026.5]])


class TestPredictScenario:
    def test_no_mitigation_keeps_raw_values(self, small_box, constant_model):
        model = constant_model(100.0)
        result = predict_scenario(model, small_box, 2025, 0.0, "none", step_degrees=10.0)
        assert result.grid_size == 9
        assert len(result.points) == 9
        assert result.max_adjusted_value == pytest.approx(100.0)
        assert all(p.raw_value == p.adjusted_value for p in result.points)

    def test_single_batched_call(self, small_box, constant_model):
        model = constant_model(1.0)
        predict_scenario(model, small_box, 2025, 1.0, "none", step_degrees=5.0)
        assert model.calls == [25]

    def test_target_year(self, small_box, constant_model):
        result = predict_scenario(constant_model(1.0), small_box, 2020, 0.5, "none")
        assert result.target_year == pytest.approx(2020.5)

    def test_non_positive_predictions_dropped(self, small_box, constant_model):
        result = predict_scenario(constant_model(-5.0), small_box, 2025, 0.0, "none", step_degrees=10.0)
        assert result.points == []
        assert result.max_adjusted_value == 0.0
        assert result.grid_size == 9

    def test_mitigation_applied_per_point(self, constant_model):
        # Box straddling lat 10: river tactic applies only up to lat 10
        box = BoundingBox(0.0, 20.0, 0.0, 0.0, 2015, 2015)
        result = predict_scenario(constant_model(100.0), box, 2025, 1.0, "river", step_degrees=10.0)
        by_lat = {p.latitude: p.adjusted_value for p in result.points}
        assert by_lat[0.0] == pytest.approx(60.0)
        assert by_lat[10.0] == pytest.approx(60.0)
        assert by_lat[20.0] == pytest.approx(100.0)
        assert result.max_adjusted_value == pytest.approx(100.0)

    def test_max_matches_points(self, small_box):
        class Gradient:
            def predict(self, points):
                return np.asarray(points)[:, 0] + 20.0

        result = predict_scenario(Gradient(), small_box, 2025, 0.0, "none", step_degrees=5.0)
        assert result.max_adjusted_value == max(p.adjusted_value for p in result.points)
        assert result.max_adjusted_value == pytest.approx(30.0)
        # lat -10 -> value 10 > 0 kept; every point positive here
        assert len(result.points) == result.grid_size

    def test_progress_checkpoints(self, small_box, constant_model):
        seen = []
        predict_scenario(
            constant_model(1.0), small_box, 2025, 0.0, "none",
            on_progress=lambda pct, msg: seen.append(pct),
        )
        assert seen == [PROGRESS_INPUTS_READY, PROGRESS_INFERENCE_DONE]

    def test_unknown_tactic_raises_before_inference(self, small_box, constant_model):
        model = constant_model(1.0)
        with pytest.raises(KeyError):
            predict_scenario(model, small_box, 2025, 0.0, "nope")
        assert model.calls == []

    def test_untrained_model_raises(self, small_box):
        with pytest.raises(ModelNotReadyError):
            predict_scenario(RegressionModel(), small_box, 2025, 0.0, "none")

    def test_to_render_shape(self, small_box, constant_model):
        result = predict_scenario(constant_model(7.0), small_box, 2025, 0.0, "globalban", step_degrees=10.0)
        render = result.to_render()
        assert render["domain"] == {"minValue": 0.0, "maxValue": pytest.approx(3.5)}
        assert len(render["points"]) == 9
        assert set(render["points"][0]) == {"latitude", "longitude", "value"}
