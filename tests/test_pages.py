"""Smoke tests for the Streamlit pages, run headless with AppTest."""

import os

import pytest
from streamlit.testing.v1 import AppTest

from models.regression import RegressionModel
from prediction.session import PredictionSession

PAGES_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "pages")
TIMEOUT_S = 60


def _page(name, **state):
    at = AppTest.from_file(os.path.join(PAGES_DIR, name), default_timeout=TIMEOUT_S)
    for key, value in state.items():
        at.session_state[key] = value
    return at.run()


def _metric(at, label):
    return next(m.value for m in at.metric if m.label == label)


@pytest.mark.parametrize("name", ["level3_map.py", "mitigation_sim.py", "data_table.py", "region_graph.py"])
def test_pages_without_data_ask_for_it(name):
    at = _page(name)
    assert not at.exception
    assert "No observations available" in at.info[0].value


class TestObservationsMapPage:
    def test_renders_with_zero_to_max_domain(self, few_observations):
        at = _page("level3_map.py", observations=few_observations)
        assert not at.exception
        assert _metric(at, "Observations") == "4"
        assert _metric(at, "Max Concentration") == "400.0"


class TestMitigationSimPage:
    def test_default_tactic_keeps_observed_max(self, few_observations):
        at = _page("mitigation_sim.py", observations=few_observations)
        assert not at.exception
        assert _metric(at, "Max After Tactic") == "400.0"

    def test_tactic_change_recomputes_max(self, few_observations):
        at = _page("mitigation_sim.py", observations=few_observations)
        at.selectbox[0].set_value("globalban").run()
        assert not at.exception
        assert _metric(at, "Max After Tactic") == "200.0"
        assert _metric(at, "Observed Max") == "400.0"


class TestDataTablePage:
    def test_preview(self, few_observations):
        at = _page("data_table.py", observations=few_observations)
        assert not at.exception
        assert len(at.dataframe[0].value) == 4
        assert any("first 4 of 4" in c.value for c in at.caption)


class TestPointPredictionPage:
    def test_without_model(self):
        at = _page("ai_predictions.py")
        assert not at.exception
        assert "No trained model available" in at.info[0].value

    def test_with_trained_session(self, few_observations):
        session = PredictionSession(model=RegressionModel(seed=0, epochs=1, batch_size=8))
        session.set_observations(few_observations)
        assert session.retrain().ok
        at = _page("ai_predictions.py", session=session)
        assert not at.exception
        assert len(at.number_input) == 2


class TestTimeLapsePage:
    def test_renders_first_month(self):
        at = _page("time_lapse.py")
        assert not at.exception
        assert any(c.value.startswith("Jan.:") for c in at.caption)

    def test_stop_renders_current_month(self):
        at = _page("time_lapse.py")
        stop = next(b for b in at.button if "Stop" in b.label)
        stop.click().run()
        assert not at.exception
        assert any(c.value.startswith("Jan.:") for c in at.caption)
