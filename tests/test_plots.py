"""Smoke tests for the Plotly figure builders.

Figures are built from small hand-made inputs and checked for their
trace count and colour domain; nothing is rendered.
"""

import plotly.graph_objects as go
import pytest

from models.regions import build_region_graph, pin_nodes
from prediction.scenario import predict_scenario
from visualization.plots import (
    create_heatmap_figure,
    create_loss_figure,
    create_monthly_figure,
    create_region_graph_figure,
    create_scenario_figure,
)


@pytest.fixture
def plot_points():
    return [
        {"latitude": 10.0, "longitude": 20.0, "value": 5.0},
        {"latitude": -10.0, "longitude": -20.0, "value": 15.0},
    ]


class TestHeatmap:
    def test_returns_figure(self, plot_points):
        fig = create_heatmap_figure(plot_points)
        assert isinstance(fig, go.Figure)
        assert len(fig.data) == 1

    def test_default_domain_is_zero_to_max(self, plot_points):
        marker = create_heatmap_figure(plot_points).data[0].marker
        assert (marker.cmin, marker.cmax) == (0.0, 15.0)

    def test_explicit_domain(self, plot_points):
        marker = create_heatmap_figure(plot_points, domain=(0.0, 100.0)).data[0].marker
        assert marker.cmax == 100.0

    def test_empty_points(self):
        fig = create_heatmap_figure([])
        assert isinstance(fig, go.Figure)
        assert fig.data[0].marker.cmax == 1.0

    def test_scenario_figure(self, small_box, constant_model):
        result = predict_scenario(constant_model(8.0), small_box, 2025, 1.0, "none", step_degrees=10.0)
        fig = create_scenario_figure(result.to_render(), "2025 (After 1 Year)", "No Mitigation")
        assert len(fig.data[0].lat) == 9
        assert "No Mitigation" in fig.layout.title.text

    def test_monthly_figure(self, plot_points):
        fig = create_monthly_figure(plot_points, "Jan.", 15.0, "pieces/m3")
        assert "Jan." in fig.layout.title.text


class TestOtherFigures:
    def test_loss_figure(self):
        fig = create_loss_figure([1.0, 0.5, 0.25])
        assert list(fig.data[0].y) == [1.0, 0.5, 0.25]

    def test_loss_figure_empty(self):
        assert isinstance(create_loss_figure([]), go.Figure)

    def test_region_graph_free(self, mock_observations):
        graph = build_region_graph(mock_observations[:40], seed=0)
        fig = create_region_graph_figure(graph)
        assert isinstance(fig, go.Figure)
        # One link trace plus one trace per region
        regions = {n["region"] for n in graph["nodes"]}
        assert len(fig.data) == 1 + len(regions)

    def test_region_graph_pinned(self, mock_observations):
        graph = build_region_graph(mock_observations[:40], seed=0)
        nodes = pin_nodes(graph["nodes"], grouped=True, expanded_region="Other")
        assert isinstance(create_region_graph_figure(graph, nodes), go.Figure)
