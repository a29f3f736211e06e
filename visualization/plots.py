"""
Visualization module for the Microplastics Mitigation Viewer.

Provides Plotly-based interactive plots for the Streamlit interface.
All map figures take the renderable shape produced by the pipeline:
a list of ``{"latitude", "longitude", "value"}`` dicts plus a
``(min_value, max_value)`` colour domain.
"""

import plotly.graph_objects as go
from typing import List, Optional, Sequence, Tuple

from config import COLOR_SCALE, MARKER_SIZE


def _domain_or_default(domain: Optional[Tuple[float, float]], values: Sequence[float]) -> Tuple[float, float]:
    """Use *domain* if given, else [0, max(values)] (1.0 when empty)."""
    if domain is not None:
        lo, hi = domain
    else:
        lo, hi = 0.0, max(values) if values else 0.0
    if hi <= lo:
        hi = lo + 1.0
    return lo, hi


def _world_layout(fig: go.Figure, title: str) -> None:
    fig.update_geos(
        projection_type="natural earth",
        showcoastlines=True,
        coastlinecolor="rgba(80,80,80,0.6)",
        showland=True,
        landcolor="rgb(235,235,230)",
        showocean=True,
        oceancolor="rgb(215,230,245)",
        lataxis_range=[-90, 90],
        lonaxis_range=[-180, 180],
    )
    fig.update_layout(
        title=title,
        height=520,
        margin=dict(l=10, r=10, t=50, b=10),
    )


def create_heatmap_figure(
    points: List[dict],
    domain: Optional[Tuple[float, float]] = None,
    title: str = "Predicted Microplastic Concentration",
    value_label: str = "pieces/km²",
    hover_extra: str = "",
) -> go.Figure:
    """
    Render scattered values as coloured circle markers on a world map.

    Args:
        points: Dicts with 'latitude', 'longitude', 'value'.
        domain: (min, max) for the colour scale; defaults to [0, max].
        title: Figure title.
        value_label: Colour bar / tooltip unit label.
        hover_extra: Extra HTML appended to every tooltip
            (e.g. year and tactic).

    Returns:
        Plotly Figure with a single Scattergeo trace.
    """
    lats = [p["latitude"] for p in points]
    lons = [p["longitude"] for p in points]
    values = [p["value"] for p in points]
    cmin, cmax = _domain_or_default(domain, values)

    fig = go.Figure(
        go.Scattergeo(
            lat=lats,
            lon=lons,
            mode="markers",
            marker=dict(
                size=MARKER_SIZE,
                color=values,
                colorscale=COLOR_SCALE,
                cmin=cmin,
                cmax=cmax,
                opacity=1.0,
                colorbar=dict(title=value_label),
            ),
            hovertemplate=(
                "<b>Lat:</b> %{lat}, <b>Lon:</b> %{lon}<br>"
                f"<b>Value:</b> %{{marker.color:.1f}} {value_label}"
                f"{hover_extra}<extra></extra>"
            ),
            name="",
        )
    )
    _world_layout(fig, title)
    return fig


def create_scenario_figure(render: dict, year_label: str, tactic_label: str) -> go.Figure:
    """Heatmap for a ``ScenarioResult.to_render()`` payload."""
    domain = (render["domain"]["minValue"], render["domain"]["maxValue"])
    return create_heatmap_figure(
        render["points"],
        domain=domain,
        title=f"AI Heatmap: {year_label} ({tactic_label})",
        hover_extra=f"<br><b>Year:</b> {year_label}<br><b>Mitigation:</b> {tactic_label}",
    )


def create_monthly_figure(points: List[dict], month: str, max_value: float, unit: str) -> go.Figure:
    """Heatmap of one month of a monthly dataset."""
    return create_heatmap_figure(
        points,
        domain=(0.0, max_value),
        title=f"Monthly Distribution: {month}",
        value_label=unit,
    )


def create_loss_figure(loss_history: Sequence[float]) -> go.Figure:
    """Line chart of per-epoch training loss."""
    epochs = list(range(1, len(loss_history) + 1))
    fig = go.Figure(
        go.Scatter(
            x=epochs,
            y=list(loss_history),
            mode="lines+markers",
            line=dict(color="royalblue", width=2),
            marker=dict(size=5),
            hovertemplate="Epoch %{x}<br>MSE %{y:.4f}<extra></extra>",
        )
    )
    fig.update_layout(
        title="Training Loss (normalized MSE)",
        xaxis_title="Epoch",
        yaxis_title="Loss",
        height=300,
        margin=dict(l=40, r=10, t=50, b=40),
    )
    return fig


def create_region_graph_figure(graph: dict, pinned_nodes: Optional[List[dict]] = None) -> go.Figure:
    """
    3D node graph of observations grouped by region.

    Pinned nodes are drawn at their region centre (with small jitter so
    they remain distinguishable); free nodes are laid out from their
    coordinates.

    Args:
        graph: Output of ``build_region_graph``.
        pinned_nodes: Output of ``pin_nodes``; defaults to free layout.

    Returns:
        Plotly Figure with one marker trace per region and a link trace.
    """
    nodes = pinned_nodes if pinned_nodes is not None else graph["nodes"]
    positions = {}
    for i, node in enumerate(nodes):
        if node.get("fx") is not None:
            jitter = (i % 7) * 1.5
            positions[node["id"]] = (node["fx"] + jitter, node["fy"] + jitter, node["fz"])
        else:
            positions[node["id"]] = (node["longitude"], node["latitude"], node["size"] * 10.0)

    fig = go.Figure()

    link_x, link_y, link_z = [], [], []
    for link in graph["links"]:
        s, t = positions[link["source"]], positions[link["target"]]
        link_x += [s[0], t[0], None]
        link_y += [s[1], t[1], None]
        link_z += [s[2], t[2], None]
    fig.add_trace(
        go.Scatter3d(
            x=link_x, y=link_y, z=link_z,
            mode="lines",
            line=dict(color="rgba(150,150,150,0.35)", width=1),
            hoverinfo="skip",
            name="Links",
            showlegend=False,
        )
    )

    regions = sorted({n["region"] for n in nodes})
    for region in regions:
        members = [n for n in nodes if n["region"] == region]
        fig.add_trace(
            go.Scatter3d(
                x=[positions[n["id"]][0] for n in members],
                y=[positions[n["id"]][1] for n in members],
                z=[positions[n["id"]][2] for n in members],
                mode="markers",
                marker=dict(size=[max(2.0, n["size"] * 1.5) for n in members], opacity=0.85),
                text=[f"{n['region']}: {n['concentration']:.1f}" for n in members],
                hovertemplate="%{text}<extra></extra>",
                name=region,
            )
        )

    fig.update_layout(
        title="Microplastics Node Graph by Region",
        height=600,
        margin=dict(l=0, r=0, t=50, b=0),
        scene=dict(xaxis_title="", yaxis_title="", zaxis_title=""),
    )
    return fig
