"""
Observations Map Page: the cleaned Level 3 survey values on a world map.

Reads the observations loaded by main.py from st.session_state.  The
colour scale runs from 0 to the largest observed concentration.
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import streamlit as st

from prediction.observed import observation_points
from visualization.plots import create_heatmap_figure


st.set_page_config(page_title="Observations Map", page_icon="🗺️", layout="wide")
st.title("Level 3 Observations")

observations = st.session_state.get("observations")
if not observations:
    st.info(
        "No observations available. Load a dataset on the main "
        "Mitigation Viewer page first."
    )
    st.stop()

points, max_value = observation_points(observations)

c1, c2 = st.columns(2)
c1.metric("Observations", f"{len(points):,}")
c2.metric("Max Concentration", f"{max_value:,.1f}")

fig = create_heatmap_figure(
    points,
    domain=(0.0, max_value),
    title="Observed Microplastic Concentration",
)
st.plotly_chart(fig, use_container_width=True)
