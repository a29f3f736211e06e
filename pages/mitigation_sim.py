"""
Mitigation Simulator Page: tactics applied to the observed values.

Unlike the main page, nothing is predicted: each observation is scaled
by the chosen tactic and the colour domain is rebuilt from the adjusted
values.
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import logging

import streamlit as st

from config import LOG_FORMAT, TIME_INCREMENTS
from models.mitigation import TACTICS
from prediction.observed import mitigate_observations, observation_points
from visualization.plots import create_heatmap_figure

logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
LOGGER = logging.getLogger(__name__)


st.set_page_config(page_title="Mitigation Simulator", page_icon="🧹", layout="wide")
st.title("Mitigation Simulator")

observations = st.session_state.get("observations")
if not observations:
    st.info(
        "No observations available. Load a dataset on the main "
        "Mitigation Viewer page first."
    )
    st.stop()

st.sidebar.header("Tactic")
tactic_id = st.sidebar.selectbox(
    "Mitigation Tactic",
    list(TACTICS),
    format_func=lambda tid: TACTICS[tid].label,
)
increment_label = st.sidebar.selectbox("Time Increment", list(TIME_INCREMENTS))

points, max_value = mitigate_observations(observations, tactic_id, TIME_INCREMENTS[increment_label])
_, observed_max = observation_points(observations)
LOGGER.info("Simulated %s over %d observations", tactic_id, len(observations))

c1, c2, c3 = st.columns(3)
c1.metric("Points Remaining", f"{len(points):,}", delta=f"{len(points) - len(observations):,}")
c2.metric("Max After Tactic", f"{max_value:,.1f}")
c3.metric("Observed Max", f"{observed_max:,.1f}")

fig = create_heatmap_figure(
    points,
    domain=(0.0, max_value),
    title=f"Observed Concentration after {TACTICS[tactic_id].label}",
    hover_extra=f"<br><b>Tactic:</b> {TACTICS[tactic_id].label}",
)
st.plotly_chart(fig, use_container_width=True)

if not points:
    st.info("Every observation was mitigated to zero for this tactic.")
