"""
Region Graph Page: 3D node graph of observations by region.

Reads the observations loaded by main.py from st.session_state.  Nodes
can be pinned to their region centre, with one region expanded so its
nodes float free.
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import streamlit as st

from config import FALLBACK_REGION, REGION_BOXES
from models.regions import build_region_graph, pin_nodes
from visualization.plots import create_region_graph_figure


st.set_page_config(page_title="Region Graph", page_icon="🕸️", layout="wide")
st.title("Microplastics Node Graph")

observations = st.session_state.get("observations")
if not observations:
    st.info(
        "No observations available. Load a dataset on the main "
        "Mitigation Viewer page first."
    )
    st.stop()

st.sidebar.header("Layout")
grouped = st.sidebar.checkbox("Group nodes by region", value=True)
region_names = [name for name, _ in REGION_BOXES] + [FALLBACK_REGION]
expanded = st.sidebar.selectbox(
    "Expand region",
    ["(none)"] + region_names,
    disabled=not grouped,
)
seed = st.sidebar.number_input("Link seed", value=0, step=1)

graph = build_region_graph(observations, seed=int(seed))
nodes = pin_nodes(graph["nodes"], grouped, None if expanded == "(none)" else expanded)

c1, c2, c3 = st.columns(3)
c1.metric("Nodes", f"{len(graph['nodes']):,}")
c2.metric("Links", f"{len(graph['links']):,}")
c3.metric("Regions", f"{len({n['region'] for n in graph['nodes']})}")

st.plotly_chart(create_region_graph_figure(graph, nodes), use_container_width=True)
