"""
Data Table Page: the first rows of the loaded observations.
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import streamlit as st

from config import PREVIEW_ROWS
from prediction.observed import preview_frame


st.set_page_config(page_title="Data Table", page_icon="📋", layout="wide")
st.title("Observation Table")

observations = st.session_state.get("observations")
if not observations:
    st.info(
        "No observations available. Load a dataset on the main "
        "Mitigation Viewer page first."
    )
    st.stop()

frame = preview_frame(observations, PREVIEW_ROWS)
st.dataframe(frame, use_container_width=True, hide_index=True)
st.caption(f"Showing the first {len(frame)} of {len(observations):,} observations")
