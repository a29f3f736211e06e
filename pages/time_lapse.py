"""
Monthly Time-Lapse Page.

Plays a monthly microplastics dataset (Level 3pm or Level 3wm) as an
animated world map, one frame per month.
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import io
import logging

import streamlit as st

from config import (
    CACHE_MAX_ENTRIES,
    LOG_FORMAT,
    MONTH_LABELS,
    MONTHLY_UNITS,
    PLAYBACK_INTERVAL_S,
    SAMPLE_MONTHLY_PATH,
)
from data.interfaces import MockDataProvider
from data.monthly import load_monthly_table
from errors import DataLoadError
from visualization.playback import FramePlayer
from visualization.plots import create_monthly_figure

logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
LOGGER = logging.getLogger(__name__)


@st.cache_data(max_entries=CACHE_MAX_ENTRIES)
def _load_table(source_kind: str, dataset: str, payload: bytes = b""):
    if source_kind == "Upload CSV":
        return load_monthly_table(io.BytesIO(payload), dataset=dataset)
    if source_kind == "Synthetic":
        return MockDataProvider().get_monthly_table()
    return load_monthly_table(SAMPLE_MONTHLY_PATH, dataset=dataset)


st.set_page_config(page_title="Monthly Time-Lapse", page_icon="🗓️", layout="wide")
st.title("Monthly Time-Lapse")

# ── Data ─────────────────────────────────────────────────────────────────────

st.sidebar.header("Monthly Data")
source_kind = st.sidebar.radio("Source", ["Bundled sample", "Upload CSV", "Synthetic"])
dataset = st.sidebar.selectbox(
    "Dataset",
    list(MONTHLY_UNITS),
    format_func=lambda d: f"Level 3{d} ({MONTHLY_UNITS[d]})",
)

payload = b""
if source_kind == "Upload CSV":
    uploaded = st.sidebar.file_uploader("Monthly CSV", type=["csv"])
    if uploaded is None:
        st.info("Upload a monthly Level 3pm / 3wm CSV to begin.")
        st.stop()
    payload = uploaded.getvalue()

try:
    table = _load_table(source_kind, dataset, payload)
except (DataLoadError, ValueError) as exc:
    st.error(str(exc))
    st.stop()

if len(table) == 0:
    st.warning("No valid monthly records in this dataset.")
    st.stop()

st.sidebar.caption(f"{len(table)} locations loaded")

# ── Playback ─────────────────────────────────────────────────────────────────

if "month" not in st.session_state:
    st.session_state.month = MONTH_LABELS[0]

interval = st.sidebar.slider(
    "Seconds per frame", min_value=0.5, max_value=5.0, value=PLAYBACK_INTERVAL_S, step=0.5,
)

col_play, col_stop, col_month = st.columns([1, 1, 4])
play = col_play.button("▶ Play")
stop = col_stop.button("■ Stop")
month = col_month.select_slider("Month", options=table.months, key="month")

unit = MONTHLY_UNITS[dataset]
chart = st.empty()
caption = st.empty()


def _render(label: str) -> None:
    frame = table.frame(label)
    chart.plotly_chart(
        create_monthly_figure(frame.points, label, frame.max_value, unit),
        use_container_width=True,
    )
    caption.caption(f"{label}: {len(frame.points)} locations with data, max {frame.max_value:.3f} {unit}")


if stop:
    LOGGER.info("Playback stopped at %s", month)

if play:
    # Any widget interaction (including Stop) reruns the script, which
    # abandons this loop and with it the player.
    player = FramePlayer(table.months, interval_s=interval)
    player.seek(month)
    LOGGER.info("Playing %d monthly frames from %s", len(table.months), month)
    for label in player.play(max_frames=len(table.months)):
        _render(label)
else:
    _render(month)
