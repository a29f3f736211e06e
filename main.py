"""
Microplastics Mitigation Viewer: Streamlit Interface.

Run with:  streamlit run main.py
"""

import sys
import os

# Ensure the project root is on the Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import logging

import streamlit as st

from config import (
    DEFAULT_YEAR,
    GRID_POINT_WARNING,
    GRID_STEP_DEG,
    GRID_STEP_OPTIONS,
    LOG_FORMAT,
    MODEL_CACHE_DIR,
    SAMPLE_OBSERVATIONS_PATH,
    TIME_INCREMENTS,
)
from data.interfaces import MockDataProvider
from data.model_store import DirectoryModelStore
from models.mitigation import TACTICS
from prediction.grid import estimate_grid_size
from prediction.session import PredictionSession
from visualization.plots import create_loss_figure, create_scenario_figure

logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
LOGGER = logging.getLogger(__name__)

# ── Page Config ──────────────────────────────────────────────────────────────

st.set_page_config(
    page_title="Microplastics Mitigation Viewer",
    page_icon="🌊",
    layout="wide",
)

st.title("Microplastics Mitigation Viewer")
st.markdown(
    "Trains a small neural network on surface microplastics survey data and "
    "projects concentrations forward in time under a chosen mitigation tactic."
)

# ── Data Source ──────────────────────────────────────────────────────────────

st.sidebar.header("Data")

source_kind = st.sidebar.radio(
    "Observation source",
    ["Bundled sample", "Upload CSV", "Synthetic"],
)

uploaded = None
if source_kind == "Upload CSV":
    uploaded = st.sidebar.file_uploader("Level 3 CSV", type=["csv"])
    if uploaded is None:
        st.info("Upload a Level 3 survey CSV to begin.")
        st.stop()
    data_key = ("upload", uploaded.name, uploaded.size)
elif source_kind == "Synthetic":
    data_key = ("synthetic",)
else:
    data_key = ("sample", SAMPLE_OBSERVATIONS_PATH)

# One session per data source; switching sources disposes the old one.
if st.session_state.get("data_key") != data_key:
    LOGGER.info("Data source changed to %s", data_key[0])
    old = st.session_state.get("session")
    if old is not None:
        old.dispose()
    session = PredictionSession(store=DirectoryModelStore(MODEL_CACHE_DIR))
    if source_kind == "Synthetic":
        session.set_observations(MockDataProvider().get_observations())
    elif uploaded is not None:
        session.load_data(uploaded)
    else:
        session.load_data(SAMPLE_OBSERVATIONS_PATH)
    st.session_state.session = session
    st.session_state.data_key = data_key
    st.session_state.observations = session.observations

session = st.session_state.session

if session.bounding_box is None:
    st.error(session.status.message)
    st.stop()

st.sidebar.caption(f"{len(session.observations)} observations loaded")

# ── Scenario Controls ────────────────────────────────────────────────────────

st.sidebar.header("Scenario")

years = session.years or [DEFAULT_YEAR]
base_year = st.sidebar.selectbox(
    "Year",
    years,
    index=years.index(DEFAULT_YEAR) if DEFAULT_YEAR in years else len(years) - 1,
)

increment_label = st.sidebar.selectbox("Time Increment", list(TIME_INCREMENTS))
elapsed_years = TIME_INCREMENTS[increment_label]

tactic_ids = list(TACTICS)
tactic_id = st.sidebar.selectbox(
    "Mitigation Tactic",
    tactic_ids,
    format_func=lambda tid: TACTICS[tid].label,
)

step_degrees = st.sidebar.select_slider(
    "Grid Step (degrees)",
    options=GRID_STEP_OPTIONS,
    value=GRID_STEP_DEG,
)
grid_points = estimate_grid_size(session.bounding_box, step_degrees)
st.sidebar.caption(f"Inference points: {grid_points:,}")
if grid_points > GRID_POINT_WARNING:
    st.sidebar.warning(
        f"{grid_points:,} grid points may take a while to predict. "
        "Consider a coarser grid step."
    )

retrain_clicked = st.sidebar.button("Retrain Model")

# ── Model ────────────────────────────────────────────────────────────────────

if retrain_clicked or not session.model.is_ready:
    progress = st.progress(0, text="Preparing model...")

    def _on_epoch_end(epoch, total, loss):
        progress.progress(epoch / total, text=f"Training epoch {epoch}/{total} (loss {loss:.4f})")

    with st.spinner("Loading or training model..."):
        if retrain_clicked:
            status = session.retrain(on_epoch_end=_on_epoch_end)
        else:
            status = session.ensure_model(on_epoch_end=_on_epoch_end)
    progress.empty()
    if not status.ok:
        st.error(status.message)
        if not session.model.is_ready:
            st.stop()
    else:
        st.toast(status.message)

# ── Prediction ───────────────────────────────────────────────────────────────

pred_progress = st.progress(0, text="Predicting...")


def _on_progress(percent, message):
    pred_progress.progress(percent / 100.0, text=message)


result, status = session.predict(
    base_year=base_year,
    elapsed_years=elapsed_years,
    tactic=tactic_id,
    step_degrees=step_degrees,
    on_progress=_on_progress,
)
pred_progress.empty()

if status.ok:
    st.success(status.message)
elif result is not None:
    st.warning(f"{status.message} Showing the previous result.")
else:
    st.error(status.message)

# ── Summary Metrics Banner ───────────────────────────────────────────────────

if result is not None:
    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Target Year", f"{result.target_year:.2f}")
    m2.metric("Grid Points", f"{result.grid_size:,}")
    m3.metric("Non-zero Points", f"{len(result.points):,}")
    m4.metric("Max Concentration", f"{result.max_adjusted_value:,.1f}")

# ── Visualization ──────────────────────────────────────────────────────────

if result is not None:
    year_label = f"{base_year} ({increment_label})"
    fig = create_scenario_figure(result.to_render(), year_label, TACTICS[result.tactic_id].label)
    st.plotly_chart(fig, use_container_width=True)

    if not result.points:
        st.info("Every grid point was mitigated to zero for this scenario.")

# ── Info Panel ───────────────────────────────────────────────────────────────

with st.expander("Training History"):
    if session.model.loss_history:
        st.plotly_chart(create_loss_figure(session.model.loss_history), use_container_width=True)
    else:
        st.caption("No training history for a model loaded without one.")

with st.expander("About the Model"):
    st.markdown(
        """
        **Regression Model**: A small feed-forward network
        (latitude, longitude, year → 32 → 16 → concentration) trained with
        Adam on z-score normalized inputs and targets. The trained weights
        and normalization statistics are cached on disk and reused on the
        next start; an incompatible cached model triggers retraining.

        **Prediction Grid**: The bounding box of the observations is
        sampled at the selected step (longitude-major) and every point is
        predicted for *year + time increment*.

        **Mitigation**: One-time tactics scale the prediction once.
        Per-year tactics compound for every *whole* elapsed year, so
        increments under one year show no per-year reduction. Tactics with
        a geographic rule only act inside their region.
        """
    )
