"""
Point Prediction Page: query the trained model at one location.

Uses the model of the session held by main.py, so the main page must
have loaded data and trained (or loaded) a model first.
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import streamlit as st

from config import DEFAULT_YEAR
from errors import ModelNotReadyError
from prediction.observed import predict_point


st.set_page_config(page_title="Point Prediction", page_icon="🎯", layout="wide")
st.title("AI Point Prediction")

session = st.session_state.get("session")
if session is None or not session.model.is_ready:
    st.info(
        "No trained model available. Open the main Mitigation Viewer "
        "page and let it train or load a model first."
    )
    st.stop()

st.caption(f"Model state: {session.model.state.value}")

years = session.years or [DEFAULT_YEAR]
with st.form("predict_point"):
    c1, c2, c3 = st.columns(3)
    latitude = c1.number_input("Latitude", min_value=-90.0, max_value=90.0, value=0.0)
    longitude = c2.number_input("Longitude", min_value=-180.0, max_value=180.0, value=0.0)
    year = c3.selectbox(
        "Year",
        years,
        index=years.index(DEFAULT_YEAR) if DEFAULT_YEAR in years else len(years) - 1,
    )
    submitted = st.form_submit_button("Predict")

if submitted:
    try:
        value = predict_point(session.model, latitude, longitude, year)
    except (ModelNotReadyError, ValueError) as exc:
        st.error(str(exc))
    else:
        st.metric(f"Predicted concentration at ({latitude:.2f}, {longitude:.2f}) in {year}", f"{value:,.2f}")
