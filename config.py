"""
Global configuration and constants for the Microplastics Mitigation Viewer.
"""

import os

# --- Bundled Sample Data ---
SAMPLES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "samples")
SAMPLE_OBSERVATIONS_PATH = os.path.join(SAMPLES_DIR, "level3_sample.csv")
SAMPLE_MONTHLY_PATH = os.path.join(SAMPLES_DIR, "level3pm_sample.csv")

# --- Dataset Columns ---
LATITUDE_COLUMN = "latitude (degree: N+, S-)"
LONGITUDE_COLUMN = "longitude (degree: E+, W-)"
CONCENTRATION_COLUMN = "Level 3p (pieces/km2)"
YEAR_COLUMN = "year"

# --- Missing Data ---
SENTINEL_VALUE = -9999.0              # "No data" placeholder in the source CSVs
BANNER_MARKERS = ("-9999: No data",)  # Metadata rows that sit under the header
DEFAULT_YEAR = 2025                   # Assigned when a row has no year

# --- Geographic Ranges ---
LATITUDE_RANGE = (-90.0, 90.0)
LONGITUDE_RANGE = (-180.0, 180.0)

# --- Grid Sampling ---
# Point count grows with (1 / step)^2: 10 deg gives ~650 points for a global
# box, 5 deg ~2600, 2 deg ~16000.
GRID_STEP_DEG = 10.0
GRID_STEP_OPTIONS = [20.0, 10.0, 5.0, 2.0]
GRID_POINT_WARNING = 10000     # UI warns above this many inference points

# --- Regression Model ---
MODEL_INPUT_FEATURES = ("latitude", "longitude", "year")
MODEL_HIDDEN_UNITS = (32, 16)
TRAINING_EPOCHS = 30
TRAINING_BATCH_SIZE = 64
LEARNING_RATE = 1e-3

# --- Model Cache ---
# Bump MODEL_SCHEMA_VERSION whenever the feature set or architecture changes.
MODEL_SCHEMA_VERSION = 4
MODEL_CACHE_KEY = f"microplastics-model-v{MODEL_SCHEMA_VERSION}"
MODEL_CACHE_DIR = ".model_cache"

# --- Scenario Controls ---
# Time increments offered in the UI, in years
TIME_INCREMENTS = {
    "Now": 0.0,
    "After 1 Month": 1 / 12,
    "After 3 Months": 3 / 12,
    "After 6 Months": 6 / 12,
    "After 1 Year": 1.0,
    "After 2 Years": 2.0,
    "After 5 Years": 5.0,
    "After 10 Years": 10.0,
}

# --- Progress Checkpoints (percent) ---
PROGRESS_INPUTS_READY = 50
PROGRESS_INFERENCE_DONE = 100

# --- Monthly Datasets ---
MONTH_LABELS = [
    "Jan.", "Feb.", "Mar.", "Apr.", "May", "Jun.",
    "Jul.", "Aug.", "Sept.", "Oct.", "Nov.", "Dec.",
]
MONTHLY_BANNER_MARKERS = {
    "pm": ("-9999: No data", "Level 3pm (pieces/m3)"),
    "wm": ("-9999: No data", "Level 3wm (mg/m3)"),
}
MONTHLY_UNITS = {"pm": "pieces/m3", "wm": "mg/m3"}
PLAYBACK_INTERVAL_S = 2.0

# --- Region Graph ---
# Rough (lat_min, lat_max, lon_min, lon_max) boxes, checked in order
REGION_BOXES = [
    ("USA", (25.0, 49.0, -125.0, -66.0)),
    ("Canada", (50.0, 70.0, -140.0, -50.0)),
    ("Brazil", (-34.0, 5.0, -74.0, -34.0)),
    ("Australia", (-44.0, -10.0, 113.0, 154.0)),
    ("Russia", (41.0, 77.0, 30.0, 180.0)),
    ("China", (18.0, 53.0, 73.0, 135.0)),
    ("India", (6.0, 35.0, 68.0, 97.0)),
    ("EU", (35.0, 71.0, -10.0, 40.0)),
    ("Africa", (-35.0, 37.0, -17.0, 51.0)),
]
FALLBACK_REGION = "Other"

# Fixed 3D positions used when nodes are pinned by region
REGION_CENTERS = {
    "USA": (0, 0, 0),
    "Canada": (80, 60, 0),
    "Brazil": (-80, -40, 0),
    "Australia": (50, -100, 50),
    "Russia": (0, 100, -50),
    "China": (120, 10, 80),
    "India": (100, -60, 80),
    "EU": (-120, 20, 50),
    "Africa": (-20, -80, 0),
    "Other": (0, 120, 0),
}

# --- Visualization ---
COLOR_SCALE = "YlOrRd"
MARKER_SIZE = 6

# --- Cache ---
CACHE_MAX_ENTRIES = 32         # Max entries for Streamlit data caches

# --- Data Preview ---
PREVIEW_ROWS = 20              # Rows shown by the data table page

# --- Logging ---
LOG_FORMAT = "%(asctime)s %(levelname)s | %(message)s"
