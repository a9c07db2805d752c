"""
Main streamlit.io application
"""

import os

import streamlit as st

from roadwatch.core.loader import load_records
from roadwatch.ui import dashboard
from roadwatch.utils.log_util import app_logger

logger = app_logger(__name__)

st.set_page_config(
    page_title="US Accident Explorer",
    layout="wide",
    initial_sidebar_state="collapsed",
)

DATA_FILE = os.environ.get(
    "ROADWATCH_DATA_FILE", "data/US_Accidents_March23_sampled_500k.csv"
)


@st.cache_resource(show_spinner="Loading accident records...")
def get_working_set(path: str):
    """Load the records once per server process; the working set is read-only."""
    return load_records(path)


# Setup and get data ########################

try:
    result = get_working_set(DATA_FILE)
except FileNotFoundError:
    st.error(f"Data file not found: {DATA_FILE}")
    st.stop()

st.sidebar.write(f"Records loaded: {len(result.records):,}")
if result.dropped:
    st.sidebar.caption(
        f"Excluded {result.dropped_timestamp:,} rows with unreadable start times "
        f"and {result.dropped_severity:,} with invalid severity"
    )

# Present the dashboard ########################

st.title("US Accident Explorer")
dashboard.render(result.records)
