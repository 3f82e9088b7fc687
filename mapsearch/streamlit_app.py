"""Main Streamlit application entry point."""
import streamlit as st
from mapsearch.core.client import RateLimitedClient
from mapsearch.core.config import LOG_LEVEL
from mapsearch.core.pipeline import QueryPipeline
from mapsearch.core.selection import SelectionController
from mapsearch.utils.error_tracking import setup_error_tracking
from mapsearch.utils.logging import setup_logging

st.set_page_config(
    page_title="Postcode Map Search",
    page_icon="📍",
    layout="wide"
)

# Setup logging
setup_logging(LOG_LEVEL)

if "error_tracking" not in st.session_state:
    st.session_state.error_tracking = setup_error_tracking()

# One client per session keeps the rate limiter shared by every lookup
if "pipeline" not in st.session_state:
    st.session_state.pipeline = QueryPipeline(RateLimitedClient())

if "selection" not in st.session_state:
    st.session_state.selection = SelectionController()

st.title("📍 Postcode Map Search")
st.markdown("Search for a place name or postcode and see it on the map with its country details.")
st.info("Open **Search** in the sidebar to start.")
