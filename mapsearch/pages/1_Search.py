"""Search page: type a place or postcode, pick a match, see it on the map."""
import asyncio
from typing import Optional

import pydeck as pdk
import streamlit as st

from mapsearch.core.client import RateLimitedClient
from mapsearch.core.config import DEFAULT_VIEW, FOCUS_ZOOM, ORIGIN_HOVER
from mapsearch.core.highlight import highlight_markdown
from mapsearch.core.hover import HoverProbe
from mapsearch.core.location import (
    country_domain,
    flag_emoji,
    format_coordinates,
    format_local_time,
    resolve_location,
)
from mapsearch.core.models import CandidateResult, ResolvedLocation
from mapsearch.core.pipeline import STALE, QueryPipeline
from mapsearch.core.selection import SelectionController
from mapsearch.utils.error_handler import handle_streamlit_errors
from mapsearch.utils.timing import Timer

# Initialize session state if not already initialized
if "pipeline" not in st.session_state:
    st.session_state.pipeline = QueryPipeline(RateLimitedClient())

if "selection" not in st.session_state:
    st.session_state.selection = SelectionController()

if "probe" not in st.session_state:
    st.session_state.probe = HoverProbe(st.session_state.pipeline, origin=ORIGIN_HOVER)


def commit_candidate(candidate: CandidateResult):
    st.session_state.location = resolve_location(candidate)


def render_details(location: ResolvedLocation):
    """Detail cards for the committed location."""
    st.markdown(f"### {flag_emoji(location.country_code)} {location.name}")
    st.caption(location.country)

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Postcode", location.postcode)
        st.metric("Coordinates", format_coordinates(location.latitude, location.longitude))
    with col2:
        st.metric("Local Time", format_local_time(location.timezone_label))
        st.metric("Timezone (approx.)", location.timezone_label)
    with col3:
        st.metric("Currency", location.currency_code)
        st.metric("Domain", country_domain(location.country_code))

    st.markdown("**Copy-friendly coordinates:**")
    st.code(format_coordinates(location.latitude, location.longitude, precision=6), language=None)


def render_map(location: Optional[ResolvedLocation]):
    if location is None:
        view_state = pdk.ViewState(**DEFAULT_VIEW, pitch=0)
        layers = []
    else:
        view_state = pdk.ViewState(
            longitude=location.longitude,
            latitude=location.latitude,
            zoom=FOCUS_ZOOM,
            pitch=0
        )
        layers = [
            pdk.Layer(
                "ScatterplotLayer",
                data=[{
                    "lon": location.longitude,
                    "lat": location.latitude,
                    "name": location.name
                }],
                get_position=["lon", "lat"],
                get_fill_color=[220, 38, 38, 220],
                get_radius=40,
                radius_min_pixels=6,
                pickable=True
            )
        ]

    deck = pdk.Deck(
        map_style=None,  # Use default OpenStreetMap style
        initial_view_state=view_state,
        layers=layers,
        tooltip={"text": "{name}"}
    )
    st.pydeck_chart(deck)


@handle_streamlit_errors()
def render_page():
    pipeline: QueryPipeline = st.session_state.pipeline
    selection: SelectionController = st.session_state.selection
    selection.on_commit = commit_candidate

    st.title("🔍 Search")

    query = st.text_input(
        "Search for a location...",
        placeholder="e.g. 'SW1A 1AA' or 'Kyoto'"
    )

    # Streamlit reruns the whole script on every change, so there is no
    # keystroke burst to debounce here; each submitted value runs at once.
    if query != st.session_state.get("last_query"):
        st.session_state.last_query = query
        if query.strip():
            with Timer("search_page_query"):
                results = asyncio.run(pipeline.run_search(query))
            if results is not STALE:
                selection.set_candidates(results)
                st.session_state.no_matches = not results
        else:
            selection.set_candidates([])
            st.session_state.no_matches = False

    if selection.candidates:
        st.subheader("Matches")
        for index, candidate in enumerate(selection.candidates):
            label = candidate.display_name
            if candidate.postcode:
                label = f"{label} (Postcode: {candidate.postcode})"
            col1, col2 = st.columns([5, 1])
            with col1:
                st.markdown(highlight_markdown(label, query))
            with col2:
                if st.button("Show", key=f"candidate-{index}"):
                    selection.pointer_select(index)
                    st.rerun()
    elif st.session_state.get("no_matches"):
        st.warning("No matches found")

    location = st.session_state.get("location")
    if location is not None:
        render_details(location)
    render_map(location)

    with st.expander("Look up a point"):
        col1, col2 = st.columns(2)
        with col1:
            lat = st.number_input("Latitude", min_value=-90.0, max_value=90.0, value=51.5, format="%.6f")
        with col2:
            lon = st.number_input("Longitude", min_value=-180.0, max_value=180.0, value=-0.12, format="%.6f")
        if st.button("Look up", type="primary"):
            resolved = asyncio.run(st.session_state.probe.click(lat, lon))
            if resolved is None:
                st.warning("Nothing found at this point")
            else:
                st.session_state.location = resolved
                st.rerun()


render_page()
