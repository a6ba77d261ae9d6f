"""Catch-all page for unknown routes."""

import streamlit as st

from coachsearching.config.settings import ROUTES
from coachsearching.routing import Link


def render_not_found_page(services, route) -> None:
    st.title("Page not found")
    st.caption(f"There is nothing at #{route.full_path}.")
    Link(ROUTES['HOME'], "Go to the home page").render(services.router, key="not_found_home")
