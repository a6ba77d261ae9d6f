"""Streamlit UI for CoachSearching."""
