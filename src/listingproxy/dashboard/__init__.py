"""Streamlit table UI for the listings proxy."""
