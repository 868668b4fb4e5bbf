"""Streamlit dashboard for listingproxy.

Run with: streamlit run src/listingproxy/dashboard/app.py
"""

import asyncio

import pandas as pd
import streamlit as st

from listingproxy.config import config
from listingproxy.constants import PROPERTY_TYPES
from listingproxy.models.listing import DerivedListingView
from listingproxy.views import FilterSortState, SortKey, load_views, to_csv, trigger_refresh

# Filter buttons: label -> property type id ("" = all types)
TYPE_FILTERS = {"All": "", **{label: str(type_id) for type_id, label in PROPERTY_TYPES.items()}}

# Sortable columns in display order
SORT_COLUMNS = [
    ("Property", SortKey.LOCATION),
    ("Size", SortKey.SIZE),
    ("Brokers", SortKey.BROKERS),
    ("Type", SortKey.TYPE),
]

MAX_DETAIL_CARDS = 50


def create_listing_dataframe(views: list[DerivedListingView]) -> pd.DataFrame:
    """Convert views to the table shown on the page."""
    data = []
    for view in views:
        data.append({
            "Property": view.location,
            "Size": view.size,
            "Brokers": ", ".join(view.broker_names),
            "Type": view.listing_type,
            "Available SF": view.total_available_sf or None,
            "Listing": view.url if view.url != "#" else None,
        })
    return pd.DataFrame(data, columns=["Property", "Size", "Brokers", "Type", "Available SF", "Listing"])


def fetch_views(proxy_url: str) -> list[DerivedListingView]:
    """Fetch and join listings; an unreachable proxy yields an empty table."""
    return asyncio.run(load_views(proxy_url))


def show_listing_detail(view: DerivedListingView):
    """Display the expanded card for one listing."""
    col1, col2 = st.columns([1, 2])

    with col1:
        st.image(view.image_url, use_container_width=True)

    with col2:
        st.markdown(f"### {view.location}")
        if view.subtype_type_line:
            st.caption(view.subtype_type_line)
        st.write(view.description)
        st.write(f"**Size:** {view.size_detail}")
        if view.brokers_arr:
            contacts = ", ".join(
                f"[{b.name}](mailto:{b.email})" if b.email else b.name
                for b in view.brokers_arr
            )
            st.markdown(f"**Brokers:** {contacts}")

        buttons = st.columns(3)
        with buttons[0]:
            if view.url != "#":
                st.link_button("View Listing", view.url, use_container_width=True)
        with buttons[1]:
            if view.brochure_url:
                st.link_button("View Brochure", view.brochure_url, use_container_width=True)
        with buttons[2]:
            if view.video_url:
                st.link_button("View Video", view.video_url, use_container_width=True)


def main():
    """Main dashboard application."""
    st.set_page_config(
        page_title="Listings",
        page_icon="🏢",
        layout="wide",
    )
    st.title("🏢 Available Properties")

    proxy_url = st.session_state.get("proxy_url", config.proxy_url)

    # Initialize session state
    if "table_state" not in st.session_state:
        st.session_state.table_state = FilterSortState()
    if "views" not in st.session_state:
        with st.spinner("Loading listings..."):
            st.session_state.views = fetch_views(proxy_url)

    state: FilterSortState = st.session_state.table_state

    # Sidebar filters
    with st.sidebar:
        st.header("🔍 Filters")
        state.text_query = st.text_input("Search", key="search_query", placeholder="Address, title, broker")
        selected = st.radio("Property Type", options=list(TYPE_FILTERS.keys()), key="type_label")
        state.type_filter = TYPE_FILTERS[selected]

        st.divider()

        if st.button("🔄 Reload Table", use_container_width=True):
            st.session_state.views = fetch_views(proxy_url)
        if st.button("⬇️ Refresh From Provider", use_container_width=True):
            with st.spinner("Refreshing listings cache..."):
                count = asyncio.run(trigger_refresh(proxy_url))
            if count is None:
                st.error("Refresh failed; showing cached data")
            else:
                st.success(f"Refreshed {count} listings")
            st.session_state.views = fetch_views(proxy_url)

    # Sortable headers
    header_cols = st.columns(len(SORT_COLUMNS))
    for col, (label, key) in zip(header_cols, SORT_COLUMNS):
        with col:
            if st.button(f"{label} {state.indicator(key)}".strip(), key=f"sort_{key.value}", use_container_width=True):
                state.toggle_sort(key)
                st.rerun()

    rows = state.apply(st.session_state.views)

    if not st.session_state.views:
        st.info("No listings available. The proxy may still be loading or unreachable.")
        return

    st.subheader(f"📋 {len(rows)} of {len(st.session_state.views)} Listings")
    st.dataframe(
        create_listing_dataframe(rows),
        use_container_width=True,
        hide_index=True,
        column_config={
            "Listing": st.column_config.LinkColumn("Listing", display_text="View"),
            "Available SF": st.column_config.NumberColumn("Available SF", format="%d"),
        },
    )

    st.download_button(
        "📄 Export CSV",
        data=to_csv(rows),
        file_name="listings.csv",
        mime="text/csv",
        disabled=not rows,
    )

    st.divider()
    for view in rows[:MAX_DETAIL_CARDS]:
        with st.expander(f"{view.location} · {view.size} · {view.listing_type}"):
            show_listing_detail(view)
    if len(rows) > MAX_DETAIL_CARDS:
        st.caption(f"Showing details for the first {MAX_DETAIL_CARDS} listings; narrow the search to see more.")


if __name__ == "__main__":
    main()
