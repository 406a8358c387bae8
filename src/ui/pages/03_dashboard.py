"""
Dashboard page: browse, play and delete saved items.

Items stuck in processing for more than five minutes are offered for
cancellation on load.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys
from pathlib import Path as _Path

_r = str(_Path(__file__).resolve().parents[3])
_r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

import streamlit as st  # noqa: E402

from src.ui.api_client import APIError, get_api_client  # noqa: E402
from src.ui.components.saved_item import render_saved_item  # noqa: E402

client = get_api_client(st.session_state.api_base_url, st.session_state.api_token or None)

st.header("Dashboard")


@st.dialog("Stalled items")
def _confirm_cancel_stalled(items: list[dict]) -> None:
    st.write(
        f"{len(items)} item(s) have been processing for more than "
        "5 minutes. Cancel processing for these items?"
    )
    col1, col2 = st.columns(2)
    with col1:
        if st.button("Cancel processing", type="primary", use_container_width=True):
            try:
                result = client.cancel_stalled([item["id"] for item in items])
                st.session_state.stalled_prompted = True
                st.toast(f"Cancelled {len(result['cancelled'])} item(s)")
            except APIError as exc:
                st.error(exc.message)
                return
            st.rerun()
    with col2:
        if st.button("Keep waiting", use_container_width=True):
            st.session_state.stalled_prompted = True
            st.rerun()


if not st.session_state.stalled_prompted:
    try:
        stalled = client.list_stalled()["items"]
    except APIError:
        stalled = []
    if stalled:
        _confirm_cancel_stalled(stalled)

try:
    items = client.list_saved_items()
except APIError as exc:
    st.error(f"Could not load your saved items: {exc.message}")
    st.stop()

stt_tab, tts_tab = st.tabs(["Transcriptions", "Generated speech"])
for tab, item_type in ((stt_tab, "speech-to-text"), (tts_tab, "text-to-speech")):
    with tab:
        typed = [item for item in items if item["type"] == item_type]
        if not typed:
            st.info("Nothing saved yet.")
        for item in typed:
            render_saved_item(client, item)
