"""
Saved item card display components.
"""

import streamlit as st

from src.core.utils import build_transcript_download, transcript_filename
from src.ui.api_client import APIClient, APIError


def render_saved_item(client: APIClient, item: dict) -> None:
    """Render one library item with playback, download and delete.

    Args:
        client: API client used for deletion.
        item: Saved item dict from the API (camelCase field names).
    """
    item_id = item["id"]
    with st.container(border=True):
        col1, col2 = st.columns([5, 1])
        with col1:
            label = item.get("language", "").title()
            if item.get("voice"):
                label += f" · {item['voice']} ({item.get('voiceGender') or 'female'})"
            st.markdown(f"**{label}**")
            st.caption(item.get("timestamp", ""))
        with col2:
            if st.button("Delete", key=f"delete_{item_id}"):
                try:
                    client.delete_saved_item(item_id)
                    st.toast("Item deleted")
                except APIError as exc:
                    st.error(exc.message)
                st.rerun()

        st.write(item.get("text", ""))

        if item.get("isProcessing"):
            st.info("Audio is still processing...")
        elif item.get("audioError"):
            st.warning(item.get("errorMessage") or "There was an error saving the audio")
        elif item.get("audioURL"):
            st.audio(item["audioURL"])

        if item["type"] == "speech-to-text" and item.get("text"):
            st.download_button(
                "Download",
                data=build_transcript_download(item["text"], item.get("segments")),
                file_name=transcript_filename(),
                mime="text/plain",
                key=f"download_{item_id}",
            )
