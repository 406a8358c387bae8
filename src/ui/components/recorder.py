"""
Recorder component: drives the backend audio controller.

States: idle -> recording -> ready -> (playing <-> paused) -> idle
The microphone and speaker belong to the backend host; this component
only issues commands and renders the controller snapshot.
"""

import logging

import streamlit as st

from src.core.utils import format_clock, progress_percent
from src.ui.api_client import APIClient, APIError

logger = logging.getLogger(__name__)

_ACCEPTED_TYPES = ["wav", "mp3", "m4a", "ogg", "flac", "webm", "aac"]


def _run(action, *args) -> dict | None:  # noqa: ANN001
    """Call an API action and show its error in place."""
    try:
        return action(*args)
    except APIError as exc:
        if exc.category == "permission":
            st.error(f"Microphone access denied: {exc.message}")
        elif exc.category == "file":
            st.error(f"Invalid file: {exc.message}")
        else:
            st.error(exc.message)
        return None


def _render_upload(client: APIClient, recording: bool) -> None:
    uploaded = st.file_uploader(
        "Or upload an audio file (max 50MB)",
        type=_ACCEPTED_TYPES,
        disabled=recording,
        key="recorder_upload",
    )
    if uploaded is None:
        return
    marker = (uploaded.name, uploaded.size)
    if st.session_state.get("_last_upload") == marker:
        return
    st.session_state._last_upload = marker
    snapshot = _run(
        client.upload_audio,
        uploaded.getvalue(),
        uploaded.name,
        uploaded.type or "application/octet-stream",
    )
    if snapshot:
        st.success(f"File uploaded: {uploaded.name}")


def render_recorder(client: APIClient) -> dict:
    """Render recording/playback controls and return the latest snapshot."""
    snapshot = _run(client.recorder_state) or {"state": "idle", "playback": {}}
    state = snapshot["state"]
    recording = state == "recording"
    has_audio = snapshot.get("source_kind") is not None

    col_rec, col_play, col_clear = st.columns(3)
    with col_rec:
        if recording:
            if st.button("⏹ Stop recording", type="primary", use_container_width=True):
                if _run(client.stop_recording):
                    st.success("Recording complete")
                st.rerun()
        elif st.button("\U0001f534 Start recording", use_container_width=True):
            if _run(client.start_recording):
                st.toast("Recording started. Speak clearly into your microphone")
            st.rerun()
    with col_play:
        playback = snapshot.get("playback", {})
        label = "⏸ Pause" if playback.get("is_playing") else "▶ Play"
        if st.button(
            label,
            disabled=recording or not has_audio,
            use_container_width=True,
        ):
            _run(client.toggle_playback)
            st.rerun()
    with col_clear:
        if st.button(
            "\U0001f5d1 Clear",
            disabled=recording or not has_audio,
            use_container_width=True,
        ):
            _run(client.clear_audio)
            st.session_state.transcription = None
            st.session_state.pop("_last_upload", None)
            st.rerun()

    if recording:
        st.markdown(f"**Recording** {format_clock(snapshot.get('elapsed_seconds'))}")
        if st.button("Refresh timer"):
            st.rerun()
    elif has_audio:
        playback = snapshot.get("playback", {})
        current = playback.get("current_time", 0.0)
        duration = playback.get("duration", 0.0)
        st.progress(int(progress_percent(current, duration)))
        st.caption(
            f"{format_clock(current)} / {format_clock(duration)}"
            f" · {snapshot.get('source_kind')} · {snapshot.get('mime_type')}"
        )
        if not playback.get("ready"):
            st.caption("Loading audio...")
        audio = client.download_recorder_audio()
        if audio:
            st.audio(audio[0], format=audio[1])

    _render_upload(client, recording)
    return snapshot
