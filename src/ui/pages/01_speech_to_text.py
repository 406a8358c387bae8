"""
Speech to Text page: record or upload audio, transcribe, download, save.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys
from pathlib import Path as _Path

_r = str(_Path(__file__).resolve().parents[3])
_r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

import streamlit as st  # noqa: E402

from src.core.languages import DEFAULT_LANGUAGES  # noqa: E402
from src.core.utils import (  # noqa: E402
    build_transcript_download,
    format_timestamp,
    transcript_filename,
)
from src.ui.api_client import APIError, get_api_client  # noqa: E402
from src.ui.components.recorder import render_recorder  # noqa: E402

client = get_api_client(st.session_state.api_base_url, st.session_state.api_token or None)

st.header("Speech to Text")
st.caption("Record or upload audio in Yoruba, Igbo or Hausa and get a transcription.")

codes = [lang["code"] for lang in DEFAULT_LANGUAGES]
st.session_state.stt_language = st.selectbox(
    "Language",
    options=codes,
    index=codes.index(st.session_state.stt_language),
    format_func=lambda code: next(l["name"] for l in DEFAULT_LANGUAGES if l["code"] == code),
)

snapshot = render_recorder(client)
has_audio = snapshot.get("source_kind") is not None and snapshot["state"] != "recording"

if st.button("Transcribe", type="primary", disabled=not has_audio):
    with st.spinner("Transcribing..."):
        try:
            result = client.transcribe_recorder(st.session_state.stt_language)
            st.session_state.transcription = result["transcription"]
            st.success(f"Your {result['source_kind']} audio has been transcribed")
        except APIError as exc:
            st.session_state.transcription = {"text": "", "segments": []}
            st.error(f"Transcription failed: {exc.message}")

transcription = st.session_state.transcription
if transcription and transcription.get("text"):
    st.subheader("Transcription")
    st.text_area("Text", value=transcription["text"], height=150, disabled=True)

    segments = transcription.get("segments") or []
    if segments:
        with st.expander("Detailed transcription with timestamps"):
            for seg in segments:
                speaker = f"Speaker {seg['speaker']}: " if seg.get("speaker") else ""
                st.markdown(
                    f"`{format_timestamp(seg['start'])} - {format_timestamp(seg['end'])}` "
                    f"{speaker}{seg['text']}"
                )

    col_dl, col_save = st.columns(2)
    with col_dl:
        st.download_button(
            "Download transcription",
            data=build_transcript_download(transcription["text"], segments),
            file_name=transcript_filename(),
            mime="text/plain",
            use_container_width=True,
        )
    with col_save:
        if st.button("Save to account", use_container_width=True):
            metadata = {
                "text": transcription["text"],
                "language": st.session_state.stt_language,
                "type": "speech-to-text",
                "segments": segments or None,
            }
            with st.spinner("Saving..."):
                try:
                    item = client.save_item(metadata, use_recorder_audio=has_audio)
                except APIError as exc:
                    st.error(f"Save failed: {exc.message}")
                else:
                    if item.get("audioError"):
                        st.warning(
                            "Your transcription was saved, but there was an error "
                            f"saving the audio: {item.get('errorMessage')}"
                        )
                    else:
                        st.success("Your transcription and audio have been saved")
