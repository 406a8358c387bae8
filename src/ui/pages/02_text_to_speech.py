"""
Text to Speech page: pick a language and voice, generate, download, save.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys
from pathlib import Path as _Path

_r = str(_Path(__file__).resolve().parents[3])
_r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

import streamlit as st  # noqa: E402

from src.core.languages import DEFAULT_LANGUAGES, VOICES_BY_LANGUAGE, voice_gender  # noqa: E402
from src.ui.api_client import APIError, get_api_client  # noqa: E402

client = get_api_client(st.session_state.api_base_url, st.session_state.api_token or None)

st.header("Text to Speech")
st.caption("Type text in Yoruba, Igbo or Hausa and listen to it spoken aloud.")

codes = [lang["code"] for lang in DEFAULT_LANGUAGES]
language = st.selectbox(
    "Language",
    options=codes,
    index=codes.index(st.session_state.tts_language),
    format_func=lambda code: next(l["name"] for l in DEFAULT_LANGUAGES if l["code"] == code),
)
if language != st.session_state.tts_language:
    st.session_state.tts_language = language
    st.session_state.tts_voice = VOICES_BY_LANGUAGE[language][0]["id"]

try:
    voices = client.list_voices(language)
except APIError:
    voices = VOICES_BY_LANGUAGE[language]
voice_ids = [v["id"] for v in voices] or [st.session_state.tts_voice]
voice_names = {v["id"]: v.get("name") or v["id"] for v in voices}
if st.session_state.tts_voice not in voice_ids:
    st.session_state.tts_voice = voice_ids[0]
st.session_state.tts_voice = st.selectbox(
    "Voice",
    options=voice_ids,
    index=voice_ids.index(st.session_state.tts_voice),
    format_func=lambda vid: voice_names.get(vid, vid),
)

st.session_state.tts_text = st.text_area(
    "Text", value=st.session_state.tts_text, height=150, max_chars=5000
)

if st.button("Generate speech", type="primary", disabled=not st.session_state.tts_text.strip()):
    with st.spinner("Generating speech..."):
        try:
            st.session_state.tts_audio = client.synthesize(
                st.session_state.tts_text, st.session_state.tts_voice, language
            )
        except APIError as exc:
            st.session_state.tts_audio = None
            st.error(f"Speech generation failed: {exc.message}")

audio = st.session_state.tts_audio
if audio:
    st.audio(audio, format="audio/wav")
    col_dl, col_save = st.columns(2)
    with col_dl:
        st.download_button(
            "Download audio",
            data=audio,
            file_name=f"afroglot-speech-{language}.wav",
            mime="audio/wav",
            use_container_width=True,
        )
    with col_save:
        if st.button("Save to account", use_container_width=True):
            metadata = {
                "text": st.session_state.tts_text,
                "language": language,
                "type": "text-to-speech",
                "voice": st.session_state.tts_voice,
                "voiceGender": voice_gender(language, st.session_state.tts_voice),
            }
            with st.spinner("Saving..."):
                try:
                    item = client.save_item(metadata, audio=audio)
                except APIError as exc:
                    st.error(f"Save failed: {exc.message}")
                else:
                    if item.get("audioError"):
                        st.warning(
                            "Your text was saved, but there was an error saving the "
                            f"audio: {item.get('errorMessage')}"
                        )
                    else:
                        st.success("Your speech has been saved")
