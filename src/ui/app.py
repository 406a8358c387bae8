"""
Afroglot Streamlit UI: main entry point.

Run with: ``streamlit run src/ui/app.py``
"""

# ---------------------------------------------------------------------------
# Ensure project root is on sys.path so ``from src.xxx`` imports work.
# Streamlit replaces sys.path[0] with the script directory (src/ui/),
# which removes the project root needed for absolute ``src.*`` imports.
# ---------------------------------------------------------------------------
import sys  # noqa: E402
from pathlib import Path  # noqa: E402

_project_root = str(Path(__file__).resolve().parent.parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import streamlit as st  # noqa: E402

from src.ui.api_client import APIError, get_api_client  # noqa: E402

# ---------------------------------------------------------------------------
# Page config (must be first Streamlit call)
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="Afroglot",
    page_icon="\U0001f5e3️",
    layout="wide",
)

# ---------------------------------------------------------------------------
# Session state defaults
# ---------------------------------------------------------------------------
_DEFAULTS = {
    "api_base_url": "http://localhost:8000",
    "api_token": "",
    "stt_language": "yoruba",
    "transcription": None,
    "tts_language": "yoruba",
    "tts_voice": "sade",
    "tts_text": "",
    "tts_audio": None,
    "stalled_prompted": False,
}

for key, value in _DEFAULTS.items():
    if key not in st.session_state:
        st.session_state[key] = value

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
with st.sidebar:
    st.title("\U0001f5e3️ Afroglot")
    st.caption("Speech-to-text and text-to-speech for Yoruba, Igbo and Hausa")
    st.divider()
    st.session_state.api_base_url = st.text_input(
        "Backend API URL",
        value=st.session_state.api_base_url,
        help="URL of the Afroglot FastAPI backend server (default: http://localhost:8000)",
    )
    st.session_state.api_token = st.text_input(
        "Access token",
        value=st.session_state.api_token,
        type="password",
        help="Only needed when the backend is configured with AUTH_TOKENS",
    )

    # Connection status indicator
    _client = get_api_client(st.session_state.api_base_url, st.session_state.api_token or None)
    _conn_ok, _conn_msg = _client.check_connection()
    if _conn_ok:
        st.success(f"Backend: {_conn_msg}")
        try:
            _status = _client.speech_status()
            if not _status.get("api_key_configured"):
                st.info("Demo mode: add SPITCH_API_KEY to .env for real speech processing.")
        except APIError as exc:
            st.warning(f"Speech status unavailable: {exc.message}")
    else:
        st.error(f"Backend: {_conn_msg}")

# ---------------------------------------------------------------------------
# Navigation (multipage)
# ---------------------------------------------------------------------------
stt_page = st.Page(
    "pages/01_speech_to_text.py",
    title="Speech to Text",
    icon="\U0001f3a4",
    default=True,
)
tts_page = st.Page(
    "pages/02_text_to_speech.py",
    title="Text to Speech",
    icon="\U0001f50a",
)
dashboard_page = st.Page(
    "pages/03_dashboard.py",
    title="Dashboard",
    icon="\U0001f4da",
)

nav = st.navigation([stt_page, tts_page, dashboard_page])
nav.run()
