"""Supported languages and the voices available for each."""

LANGUAGE_CODES: dict[str, str] = {
    "yoruba": "yo",
    "igbo": "ig",
    "hausa": "ha",
}

DEFAULT_LANGUAGES: list[dict[str, str]] = [
    {"code": "yoruba", "name": "Yoruba"},
    {"code": "igbo", "name": "Igbo"},
    {"code": "hausa", "name": "Hausa"},
]

VOICES_BY_LANGUAGE: dict[str, list[dict[str, str]]] = {
    "yoruba": [
        {"id": "sade", "name": "Sade (Female)", "gender": "female"},
        {"id": "femi", "name": "Femi (Male)", "gender": "male"},
    ],
    "igbo": [
        {"id": "amara", "name": "Amara (Female)", "gender": "female"},
        {"id": "ebuka", "name": "Ebuka (Male)", "gender": "male"},
    ],
    "hausa": [
        {"id": "zainab", "name": "Zainab (Female)", "gender": "female"},
        {"id": "hasan", "name": "Hasan (Male)", "gender": "male"},
    ],
}


def to_language_code(language: str) -> str:
    """Map a language name (``"Yoruba"``) to its API code (``"yo"``).

    Values that are not a known name are passed through unchanged, so
    callers may already send ``"yo"``.
    """
    return LANGUAGE_CODES.get(language.lower(), language)


def voice_gender(language: str, voice: str) -> str:
    """Return the gender of *voice* for *language*, defaulting to female."""
    for entry in VOICES_BY_LANGUAGE.get(language.lower(), []):
        if entry["id"] == voice:
            return entry["gender"]
    return "female"
