"""
Application configuration via pydantic-settings.

Loads values from .env file with sensible defaults for local development.
Use ``get_settings()`` to obtain the cached singleton instance.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Afroglot application settings loaded from environment / .env file.

    All settings can be overridden via environment variables or a `.env` file.
    Field names map directly to env var names (case-insensitive).

    Attributes:
        spitch_api_key: Bearer key for the Spitch speech API. Empty = demo mode.
        cloudinary_cloud_name: Cloudinary account used for saved audio.
        database_url: Async SQLAlchemy connection string for SQLite.
        auth_tokens: Mapping of bearer token -> user id. Empty = single-user mode.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore unrecognized env vars
    )

    # --- Speech API (Spitch) ---
    spitch_api_key: str = ""  # Empty = demo transcription / synthesis
    spitch_base_url: str = "https://api.spi-tch.com/v1"
    spitch_timeout: float = 60.0  # Seconds per request
    default_language: str = "yoruba"

    # --- Media CDN (Cloudinary) ---
    cloudinary_cloud_name: str = ""
    cloudinary_upload_preset: str = ""
    cloudinary_api_key: str = ""
    cloudinary_base_url: str = "https://api.cloudinary.com/v1_1"
    app_folder: str = "afroglot"  # Uploads land in <app_folder>/<user_id>

    # --- Audio capture / upload ---
    capture_sample_rate: int = 22050  # Reduced rate keeps recordings small
    capture_timeslice: float = 1.0  # Max seconds between delivered fragments
    max_upload_bytes: int = 50 * 1024 * 1024

    # --- Save pipeline ---
    save_upload_timeout: float = 120.0  # Audio upload deadline before marking failed
    stalled_after_ms: int = 5 * 60 * 1000  # Processing flag older than this = stalled

    # --- Auth ---
    # Bearer token -> user id, e.g. AUTH_TOKENS='{"s3cret": "user-1"}'
    auth_tokens: dict[str, str] = {}
    default_user_id: str = "local"  # Used when auth_tokens is empty

    # --- Application ---
    app_host: str = "0.0.0.0"  # Bind address for the FastAPI server
    app_port: int = 8000
    log_level: str = "INFO"  # Python logging level
    cors_origins: list[str] = [
        "http://localhost:8501",  # Streamlit
        "http://localhost:3000",  # Dev frontend
    ]

    # --- Storage ---
    database_url: str = "sqlite+aiosqlite:///data/afroglot.db"


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings singleton.

    Uses ``functools.lru_cache`` so the .env file is read only once.
    Subsequent calls return the same ``Settings`` instance.

    Returns:
        Settings: The application-wide configuration object.
    """
    return Settings()
