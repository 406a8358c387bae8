"""
FastAPI application factory.

``create_app()`` assembles the application with CORS, auth, error
handlers, routers, and the health endpoint. The module-level ``app``
instance allows ``uvicorn src.api.app:app --reload``.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.middleware.auth import UserAuthMiddleware
from src.api.middleware.error_handler import register_error_handlers
from src.api.routes import library, recorder, speech
from src.core.config import get_settings
from src.core.models import HealthResponse
from src.services.audio.controller import AudioController
from src.services.audio.devices import CaptureConstraints
from src.services.media import CloudinaryUploader, create_uploader
from src.services.speech import BaseSpeechClient, create_speech_client
from src.services.storage.database import close_db, init_db

logger = logging.getLogger(__name__)


def _build_controller() -> AudioController:
    """Create the controller on the system's default audio devices."""
    from src.services.audio.sounddevice_io import SoundDeviceMediaElement, SoundDeviceMicrophone

    settings = get_settings()
    return AudioController(
        SoundDeviceMicrophone(),
        SoundDeviceMediaElement(),
        constraints=CaptureConstraints(sample_rate=settings.capture_sample_rate),
        timeslice=settings.capture_timeslice,
        max_upload_bytes=settings.max_upload_bytes,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown lifecycle.

    Startup: configure logging, initialize the database, and create any
    service not injected through ``create_app``.
    Shutdown: release the audio devices and clients, then dispose the DB engine.
    """
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    await init_db()

    state = app.state
    if state.speech_client is None:
        state.speech_client = create_speech_client(settings)
    if state.uploader is None:
        state.uploader = create_uploader(settings)
    if state.controller is None:
        state.controller = _build_controller()
    logger.info(
        "Afroglot started (speech provider: %s)", state.speech_client.provider
    )

    yield

    await state.controller.close()
    await state.speech_client.close()
    await state.uploader.close()
    await close_db()


def create_app(
    controller: AudioController | None = None,
    speech_client: BaseSpeechClient | None = None,
    uploader: CloudinaryUploader | None = None,
) -> FastAPI:
    """Build and return a fully configured FastAPI application.

    Args:
        controller: Audio controller override (tests pass one with fake devices).
        speech_client: Speech provider override.
        uploader: Media uploader override.

    Returns:
        FastAPI: The configured application, ready for ``uvicorn``.
    """

    app = FastAPI(
        title="Afroglot",
        description="Speech-to-text and text-to-speech for Yoruba, Igbo and Hausa.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.controller = controller
    app.state.speech_client = speech_client
    app.state.uploader = uploader

    # -- CORS --
    settings = get_settings()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -- User Auth Middleware --
    app.add_middleware(UserAuthMiddleware)

    # -- Error handlers --
    register_error_handlers(app)

    # -- Health check (root-level, not under /api/v1) --
    @app.get("/health", response_model=HealthResponse, tags=["system"])
    async def health() -> HealthResponse:
        return HealthResponse(timestamp=datetime.now(UTC))

    # -- REST routes --
    app.include_router(recorder.router, prefix="/api/v1")
    app.include_router(speech.router, prefix="/api/v1")
    app.include_router(library.router, prefix="/api/v1")

    return app


app = create_app()
