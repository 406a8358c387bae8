"""
FastAPI dependencies for app-owned services.

The audio controller, speech client and media uploader live on
``app.state`` (created in the lifespan or injected by ``create_app``);
the calling user is resolved by :class:`UserAuthMiddleware`.
"""

from fastapi import Request

from src.core.config import get_settings
from src.services.audio.controller import AudioController
from src.services.media.cloudinary import CloudinaryUploader
from src.services.speech.base import BaseSpeechClient


def get_controller(request: Request) -> AudioController:
    return request.app.state.controller


def get_speech_client(request: Request) -> BaseSpeechClient:
    return request.app.state.speech_client


def get_uploader(request: Request) -> CloudinaryUploader:
    return request.app.state.uploader


def get_user_id(request: Request) -> str:
    """Return the user resolved by the auth middleware (or the default user)."""
    return getattr(request.state, "user_id", None) or get_settings().default_user_id
