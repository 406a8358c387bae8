"""
Speech module - Speech-to-text and text-to-speech providers.

Factory function for creating a speech client from configuration.
"""

from src.core.config import Settings

from .base import BaseSpeechClient

__all__ = ["BaseSpeechClient", "create_speech_client"]


def create_speech_client(settings: Settings, **kwargs) -> BaseSpeechClient:
    """
    Factory function to create the configured speech client.

    Uses the hosted Spitch API when an API key is configured and falls back
    to the offline demo provider otherwise.

    Args:
        settings: Application settings.
        **kwargs: Provider-specific options (e.g. ``transport`` for Spitch)

    Returns:
        BaseSpeechClient implementation instance
    """
    if settings.spitch_api_key:
        from .spitch import SpitchClient
        return SpitchClient(
            api_key=settings.spitch_api_key,
            base_url=settings.spitch_base_url,
            timeout=settings.spitch_timeout,
            **kwargs,
        )
    from .demo import DemoSpeechClient
    return DemoSpeechClient()
