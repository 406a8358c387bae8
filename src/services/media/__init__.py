"""
Media module - Audio hosting on the Cloudinary CDN.
"""

from src.core.config import Settings

from .cloudinary import CloudinaryUploader

__all__ = ["CloudinaryUploader", "create_uploader"]


def create_uploader(settings: Settings, **kwargs) -> CloudinaryUploader:
    """Build the uploader from application settings."""
    return CloudinaryUploader(
        cloud_name=settings.cloudinary_cloud_name,
        upload_preset=settings.cloudinary_upload_preset,
        app_folder=settings.app_folder,
        base_url=settings.cloudinary_base_url,
        timeout=settings.save_upload_timeout,
        **kwargs,
    )
