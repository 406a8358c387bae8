"""Integration test fixtures for Afroglot.

Provides an async HTTP client for an app wired to fake audio devices, the
offline demo speech provider, a mocked CDN uploader, and an in-memory
SQLite database with real repository operations.
"""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.app import create_app
from src.core.models import UploadResult
from src.services.media.cloudinary import CloudinaryUploader
from src.services.speech.demo import DemoSpeechClient
from src.services.storage import database


@pytest.fixture
def uploader():
    """Mock CDN uploader that accepts every upload."""
    mock = AsyncMock(spec=CloudinaryUploader)
    mock.configured = True
    mock.upload.return_value = UploadResult(
        url="https://res.cloudinary.com/demo/afroglot/local/item.wav",
        public_id="afroglot/local/item",
        format="wav",
        duration=1.0,
        resource_type="video",
    )
    return mock


@pytest.fixture
def app(controller, uploader):
    """Create a fresh FastAPI application with injected services."""
    return create_app(
        controller=controller,
        speech_client=DemoSpeechClient(),
        uploader=uploader,
    )


@pytest.fixture
async def async_client(app, db_engine):
    """AsyncClient backed by the in-memory test engine.

    Injects the test engine into the database module so that all routes
    use the same in-memory SQLite with tables already created.
    """
    database._engine = db_engine
    database._session_factory = None
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    database.reset_engine()
