"""Shared pytest fixtures for the Afroglot test suite.

Provides in-memory audio devices for the controller, a manual clock,
PCM sample data, and database setup helpers used across unit and
integration tests.
"""

import asyncio
import math
import struct

import pytest

from src.core.exceptions import PermissionDeniedError
from src.services.audio.controller import AudioController
from src.services.audio.devices import (
    CaptureConstraints,
    CaptureStream,
    FragmentCallback,
    MediaElement,
    Microphone,
)

# ---------------------------------------------------------------------------
# Fake audio devices
# ---------------------------------------------------------------------------


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeCaptureStream(CaptureStream):
    """Capture stream whose fragments are pushed by the test."""

    def __init__(self, on_fragment: FragmentCallback, final_fragment: bytes = b"") -> None:
        self._on_fragment = on_fragment
        self.final_fragment = final_fragment
        self.stopped = False
        self.stop_error: Exception | None = None

    @property
    def mime_type(self) -> str:
        return "audio/webm"

    def emit(self, data: bytes) -> None:
        self._on_fragment(data)

    async def stop(self) -> None:
        if self.final_fragment:
            self._on_fragment(self.final_fragment)
        if self.stop_error is not None:
            raise self.stop_error
        self.stopped = True

    def package(self, fragments: list[bytes]) -> bytes:
        return b"".join(fragments)


class FakeMicrophone(Microphone):
    """Microphone that grants access unless ``deny`` is set.

    When ``gate`` is an ``asyncio.Event``, ``open`` waits for it, which lets
    tests issue a second start while the first is still pending.
    """

    def __init__(self) -> None:
        self.deny = False
        self.gate: asyncio.Event | None = None
        self.final_fragment = b""
        self.streams: list[FakeCaptureStream] = []
        self.constraints: list[CaptureConstraints] = []

    async def open(
        self,
        constraints: CaptureConstraints,
        on_fragment: FragmentCallback,
        timeslice: float,
    ) -> CaptureStream:
        if self.gate is not None:
            await self.gate.wait()
        if self.deny:
            raise PermissionDeniedError()
        self.constraints.append(constraints)
        stream = FakeCaptureStream(on_fragment, self.final_fragment)
        self.streams.append(stream)
        return stream

    @property
    def last_stream(self) -> FakeCaptureStream:
        return self.streams[-1]


class FakeMediaElement(MediaElement):
    """Media element that reports readiness on load unless ``auto_ready`` is off."""

    def __init__(self) -> None:
        super().__init__()
        self.auto_ready = True
        self.reported_duration: float | None = 4.2
        self.fail_play = False
        self.loaded: list[tuple[bytes, str]] = []
        self.unload_count = 0
        self.pause_count = 0

    def emit(self, event: str, *args) -> None:
        getattr(self._listener, event)(*args)

    async def load(self, data: bytes, mime_type: str) -> None:
        self.loaded.append((data, mime_type))
        if self.auto_ready:
            self.emit("on_duration_known", self.reported_duration)
            self.emit("on_can_play_through", self.reported_duration)

    async def play(self) -> None:
        if self.fail_play:
            raise RuntimeError("NotAllowedError: play() failed")
        self.emit("on_play")

    def pause(self) -> None:
        self.pause_count += 1
        self.emit("on_pause")

    def unload(self) -> None:
        self.unload_count += 1


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def microphone():
    return FakeMicrophone()


@pytest.fixture
def element():
    return FakeMediaElement()


@pytest.fixture
async def controller(microphone, element, clock):
    """AudioController wired to fake devices; closed after the test."""
    ctrl = AudioController(microphone, element, clock=clock, tick_interval=0.01)
    yield ctrl
    await ctrl.close()


# ---------------------------------------------------------------------------
# Audio Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_pcm_bytes():
    """Generate 1 second of 440Hz sine-wave PCM audio (16kHz, 16-bit, mono).

    Returns:
        bytes: Raw PCM audio data.
    """
    sample_rate = 16000
    duration = 1.0
    frequency = 440.0
    amplitude = 16000  # ~50% of max int16

    samples = []
    for i in range(int(sample_rate * duration)):
        value = int(amplitude * math.sin(2 * math.pi * frequency * i / sample_rate))
        samples.append(struct.pack("<h", value))
    return b"".join(samples)


@pytest.fixture
def sample_wav_bytes(sample_pcm_bytes):
    """The 1-second sine wave wrapped in a WAV container."""
    import io
    import wave

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(16000)
        wf.writeframes(sample_pcm_bytes)
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Database Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine with tables, dispose after test."""
    from sqlalchemy.ext.asyncio import create_async_engine

    from src.services.storage.database import Base

    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Yield an AsyncSession bound to the test engine; rolls back after test."""
    from sqlalchemy.ext.asyncio import async_sessionmaker

    factory = async_sessionmaker(db_engine, expire_on_commit=False)
    async with factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def repository(db_session):
    """Return a SavedItemRepository bound to the test session."""
    from src.services.storage.repository import SavedItemRepository

    return SavedItemRepository(db_session)


@pytest.fixture
def use_test_db(db_engine):
    """Point ``get_session()`` at the in-memory test engine."""
    from src.services.storage import database

    database._engine = db_engine
    database._session_factory = None
    yield db_engine
    database.reset_engine()
