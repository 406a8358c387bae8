"""Audio capture/playback controller.

Owns one recording session, one playback session and a single "current
audio" slot, and reconciles user actions against an injected
``Microphone`` and ``MediaElement``.

States::

    idle -> recording -> ready -> (playing <-> paused) -> idle   (clear)
    idle -> ready                                                 (upload)

Everything runs on one event loop. Element events arrive as the
``on_*`` transitions below and are the only way playback observations
change.

Usage::

    controller = AudioController(SoundDeviceMicrophone(), SoundDeviceMediaElement())
    await controller.start_recording()
    ...
    artifact = await controller.stop_recording()
    saved = await controller.save()
"""

import asyncio
import logging
import math
import time
from collections.abc import Callable

from src.core.exceptions import (
    CaptureError,
    FileTooLargeError,
    InvalidFileTypeError,
    NoAudioError,
    PermissionDeniedError,
    PlaybackError,
    RecorderStateError,
    RecordingAlreadyActiveError,
    RetrievalError,
)
from src.core.models import PlaybackStateResponse, RecorderSnapshot, RecorderState
from src.services.audio.artifacts import (
    AudioArtifact,
    BlobHandle,
    PlaybackState,
    RecordedAudio,
    RecordingSession,
    SavedAudio,
    UploadedAudio,
)
from src.services.audio.devices import CaptureConstraints, CaptureStream, MediaElement, Microphone

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 50 * 1024 * 1024
TICK_INTERVAL = 0.1


def _valid_duration(value: float | None) -> bool:
    return value is not None and math.isfinite(value) and value > 0


class AudioController:
    """Single-session audio recorder and player.

    Args:
        microphone: Host microphone that grants capture streams.
        element: Media element used for playback; its events are routed here.
        constraints: Capture parameters requested on every start.
        timeslice: Maximum seconds between delivered fragments.
        max_upload_bytes: Upload size limit (inclusive).
        tick_interval: Seconds between elapsed-time updates while recording.
        clock: Monotonic clock, injectable for tests.
    """

    def __init__(
        self,
        microphone: Microphone,
        element: MediaElement,
        constraints: CaptureConstraints | None = None,
        timeslice: float = 1.0,
        max_upload_bytes: int = MAX_UPLOAD_BYTES,
        tick_interval: float = TICK_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._microphone = microphone
        self._element = element
        self._constraints = constraints or CaptureConstraints()
        self._timeslice = timeslice
        self._max_upload_bytes = max_upload_bytes
        self._tick_interval = tick_interval
        self._clock = clock

        self._state = RecorderState.idle
        self._opening = False
        self._session: RecordingSession | None = None
        self._stream: CaptureStream | None = None
        self._tick_task: asyncio.Task | None = None
        self._elapsed = 0.0
        self._current: AudioArtifact | None = None
        self._playback = PlaybackState()

        element.attach(self)

    # ------------------------------------------------------------------
    # Observations
    # ------------------------------------------------------------------

    @property
    def state(self) -> RecorderState:
        return self._state

    @property
    def current(self) -> AudioArtifact | None:
        return self._current

    @property
    def session(self) -> RecordingSession | None:
        return self._session

    @property
    def playback(self) -> PlaybackState:
        return self._playback

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time of the active (or most recently stopped) recording."""
        return self._elapsed

    @property
    def is_recording(self) -> bool:
        return self._state is RecorderState.recording

    def snapshot(self) -> RecorderSnapshot:
        """Return a serializable view of the controller."""
        current = self._current
        return RecorderSnapshot(
            state=self._state,
            source_kind=current.source_kind if current else None,
            mime_type=current.mime_type if current else None,
            byte_size=current.byte_size if current else 0,
            elapsed_seconds=self._elapsed,
            playback=PlaybackStateResponse(
                is_playing=self._playback.is_playing,
                current_time=self._playback.current_time,
                duration=self._playback.duration,
                ready=self._playback.ready,
            ),
        )

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    async def start_recording(self) -> None:
        """Request the microphone and begin buffering fragments.

        Raises:
            RecordingAlreadyActiveError: If a recording is active or starting.
            RecorderStateError: If audio is currently playing.
            PermissionDeniedError: If the host refuses microphone access.
        """
        if self._state is RecorderState.recording or self._opening:
            raise RecordingAlreadyActiveError()
        if self._playback.is_playing:
            raise RecorderStateError("Pause playback before starting a recording")

        self._opening = True
        try:
            stream = await self._microphone.open(
                self._constraints, self._on_fragment, self._timeslice
            )
        except PermissionDeniedError:
            logger.warning("Microphone access denied; controller stays %s", self._state)
            raise
        finally:
            self._opening = False

        # Access granted: the previous artifact is superseded by this session.
        self._discard_current()
        self._playback = PlaybackState()
        self._elapsed = 0.0
        self._session = RecordingSession(started_at=self._clock())
        self._stream = stream
        self._state = RecorderState.recording
        self._tick_task = asyncio.create_task(self._tick())
        logger.info("Recording started (%s)", stream.mime_type)

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self._tick_interval)
            if self._session is not None:
                self._elapsed = self._clock() - self._session.started_at
                self._session.elapsed_seconds = self._elapsed

    async def _cancel_tick(self) -> None:
        if self._tick_task is None:
            return
        task, self._tick_task = self._tick_task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def _on_fragment(self, data: bytes) -> None:
        """Append one captured fragment; fragments arrive in capture order."""
        session = self._session
        if session is None or not session.active or not data:
            return
        session.chunks.append(data)

    async def stop_recording(self) -> RecordedAudio:
        """Finalize the active session into the current ``RecordedAudio``.

        Duration is the measured elapsed time, not container metadata.

        If the capture device fails to stop, the fragments delivered before
        the failure still become the recording; with none the controller
        returns to ``idle``.

        Raises:
            RecorderStateError: If no recording is active.
            CaptureError: If the device failed and no audio was captured.
        """
        session, stream = self._session, self._stream
        if self._state is not RecorderState.recording or session is None or stream is None:
            raise RecorderStateError("No recording in progress")

        await self._cancel_tick()
        elapsed = self._clock() - session.started_at
        stop_error: Exception | None = None
        try:
            await stream.stop()
        except Exception as exc:
            logger.exception(
                "Capture device failed to stop; %d fragment(s) buffered", len(session.chunks)
            )
            stop_error = exc
        finally:
            session.active = False
            session.elapsed_seconds = elapsed
            self._session = None
            self._stream = None

        if stop_error is not None and not session.chunks:
            self._playback = PlaybackState()
            self._elapsed = 0.0
            self._state = RecorderState.idle
            raise CaptureError(f"Recording failed: {stop_error}") from stop_error

        payload = stream.package(session.chunks)
        artifact = RecordedAudio(
            handle=BlobHandle(payload),
            mime_type=stream.mime_type,
            byte_size=len(payload),
            duration_seconds=elapsed,
        )
        self._elapsed = elapsed
        self._current = artifact
        self._playback = PlaybackState(duration=elapsed, ready=True)
        self._state = RecorderState.ready
        logger.info(
            "Recording complete: %.1f KB, %.2fs, %d fragment(s)",
            artifact.byte_size / 1024,
            elapsed,
            len(session.chunks),
        )

        try:
            await self._element.load(payload, artifact.mime_type)
        except Exception:
            logger.exception("Could not load recorded audio for playback")
            self._playback.ready = False
        return artifact

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    async def upload_file(
        self,
        data: bytes,
        mime_type: str | None,
        filename: str | None = None,
    ) -> UploadedAudio:
        """Make an uploaded file the current artifact.

        Readiness stays false until the element reports can-play-through.

        Raises:
            RecorderStateError: While recording.
            InvalidFileTypeError: If *mime_type* is not ``audio/*``.
            FileTooLargeError: If *data* exceeds the upload limit.
        """
        if self._state is RecorderState.recording or self._opening:
            raise RecorderStateError("Stop recording before uploading a file")
        if not mime_type or not mime_type.startswith("audio/"):
            logger.warning("Rejected upload %r: type %r", filename, mime_type)
            raise InvalidFileTypeError(mime_type)
        if len(data) > self._max_upload_bytes:
            logger.warning("Rejected upload %r: %d bytes", filename, len(data))
            raise FileTooLargeError(len(data), self._max_upload_bytes)

        self._discard_current()
        artifact = UploadedAudio(
            handle=BlobHandle(data),
            mime_type=mime_type,
            byte_size=len(data),
            filename=filename,
        )
        self._current = artifact
        self._playback = PlaybackState()
        self._elapsed = 0.0
        self._state = RecorderState.ready
        logger.info("File uploaded: %s (%d bytes, %s)", filename, len(data), mime_type)

        try:
            await self._element.load(data, mime_type)
        except Exception:
            logger.exception("Could not load uploaded audio %r for playback", filename)
        return artifact

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    async def toggle_play_pause(self) -> None:
        """Pause when playing, otherwise ask the element to play.

        Raises:
            RecorderStateError: While recording, or while an upload is loading.
            PlaybackError: If the element rejects the play request.
        """
        current = self._current
        if current is None:
            return
        if self._state is RecorderState.recording:
            raise RecorderStateError("Cannot play audio while recording")
        if isinstance(current, UploadedAudio) and not self._playback.ready:
            raise RecorderStateError("Audio is still loading", code="AUDIO_NOT_READY")

        if self._playback.is_playing:
            self._element.pause()
            return
        try:
            await self._element.play()
        except Exception as exc:
            logger.warning("Error playing audio: %s", exc)
            if isinstance(exc, PlaybackError):
                raise
            raise PlaybackError() from exc

    # -- element events --

    def on_play(self) -> None:
        if self._current is None:
            return
        self._playback.is_playing = True
        self._state = RecorderState.playing

    def on_pause(self) -> None:
        if self._current is None:
            return
        self._playback.is_playing = False
        if self._state is RecorderState.playing:
            self._state = RecorderState.paused

    def on_ended(self) -> None:
        if self._current is None:
            return
        self._playback.is_playing = False
        self._playback.current_time = 0.0
        self._state = RecorderState.ready

    def on_time_update(self, current_time: float) -> None:
        if self._current is None:
            return
        self._playback.current_time = current_time

    def on_duration_known(self, duration: float | None) -> None:
        current = self._current
        # Recorded duration is the measured elapsed time; container metadata
        # for streamed recordings is unreliable.
        if not isinstance(current, UploadedAudio) or not _valid_duration(duration):
            return
        current.duration_seconds = duration
        self._playback.duration = duration

    def on_can_play_through(self, duration: float | None = None) -> None:
        if self._current is None:
            return
        self._playback.ready = True
        self.on_duration_known(duration)

    # ------------------------------------------------------------------
    # Save / clear
    # ------------------------------------------------------------------

    async def save(self) -> SavedAudio:
        """Hand the current artifact's content to the caller.

        Raises:
            RecorderStateError: While recording.
            NoAudioError: If there is no current artifact.
            RetrievalError: If the artifact's content was already released.
        """
        if self._state is RecorderState.recording:
            raise RecorderStateError("Stop recording before saving")
        current = self._current
        if current is None:
            raise NoAudioError()
        try:
            data = current.handle.read()
        except RetrievalError:
            logger.warning("Current %s audio was already released", current.source_kind)
            raise
        return SavedAudio(
            data=data,
            source_kind=current.source_kind,
            mime_type=current.mime_type,
            duration_seconds=current.duration_seconds,
            artifact=current,
        )

    async def clear(self) -> None:
        """Drop the current artifact and return to ``idle``.

        No-op from ``idle`` and ``recording``.
        """
        if self._state in (RecorderState.idle, RecorderState.recording):
            return
        self._discard_current()
        self._playback = PlaybackState()
        self._elapsed = 0.0
        self._state = RecorderState.idle
        logger.info("Audio cleared")

    async def close(self) -> None:
        """Release the microphone, the element source and the artifact."""
        if self._state is RecorderState.recording:
            await self._cancel_tick()
            stream, self._stream = self._stream, None
            if self._session is not None:
                self._session.active = False
            self._session = None
            if stream is not None:
                try:
                    await stream.stop()
                except Exception:
                    logger.exception("Failed to release microphone on close")
        self._discard_current()
        self._playback = PlaybackState()
        self._elapsed = 0.0
        self._state = RecorderState.idle

    def _discard_current(self) -> None:
        current, self._current = self._current, None
        if current is None:
            return
        if self._playback.is_playing:
            self._element.pause()
        self._element.unload()
        current.handle.release()
