"""PortAudio-backed microphone and media element (via ``sounddevice``).

PortAudio invokes stream callbacks on its own thread. Capture callbacks
only append to a locked buffer that an event-loop task drains every
``timeslice``; playback callbacks post their events onto the loop with
``call_soon_threadsafe``. Listener code therefore always runs on the
event loop, in delivery order.
"""

import asyncio
import logging
import threading

import numpy as np
import sounddevice as sd

from src.core.exceptions import PermissionDeniedError, PlaybackError
from src.services.audio.devices import (
    CaptureConstraints,
    CaptureStream,
    FragmentCallback,
    MediaElement,
    Microphone,
)
from src.services.audio.processor import AudioProcessor

logger = logging.getLogger(__name__)


class SoundDeviceCaptureStream(CaptureStream):
    """16-bit PCM capture packaged as WAV on stop."""

    def __init__(
        self,
        constraints: CaptureConstraints,
        on_fragment: FragmentCallback,
        timeslice: float,
        device: int | str | None = None,
    ) -> None:
        self._on_fragment = on_fragment
        self._timeslice = timeslice
        self._processor = AudioProcessor(
            sample_rate=constraints.sample_rate,
            sample_width=2,
            channels=constraints.channels,
        )
        self._pending = bytearray()
        self._lock = threading.Lock()
        self._flush_task: asyncio.Task | None = None
        self._stream = sd.RawInputStream(
            samplerate=constraints.sample_rate,
            channels=constraints.channels,
            dtype="int16",
            device=device,
            callback=self._callback,
        )

    @property
    def mime_type(self) -> str:
        return "audio/wav"

    def _callback(self, indata, frames, time_info, status) -> None:  # noqa: ANN001
        if status:
            logger.debug("Capture status: %s", status)
        with self._lock:
            self._pending.extend(bytes(indata))

    def start(self) -> None:
        self._stream.start()
        self._flush_task = asyncio.get_running_loop().create_task(self._flush_loop())

    async def _flush_loop(self) -> None:
        while True:
            await asyncio.sleep(self._timeslice)
            self._flush()

    def _flush(self) -> None:
        with self._lock:
            data = bytes(self._pending)
            self._pending.clear()
        if data:
            self._on_fragment(data)

    async def stop(self) -> None:
        if self._flush_task is not None:
            self._flush_task.cancel()
            try:
                await self._flush_task
            except asyncio.CancelledError:
                pass
            self._flush_task = None
        try:
            await asyncio.to_thread(self._stream.stop)
        finally:
            # Audio captured before a device failure is still delivered.
            self._stream.close()
            self._flush()

    def package(self, fragments: list[bytes]) -> bytes:
        return self._processor.pcm_to_wav_bytes(b"".join(fragments))


class SoundDeviceMicrophone(Microphone):
    """Default system input device.

    PortAudio exposes no echo, noise or gain processing; only channel count
    and sample rate from the constraints are applied.
    """

    def __init__(self, device: int | str | None = None) -> None:
        self._device = device

    async def open(
        self,
        constraints: CaptureConstraints,
        on_fragment: FragmentCallback,
        timeslice: float,
    ) -> CaptureStream:
        try:
            stream = SoundDeviceCaptureStream(
                constraints, on_fragment, timeslice, device=self._device
            )
            stream.start()
        except sd.PortAudioError as exc:
            logger.warning("Microphone unavailable: %s", exc)
            raise PermissionDeniedError(f"Microphone access denied: {exc}") from exc
        logger.info(
            "Microphone opened: %s Hz, %s channel(s)",
            constraints.sample_rate,
            constraints.channels,
        )
        return stream


class SoundDeviceMediaElement(MediaElement):
    """Plays one decoded source through the default output device.

    Each ``load``/``unload`` bumps a generation counter; events posted by a
    previous source are dropped on arrival.
    """

    def __init__(
        self,
        device: int | str | None = None,
        update_interval: float = 0.25,
    ) -> None:
        super().__init__()
        self._device = device
        self._update_interval = update_interval
        self._processor = AudioProcessor()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._generation = 0
        self._samples: np.ndarray | None = None
        self._sample_rate = 0
        self._position = 0
        self._last_update = 0
        self._stream: sd.OutputStream | None = None

    # -- event plumbing --

    def _dispatch(self, generation: int, event: str, *args) -> None:
        if generation != self._generation or self._listener is None:
            return
        getattr(self._listener, event)(*args)

    def _post(self, fn, *args) -> None:  # noqa: ANN001
        """Schedule *fn* from the PortAudio thread onto the loop."""
        if self._loop is not None:
            self._loop.call_soon_threadsafe(fn, *args)

    # -- MediaElement --

    async def load(self, data: bytes, mime_type: str) -> None:
        self.unload()
        generation = self._generation
        self._loop = asyncio.get_running_loop()
        samples, rate = await asyncio.to_thread(self._processor.decode, data, mime_type)
        if generation != self._generation:
            return  # superseded while decoding
        self._samples = samples
        self._sample_rate = rate
        self._position = 0
        duration = len(samples) / rate if rate else None
        self._dispatch(generation, "on_duration_known", duration)
        self._dispatch(generation, "on_can_play_through", duration)

    async def play(self) -> None:
        if self._samples is None:
            raise PlaybackError("No audio source is loaded")
        if self._stream is not None:
            return
        generation = self._generation
        try:
            self._stream = sd.OutputStream(
                samplerate=self._sample_rate,
                channels=self._samples.shape[1],
                dtype="float32",
                device=self._device,
                callback=self._make_callback(generation),
                finished_callback=lambda: self._post(self._finish, generation),
            )
            self._stream.start()
        except sd.PortAudioError as exc:
            self._stream = None
            raise PlaybackError(f"Audio output unavailable: {exc}") from exc
        self._dispatch(generation, "on_play")

    def _make_callback(self, generation: int):
        def callback(outdata, frames, time_info, status) -> None:  # noqa: ANN001
            samples = self._samples
            if samples is None:
                raise sd.CallbackStop
            chunk = samples[self._position : self._position + frames]
            outdata[: len(chunk)] = chunk
            if len(chunk) < frames:
                outdata[len(chunk) :] = 0
            self._position += len(chunk)
            if self._position - self._last_update >= self._update_interval * self._sample_rate:
                self._last_update = self._position
                self._post(
                    self._dispatch,
                    generation,
                    "on_time_update",
                    self._position / self._sample_rate,
                )
            if self._position >= len(samples):
                raise sd.CallbackStop

        return callback

    def _close_stream(self) -> None:
        if self._stream is not None:
            stream, self._stream = self._stream, None
            stream.stop()
            stream.close()

    def _finish(self, generation: int) -> None:
        if generation != self._generation or self._samples is None:
            return
        if self._position < len(self._samples):
            return  # stopped by pause()
        self._close_stream()
        self._position = 0
        self._last_update = 0
        self._dispatch(generation, "on_ended")

    def pause(self) -> None:
        if self._stream is None:
            return
        self._close_stream()
        self._dispatch(self._generation, "on_pause")

    def unload(self) -> None:
        self._close_stream()
        self._generation += 1
        self._samples = None
        self._sample_rate = 0
        self._position = 0
        self._last_update = 0
