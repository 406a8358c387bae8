"""Tests for the PortAudio device adapters.

``sd.RawInputStream`` and ``sd.OutputStream`` are replaced with MagicMocks,
and the tests call the captured PortAudio callbacks directly. That covers
fragment flushing, the playback generation counter, and telling a pause
apart from end-of-stream, all without touching a real sound card.
"""

import asyncio
from unittest.mock import MagicMock

import numpy as np
import pytest

try:
    import sounddevice as sd
except OSError:  # PortAudio shared library not installed
    pytest.skip("PortAudio is not available", allow_module_level=True)

from src.core.exceptions import PermissionDeniedError, PlaybackError
from src.services.audio import sounddevice_io
from src.services.audio.devices import CaptureConstraints
from src.services.audio.sounddevice_io import (
    SoundDeviceCaptureStream,
    SoundDeviceMediaElement,
    SoundDeviceMicrophone,
)

PCM = b"\x01\x00\x02\x00\x03\x00\x04\x00"  # four int16 samples


@pytest.fixture
def input_stream_cls(monkeypatch):
    """Replace ``sd.RawInputStream``; ``.call_args`` exposes the callback."""
    cls = MagicMock()
    monkeypatch.setattr(sounddevice_io.sd, "RawInputStream", cls)
    return cls


@pytest.fixture
def output_stream_cls(monkeypatch):
    """Replace ``sd.OutputStream``; ``.call_args`` exposes the callbacks."""
    cls = MagicMock()
    monkeypatch.setattr(sounddevice_io.sd, "OutputStream", cls)
    return cls


def _capture_callback(cls):
    return cls.call_args.kwargs["callback"]


# ---------------------------------------------------------------------------
# Capture
# ---------------------------------------------------------------------------


class TestCaptureStream:
    """Fragment delivery from the PortAudio thread to the controller."""

    async def test_timeslice_flush_delivers_fragments(self, input_stream_cls):
        fragments: list[bytes] = []
        stream = SoundDeviceCaptureStream(CaptureConstraints(), fragments.append, timeslice=0.01)
        stream.start()
        _capture_callback(input_stream_cls)(PCM, 4, None, None)
        await asyncio.sleep(0.05)
        assert fragments == [PCM]
        await stream.stop()
        assert fragments == [PCM]

    async def test_stop_flushes_remaining_audio(self, input_stream_cls):
        fragments: list[bytes] = []
        stream = SoundDeviceCaptureStream(CaptureConstraints(), fragments.append, timeslice=10.0)
        stream.start()
        _capture_callback(input_stream_cls)(PCM, 4, None, None)

        await stream.stop()
        assert fragments == [PCM]
        input_stream_cls.return_value.stop.assert_called_once()
        input_stream_cls.return_value.close.assert_called_once()

    async def test_device_failure_still_delivers_buffered_audio(self, input_stream_cls):
        fragments: list[bytes] = []
        input_stream_cls.return_value.stop.side_effect = sd.PortAudioError("device unplugged")
        stream = SoundDeviceCaptureStream(CaptureConstraints(), fragments.append, timeslice=10.0)
        stream.start()
        _capture_callback(input_stream_cls)(PCM, 4, None, None)

        with pytest.raises(sd.PortAudioError):
            await stream.stop()
        assert fragments == [PCM]
        input_stream_cls.return_value.close.assert_called_once()

    def test_package_wraps_fragments_in_wav(self, input_stream_cls):
        stream = SoundDeviceCaptureStream(CaptureConstraints(), lambda _: None, timeslice=1.0)
        wav = stream.package([PCM[:4], PCM[4:]])
        assert stream.mime_type == "audio/wav"
        assert wav[:4] == b"RIFF"
        assert wav.endswith(PCM)


class TestMicrophone:
    async def test_open_applies_constraints(self, input_stream_cls):
        stream = await SoundDeviceMicrophone().open(
            CaptureConstraints(sample_rate=16000), lambda _: None, 1.0
        )
        kwargs = input_stream_cls.call_args.kwargs
        assert kwargs["samplerate"] == 16000
        assert kwargs["channels"] == 1
        assert kwargs["dtype"] == "int16"
        input_stream_cls.return_value.start.assert_called_once()
        await stream.stop()

    async def test_unavailable_device_is_permission_denied(self, input_stream_cls):
        input_stream_cls.side_effect = sd.PortAudioError("no input device")
        with pytest.raises(PermissionDeniedError):
            await SoundDeviceMicrophone().open(CaptureConstraints(), lambda _: None, 1.0)


# ---------------------------------------------------------------------------
# Playback
# ---------------------------------------------------------------------------


@pytest.fixture
def samples():
    """Eight mono samples at 4 Hz: a 2-second source."""
    return (np.arange(8, dtype=np.float32) / 10).reshape(-1, 1)


@pytest.fixture
def listener():
    return MagicMock()


@pytest.fixture
async def element(samples, listener, output_stream_cls):
    """Media element with decoding stubbed out and *listener* attached."""
    el = SoundDeviceMediaElement(update_interval=0.25)
    el._processor.decode = MagicMock(return_value=(samples, 4))
    el.attach(listener)
    await el.load(b"encoded", "audio/wav")
    return el


def _render(cls, frames: int) -> np.ndarray:
    """Pull *frames* samples through the latest output callback."""
    outdata = np.ones((frames, 1), dtype=np.float32)
    cls.call_args.kwargs["callback"](outdata, frames, None, None)
    return outdata


class TestMediaElement:
    async def test_load_reports_duration_and_readiness(self, element, listener):
        listener.on_duration_known.assert_called_once_with(2.0)
        listener.on_can_play_through.assert_called_once_with(2.0)

    async def test_play_opens_output_stream(self, element, listener, output_stream_cls):
        await element.play()
        kwargs = output_stream_cls.call_args.kwargs
        assert kwargs["samplerate"] == 4
        assert kwargs["channels"] == 1
        output_stream_cls.return_value.start.assert_called_once()
        listener.on_play.assert_called_once()

    async def test_play_without_source_raises(self):
        with pytest.raises(PlaybackError):
            await SoundDeviceMediaElement().play()

    async def test_output_failure_is_playback_error(self, element, listener, output_stream_cls):
        output_stream_cls.side_effect = sd.PortAudioError("no output device")
        with pytest.raises(PlaybackError):
            await element.play()
        listener.on_play.assert_not_called()

        output_stream_cls.side_effect = None
        await element.play()
        listener.on_play.assert_called_once()

    async def test_time_updates_posted_to_loop(
        self, element, listener, output_stream_cls, samples
    ):
        await element.play()
        out = _render(output_stream_cls, 5)
        np.testing.assert_array_equal(out, samples[:5])
        await asyncio.sleep(0)
        listener.on_time_update.assert_called_once_with(1.25)

    async def test_end_of_stream_resets_position(
        self, element, listener, output_stream_cls, samples
    ):
        await element.play()
        _render(output_stream_cls, 5)
        with pytest.raises(sd.CallbackStop):
            out = np.ones((5, 1), dtype=np.float32)
            output_stream_cls.call_args.kwargs["callback"](out, 5, None, None)
        np.testing.assert_array_equal(out[:3], samples[5:])
        assert not out[3:].any()

        output_stream_cls.call_args.kwargs["finished_callback"]()
        await asyncio.sleep(0)
        listener.on_ended.assert_called_once()
        output_stream_cls.return_value.close.assert_called_once()

        await element.play()
        np.testing.assert_array_equal(_render(output_stream_cls, 2), samples[:2])

    async def test_pause_is_not_reported_as_ended(self, element, listener, output_stream_cls):
        await element.play()
        _render(output_stream_cls, 2)
        element.pause()
        listener.on_pause.assert_called_once()
        output_stream_cls.return_value.stop.assert_called_once()

        # PortAudio fires finished_callback after a stop as well.
        output_stream_cls.call_args.kwargs["finished_callback"]()
        await asyncio.sleep(0)
        listener.on_ended.assert_not_called()

    async def test_events_from_unloaded_source_are_dropped(
        self, element, listener, output_stream_cls
    ):
        await element.play()
        finished = output_stream_cls.call_args.kwargs["finished_callback"]
        _render(output_stream_cls, 2)
        element.unload()
        finished()
        await asyncio.sleep(0)
        listener.on_time_update.assert_not_called()
        listener.on_ended.assert_not_called()

    async def test_pause_without_stream_is_noop(self, element, listener):
        element.pause()
        listener.on_pause.assert_not_called()
