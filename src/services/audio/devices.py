"""
Host-environment interfaces used by the audio controller.

A ``Microphone`` grants or denies access and delivers ordered binary
fragments while a ``CaptureStream`` is open. A ``MediaElement`` plays a
single source and reports what happens to it through a
``PlaybackListener``. Concrete implementations live in
:mod:`src.services.audio.sounddevice_io`; tests use in-memory fakes.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

FragmentCallback = Callable[[bytes], None]


@dataclass(frozen=True)
class CaptureConstraints:
    """Fixed capture parameters requested from the host."""

    channels: int = 1
    sample_rate: int = 22050
    echo_cancellation: bool = True
    noise_suppression: bool = True
    auto_gain_control: bool = True


class CaptureStream(ABC):
    """An open microphone capture."""

    @property
    @abstractmethod
    def mime_type(self) -> str:
        """Mime type negotiated for the packaged recording."""

    @abstractmethod
    def package(self, fragments: list[bytes]) -> bytes:
        """Concatenate delivered fragments into one playable payload."""

    @abstractmethod
    async def stop(self) -> None:
        """Stop capturing, deliver any final fragment, and release the device.

        The final fragment must be delivered through the fragment callback
        before this coroutine returns.
        """


class Microphone(ABC):
    """Source of capture streams."""

    @abstractmethod
    async def open(
        self,
        constraints: CaptureConstraints,
        on_fragment: FragmentCallback,
        timeslice: float,
    ) -> CaptureStream:
        """Request access and start capturing.

        Args:
            constraints: Channel count, sample rate and processing flags.
            on_fragment: Called on the event loop with each non-empty fragment,
                in capture order.
            timeslice: Maximum seconds between fragment deliveries.

        Raises:
            PermissionDeniedError: If the host refuses access.
        """


class PlaybackListener(Protocol):
    """Receiver of media element events."""

    def on_play(self) -> None: ...

    def on_pause(self) -> None: ...

    def on_ended(self) -> None: ...

    def on_time_update(self, current_time: float) -> None: ...

    def on_duration_known(self, duration: float | None) -> None: ...

    def on_can_play_through(self, duration: float | None) -> None: ...


class MediaElement(ABC):
    """Single-source audio player driven by events."""

    def __init__(self) -> None:
        self._listener: PlaybackListener | None = None

    def attach(self, listener: PlaybackListener) -> None:
        """Route this element's events to *listener*."""
        self._listener = listener

    @abstractmethod
    async def load(self, data: bytes, mime_type: str) -> None:
        """Replace the current source with *data*.

        Duration and readiness are reported later through
        ``on_duration_known`` and ``on_can_play_through``.
        """

    @abstractmethod
    async def play(self) -> None:
        """Start or resume playback; raise if the source cannot be played."""

    @abstractmethod
    def pause(self) -> None:
        """Pause playback, keeping the current position."""

    @abstractmethod
    def unload(self) -> None:
        """Stop playback and release the current source."""
