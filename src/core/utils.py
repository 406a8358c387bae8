"""Shared utility functions for Afroglot."""

import math
import time
from collections.abc import Iterable, Mapping
from datetime import UTC, date, datetime


def epoch_ms() -> int:
    """Current wall-clock time in integer milliseconds since the epoch."""
    return int(time.time() * 1000)


def utc_iso() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a ``Z`` suffix."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_clock(seconds: float | None) -> str:
    """Format seconds as ``MM:SS``; invalid or negative input gives ``00:00``."""
    if seconds is None or not math.isfinite(seconds) or seconds < 0:
        return "00:00"
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes:02d}:{secs:02d}"


def format_timestamp(seconds: float | None) -> str:
    """Format a segment timestamp as ``MM:SS.d`` (tenths of a second)."""
    if isinstance(seconds, bool) or not isinstance(seconds, int | float):
        return "00:00.0"
    if not math.isfinite(seconds):
        return "00:00.0"
    # Work in whole tenths so 2.8 does not render as 02.7.
    total = math.floor(seconds * 10 + 1e-9)
    minutes, rest = divmod(total, 600)
    secs, tenths = divmod(rest, 10)
    return f"{minutes:02d}:{secs:02d}.{tenths}"


def progress_percent(current: float, duration: float) -> float:
    """Playback progress in percent, clamped to [0, 100]."""
    if not duration or duration <= 0 or not math.isfinite(duration):
        return 0.0
    progress = current / duration * 100
    if not math.isfinite(progress):
        return 0.0
    return max(0.0, min(progress, 100.0))


def build_transcript_download(text: str, segments: Iterable[Mapping] | None = None) -> str:
    """Render a transcription and its timestamped segments as plain text."""
    content = text
    segments = list(segments or [])
    if segments:
        content += "\n\n--- Detailed Transcription with Timestamps ---\n\n"
        for seg in segments:
            speaker = seg.get("speaker")
            speaker_info = f"Speaker {speaker}: " if speaker else ""
            content += (
                f"[{format_timestamp(seg.get('start'))} - {format_timestamp(seg.get('end'))}] "
                f"{speaker_info}{seg.get('text', '')}\n"
            )
    return content


def transcript_filename(day: date | None = None) -> str:
    """Download name for a transcription, e.g. ``afroglot-transcription-2024-05-01.txt``."""
    day = day or datetime.now(UTC).date()
    return f"afroglot-transcription-{day.isoformat()}.txt"
