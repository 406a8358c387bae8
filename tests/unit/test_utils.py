"""Tests for display helpers and language mapping."""

from datetime import date

import pytest

from src.core.languages import to_language_code, voice_gender
from src.core.utils import (
    build_transcript_download,
    format_clock,
    format_timestamp,
    progress_percent,
    transcript_filename,
    utc_iso,
)


class TestFormatClock:
    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [(0, "00:00"), (5.9, "00:05"), (65, "01:05"), (3600, "60:00")],
    )
    def test_formats_minutes_and_seconds(self, seconds, expected):
        assert format_clock(seconds) == expected

    @pytest.mark.parametrize("seconds", [None, float("nan"), float("inf"), -1])
    def test_invalid_input(self, seconds):
        assert format_clock(seconds) == "00:00"


class TestFormatTimestamp:
    def test_tenths(self):
        assert format_timestamp(2.5) == "00:02.5"
        assert format_timestamp(65.25) == "01:05.2"

    def test_non_number(self):
        assert format_timestamp(None) == "00:00.0"
        assert format_timestamp("1.0") == "00:00.0"


class TestProgressPercent:
    def test_midpoint(self):
        assert progress_percent(1.5, 3.0) == pytest.approx(50.0)

    def test_clamped(self):
        assert progress_percent(5.0, 3.0) == 100.0
        assert progress_percent(-1.0, 3.0) == 0.0

    def test_unknown_duration(self):
        assert progress_percent(1.0, 0.0) == 0.0
        assert progress_percent(1.0, float("inf")) == 0.0


class TestTranscriptDownload:
    def test_text_only(self):
        assert build_transcript_download("Báwo ni", []) == "Báwo ni"

    def test_with_segments(self):
        content = build_transcript_download(
            "Hello there",
            [
                {"start": 0, "end": 2.5, "text": "Hello", "speaker": 1},
                {"start": 2.8, "end": 5.2, "text": "there"},
            ],
        )
        assert content == (
            "Hello there"
            "\n\n--- Detailed Transcription with Timestamps ---\n\n"
            "[00:00.0 - 00:02.5] Speaker 1: Hello\n"
            "[00:02.8 - 00:05.2] there\n"
        )

    def test_filename(self):
        assert transcript_filename(date(2024, 5, 1)) == "afroglot-transcription-2024-05-01.txt"


def test_utc_iso_has_z_suffix():
    value = utc_iso()
    assert value.endswith("Z")
    assert "T" in value


class TestLanguages:
    def test_names_map_to_codes(self):
        assert to_language_code("yoruba") == "yo"
        assert to_language_code("Igbo") == "ig"
        assert to_language_code("HAUSA") == "ha"

    def test_unknown_passes_through(self):
        assert to_language_code("yo") == "yo"
        assert to_language_code("swahili") == "swahili"

    def test_voice_gender(self):
        assert voice_gender("yoruba", "femi") == "male"
        assert voice_gender("igbo", "amara") == "female"
        assert voice_gender("hausa", "unknown") == "female"
