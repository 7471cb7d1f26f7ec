"""
Unit tests for the VTT and SRT codecs

Tests timestamp grammars, file layout and tolerant VTT parsing.
"""

import pytest

from subburn.formatters import (
    cues_to_srt,
    cues_to_vtt,
    parse_timestamp,
    parse_vtt,
    to_ass_timestamp,
    to_srt_timestamp,
    to_vtt_timestamp,
)
from subburn.models import Cue


class TestTimestamps:
    """Test suite for timestamp formatting and parsing"""

    def test_vtt_timestamp_padding(self):
        """Test that every field is zero-padded"""
        assert to_vtt_timestamp(0) == "00:00:00.000"
        assert to_vtt_timestamp(3661.5) == "01:01:01.500"

    def test_fraction_is_truncated(self):
        """Test that milliseconds are floored, never rounded up"""
        assert to_vtt_timestamp(1.9999) == "00:00:01.999"
        assert to_ass_timestamp(1.239) == "0:00:01.23"

    def test_float_noise_does_not_lose_a_millisecond(self):
        """Test that 2.345 stays 345ms despite binary representation"""
        assert to_vtt_timestamp(2.345) == "00:00:02.345"

    def test_srt_uses_comma(self):
        """Test SRT decimal separator"""
        assert to_srt_timestamp(3661.5) == "01:01:01,500"

    def test_ass_timestamp_hours_unpadded(self):
        """Test ASS H:MM:SS.cc grammar"""
        assert to_ass_timestamp(3661.5) == "1:01:01.50"
        assert to_ass_timestamp(0) == "0:00:00.00"

    def test_negative_clamped_to_zero(self):
        """Test that negative inputs render as zero"""
        assert to_vtt_timestamp(-3) == "00:00:00.000"

    @pytest.mark.parametrize("raw,expected", [
        ("00:00:01.500", 1.5),
        ("01:02:03.004", 3723.004),
        ("00:01,250", 1.25),
        ("  00:00:02.000  ", 2.0),
    ])
    def test_parse_timestamp(self, raw, expected):
        """Test parsing of well-formed timestamps"""
        assert parse_timestamp(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", ["bogus", "aa:bb:cc", "1:2:3:4", "00:00:-1.000", "inf:00:00", ""])
    def test_parse_malformed_timestamp_is_zero(self, raw):
        """Test that malformed timestamps degrade to zero"""
        assert parse_timestamp(raw) == 0.0


class TestVTTFormatter:
    """Test suite for VTT output"""

    def test_vtt_layout(self):
        """Test header, timing lines and blank separators"""
        cues = [Cue(start_sec=0, end_sec=2, text="Hi"), Cue(start_sec=2.5, end_sec=4, text="There")]

        assert cues_to_vtt(cues) == (
            "WEBVTT\n"
            "\n"
            "00:00:00.000 --> 00:00:02.000\n"
            "Hi\n"
            "\n"
            "00:00:02.500 --> 00:00:04.000\n"
            "There\n"
        )

    def test_empty_cue_list(self):
        """Test that an empty track is still a valid VTT file"""
        assert cues_to_vtt([]).startswith("WEBVTT")


class TestSRTFormatter:
    """Test suite for SRT output"""

    def test_srt_layout(self):
        """Test sequence numbers and comma timestamps"""
        cues = [Cue(start_sec=0, end_sec=2, text="你好"), Cue(start_sec=2.5, end_sec=4, text="世界")]

        assert cues_to_srt(cues) == (
            "1\n"
            "00:00:00,000 --> 00:00:02,000\n"
            "你好\n"
            "\n"
            "2\n"
            "00:00:02,500 --> 00:00:04,000\n"
            "世界\n"
        )


class TestParseVTT:
    """Test suite for the tolerant VTT parser"""

    def test_parses_multiline_cues_and_ignores_settings(self):
        """Test text accumulation and cue-settings suffixes"""
        content = (
            "WEBVTT\n"
            "\n"
            "00:00:01.000 --> 00:00:02.500 align:start position:10%\n"
            "line one\n"
            "line two\n"
            "\n"
            "00:00:05.000 --> 00:00:06.000\n"
            "last\n"
        )

        cues = parse_vtt(content)

        assert cues == [
            Cue(start_sec=1.0, end_sec=2.5, text="line one\nline two"),
            Cue(start_sec=5.0, end_sec=6.0, text="last"),
        ]

    def test_timing_without_text_yields_empty_cue(self):
        """Test that a block with no text lines still produces a cue"""
        content = "WEBVTT\n\n00:00:03.000 --> 00:00:04.000\n\n00:00:05.000 --> 00:00:06.000\nnext\n"

        cues = parse_vtt(content)

        assert len(cues) == 2
        assert cues[0].text == ""
        assert cues[1].text == "next"

    def test_crlf_line_endings(self):
        """Test Windows line endings"""
        cues = parse_vtt("WEBVTT\r\n\r\n00:00:00.000 --> 00:00:01.000\r\nHi\r\n")

        assert cues == [Cue(start_sec=0, end_sec=1, text="Hi")]

    def test_malformed_timestamp_degrades_to_zero(self):
        """Test that a bad timestamp does not abort parsing"""
        cues = parse_vtt("WEBVTT\n\nxx --> 00:00:01.000\ntext\n")

        assert cues == [Cue(start_sec=0, end_sec=1, text="text")]

    def test_blank_and_header_only(self):
        """Test inputs with no cues"""
        assert parse_vtt("") == []
        assert parse_vtt("WEBVTT\n\n") == []

    def test_short_timestamp_form(self):
        """Test MM:SS.mmm timestamps"""
        cues = parse_vtt("WEBVTT\n\n00:01.000 --> 00:02.500\nshort\n")

        assert cues[0].start_sec == 1.0
        assert cues[0].end_sec == 2.5

    @pytest.mark.parametrize("cues", [
        [],
        [
            Cue(start_sec=0.0, end_sec=1.25, text="大家好，欢迎来到这个演示视频。"),
            Cue(start_sec=1.5, end_sec=3.75, text="two\nlines"),
        ],
        [Cue(start_sec=0.3, end_sec=1.0005, text="sub-millisecond")],
        [Cue(start_sec=2.9999, end_sec=7.0001, text="near boundaries")],
        [Cue(start_sec=3 * 3600 + 59 * 60 + 59.999, end_sec=100 * 3600 + 0.5, text="long video")],
        [
            Cue(start_sec=0, end_sec=1, text=""),
            Cue(start_sec=1, end_sec=2, text="after an empty cue"),
            Cue(start_sec=2, end_sec=3, text=""),
        ],
    ])
    def test_reads_back_written_file(self, cues):
        """Test that parsing a written file returns the same cues within 1ms"""
        parsed = parse_vtt(cues_to_vtt(cues))

        assert len(parsed) == len(cues)
        for original, cue in zip(cues, parsed):
            assert cue.start_sec == pytest.approx(original.start_sec, abs=1e-3)
            assert cue.end_sec == pytest.approx(original.end_sec, abs=1e-3)
            assert cue.text == original.text
