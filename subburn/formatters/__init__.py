"""
Subtitle formatters: VTT, SRT and ASS codecs plus shared text helpers.
"""

from subburn.formatters.ass import ASSFormatter, cues_to_ass, to_ass_color
from subburn.formatters.srt import SRTFormatter, cues_to_srt
from subburn.formatters.text import max_chars_per_line, normalize_hex_color, wrap_text
from subburn.formatters.timestamps import (
    parse_timestamp,
    to_ass_timestamp,
    to_srt_timestamp,
    to_vtt_timestamp,
)
from subburn.formatters.vtt import VTTFormatter, cues_to_vtt, parse_vtt

__all__ = [
    "ASSFormatter",
    "SRTFormatter",
    "VTTFormatter",
    "cues_to_ass",
    "cues_to_srt",
    "cues_to_vtt",
    "parse_vtt",
    "to_ass_color",
    "parse_timestamp",
    "to_ass_timestamp",
    "to_srt_timestamp",
    "to_vtt_timestamp",
    "max_chars_per_line",
    "normalize_hex_color",
    "wrap_text",
]
