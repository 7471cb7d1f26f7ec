"""
WebVTT Subtitle Formatter and Parser

The Chinese VTT file written by the transcription stage is the input of
the render stage. Parsing is forgiving: anything that looks like a cue
is kept and bad timestamps become zero.
"""

import logging
from typing import List

from subburn.formatters.timestamps import parse_timestamp, to_vtt_timestamp
from subburn.models import Cue

logger = logging.getLogger(__name__)

VTT_HEADER = "WEBVTT"
TIMING_ARROW = "-->"


class VTTFormatter:
    """
    Formats cues as WebVTT (.vtt) subtitle files.

    Example:
        WEBVTT

        00:00:00.000 --> 00:00:02.000
        Hello world.

    """

    def format(self, cues: List[Cue]) -> str:
        """
        Format cues as a VTT subtitle file.

        Args:
            cues: Ordered cues

        Returns:
            VTT formatted string
        """
        lines = [VTT_HEADER, ""]
        for cue in cues:
            lines.append(f"{to_vtt_timestamp(cue.start_sec)} {TIMING_ARROW} {to_vtt_timestamp(cue.end_sec)}")
            lines.append(cue.text)
            lines.append("")
        return "\n".join(lines)


def cues_to_vtt(cues: List[Cue]) -> str:
    """Convenience wrapper around :class:`VTTFormatter`"""
    return VTTFormatter().format(cues)


def _first_token(part: str) -> str:
    tokens = part.split()
    return tokens[0] if tokens else ""


def parse_vtt(content: str) -> List[Cue]:
    """
    Parse WebVTT content into cues.

    Blank lines and the ``WEBVTT`` marker are skipped. A line containing
    ``-->`` starts a cue; the first token on each side is the timestamp
    (cue settings after it are ignored). Following non-blank lines form
    the cue text, newline-joined and trimmed. A timing line with no text
    yields an empty-text cue.

    Args:
        content: Raw VTT file content

    Returns:
        Cues in file order
    """
    normalized = content.replace("\r", "").strip()
    if not normalized:
        return []

    lines = normalized.split("\n")
    cues = []
    i = 0

    while i < len(lines):
        line = lines[i].strip()

        if not line or line == VTT_HEADER or TIMING_ARROW not in line:
            i += 1
            continue

        parts = line.split(TIMING_ARROW)
        start_raw = _first_token(parts[0])
        end_raw = _first_token(parts[1])

        text_lines = []
        i += 1
        while i < len(lines) and lines[i].strip() != "":
            text_lines.append(lines[i])
            i += 1

        cues.append(
            Cue(
                start_sec=parse_timestamp(start_raw),
                end_sec=parse_timestamp(end_raw),
                text="\n".join(text_lines).strip(),
            )
        )
        i += 1

    logger.debug(f"Parsed {len(cues)} cue(s) from VTT")
    return cues
