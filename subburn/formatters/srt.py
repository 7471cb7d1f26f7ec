"""
SRT (SubRip) Subtitle Formatter

Generates subtitle files in SubRip format (.srt), the most widely supported
sidecar format for video players and editors.
"""

from typing import List

from subburn.formatters.timestamps import to_srt_timestamp
from subburn.models import Cue


class SRTFormatter:
    """
    Formats cues as SubRip (.srt) subtitle files.

    SRT format:
    - Sequential numbering starting from 1
    - Timestamps in HH:MM:SS,mmm format
    - Text content with UTF-8 encoding
    - Blank line between entries

    Example:
        1
        00:00:00,000 --> 00:00:02,500
        Hello world.

        2
        00:00:02,500 --> 00:00:05,000
        This is a test.
    """

    def format(self, cues: List[Cue]) -> str:
        """
        Format cues as an SRT subtitle file.

        Args:
            cues: Ordered cues

        Returns:
            SRT formatted string
        """
        lines = []
        for idx, cue in enumerate(cues, start=1):
            lines.append(str(idx))
            lines.append(f"{self._format_timestamp(cue.start_sec)} --> {self._format_timestamp(cue.end_sec)}")
            lines.append(cue.text)
            lines.append("")
        return "\n".join(lines)

    def _format_timestamp(self, seconds: float) -> str:
        """Convert seconds to SRT timestamp format: HH:MM:SS,mmm"""
        return to_srt_timestamp(seconds)


def cues_to_srt(cues: List[Cue]) -> str:
    """Convenience wrapper around :class:`SRTFormatter`"""
    return SRTFormatter().format(cues)
