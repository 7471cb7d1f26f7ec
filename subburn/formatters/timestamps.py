"""
Subtitle Timestamp Grammars

VTT:  HH:MM:SS.mmm
SRT:  HH:MM:SS,mmm
ASS:  H:MM:SS.cc

Fractions are truncated, never rounded up.
"""

import math


def _split(seconds: float, units_per_second: int):
    # Round away float noise (0.3 * 1000 == 299.99999...) before truncating.
    total_units = int(math.floor(round(max(0.0, seconds) * units_per_second, 3)))
    total_secs, fraction = divmod(total_units, units_per_second)
    hours, remainder = divmod(total_secs, 3600)
    minutes, secs = divmod(remainder, 60)
    return hours, minutes, secs, fraction


def to_vtt_timestamp(seconds: float) -> str:
    """Convert seconds to ``HH:MM:SS.mmm``"""
    hours, minutes, secs, millis = _split(seconds, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d}"


def to_srt_timestamp(seconds: float) -> str:
    """Convert seconds to ``HH:MM:SS,mmm``"""
    return to_vtt_timestamp(seconds).replace(".", ",")


def to_ass_timestamp(seconds: float) -> str:
    """Convert seconds to ``H:MM:SS.cc`` (no hour padding)"""
    hours, minutes, secs, centis = _split(seconds, 100)
    return f"{hours}:{minutes:02d}:{secs:02d}.{centis:02d}"


def parse_timestamp(value: str) -> float:
    """
    Parse ``HH:MM:SS.mmm`` or ``MM:SS.mmm`` (``,`` also accepted).

    Malformed, negative or non-finite values parse as 0.0 so a damaged
    file never aborts the pipeline.
    """
    parts = value.strip().replace(",", ".").split(":")
    if len(parts) not in (2, 3):
        return 0.0

    try:
        numbers = [float(part) for part in parts]
    except ValueError:
        return 0.0

    if len(numbers) == 2:
        numbers.insert(0, 0.0)

    total = numbers[0] * 3600 + numbers[1] * 60 + numbers[2]
    if not math.isfinite(total) or total < 0:
        return 0.0
    return total
