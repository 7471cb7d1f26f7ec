"""
Shared Text Helpers

Line wrapping and colour normalisation used by both the ASS codec and
the drawtext render strategy. Both must wrap identically so the burned
output matches the styled preview.
"""

import math
import re
from typing import List, Optional

# Average glyph width as a fraction of the font size. A heuristic, not
# real glyph metrics.
CHAR_WIDTH_FACTOR = 0.75

# Budgets below this are treated as "do not wrap".
MIN_WRAP_CHARS = 8

_HEX_COLOR = re.compile(r"^#([0-9a-fA-F]{6})$")


def round_half_up(value: float) -> int:
    """Round halves up (2.5 -> 3), unlike the builtin round()."""
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def max_chars_per_line(video_width: float, max_width_ratio: float, font_size: float) -> int:
    """
    Approximate how many characters fit on one subtitle line.

    Args:
        video_width: Frame width in pixels
        max_width_ratio: Fraction of the frame available to text
        font_size: Font size in pixels

    Returns:
        Character budget per line
    """
    return math.floor((video_width * max_width_ratio) / max(1.0, font_size * CHAR_WIDTH_FACTOR))


def wrap_text(text: str, max_chars: int) -> List[str]:
    """
    Greedy whitespace line fill.

    A word is appended to the current line while ``line + " " + word``
    fits the budget, otherwise it starts a new line. Words are never
    split, so a single long word may exceed the budget.

    Args:
        text: Text to wrap
        max_chars: Character budget per line

    Returns:
        Wrapped lines. The text is returned untouched as one line when the
        budget is too small or there is at most one word.
    """
    if max_chars < MIN_WRAP_CHARS:
        return [text]

    words = text.split()
    if len(words) <= 1:
        return [text]

    lines = []
    current = words[0]
    for word in words[1:]:
        candidate = f"{current} {word}"
        if len(candidate) <= max_chars:
            current = candidate
        else:
            lines.append(current)
            current = word
    lines.append(current)
    return lines


def normalize_hex_color(value: Optional[str], fallback: str = "#ffffff", upper: bool = False) -> str:
    """
    Validate a ``#RRGGBB`` colour, returning ``fallback`` when invalid.

    Args:
        value: Colour string from the style config
        fallback: Colour used when ``value`` is missing or malformed
        upper: Case of the returned hex digits

    Returns:
        Normalised colour string
    """
    raw = (value if value is not None else fallback).strip()
    match = _HEX_COLOR.match(raw)
    if not match:
        return fallback
    digits = match.group(1)
    return "#" + (digits.upper() if upper else digits.lower())
