"""
ASS (Advanced SubStation Alpha) Script Formatter

Builds a complete styled script from cues, a style configuration and the
video dimensions. Used by the prebuilt-script render strategy.
"""

import logging
from typing import List

from subburn.formatters.text import (
    clamp,
    max_chars_per_line,
    normalize_hex_color,
    round_half_up,
    wrap_text,
)
from subburn.formatters.timestamps import to_ass_timestamp
from subburn.models import Cue, StyleConfig, VideoMetadata

logger = logging.getLogger(__name__)

STYLE_FORMAT = (
    "Format: Name,Fontname,Fontsize,PrimaryColour,SecondaryColour,OutlineColour,BackColour,"
    "Bold,Italic,Underline,StrikeOut,ScaleX,ScaleY,Spacing,Angle,BorderStyle,Outline,Shadow,"
    "Alignment,MarginL,MarginR,MarginV,Encoding"
)
EVENT_FORMAT = "Format: Layer,Start,End,Style,Name,MarginL,MarginR,MarginV,Effect,Text"

# Numpad-style alignment, all vertically centred
ALIGNMENT_CODES = {"left": 4, "center": 5, "right": 6}


def to_ass_color(hex_rgb: str, opacity: float) -> str:
    """
    Encode ``#RRGGBB`` plus opacity as an ASS ``&HAABBGGRR`` colour.

    The alpha byte is inverted (00 = opaque) and the colour bytes are
    stored in blue, green, red order.

    Args:
        hex_rgb: Colour as ``#RRGGBB``; invalid values fall back to white
        opacity: 0 (transparent) to 1 (opaque)

    Returns:
        ASS colour literal, e.g. ``&H00AAFF00`` for ``#00ffaa`` fully opaque
    """
    digits = normalize_hex_color(hex_rgb, "#FFFFFF", upper=True)[1:]
    rr, gg, bb = digits[0:2], digits[2:4], digits[4:6]
    alpha = int(clamp(round_half_up((1 - opacity) * 255), 0, 255))
    return f"&H{alpha:02X}{bb}{gg}{rr}"


def alignment_code(text_align: str) -> int:
    return ALIGNMENT_CODES.get(text_align, ALIGNMENT_CODES["center"])


def escape_ass_text(value: str) -> str:
    """Escape override braces and backslashes; newlines become ``\\N``"""
    return (
        value.replace("\\", "\\\\")
        .replace("{", "\\{")
        .replace("}", "\\}")
        .replace("\n", "\\N")
    )


def _num(value: float) -> str:
    return f"{value:g}"


class ASSFormatter:
    """
    Formats cues as an ASS script with one ``Default`` style.

    Every dialogue line carries an ``\\an`` alignment and ``\\pos`` override
    so the text lands exactly on the configured anchor.
    """

    def format(self, cues: List[Cue], style: StyleConfig, metadata: VideoMetadata) -> str:
        """
        Build the ASS script.

        Args:
            cues: Ordered cues
            style: Render style
            metadata: Probed video dimensions (PlayResX/PlayResY)

        Returns:
            Complete ASS script text
        """
        play_res_x = max(1, round_half_up(metadata.width))
        play_res_y = max(1, round_half_up(metadata.height))
        font_size = round_half_up(style.font_size)
        outline = max(0.0, style.stroke.width) if style.stroke.enabled else 0
        shadow = max(1, round_half_up(style.shadow.opacity * 5)) if style.shadow.enabled else 0
        side_margin = max(0, round_half_up((1 - style.max_width_ratio) * play_res_x / 2))
        x_px = round_half_up(style.position.x * play_res_x)
        y_px = round_half_up(style.position.y * play_res_y)
        max_chars = max_chars_per_line(play_res_x, style.max_width_ratio, font_size)
        font_color = normalize_hex_color(style.font_color, "#FFFFFF", upper=True)
        align = alignment_code(style.text_align)

        style_line = ",".join(
            str(field)
            for field in [
                "Style: Default",
                style.font_family,
                font_size,
                to_ass_color(font_color, 1),
                to_ass_color(font_color, 1),
                to_ass_color("#000000", clamp(style.shadow.opacity, 0, 1)),
                to_ass_color("#000000", 1),
                0,  # Bold
                0,  # Italic
                0,  # Underline
                0,  # StrikeOut
                100,  # ScaleX
                100,  # ScaleY
                0,  # Spacing
                0,  # Angle
                1,  # BorderStyle: outline + drop shadow
                _num(outline),
                shadow,
                align,
                side_margin,
                side_margin,
                0,  # MarginV
                1,  # Encoding
            ]
        )

        header = [
            "[Script Info]",
            "ScriptType: v4.00+",
            f"PlayResX: {play_res_x}",
            f"PlayResY: {play_res_y}",
            "ScaledBorderAndShadow: yes",
            "",
            "[V4+ Styles]",
            STYLE_FORMAT,
            style_line,
            "",
            "[Events]",
            EVENT_FORMAT,
        ]

        dialogues = []
        for cue in cues:
            wrapped = "\n".join(wrap_text(cue.text, max_chars))
            dialogues.append(
                f"Dialogue: 0,{to_ass_timestamp(cue.start_sec)},{to_ass_timestamp(cue.end_sec)},"
                f"Default,,0,0,0,,{{\\an{align}\\pos({x_px},{y_px})}}{escape_ass_text(wrapped)}"
            )

        logger.debug(f"Built ASS script with {len(dialogues)} dialogue line(s)")
        return "\n".join(header + dialogues + [""])


def cues_to_ass(cues: List[Cue], style: StyleConfig, metadata: VideoMetadata) -> str:
    """Convenience wrapper around :class:`ASSFormatter`"""
    return ASSFormatter().format(cues, style, metadata)
