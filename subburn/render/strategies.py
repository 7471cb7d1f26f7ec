"""
Subtitle Burn Strategies

Two ways of turning cues into an ffmpeg ``-vf`` filter graph:

- DrawtextStrategy: one ``drawtext`` filter per cue, styled directly
  from the StyleConfig (needs ffmpeg built with libfreetype).
- AssStrategy: overlay the pre-generated ASS script with the ``ass``
  filter (needs ffmpeg built with libass).
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from subburn.formatters.text import (
    clamp,
    max_chars_per_line,
    normalize_hex_color,
    round_half_up,
    wrap_text,
)
from subburn.models import Cue, StyleConfig, VideoMetadata

logger = logging.getLogger(__name__)

CJK_FONT_CANDIDATES = [
    "/usr/share/fonts/opentype/noto/NotoSansCJK-Regular.ttc",
    "/usr/share/fonts/truetype/noto/NotoSansCJK-Regular.ttc",
    "/System/Library/Fonts/PingFang.ttc",
    "/System/Library/Fonts/STHeiti Light.ttc",
]


@dataclass(frozen=True)
class BurnRequest:
    """Everything needed to burn subtitles into one video"""
    input_video_path: str
    ass_path: str
    cues: List[Cue]
    style: StyleConfig
    metadata: VideoMetadata
    output_video_path: str


def escape_filter_path(value: str) -> str:
    """Escape a file path for use inside a quoted filter option"""
    return (
        value.replace("\\", "/")
        .replace("'", "\\\\'")
        .replace(":", "\\:")
        .replace(",", "\\,")
        .replace("[", "\\[")
        .replace("]", "\\]")
    )


def escape_drawtext_value(value: str) -> str:
    """Escape text for drawtext's ``text='...'`` option; newlines become ``\\n``"""
    return (
        value.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace(":", "\\:")
        .replace(",", "\\,")
        .replace("%", "\\%")
        .replace("[", "\\[")
        .replace("]", "\\]")
        .replace("\n", "\\n")
    )


def resolve_font_file(candidates: Sequence[str] = CJK_FONT_CANDIDATES) -> Optional[str]:
    """First CJK-capable font file that exists, or None"""
    for candidate in candidates:
        if os.path.isfile(candidate):
            return candidate
    return None


def drawtext_x_expression(text_align: str, x_px: int, max_width_ratio: float, video_width: float) -> str:
    """
    Horizontal anchor expression, clamped to ``[0, w - text_w]``.

    left:   block's left edge at ``x - width*ratio/2``
    right:  text's right edge at ``x + width*ratio/2``
    center: text centred on ``x``
    """
    half_block = (video_width * max_width_ratio) / 2
    if text_align == "left":
        left_anchor = round_half_up(x_px - half_block)
        return f"max(0,min(w-text_w,{left_anchor}))"
    if text_align == "right":
        right_anchor = round_half_up(x_px + half_block)
        return f"max(0,min(w-text_w,{right_anchor}-text_w))"
    return f"max(0,min(w-text_w,{x_px}-text_w/2))"


def drawtext_y_expression(y_px: int) -> str:
    """Vertical anchor centred on ``y``, clamped to ``[0, h - text_h]``"""
    return f"max(0,min(h-text_h,{y_px}-text_h/2))"


class BurnStrategy(ABC):
    """
    A way of expressing burned subtitles as an ffmpeg filter graph.

    ``filter_name`` is the ffmpeg filter the strategy depends on; the
    render engine only uses a strategy whose filter is available.
    """

    filter_name: str = ""

    @abstractmethod
    def build_filter(self, request: BurnRequest) -> str:
        """
        Build the ``-vf`` filter graph for a request.

        Args:
            request: Burn request

        Returns:
            Filter graph string
        """
        pass


class DrawtextStrategy(BurnStrategy):
    """Text overlay: one time-gated drawtext filter per cue, chained."""

    filter_name = "drawtext"

    def __init__(self, font_candidates: Sequence[str] = CJK_FONT_CANDIDATES):
        self.font_candidates = list(font_candidates)

    def build_filter(self, request: BurnRequest) -> str:
        style = request.style
        metadata = request.metadata

        font_file = resolve_font_file(self.font_candidates)
        if font_file is None:
            logger.warning("No CJK font file found, drawtext will use its default font")

        font_size = round_half_up(style.font_size)
        outline = max(0.0, style.stroke.width) if style.stroke.enabled else 0
        shadow_opacity = clamp(style.shadow.opacity, 0, 1) if style.shadow.enabled else 0
        x_px = round_half_up(style.position.x * metadata.width)
        y_px = round_half_up(style.position.y * metadata.height)
        max_chars = max_chars_per_line(metadata.width, style.max_width_ratio, font_size)
        font_color = normalize_hex_color(style.font_color, "#ffffff")
        x_expression = drawtext_x_expression(style.text_align, x_px, style.max_width_ratio, metadata.width)
        y_expression = drawtext_y_expression(y_px)

        filters = []
        for cue in request.cues:
            text = escape_drawtext_value("\n".join(wrap_text(cue.text, max_chars)))
            options = [
                f"text='{text}'",
                f"fontsize={font_size}",
                f"fontcolor={font_color}",
                f"borderw={outline:g}",
                "bordercolor=black",
                "line_spacing=6",
                "box=1",
                "boxcolor=black@0.35",
                "boxborderw=12",
                f"x='{x_expression}'",
                f"y='{y_expression}'",
                f"enable='between(t,{cue.start_sec:.3f},{cue.end_sec:.3f})'",
            ]
            if font_file:
                options.append(f"fontfile='{escape_filter_path(font_file)}'")
            if shadow_opacity > 0:
                options.extend(["shadowx=2", "shadowy=2", f"shadowcolor=black@{shadow_opacity:.2f}"])

            filters.append("drawtext=" + ":".join(options))

        return ",".join(filters)


class AssStrategy(BurnStrategy):
    """Prebuilt script: overlay the generated ASS file."""

    filter_name = "ass"

    def build_filter(self, request: BurnRequest) -> str:
        return f"ass=filename='{escape_filter_path(str(Path(request.ass_path)))}'"
