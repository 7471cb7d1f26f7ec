"""
Data Models

Pydantic models shared by the codecs, render engine, job processor and API.
JSON field names are camelCase (``startSec``, ``fontSize``); Python
attributes are snake_case.
"""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

HEX_COLOR_PATTERN = r"^#([0-9a-fA-F]{6})$"


class CamelModel(BaseModel):
    """Base model serialising to camelCase JSON"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Cue(CamelModel):
    """
    A timed subtitle line.

    Cues produced by ASR are ordered by start time. Ordering and
    end > start are not enforced here because parsed files may degrade
    malformed timestamps to zero.
    """

    start_sec: float = Field(ge=0.0, description="Start time in seconds")
    end_sec: float = Field(ge=0.0, description="End time in seconds")
    text: str = Field(default="", description="Subtitle text, may contain newlines")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={"example": {"startSec": 0.0, "endSec": 2.0, "text": "Hi"}},
    )


class VideoMetadata(CamelModel):
    """Probed video properties. Immutable once probed."""

    duration_sec: float = Field(gt=0.0, description="Duration in seconds")
    width: int = Field(gt=0, description="Frame width in pixels")
    height: int = Field(gt=0, description="Frame height in pixels")
    fps: float = Field(default=0.0, ge=0.0, description="Average frame rate")

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Position(BaseModel):
    """Subtitle anchor as a fraction of frame width/height"""

    x: float = Field(ge=0.0, le=1.0)
    y: float = Field(ge=0.0, le=1.0)

    model_config = ConfigDict(frozen=True)


class StrokeConfig(BaseModel):
    enabled: bool
    width: float = Field(ge=0.0, le=10.0)

    model_config = ConfigDict(frozen=True)


class ShadowConfig(BaseModel):
    enabled: bool
    opacity: float = Field(ge=0.0, le=1.0)

    model_config = ConfigDict(frozen=True)


class StyleConfig(CamelModel):
    """
    Subtitle styling supplied with a render request.

    Immutable for the duration of one render.
    """

    font_size: float = Field(ge=12, le=120, description="Font size in pixels")
    position: Position
    max_width_ratio: float = Field(default=0.9, ge=0.25, le=1.0)
    stroke: StrokeConfig = Field(default_factory=lambda: StrokeConfig(enabled=True, width=2))
    shadow: ShadowConfig = Field(default_factory=lambda: ShadowConfig(enabled=True, opacity=0.3))
    font_family: str = Field(default="Noto Sans SC", min_length=1, max_length=80)
    font_color: str = Field(
        default="#ffffff",
        pattern=HEX_COLOR_PATTERN,
        description="fontColor must be a hex color like #ffffff",
    )
    text_align: Literal["left", "center", "right"] = "center"

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        json_schema_extra={
            "example": {
                "fontSize": 42,
                "position": {"x": 0.5, "y": 0.9},
                "maxWidthRatio": 0.9,
                "stroke": {"enabled": True, "width": 2},
                "shadow": {"enabled": True, "opacity": 0.3},
                "fontFamily": "Noto Sans SC",
                "fontColor": "#ffffff",
                "textAlign": "center",
            }
        },
    )


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class VideoRecord(CamelModel):
    """Persisted record of an uploaded video and its derived artifacts"""

    id: str
    original_filename: str
    mime_type: str
    original_path: str
    original_url: str
    duration_sec: float
    width: int
    height: int
    fps: float = 0.0
    subtitle_en_path: Optional[str] = None
    subtitle_en_url: Optional[str] = None
    subtitle_zh_path: Optional[str] = None
    subtitle_zh_url: Optional[str] = None
    output_path: Optional[str] = None
    output_url: Optional[str] = None
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)

    @field_validator("duration_sec")
    @classmethod
    def duration_not_negative(cls, v):
        """Durations are stored as probed, never negative"""
        if v < 0:
            raise ValueError("duration_sec must not be negative")
        return v

    def metadata(self) -> VideoMetadata:
        return VideoMetadata(
            duration_sec=self.duration_sec,
            width=self.width,
            height=self.height,
            fps=self.fps,
        )


class ProcessResult(CamelModel):
    """Result of the transcription stage"""

    subtitle_en_url: str
    subtitle_zh_url: str


class RenderResult(CamelModel):
    """Result of the render stage"""

    output_url: str
