"""
Media Probing and Extraction

Reads video metadata with ffprobe and extracts speech audio with ffmpeg.
"""

import json
import logging
from pathlib import Path
from typing import Callable, Optional, Sequence

from subburn.errors import CommandError, MetadataError
from subburn.models import VideoMetadata
from subburn.utils.process import CommandResult, run_command

logger = logging.getLogger(__name__)

Runner = Callable[[Sequence[str]], CommandResult]


def parse_frame_rate(raw: Optional[str]) -> float:
    """
    Parse an ffprobe rational frame rate such as ``30000/1001``.

    Returns:
        Frames per second rounded to 3 decimals, 0.0 when unknown
    """
    if not raw or raw == "0/0":
        return 0.0

    num_str, _, den_str = raw.partition("/")
    try:
        num = float(num_str)
        den = float(den_str) if den_str else 1.0
    except ValueError:
        return 0.0

    if den == 0:
        return 0.0
    return round(num / den, 3)


def probe_video(
    input_path: str,
    ffprobe_path: str = "ffprobe",
    runner: Runner = run_command,
) -> VideoMetadata:
    """
    Read duration, frame size and frame rate of a video file.

    Args:
        input_path: Path to the media file
        ffprobe_path: ffprobe executable
        runner: Command runner (injectable for tests)

    Returns:
        VideoMetadata for the first video stream

    Raises:
        MetadataError: If the file has no video stream, zero duration,
            or ffprobe cannot read it
    """
    try:
        result = runner([
            ffprobe_path,
            "-v", "error",
            "-show_entries", "format=duration:stream=codec_type,width,height,avg_frame_rate",
            "-of", "json",
            str(input_path),
        ])
    except CommandError as e:
        raise MetadataError(f"Unable to read video metadata: {e.message}") from e

    try:
        payload = json.loads(result.stdout or "{}")
    except json.JSONDecodeError as e:
        raise MetadataError("Unable to read video metadata") from e

    video_stream = next(
        (s for s in payload.get("streams") or [] if s.get("codec_type") == "video"),
        None,
    )
    try:
        duration_sec = float((payload.get("format") or {}).get("duration") or 0)
    except (TypeError, ValueError):
        duration_sec = 0.0

    width = int(video_stream.get("width") or 0) if video_stream else 0
    height = int(video_stream.get("height") or 0) if video_stream else 0

    if not video_stream or duration_sec <= 0 or width <= 0 or height <= 0:
        raise MetadataError("Unable to read video metadata", {"path": str(input_path)})

    metadata = VideoMetadata(
        duration_sec=duration_sec,
        width=width,
        height=height,
        fps=parse_frame_rate(video_stream.get("avg_frame_rate")),
    )
    logger.info(
        f"Probed {Path(input_path).name}",
        extra={"metadata": metadata.model_dump()},
    )
    return metadata


def extract_audio(
    video_path: str,
    output_path: str,
    ffmpeg_path: str = "ffmpeg",
    runner: Runner = run_command,
) -> Path:
    """
    Extract a mono 16 kHz MP3 track suitable for speech recognition.

    Returns:
        Path to the written audio file
    """
    runner([
        ffmpeg_path,
        "-y",
        "-i", str(video_path),
        "-vn",
        "-ac", "1",
        "-ar", "16000",
        "-b:a", "48k",
        str(output_path),
    ])
    return Path(output_path)
