"""
Upload Validation

Checks applied to uploaded videos before they become records.
"""

import math
from pathlib import Path

ALLOWED_EXTENSIONS = {".mp4", ".mov", ".webm"}
ALLOWED_MIME_TYPES = {
    "video/mp4",
    "video/quicktime",
    "video/webm",
    "application/octet-stream",
}


def is_allowed_video_file(filename: str, mime_type: str) -> bool:
    """Both the extension and the declared MIME type must be accepted"""
    extension = Path(filename).suffix.lower()
    return extension in ALLOWED_EXTENSIONS and mime_type in ALLOWED_MIME_TYPES


def is_allowed_duration(duration_sec: float, max_duration_sec: float) -> bool:
    """Duration must be finite, positive and at most ``max_duration_sec`` (inclusive)"""
    return math.isfinite(duration_sec) and 0 < duration_sec <= max_duration_sec
