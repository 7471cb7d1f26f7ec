"""
Core Exception Classes

Exceptions raised by the pipeline, codecs, render engine and providers.
Every exception carries a human-readable ``message`` which is stored
verbatim on a failed job.
"""

from typing import Optional


class SubburnError(Exception):
    """Base class for all service errors"""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class VideoNotFoundError(SubburnError):
    """Raised when a video record is missing or has no readable media"""

    def __init__(self, video_id: Optional[str] = None):
        self.video_id = video_id
        super().__init__("Video not found", {"video_id": video_id} if video_id else None)


class SubtitleNotFoundError(SubburnError):
    """Raised when rendering is requested before subtitles were generated"""

    def __init__(self, video_id: Optional[str] = None):
        self.video_id = video_id
        super().__init__("Chinese subtitle not found. Run process first.")


class UnsupportedVideoFormatError(SubburnError):
    """Raised when an uploaded file is not an accepted video container"""

    def __init__(self, filename: str, mime_type: str = ""):
        self.filename = filename
        self.mime_type = mime_type
        super().__init__(
            "Unsupported file format. Allowed: mp4, mov, webm",
            {"filename": filename, "mime_type": mime_type},
        )


class VideoDurationError(SubburnError):
    """Raised when an uploaded video is longer than the configured limit"""

    def __init__(self, duration_sec: float, max_duration_sec: float):
        self.duration_sec = duration_sec
        self.max_duration_sec = max_duration_sec
        super().__init__(
            f"Video duration exceeds {max_duration_sec:g} seconds",
            {"duration_sec": duration_sec, "max_duration_sec": max_duration_sec},
        )


class MetadataError(SubburnError):
    """Raised when media metadata cannot be read"""


class ProviderContractError(SubburnError):
    """Raised when a collaborator returns data violating its contract"""


class ProviderError(SubburnError):
    """Raised when an ASR or translation backend fails"""


class RenderConfigurationError(SubburnError):
    """
    Raised when ffmpeg can burn subtitles with neither strategy.

    This is a deployment problem, retrying the job will not help.
    """


class CommandError(SubburnError):
    """Raised when an external program cannot be run or exits non-zero"""

    def __init__(self, message: str, returncode: Optional[int] = None, stderr: str = ""):
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message, {"returncode": returncode} if returncode is not None else None)
