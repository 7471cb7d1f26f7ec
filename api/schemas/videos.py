"""
Video Schemas

Response payloads for the upload and output endpoints.
"""

from pydantic import Field

from subburn.models import CamelModel


class UploadResponse(CamelModel):
    video_id: str
    original_url: str = Field(..., description="Absolute URL of the stored original")
    duration_sec: float


class OutputResponse(CamelModel):
    output_url: str = Field(..., description="Absolute URL of the latest rendered video")
