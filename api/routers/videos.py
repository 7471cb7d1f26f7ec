"""
Videos API Router

Upload, inspect, and queue the process and render stages for videos.
"""

import logging
import uuid
from pathlib import Path
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, File, UploadFile
from pydantic import ValidationError

from subburn.config import Settings
from subburn.errors import UnsupportedVideoFormatError
from subburn.models import StyleConfig
from subburn.services import VideoService
from subburn.utils.storage import safe_join
from subburn.utils.validators import is_allowed_video_file

from api.dependencies import get_app_settings, get_job_manager, get_video_service
from api.schemas import JobAccepted, OutputResponse, UploadResponse
from api.utils.errors import (
    FileTooLargeError,
    InvalidStyleConfigError,
    OutputNotReadyError,
    format_validation_issues,
)
from api.utils.jobs import JobManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/videos")

CHUNK_SIZE = 1024 * 1024


def _save_upload(upload: UploadFile, destination: Path, max_size_mb: float) -> int:
    """Stream an upload to disk, aborting once it exceeds ``max_size_mb``"""
    max_bytes = int(max_size_mb * 1024 * 1024)
    written = 0
    destination.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(destination, "wb") as out:
            while True:
                chunk = upload.file.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    raise FileTooLargeError(max_size_mb)
                out.write(chunk)
    except Exception:
        destination.unlink(missing_ok=True)
        raise
    return written


@router.post("/upload", response_model=UploadResponse)
def upload_video(
    file: UploadFile = File(..., description="Video file (mp4, mov, webm)"),
    settings: Settings = Depends(get_app_settings),
    video_service: VideoService = Depends(get_video_service),
):
    """
    Upload a video.

    The file is checked for type, size and duration before a record is
    created.

    **Response**:
    ```json
    {"videoId": "...", "originalUrl": "http://.../files/uploads/....mp4", "durationSec": 12.5}
    ```
    """
    filename = file.filename or ""
    mime_type = file.content_type or ""
    if not is_allowed_video_file(filename, mime_type):
        raise UnsupportedVideoFormatError(filename, mime_type)

    temp_path = safe_join(
        video_service.storage.temp, f"{uuid.uuid4()}{Path(filename).suffix.lower()}"
    )
    size_bytes = _save_upload(file, temp_path, settings.max_upload_size_mb)
    logger.info(
        f"Received upload {filename} ({size_bytes / (1024 * 1024):.1f}MB)",
        extra={"metadata": {"mime_type": mime_type, "size_bytes": size_bytes}},
    )

    video = video_service.create_from_upload(temp_path, filename, mime_type)
    return UploadResponse(
        video_id=video.id,
        original_url=f"{settings.api_base_url}{video.original_url}",
        duration_sec=video.duration_sec,
    )


@router.get("/{video_id}")
def get_video(video_id: str, video_service: VideoService = Depends(get_video_service)) -> Dict[str, Any]:
    """Public view of a video record"""
    video = video_service.require_video(video_id)
    return video_service.public_video_view(video)


@router.post("/{video_id}/process", response_model=JobAccepted)
def process_video(
    video_id: str,
    video_service: VideoService = Depends(get_video_service),
    job_manager: JobManager = Depends(get_job_manager),
):
    """Queue transcription and translation for a video"""
    video = video_service.require_video(video_id)
    return JobAccepted(job_id=job_manager.enqueue_process(video.id))


@router.post("/{video_id}/render", response_model=JobAccepted)
def render_video(
    video_id: str,
    payload: Dict[str, Any] = Body(..., description="StyleConfig"),
    video_service: VideoService = Depends(get_video_service),
    job_manager: JobManager = Depends(get_job_manager),
):
    """
    Queue a burn-in render of the Chinese subtitles.

    The body is a StyleConfig; invalid styles are rejected with 400 and
    the list of validation issues.
    """
    video = video_service.require_video(video_id)

    try:
        style = StyleConfig.model_validate(payload)
    except ValidationError as e:
        raise InvalidStyleConfigError(format_validation_issues(e.errors()))

    return JobAccepted(job_id=job_manager.enqueue_render(video.id, style))


@router.get("/{video_id}/output", response_model=OutputResponse)
def get_output(
    video_id: str,
    settings: Settings = Depends(get_app_settings),
    video_service: VideoService = Depends(get_video_service),
):
    """URL of the most recently rendered video"""
    video = video_service.require_video(video_id)
    if not video.output_url:
        raise OutputNotReadyError(video.id)
    return OutputResponse(output_url=f"{settings.api_base_url}{video.output_url}")
