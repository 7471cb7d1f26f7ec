"""
Video Service

Creates video records from uploads and records the artifacts produced by
the pipeline stages.
"""

import logging
import shutil
import uuid
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from subburn.errors import UnsupportedVideoFormatError, VideoDurationError, VideoNotFoundError
from subburn.models import VideoMetadata, VideoRecord, utc_now_iso
from subburn.store import VideoStore
from subburn.utils.storage import StoragePaths, safe_join, to_public_file_url
from subburn.utils.validators import is_allowed_duration, is_allowed_video_file

logger = logging.getLogger(__name__)


class VideoService:
    """
    Owns the lifecycle of VideoRecords.

    Args:
        store: Record store
        storage: Storage layout
        probe: Callable returning VideoMetadata for a media path
        max_duration_sec: Longest accepted upload
        api_base_url: Prefix for public URLs in API views
    """

    def __init__(
        self,
        store: VideoStore,
        storage: StoragePaths,
        probe: Callable[[str], VideoMetadata],
        max_duration_sec: float = 300,
        api_base_url: str = "",
    ):
        self.store = store
        self.storage = storage
        self.probe = probe
        self.max_duration_sec = max_duration_sec
        self.api_base_url = api_base_url

    def create_from_upload(self, temp_path: Path, original_filename: str, mime_type: str) -> VideoRecord:
        """
        Validate an uploaded file and turn it into a VideoRecord.

        The temporary file is moved into ``uploads/`` on success and
        removed on rejection.

        Raises:
            UnsupportedVideoFormatError: Extension or MIME type not accepted
            MetadataError: ffprobe could not read the file
            VideoDurationError: Longer than ``max_duration_sec``
        """
        temp_path = Path(temp_path)

        if not is_allowed_video_file(original_filename, mime_type):
            temp_path.unlink(missing_ok=True)
            raise UnsupportedVideoFormatError(original_filename, mime_type)

        try:
            metadata = self.probe(str(temp_path))
        except Exception:
            temp_path.unlink(missing_ok=True)
            raise

        if not is_allowed_duration(metadata.duration_sec, self.max_duration_sec):
            temp_path.unlink(missing_ok=True)
            raise VideoDurationError(metadata.duration_sec, self.max_duration_sec)

        video_id = str(uuid.uuid4())
        extension = Path(original_filename).suffix.lower()
        final_path = safe_join(self.storage.uploads, f"{video_id}{extension}")
        final_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(temp_path), str(final_path))

        record = VideoRecord(
            id=video_id,
            original_filename=original_filename,
            mime_type=mime_type,
            original_path=str(final_path),
            original_url=to_public_file_url(self.storage.root, final_path),
            duration_sec=metadata.duration_sec,
            width=metadata.width,
            height=metadata.height,
            fps=metadata.fps,
        )
        stored = self.store.upsert_video(record)
        logger.info(
            f"Created video {video_id} from {original_filename}",
            extra={"metadata": {"video_id": video_id, "duration_sec": metadata.duration_sec}},
        )
        return stored

    def get_video(self, video_id: str) -> Optional[VideoRecord]:
        return self.store.get_video(video_id)

    def require_video(self, video_id: str) -> VideoRecord:
        """Get a record or raise VideoNotFoundError"""
        existing = self.store.get_video(video_id)
        if existing is None:
            raise VideoNotFoundError(video_id)
        return existing

    def save_subtitles(self, video_id: str, subtitle_en_path: Path, subtitle_zh_path: Path) -> VideoRecord:
        """Record the English and Chinese VTT locations"""
        existing = self.require_video(video_id)
        updated = existing.model_copy(update={
            "subtitle_en_path": str(subtitle_en_path),
            "subtitle_zh_path": str(subtitle_zh_path),
            "subtitle_en_url": to_public_file_url(self.storage.root, subtitle_en_path),
            "subtitle_zh_url": to_public_file_url(self.storage.root, subtitle_zh_path),
            "updated_at": utc_now_iso(),
        })
        return self.store.upsert_video(updated)

    def clear_subtitles(self, video_id: str) -> VideoRecord:
        """Forget the subtitle locations after their files were removed"""
        existing = self.require_video(video_id)
        updated = existing.model_copy(update={
            "subtitle_en_path": None,
            "subtitle_zh_path": None,
            "subtitle_en_url": None,
            "subtitle_zh_url": None,
            "updated_at": utc_now_iso(),
        })
        return self.store.upsert_video(updated)

    def save_rendered_output(self, video_id: str, output_path: Path) -> VideoRecord:
        """Record the rendered video location (last writer wins)"""
        existing = self.require_video(video_id)
        updated = existing.model_copy(update={
            "output_path": str(output_path),
            "output_url": to_public_file_url(self.storage.root, output_path),
            "updated_at": utc_now_iso(),
        })
        return self.store.upsert_video(updated)

    def _absolute_url(self, path: Optional[str]) -> Optional[str]:
        return f"{self.api_base_url}{path}" if path else None

    def public_video_view(self, video: VideoRecord) -> Dict[str, Any]:
        """API representation of a record, without filesystem paths"""
        return {
            "videoId": video.id,
            "originalUrl": self._absolute_url(video.original_url),
            "durationSec": video.duration_sec,
            "width": video.width,
            "height": video.height,
            "fps": video.fps,
            "subtitleEnUrl": self._absolute_url(video.subtitle_en_url),
            "subtitleZhUrl": self._absolute_url(video.subtitle_zh_url),
            "outputUrl": self._absolute_url(video.output_url),
            "createdAt": video.created_at,
            "updatedAt": video.updated_at,
        }
