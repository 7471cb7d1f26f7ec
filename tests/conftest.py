"""
Shared fixtures: temporary storage, a seeded video record and a render
style.
"""

import pytest

from subburn.models import StyleConfig, VideoMetadata, VideoRecord
from subburn.services import VideoService
from subburn.store import VideoStore
from subburn.utils.storage import StoragePaths, to_public_file_url


@pytest.fixture
def storage(tmp_path) -> StoragePaths:
    return StoragePaths(tmp_path / "storage").ensure()


@pytest.fixture
def video_store(storage) -> VideoStore:
    return VideoStore(storage.data / "db.json").init()


@pytest.fixture
def metadata() -> VideoMetadata:
    return VideoMetadata(duration_sec=12.0, width=1280, height=720, fps=30.0)


@pytest.fixture
def video_service(video_store, storage, metadata) -> VideoService:
    return VideoService(
        store=video_store,
        storage=storage,
        probe=lambda path: metadata,
        max_duration_sec=300,
        api_base_url="http://api.test",
    )


@pytest.fixture
def seeded_video(video_store, storage, metadata) -> VideoRecord:
    """A stored record whose original file exists on disk"""
    original = storage.uploads / "vid-1.mp4"
    original.write_bytes(b"fake video")
    record = VideoRecord(
        id="vid-1",
        original_filename="clip.mp4",
        mime_type="video/mp4",
        original_path=str(original),
        original_url=to_public_file_url(storage.root, original),
        duration_sec=metadata.duration_sec,
        width=metadata.width,
        height=metadata.height,
        fps=metadata.fps,
    )
    return video_store.upsert_video(record)


@pytest.fixture
def style() -> StyleConfig:
    return StyleConfig.model_validate({
        "fontSize": 40,
        "position": {"x": 0.5, "y": 0.9},
        "maxWidthRatio": 0.8,
        "stroke": {"enabled": True, "width": 2},
        "shadow": {"enabled": True, "opacity": 0.5},
        "fontFamily": "Noto Sans SC",
        "fontColor": "#ffffff",
        "textAlign": "center",
    })
