"""
Video Record Store

JSON-file backed storage for video records. The whole database is one
small document rewritten on every change.
"""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Dict, List, Optional

from subburn.models import VideoRecord, utc_now_iso

logger = logging.getLogger(__name__)


class VideoStore:
    """
    Thread-safe store of VideoRecords persisted to ``db_path``.

    Records are read and written by API handlers and job workers with no
    optimistic concurrency: the last writer wins.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._videos: Dict[str, VideoRecord] = {}
        self._lock = threading.Lock()

    def init(self) -> "VideoStore":
        """Load the database file, creating an empty one if missing or unreadable"""
        with self._lock:
            try:
                raw = json.loads(self.db_path.read_text(encoding="utf-8"))
                self._videos = {
                    video_id: VideoRecord.model_validate(record)
                    for video_id, record in (raw.get("videos") or {}).items()
                }
                logger.info(f"Loaded {len(self._videos)} video record(s) from {self.db_path}")
            except FileNotFoundError:
                self._videos = {}
                self._persist()
            except (json.JSONDecodeError, ValueError) as e:
                logger.warning(f"Video database unreadable, starting empty: {e}")
                self._videos = {}
                self._persist()
        return self

    def _persist(self):
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        document = {
            "videos": {
                video_id: record.model_dump(by_alias=True)
                for video_id, record in self._videos.items()
            }
        }
        tmp_path = self.db_path.with_suffix(self.db_path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, self.db_path)

    def get_video(self, video_id: str) -> Optional[VideoRecord]:
        with self._lock:
            return self._videos.get(video_id)

    def list_videos(self) -> List[VideoRecord]:
        """All records, newest first"""
        with self._lock:
            return sorted(self._videos.values(), key=lambda v: v.created_at, reverse=True)

    def upsert_video(self, record: VideoRecord) -> VideoRecord:
        """Insert or replace a record, stamping ``updated_at``"""
        with self._lock:
            stored = record.model_copy(update={"updated_at": utc_now_iso()})
            self._videos[stored.id] = stored
            self._persist()
            return stored
