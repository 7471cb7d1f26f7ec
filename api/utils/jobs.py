"""
Job Queue Manager

Persistent, progress-tracked job queue executed on a fixed worker pool.
"""

import json
import logging
import os
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from subburn.models import StyleConfig
from subburn.pipeline.processor import PROCESS_VIDEO, RENDER_VIDEO

from api.utils.logging import log_event

logger = logging.getLogger(__name__)

INTERRUPTED_MESSAGE = "Job interrupted before completion"

JobHandler = Callable[[str, Dict[str, Any], Callable[[int], None]], Any]


class JobStatus(str, Enum):
    """Job status states"""
    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TERMINAL_STATUSES = (JobStatus.SUCCEEDED, JobStatus.FAILED)


@dataclass
class Job:
    """Represents a queued pipeline stage"""
    id: str
    name: str
    data: Dict[str, Any] = field(default_factory=dict)
    status: JobStatus = JobStatus.QUEUED
    created_at: datetime = field(default_factory=datetime.now)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    progress: int = 0  # 0-100
    result: Optional[Any] = None
    error: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        record = asdict(self)
        record["status"] = self.status.value
        for key in ("created_at", "started_at", "completed_at"):
            record[key] = record[key].isoformat() if record[key] else None
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Job":
        def parse(value):
            return datetime.fromisoformat(value) if value else None

        return cls(
            id=record["id"],
            name=record["name"],
            data=record.get("data") or {},
            status=JobStatus(record["status"]),
            created_at=parse(record.get("created_at")) or datetime.now(),
            started_at=parse(record.get("started_at")),
            completed_at=parse(record.get("completed_at")),
            progress=int(record.get("progress") or 0),
            result=record.get("result"),
            error=record.get("error"),
        )


class JobManager:
    """
    Job queue with a fixed-size worker pool.

    Thread-safe storage for job status and results. Jobs are dispatched to
    the pool in enqueue order; each job is only ever mutated by the worker
    running it. When ``state_file`` is set, every change is written to it
    and reloaded on construction: jobs still queued are dispatched again,
    jobs caught running are marked failed. Failed jobs are never retried.
    """

    def __init__(
        self,
        concurrency: int = 2,
        max_jobs: int = 500,
        state_file: Optional[Path] = None,
    ):
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.RLock()
        self._concurrency = max(1, concurrency)
        self._max_jobs = max_jobs
        self._state_file = Path(state_file) if state_file else None
        self._handler: Optional[JobHandler] = None
        self._executor: Optional[ThreadPoolExecutor] = None

        if self._state_file:
            self._load()

    # -- persistence -------------------------------------------------------

    def _load(self):
        try:
            raw = json.loads(self._state_file.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Job state file unreadable, starting empty: {e}")
            return

        for record in raw.get("jobs") or []:
            job = Job.from_record(record)
            if job.status == JobStatus.RUNNING:
                job.status = JobStatus.FAILED
                job.error = INTERRUPTED_MESSAGE
                job.completed_at = datetime.now()
            self._jobs[job.id] = job

        logger.info(f"Restored {len(self._jobs)} job(s) from {self._state_file}")
        with self._lock:
            self._persist()

    def _persist(self):
        """Write a snapshot of all jobs. Caller holds the lock."""
        if not self._state_file:
            return
        self._state_file.parent.mkdir(parents=True, exist_ok=True)
        document = {"jobs": [job.to_record() for job in self._jobs.values()]}
        tmp_path = self._state_file.with_suffix(self._state_file.suffix + ".tmp")
        tmp_path.write_text(json.dumps(document, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, self._state_file)

    # -- worker pool -------------------------------------------------------

    def start(self, handler: JobHandler):
        """
        Start the worker pool and dispatch any jobs already queued.

        Args:
            handler: ``handler(job_name, data, report_progress)`` returning
                the job result
        """
        with self._lock:
            if self._executor is not None:
                return
            self._handler = handler
            self._executor = ThreadPoolExecutor(
                max_workers=self._concurrency, thread_name_prefix="job-worker"
            )
            pending = sorted(
                (job for job in self._jobs.values() if job.status == JobStatus.QUEUED),
                key=lambda job: job.created_at,
            )
            for job in pending:
                self._executor.submit(self._run, job.id)

        logger.info(
            "Job workers started",
            extra={"metadata": {"concurrency": self._concurrency, "pending": len(pending)}},
        )

    def shutdown(self, wait: bool = True):
        """Stop accepting work; running jobs finish when ``wait`` is True"""
        with self._lock:
            executor = self._executor
            self._executor = None
        if executor is not None:
            executor.shutdown(wait=wait)
            logger.info("Job workers stopped")

    def _run(self, job_id: str):
        """Execute one job on a worker thread"""
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None or job.status != JobStatus.QUEUED:
                return
            handler = self._handler
            job.status = JobStatus.RUNNING
            job.started_at = datetime.now()
            self._persist()
            name, data = job.name, dict(job.data)

        log_event(logger, "info", f"Job {job_id} started", {"job_id": job_id, "name": name})

        try:
            result = handler(name, data, lambda value: self.update_progress(job_id, value))
        except Exception as e:
            logger.error(f"Job {job_id} failed: {e}", exc_info=True)
            with self._lock:
                job.status = JobStatus.FAILED
                job.error = str(e)
                job.completed_at = datetime.now()
                self._persist()
            return

        with self._lock:
            job.status = JobStatus.SUCCEEDED
            job.progress = 100
            job.result = result
            job.completed_at = datetime.now()
            self._persist()

        elapsed_ms = (job.completed_at - job.started_at).total_seconds() * 1000
        log_event(
            logger, "info", f"Job {job_id} completed in {elapsed_ms:.1f}ms",
            {"job_id": job_id, "name": name, "elapsed_ms": elapsed_ms},
        )

    # -- queue operations --------------------------------------------------

    def _enqueue(self, name: str, data: Dict[str, Any]) -> str:
        with self._lock:
            # Clean up old completed jobs if we have too many
            if len(self._jobs) >= self._max_jobs:
                self._cleanup_old_jobs()

            job_id = str(uuid.uuid4())[:8]  # Short ID for convenience
            while job_id in self._jobs:
                job_id = str(uuid.uuid4())[:8]

            job = Job(id=job_id, name=name, data=data)
            self._jobs[job_id] = job
            self._persist()

            if self._executor is not None:
                self._executor.submit(self._run, job_id)

        logger.info(f"Created job {job_id} ({name})")
        return job_id

    def enqueue_process(self, video_id: str) -> str:
        """Queue the transcription stage for a video. Never blocks on execution."""
        return self._enqueue(PROCESS_VIDEO, {"videoId": video_id})

    def enqueue_render(self, video_id: str, style_config: StyleConfig) -> str:
        """Queue the render stage for a video with the given style."""
        return self._enqueue(
            RENDER_VIDEO,
            {"videoId": video_id, "styleConfig": style_config.model_dump(by_alias=True)},
        )

    def get_job(self, job_id: str) -> Optional[Job]:
        """Get a snapshot of a job by ID"""
        with self._lock:
            job = self._jobs.get(job_id)
            return replace(job) if job else None

    def update_progress(self, job_id: str, progress: int) -> Optional[Job]:
        """
        Raise a running job's progress.

        Values are clamped to [0, 100]; lower values than the current
        progress are ignored so progress never decreases.
        """
        with self._lock:
            job = self._jobs.get(job_id)
            if not job or job.status in TERMINAL_STATUSES:
                return None

            value = int(max(0, min(100, progress)))
            if value > job.progress:
                job.progress = value
                self._persist()
            return replace(job)

    def _cleanup_old_jobs(self):
        """Remove oldest completed jobs to free memory"""
        completed_jobs = [
            (job_id, job) for job_id, job in self._jobs.items()
            if job.status in TERMINAL_STATUSES
        ]

        # Sort by completion time and remove oldest
        completed_jobs.sort(key=lambda x: x[1].completed_at or datetime.min)

        # Remove half of completed jobs
        to_remove = len(completed_jobs) // 2
        for job_id, _ in completed_jobs[:to_remove]:
            del self._jobs[job_id]
            logger.debug(f"Cleaned up old job {job_id}")

    def list_jobs(self) -> List[Job]:
        """List all jobs in creation order"""
        with self._lock:
            return sorted((replace(job) for job in self._jobs.values()), key=lambda job: job.created_at)
