"""
Jobs API Router

Status polling for queued pipeline jobs.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_job_manager
from api.schemas import JobView
from api.utils.errors import JobNotFoundError
from api.utils.jobs import JobManager

router = APIRouter(prefix="/api/jobs")


@router.get("/{job_id}", response_model=JobView, response_model_exclude_none=True)
def get_job_status(job_id: str, job_manager: JobManager = Depends(get_job_manager)):
    """
    Get the status of a job.

    **Response (running)**:
    ```json
    {"jobId": "3f2a9c1e", "status": "running", "progress": 45}
    ```

    **Response (failed)**:
    ```json
    {"jobId": "3f2a9c1e", "status": "failed", "progress": 10, "error": "ASR returned empty subtitles"}
    ```
    """
    job = job_manager.get_job(job_id)
    if job is None:
        raise JobNotFoundError(job_id)

    return JobView(
        job_id=job.id,
        status=job.status.value,
        progress=job.progress,
        error=job.error,
        result=job.result,
    )
