"""
Job Schemas

Request acknowledgement and status payloads for queued pipeline jobs.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from subburn.models import CamelModel


class JobAccepted(CamelModel):
    """Returned when a process or render job is queued"""

    job_id: str = Field(..., description="ID to poll at /api/jobs/{jobId}")


class JobView(CamelModel):
    """Job status as seen by clients; ``error`` and ``result`` only when set"""

    job_id: str
    status: Literal["queued", "running", "succeeded", "failed"]
    progress: int = Field(ge=0, le=100)
    error: Optional[str] = None
    result: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "jobId": "3f2a9c1e",
                "status": "succeeded",
                "progress": 100,
                "result": {"outputUrl": "http://localhost:4000/files/output/abc.rendered.mp4"},
            }
        },
    )
