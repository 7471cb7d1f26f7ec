"""
API Schemas
"""

from api.schemas.jobs import JobAccepted, JobView
from api.schemas.runtime_config import RuntimeConfigUpdate, RuntimeConfigView
from api.schemas.videos import OutputResponse, UploadResponse

__all__ = [
    "JobAccepted",
    "JobView",
    "RuntimeConfigUpdate",
    "RuntimeConfigView",
    "OutputResponse",
    "UploadResponse",
]
