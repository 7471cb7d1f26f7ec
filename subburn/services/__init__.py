"""
Record services.
"""

from subburn.services.video_service import VideoService

__all__ = ["VideoService"]
