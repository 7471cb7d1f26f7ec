"""
FastAPI dependency injection.

Services are built once per application in the lifespan handler and
stored on ``app.state.services``; route handlers receive them through the
getters below, which tests replace via ``app.dependency_overrides``.
"""

import logging
from dataclasses import dataclass
from functools import partial

from fastapi import Request

from subburn.config import Settings
from subburn.pipeline import JobProcessor
from subburn.providers import build_providers
from subburn.render import FilterCapabilities, RenderEngine
from subburn.services import VideoService
from subburn.store import VideoStore
from subburn.utils.media import probe_video
from subburn.utils.storage import StoragePaths

from api.utils.jobs import JobManager

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Everything a request or job worker needs"""

    settings: Settings
    storage: StoragePaths
    video_service: VideoService
    job_manager: JobManager
    processor: JobProcessor
    capabilities: FilterCapabilities


def build_services(settings: Settings) -> ServiceContainer:
    """Wire the storage, store, providers, render engine and queue from settings"""
    storage = StoragePaths(settings.storage_dir.resolve()).ensure()
    store = VideoStore(storage.data / "db.json").init()

    video_service = VideoService(
        store=store,
        storage=storage,
        probe=partial(probe_video, ffprobe_path=settings.ffprobe_path),
        max_duration_sec=settings.max_duration_sec,
        api_base_url=settings.api_base_url,
    )

    asr_provider, translation_provider = build_providers(settings)
    capabilities = FilterCapabilities(ffmpeg_path=settings.ffmpeg_path)
    processor = JobProcessor(
        video_service=video_service,
        asr_provider=asr_provider,
        translation_provider=translation_provider,
        render_engine=RenderEngine(capabilities=capabilities, ffmpeg_path=settings.ffmpeg_path),
        storage=storage,
        api_base_url=settings.api_base_url,
    )

    job_manager = JobManager(
        concurrency=settings.queue_concurrency,
        state_file=storage.data / "jobs.json",
    )

    logger.info(
        f"Services ready (storage: {storage.root})",
        extra={"metadata": {
            "asr_provider": settings.asr_provider,
            "translation_provider": settings.translation_provider,
            "queue_concurrency": settings.queue_concurrency,
        }},
    )
    return ServiceContainer(
        settings=settings,
        storage=storage,
        video_service=video_service,
        job_manager=job_manager,
        processor=processor,
        capabilities=capabilities,
    )


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_app_settings(request: Request) -> Settings:
    return request.app.state.services.settings


def get_video_service(request: Request) -> VideoService:
    return request.app.state.services.video_service


def get_job_manager(request: Request) -> JobManager:
    return request.app.state.services.job_manager
