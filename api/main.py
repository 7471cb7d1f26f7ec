"""
Subburn Service - FastAPI Application

Upload a short video, generate English and Chinese subtitles, and burn
the Chinese track into a new video.
"""

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from subburn import __version__
from subburn.config import Settings, get_settings

from api.dependencies import ServiceContainer, build_services, get_services
from api.routers import jobs, runtime_config, videos
from api.utils.errors import register_exception_handlers
from api.utils.logging import setup_logging

# Track service start time for uptime calculation
START_TIME = time.time()


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[ServiceContainer] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration; defaults to the process-wide settings
        services: Pre-built services; built from ``settings`` at startup
            when omitted
    """
    settings = services.settings if services else (settings or get_settings())
    storage_root = services.storage.root if services else settings.storage_dir.resolve()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.services is None:
            app.state.services = build_services(settings)
        container: ServiceContainer = app.state.services
        container.job_manager.start(container.processor.handle)
        try:
            yield
        finally:
            container.job_manager.shutdown(wait=True)

    app = FastAPI(
        title="Subburn Service",
        version=__version__,
        description=(
            "Transcribes short videos, translates the subtitles to Chinese and "
            "burns them into a new video with configurable styling."
        ),
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_origin],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(videos.router, tags=["Videos"])
    app.include_router(jobs.router, tags=["Jobs"])
    app.include_router(runtime_config.router, tags=["Runtime Config"])

    app.mount("/files", StaticFiles(directory=storage_root, check_dir=False), name="files")

    @app.get("/health", tags=["Health"])
    async def health_check(container: ServiceContainer = Depends(get_services)):
        """
        Service health, configured providers and upload limits.

        ``ffmpegFilters`` lists the filter probes answered so far.
        """
        current = container.settings
        return {
            "ok": True,
            "version": __version__,
            "uptimeSec": time.time() - START_TIME,
            "asrProvider": current.asr_provider,
            "translationProvider": current.translation_provider,
            "maxDurationSec": current.max_duration_sec,
            "maxUploadSizeMb": current.max_upload_size_mb,
            "ffmpegFilters": container.capabilities.cached(),
        }

    return app


_settings = get_settings()
setup_logging(log_level=_settings.log_level, use_json=_settings.log_json)

app = create_app(_settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host="0.0.0.0", port=_settings.port)
