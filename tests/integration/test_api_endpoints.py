"""
Integration tests for the HTTP API

Runs the full app (routers, exception handlers, job workers) with mock
providers, a fake ffprobe and a fake ffmpeg.
"""

import time

import pytest
from fastapi.testclient import TestClient

from subburn.config import Settings
from subburn.errors import MetadataError
from subburn.models import VideoMetadata
from subburn.pipeline import JobProcessor
from subburn.providers import MockASRProvider, MockTranslationProvider
from subburn.render import AssStrategy, DrawtextStrategy, FilterCapabilities, RenderEngine
from subburn.services import VideoService
from subburn.store import VideoStore
from subburn.utils.storage import StoragePaths

from api.dependencies import ServiceContainer, build_services
from api.main import create_app
from api.utils.jobs import JobManager
from tests.fakes import FakeRunner

STYLE = {
    "fontSize": 42,
    "position": {"x": 0.5, "y": 0.9},
    "maxWidthRatio": 0.9,
    "stroke": {"enabled": True, "width": 2},
    "shadow": {"enabled": True, "opacity": 0.3},
    "fontFamily": "Noto Sans SC",
    "fontColor": "#ffffff",
    "textAlign": "center",
}


def fake_probe(path: str) -> VideoMetadata:
    """Decides metadata from the uploaded bytes"""
    with open(path, "rb") as f:
        content = f.read()
    if content.startswith(b"broken"):
        raise MetadataError("Unable to read video metadata")
    if content.startswith(b"long"):
        return VideoMetadata(duration_sec=301, width=1280, height=720)
    return VideoMetadata(duration_sec=12, width=1280, height=720, fps=30)


@pytest.fixture
def services(tmp_path) -> ServiceContainer:
    settings = Settings(
        storage_dir=tmp_path / "storage",
        api_base_url="http://api.test",
        frontend_origin="http://web.test",
        max_upload_size_mb=1,
        max_duration_sec=300,
        asr_provider="mock",
        translation_provider="mock",
        openai_api_key=None,
        openai_base_url="https://api.openai.com/v1",
        openai_asr_model="gpt-4o-mini-transcribe",
        openai_translation_model="gpt-4o-mini",
    )
    storage = StoragePaths(settings.storage_dir).ensure()
    video_service = VideoService(
        store=VideoStore(storage.data / "db.json").init(),
        storage=storage,
        probe=fake_probe,
        max_duration_sec=settings.max_duration_sec,
        api_base_url=settings.api_base_url,
    )
    runner = FakeRunner(filters=("ass",))
    capabilities = FilterCapabilities(runner=runner)
    processor = JobProcessor(
        video_service=video_service,
        asr_provider=MockASRProvider(),
        translation_provider=MockTranslationProvider(),
        render_engine=RenderEngine(
            capabilities=capabilities,
            strategies=[DrawtextStrategy(font_candidates=[]), AssStrategy()],
            runner=runner,
        ),
        storage=storage,
        api_base_url=settings.api_base_url,
    )
    return ServiceContainer(
        settings=settings,
        storage=storage,
        video_service=video_service,
        job_manager=JobManager(concurrency=1, state_file=storage.data / "jobs.json"),
        processor=processor,
        capabilities=capabilities,
    )


@pytest.fixture
def client(services):
    with TestClient(create_app(services=services)) as test_client:
        yield test_client


def upload(client, filename="clip.mp4", content=b"video", mime="video/mp4"):
    return client.post("/api/videos/upload", files={"file": (filename, content, mime)})


def wait_for_job(client, job_id: str, timeout: float = 5.0) -> dict:
    deadline = time.time() + timeout
    while time.time() < deadline:
        body = client.get(f"/api/jobs/{job_id}").json()
        if body["status"] in ("succeeded", "failed"):
            return body
        time.sleep(0.02)
    raise AssertionError(f"Job {job_id} did not finish")


class TestHealth:
    """Test suite for /health"""

    def test_health(self, client):
        """Test providers and limits are reported"""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["asrProvider"] == "mock"
        assert data["maxDurationSec"] == 300
        assert data["maxUploadSizeMb"] == 1

    def test_cors_for_frontend_origin(self, client):
        """Test that the configured frontend origin is allowed"""
        response = client.get("/health", headers={"Origin": "http://web.test"})

        assert response.headers["access-control-allow-origin"] == "http://web.test"


class TestUploadEndpoint:
    """Test suite for POST /api/videos/upload"""

    def test_upload(self, client, services):
        """Test a valid upload and static file serving"""
        response = upload(client)

        assert response.status_code == 200
        data = response.json()
        assert data["durationSec"] == 12
        assert data["originalUrl"] == f"http://api.test/files/uploads/{data['videoId']}.mp4"

        served = client.get(f"/files/uploads/{data['videoId']}.mp4")
        assert served.status_code == 200
        assert served.content == b"video"

    def test_requires_file(self, client):
        """Test that the file field is required"""
        response = client.post("/api/videos/upload")

        assert response.status_code == 422

    def test_rejects_unsupported_format(self, client):
        """Test extension/MIME rejection"""
        response = upload(client, "invalid.avi", b"video", "video/x-msvideo")

        assert response.status_code == 400
        assert "Unsupported file format" in response.json()["message"]

    def test_rejects_long_video(self, client):
        """Test duration limit"""
        response = upload(client, "long.mp4", b"long video")

        assert response.status_code == 400
        assert "duration exceeds" in response.json()["message"]

    def test_rejects_corrupted_video(self, client, services):
        """Test probe failure mapping and temp cleanup"""
        response = upload(client, "broken.mp4", b"broken video")

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid or corrupted video file"
        assert list(services.storage.temp.iterdir()) == []

    def test_rejects_large_file(self, client, services):
        """Test upload size limit"""
        response = upload(client, "big.mp4", b"0" * (1024 * 1024 + 1))

        assert response.status_code == 413
        assert response.json()["message"] == "File too large. Max allowed is 1MB"
        assert list(services.storage.temp.iterdir()) == []


class TestVideoEndpoints:
    """Test suite for video lookups and job submission"""

    def test_unknown_video(self, client):
        """Test 404 for lookups and job submission"""
        assert client.get("/api/videos/missing").status_code == 404
        response = client.post("/api/videos/missing/process")
        assert response.status_code == 404
        assert response.json()["message"] == "Video not found"

    def test_render_rejects_invalid_style(self, client):
        """Test 400 with validation issues"""
        video_id = upload(client).json()["videoId"]

        response = client.post(
            f"/api/videos/{video_id}/render",
            json={"fontSize": 8, "position": {"x": 2, "y": -1}},
        )

        assert response.status_code == 400
        data = response.json()
        assert data["message"] == "Invalid styleConfig"
        assert data["issues"]

    def test_output_not_ready(self, client):
        """Test output lookup before any render"""
        video_id = upload(client).json()["videoId"]

        response = client.get(f"/api/videos/{video_id}/output")

        assert response.status_code == 404
        assert response.json()["message"] == "Output video not ready"

    def test_render_before_process_fails_job(self, client):
        """Test that the render job fails with a clear message"""
        video_id = upload(client).json()["videoId"]

        job_id = client.post(f"/api/videos/{video_id}/render", json=STYLE).json()["jobId"]
        job = wait_for_job(client, job_id)

        assert job["status"] == "failed"
        assert job["error"] == "Chinese subtitle not found. Run process first."

    def test_process_then_render(self, client):
        """Test the full upload -> process -> render workflow"""
        video_id = upload(client).json()["videoId"]

        process_job = wait_for_job(client, client.post(f"/api/videos/{video_id}/process").json()["jobId"])
        assert process_job["status"] == "succeeded"
        assert process_job["progress"] == 100
        assert process_job["result"]["subtitleZhUrl"] == f"http://api.test/files/subtitles/{video_id}.zh.vtt"
        assert "error" not in process_job

        zh_vtt = client.get(f"/files/subtitles/{video_id}.zh.vtt")
        assert zh_vtt.text.startswith("WEBVTT")
        assert "大家好" in zh_vtt.text

        render_job = wait_for_job(
            client, client.post(f"/api/videos/{video_id}/render", json=STYLE).json()["jobId"]
        )
        assert render_job["status"] == "succeeded"
        assert render_job["result"] == {"outputUrl": f"http://api.test/files/output/{video_id}.rendered.mp4"}

        video = client.get(f"/api/videos/{video_id}").json()
        assert video["subtitleEnUrl"] == f"http://api.test/files/subtitles/{video_id}.en.vtt"
        assert video["outputUrl"] == render_job["result"]["outputUrl"]

        output = client.get(f"/api/videos/{video_id}/output").json()
        assert output == {"outputUrl": render_job["result"]["outputUrl"]}


class TestJobsEndpoint:
    """Test suite for GET /api/jobs/{jobId}"""

    def test_unknown_job(self, client):
        """Test 404 for unknown jobs"""
        response = client.get("/api/jobs/missing-job")

        assert response.status_code == 404
        assert "Job not found" in response.json()["message"]

    def test_queued_payload(self, client, services):
        """Test the status payload of a job that has not run"""
        job_id = services.job_manager.enqueue_process("vid-x")
        services.job_manager.update_progress(job_id, 0)

        body = client.get(f"/api/jobs/{job_id}").json()

        assert body["jobId"] == job_id
        assert body["status"] in ("queued", "running", "failed")
        assert "result" not in body


class TestRuntimeConfig:
    """Test suite for /api/runtime-config"""

    def test_view_hides_key(self, client):
        """Test that only key presence is reported"""
        data = client.get("/api/runtime-config").json()

        assert data["hasOpenAiApiKey"] is False
        assert data["openAiBaseUrl"] == "https://api.openai.com/v1"
        assert "openAiApiKey" not in data

    def test_update(self, client, services):
        """Test partial update of the live settings"""
        response = client.post(
            "/api/runtime-config",
            json={"openAiApiKey": "sk-new", "openAiAsrModel": "whisper-1"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Runtime config updated"
        assert data["hasOpenAiApiKey"] is True
        assert data["openAiAsrModel"] == "whisper-1"
        assert "openAiApiKey" not in data
        assert services.settings.openai_api_key == "sk-new"

    @pytest.mark.parametrize("payload", [
        {"unknown": 1},
        {"openAiBaseUrl": "not a url"},
        {"openAiAsrModel": ""},
    ])
    def test_rejects_invalid(self, client, payload):
        """Test unknown fields and invalid values"""
        response = client.post("/api/runtime-config", json=payload)

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid runtime config"


class TestServiceWiring:
    """Test suite for build_services"""

    def test_render_engine_shares_health_capabilities(self, tmp_path):
        """Test that /health and the render engine read one filter cache"""
        services = build_services(Settings(
            storage_dir=tmp_path / "storage",
            asr_provider="mock",
            translation_provider="mock",
        ))

        assert services.processor.render_engine.capabilities is services.capabilities
        assert services.capabilities.cached() == {}
