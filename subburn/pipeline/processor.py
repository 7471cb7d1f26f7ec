"""
Job Processor

Runs the two pipeline stages:

- processVideo: ASR -> translation -> four subtitle files
- renderVideo:  Chinese VTT -> ASS script -> burned-in video

Each stage reports progress at fixed checkpoints and either completes
fully or raises; no partial results are recorded.
"""

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Dict, List

from subburn.errors import ProviderContractError, SubtitleNotFoundError, VideoNotFoundError
from subburn.formatters import cues_to_ass, cues_to_srt, cues_to_vtt, parse_vtt
from subburn.models import Cue, ProcessResult, RenderResult, StyleConfig
from subburn.providers.base import ASRProvider, TranslationProvider
from subburn.render.engine import RenderEngine
from subburn.render.strategies import BurnRequest
from subburn.services.video_service import VideoService
from subburn.utils.storage import StoragePaths, safe_join

logger = logging.getLogger(__name__)

PROCESS_VIDEO = "processVideo"
RENDER_VIDEO = "renderVideo"

ProgressCallback = Callable[[int], None]


def _write_text(path: Path, content: str):
    path.write_text(content, encoding="utf-8")


class JobProcessor:
    """
    Stage handlers invoked by the job queue workers.

    Args:
        video_service: Record access
        asr_provider: Speech recognition collaborator
        translation_provider: Translation collaborator
        render_engine: Subtitle burn-in engine
        storage: Storage layout
        api_base_url: Prefix for result URLs
    """

    def __init__(
        self,
        video_service: VideoService,
        asr_provider: ASRProvider,
        translation_provider: TranslationProvider,
        render_engine: RenderEngine,
        storage: StoragePaths,
        api_base_url: str = "",
    ):
        self.video_service = video_service
        self.asr_provider = asr_provider
        self.translation_provider = translation_provider
        self.render_engine = render_engine
        self.storage = storage
        self.api_base_url = api_base_url

    def handle(self, job_name: str, data: Dict[str, Any], report_progress: ProgressCallback) -> Dict[str, Any]:
        """
        Dispatch a queued job to its stage.

        Args:
            job_name: PROCESS_VIDEO or RENDER_VIDEO
            data: Job payload (``videoId`` and, for renders, ``styleConfig``)
            report_progress: Progress sink (0-100)

        Returns:
            Stage result as a camelCase dict
        """
        if job_name == PROCESS_VIDEO:
            result = self.process_video(data["videoId"], report_progress)
        elif job_name == RENDER_VIDEO:
            style = StyleConfig.model_validate(data["styleConfig"])
            result = self.render_video(data["videoId"], style, report_progress)
        else:
            raise ValueError(f"Unknown job name: {job_name}")
        return result.model_dump(by_alias=True)

    def process_video(self, video_id: str, report_progress: ProgressCallback) -> ProcessResult:
        """
        Transcribe, translate and write subtitle files for a video.

        Progress checkpoints: 10 (ASR), 45 (translation), 100 (done).

        Raises:
            VideoNotFoundError: No record, no media file or unknown duration
            ProviderContractError: Empty ASR output or translation count mismatch
        """
        video = self.video_service.require_video(video_id)
        if not video.duration_sec or not Path(video.original_path).is_file():
            raise VideoNotFoundError(video_id)

        stage_start = time.time()

        report_progress(10)
        en_cues = self.asr_provider.transcribe(video.original_path, video.duration_sec)
        if not en_cues:
            raise ProviderContractError("ASR returned empty subtitles")

        report_progress(45)
        zh_texts = self.translation_provider.translate([cue.text for cue in en_cues])
        if len(zh_texts) != len(en_cues):
            raise ProviderContractError(
                "Translation result count mismatch",
                {"expected": len(en_cues), "received": len(zh_texts)},
            )

        zh_cues = [cue.model_copy(update={"text": text}) for cue, text in zip(en_cues, zh_texts)]

        en_vtt_path = safe_join(self.storage.subtitles, f"{video.id}.en.vtt")
        zh_vtt_path = safe_join(self.storage.subtitles, f"{video.id}.zh.vtt")
        self._write_subtitle_files(video.id, {
            en_vtt_path: cues_to_vtt(en_cues),
            safe_join(self.storage.subtitles, f"{video.id}.en.srt"): cues_to_srt(en_cues),
            zh_vtt_path: cues_to_vtt(zh_cues),
            safe_join(self.storage.subtitles, f"{video.id}.zh.srt"): cues_to_srt(zh_cues),
        })

        updated = self.video_service.save_subtitles(video.id, en_vtt_path, zh_vtt_path)
        report_progress(100)

        logger.info(
            f"Processed video {video.id}: {len(en_cues)} cue(s) in {time.time() - stage_start:.1f}s",
            extra={"metadata": {"video_id": video.id, "cues": len(en_cues)}},
        )
        return ProcessResult(
            subtitle_en_url=f"{self.api_base_url}{updated.subtitle_en_url}",
            subtitle_zh_url=f"{self.api_base_url}{updated.subtitle_zh_url}",
        )

    def _write_subtitle_files(self, video_id: str, files: Dict[Path, str]):
        """
        Write all files to ``.tmp`` siblings concurrently, then move them
        into place.

        A failed write removes the staged copies and leaves any earlier
        subtitle files untouched. A failed move removes every file of the
        set and clears the subtitle fields of the record.
        """
        self.storage.subtitles.mkdir(parents=True, exist_ok=True)
        staged = {path: path.with_name(f"{path.name}.tmp") for path in files}
        with ThreadPoolExecutor(max_workers=len(files), thread_name_prefix="subtitle-write") as pool:
            futures = [pool.submit(_write_text, staged[path], content) for path, content in files.items()]
            errors = [future.exception() for future in futures]

        first_error = next((e for e in errors if e is not None), None)
        if first_error is not None:
            for tmp_path in staged.values():
                if tmp_path.is_file():
                    tmp_path.unlink()
            raise first_error

        try:
            for path, tmp_path in staged.items():
                os.replace(tmp_path, path)
        except OSError:
            for path in [*staged.values(), *files]:
                if path.is_file():
                    path.unlink()
            self.video_service.clear_subtitles(video_id)
            raise

    def render_video(self, video_id: str, style: StyleConfig, report_progress: ProgressCallback) -> RenderResult:
        """
        Burn the Chinese subtitles into a new video.

        Progress checkpoints: 20 (parse), 50 (render), 100 (done). The
        temporary ASS script is removed whether or not rendering succeeds.

        Raises:
            VideoNotFoundError: No record
            SubtitleNotFoundError: processVideo has not run or its Chinese VTT is gone
            ProviderContractError: The Chinese VTT has no cues
            RenderConfigurationError: ffmpeg lacks both burn filters
            CommandError: ffmpeg failed
        """
        video = self.video_service.require_video(video_id)
        if not video.subtitle_zh_path or not Path(video.subtitle_zh_path).is_file():
            raise SubtitleNotFoundError(video_id)

        metadata = video.metadata()

        report_progress(20)
        cues: List[Cue] = parse_vtt(Path(video.subtitle_zh_path).read_text(encoding="utf-8"))
        if not cues:
            raise ProviderContractError("No subtitle cues found for rendering")

        self.storage.temp.mkdir(parents=True, exist_ok=True)
        ass_path = safe_join(self.storage.temp, f"{video.id}.{int(time.time() * 1000)}.ass")
        ass_path.write_text(cues_to_ass(cues, style, metadata), encoding="utf-8")

        report_progress(50)
        output_path = safe_join(self.storage.output, f"{video.id}.rendered.mp4")
        try:
            self.render_engine.burn_subtitles(
                BurnRequest(
                    input_video_path=video.original_path,
                    ass_path=str(ass_path),
                    cues=cues,
                    style=style,
                    metadata=metadata,
                    output_video_path=str(output_path),
                )
            )
        finally:
            ass_path.unlink(missing_ok=True)

        updated = self.video_service.save_rendered_output(video.id, output_path)
        report_progress(100)

        return RenderResult(output_url=f"{self.api_base_url}{updated.output_url}")
