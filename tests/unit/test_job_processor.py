"""
Unit tests for JobProcessor

Tests the transcription and render stages end to end against fake
providers and a fake ffmpeg.
"""

import pytest

from subburn.errors import (
    CommandError,
    ProviderContractError,
    RenderConfigurationError,
    SubtitleNotFoundError,
    VideoNotFoundError,
)
from subburn.models import Cue
from subburn.pipeline import PROCESS_VIDEO, RENDER_VIDEO, JobProcessor
from subburn.render import AssStrategy, DrawtextStrategy, FilterCapabilities, RenderEngine

from tests.fakes import FakeRunner, StaticASR, StaticTranslator

HELLO_CUES = [Cue(start_sec=0, end_sec=2, text="Hi")]
HELLO_ZH = {"Hi": "你好"}


class AssCheckingRunner(FakeRunner):
    """FakeRunner that records whether an ASS script existed during render"""

    def __init__(self, temp_dir, **kwargs):
        super().__init__(**kwargs)
        self.temp_dir = temp_dir
        self.scripts_seen = []

    def __call__(self, args):
        if "-filters" not in args:
            self.scripts_seen.extend(self.temp_dir.glob("*.ass"))
        return super().__call__(args)


def make_processor(video_service, storage, runner=None, asr=None, translator=None) -> JobProcessor:
    runner = runner or FakeRunner(filters=("ass",))
    engine = RenderEngine(
        capabilities=FilterCapabilities(runner=runner),
        strategies=[DrawtextStrategy(font_candidates=[]), AssStrategy()],
        runner=runner,
    )
    return JobProcessor(
        video_service=video_service,
        asr_provider=asr or StaticASR(HELLO_CUES),
        translation_provider=translator or StaticTranslator(HELLO_ZH),
        render_engine=engine,
        storage=storage,
        api_base_url="http://api.test",
    )


class TestProcessVideo:
    """Test suite for the transcription stage"""

    def test_writes_four_subtitle_files(self, video_service, storage, seeded_video):
        """Test the Hi/你好 scenario"""
        progress = []
        processor = make_processor(video_service, storage)

        result = processor.process_video(seeded_video.id, progress.append)

        assert progress == [10, 45, 100]
        assert result.subtitle_en_url == "http://api.test/files/subtitles/vid-1.en.vtt"
        assert result.subtitle_zh_url == "http://api.test/files/subtitles/vid-1.zh.vtt"

        subtitles = storage.subtitles
        assert (subtitles / "vid-1.en.vtt").read_text(encoding="utf-8") == (
            "WEBVTT\n\n00:00:00.000 --> 00:00:02.000\nHi\n"
        )
        assert (subtitles / "vid-1.zh.vtt").read_text(encoding="utf-8") == (
            "WEBVTT\n\n00:00:00.000 --> 00:00:02.000\n你好\n"
        )
        assert (subtitles / "vid-1.en.srt").read_text(encoding="utf-8") == (
            "1\n00:00:00,000 --> 00:00:02,000\nHi\n"
        )
        assert "你好" in (subtitles / "vid-1.zh.srt").read_text(encoding="utf-8")

        record = video_service.get_video(seeded_video.id)
        assert record.subtitle_zh_path == str(subtitles / "vid-1.zh.vtt")
        assert record.subtitle_en_url == "/files/subtitles/vid-1.en.vtt"

    def test_handle_returns_camel_case(self, video_service, storage, seeded_video):
        """Test the job-facing entry point"""
        processor = make_processor(video_service, storage)

        result = processor.handle(PROCESS_VIDEO, {"videoId": seeded_video.id}, lambda p: None)

        assert set(result) == {"subtitleEnUrl", "subtitleZhUrl"}

    def test_translation_count_mismatch(self, video_service, storage, seeded_video):
        """Test that a short translation aborts before any file is written"""
        progress = []
        processor = make_processor(
            video_service, storage, translator=StaticTranslator({}, drop_unknown=True)
        )

        with pytest.raises(ProviderContractError, match="Translation result count mismatch"):
            processor.process_video(seeded_video.id, progress.append)

        assert progress == [10, 45]
        assert list(storage.subtitles.iterdir()) == []
        assert video_service.get_video(seeded_video.id).subtitle_zh_path is None

    def test_empty_asr_skips_translation(self, video_service, storage, seeded_video):
        """Test that zero cues fail before the translator is called"""
        translator = StaticTranslator(HELLO_ZH)
        processor = make_processor(video_service, storage, asr=StaticASR([]), translator=translator)

        with pytest.raises(ProviderContractError, match="ASR returned empty subtitles"):
            processor.process_video(seeded_video.id, lambda p: None)

        assert translator.calls == 0

    def test_unknown_video(self, video_service, storage):
        """Test missing record"""
        processor = make_processor(video_service, storage)

        with pytest.raises(VideoNotFoundError, match="Video not found"):
            processor.process_video("missing", lambda p: None)

    def test_missing_media_file(self, video_service, storage, seeded_video):
        """Test record whose original file is gone"""
        (storage.uploads / "vid-1.mp4").unlink()
        processor = make_processor(video_service, storage)

        with pytest.raises(VideoNotFoundError):
            processor.process_video(seeded_video.id, lambda p: None)

    def test_failed_write_removes_siblings(self, video_service, storage, seeded_video):
        """Test that one failed write leaves no subtitle files behind"""
        (storage.subtitles / "vid-1.zh.srt").mkdir()
        processor = make_processor(video_service, storage)

        with pytest.raises(OSError):
            processor.process_video(seeded_video.id, lambda p: None)

        assert not (storage.subtitles / "vid-1.en.vtt").exists()
        assert not (storage.subtitles / "vid-1.zh.vtt").exists()
        assert video_service.get_video(seeded_video.id).subtitle_zh_path is None

    def test_failed_rerun_keeps_earlier_files(self, video_service, storage, seeded_video, style):
        """Test that a write failure on a second run leaves the first run intact"""
        processor = make_processor(video_service, storage)
        processor.process_video(seeded_video.id, lambda p: None)
        first_zh = (storage.subtitles / "vid-1.zh.vtt").read_text(encoding="utf-8")
        (storage.subtitles / "vid-1.zh.srt.tmp").mkdir()

        with pytest.raises(OSError):
            processor.process_video(seeded_video.id, lambda p: None)

        record = video_service.get_video(seeded_video.id)
        assert record.subtitle_zh_path == str(storage.subtitles / "vid-1.zh.vtt")
        assert (storage.subtitles / "vid-1.zh.vtt").read_text(encoding="utf-8") == first_zh
        assert not (storage.subtitles / "vid-1.en.vtt.tmp").exists()

        result = processor.render_video(seeded_video.id, style, lambda p: None)
        assert result.output_url == "http://api.test/files/output/vid-1.rendered.mp4"

    def test_failed_rerun_move_clears_record(self, video_service, storage, seeded_video, style):
        """Test that a failed move removes the set and render reports missing subtitles"""
        processor = make_processor(video_service, storage)
        processor.process_video(seeded_video.id, lambda p: None)
        (storage.subtitles / "vid-1.zh.srt").unlink()
        (storage.subtitles / "vid-1.zh.srt").mkdir()

        with pytest.raises(OSError):
            processor.process_video(seeded_video.id, lambda p: None)

        record = video_service.get_video(seeded_video.id)
        assert record.subtitle_zh_path is None
        assert record.subtitle_zh_url is None
        assert sorted(p.name for p in storage.subtitles.iterdir()) == ["vid-1.zh.srt"]

        with pytest.raises(SubtitleNotFoundError) as exc_info:
            processor.render_video(seeded_video.id, style, lambda p: None)
        assert exc_info.value.message == "Chinese subtitle not found. Run process first."


class TestRenderVideo:
    """Test suite for the render stage"""

    def test_requires_processed_subtitles(self, video_service, storage, seeded_video, style):
        """Test render before process"""
        processor = make_processor(video_service, storage)

        with pytest.raises(SubtitleNotFoundError) as exc_info:
            processor.render_video(seeded_video.id, style, lambda p: None)

        assert exc_info.value.message == "Chinese subtitle not found. Run process first."

    def test_recorded_subtitle_file_missing(self, video_service, storage, seeded_video, style):
        """Test that a deleted Chinese VTT is reported as missing subtitles"""
        processor = make_processor(video_service, storage)
        processor.process_video(seeded_video.id, lambda p: None)
        (storage.subtitles / "vid-1.zh.vtt").unlink()

        with pytest.raises(SubtitleNotFoundError):
            processor.render_video(seeded_video.id, style, lambda p: None)

    def test_render_after_process(self, video_service, storage, seeded_video, style):
        """Test output URL, progress and ASS script lifetime"""
        runner = AssCheckingRunner(storage.temp, filters=("ass",))
        processor = make_processor(video_service, storage, runner=runner)
        processor.process_video(seeded_video.id, lambda p: None)
        progress = []

        result = processor.render_video(seeded_video.id, style, progress.append)

        assert progress == [20, 50, 100]
        assert result.output_url == "http://api.test/files/output/vid-1.rendered.mp4"
        assert len(runner.scripts_seen) == 1
        assert list(storage.temp.glob("*.ass")) == []
        assert runner.render_calls[0][-1] == str(storage.output / "vid-1.rendered.mp4")
        assert video_service.get_video(seeded_video.id).output_url == "/files/output/vid-1.rendered.mp4"

    def test_handle_render(self, video_service, storage, seeded_video, style):
        """Test the job-facing entry point with a serialised style"""
        processor = make_processor(video_service, storage)
        processor.process_video(seeded_video.id, lambda p: None)

        result = processor.handle(
            RENDER_VIDEO,
            {"videoId": seeded_video.id, "styleConfig": style.model_dump(by_alias=True)},
            lambda p: None,
        )

        assert result == {"outputUrl": "http://api.test/files/output/vid-1.rendered.mp4"}

    def test_ffmpeg_failure_removes_script(self, video_service, storage, seeded_video, style):
        """Test that the ASS script is deleted when ffmpeg fails"""
        runner = FakeRunner(filters=("ass",), render_error=CommandError("ffmpeg exited with 1: bad"))
        processor = make_processor(video_service, storage, runner=runner)
        processor.process_video(seeded_video.id, lambda p: None)

        with pytest.raises(CommandError):
            processor.render_video(seeded_video.id, style, lambda p: None)

        assert list(storage.temp.glob("*.ass")) == []
        assert video_service.get_video(seeded_video.id).output_path is None

    def test_no_filters_available(self, video_service, storage, seeded_video, style):
        """Test configuration error surfaces and the script is removed"""
        processor = make_processor(video_service, storage, runner=FakeRunner(filters=()))
        processor.process_video(seeded_video.id, lambda p: None)

        with pytest.raises(RenderConfigurationError):
            processor.render_video(seeded_video.id, style, lambda p: None)

        assert list(storage.temp.glob("*.ass")) == []

    def test_empty_subtitle_file(self, video_service, storage, seeded_video, style):
        """Test that a cue-less Chinese VTT is rejected before ffmpeg runs"""
        runner = FakeRunner(filters=("ass",))
        zh_path = storage.subtitles / "vid-1.zh.vtt"
        zh_path.write_text("WEBVTT\n", encoding="utf-8")
        video_service.save_subtitles(seeded_video.id, storage.subtitles / "vid-1.en.vtt", zh_path)
        processor = make_processor(video_service, storage, runner=runner)

        with pytest.raises(ProviderContractError, match="No subtitle cues found for rendering"):
            processor.render_video(seeded_video.id, style, lambda p: None)

        assert runner.calls == []

    def test_unknown_job_name(self, video_service, storage):
        """Test dispatch of an unknown job"""
        processor = make_processor(video_service, storage)

        with pytest.raises(ValueError, match="Unknown job name"):
            processor.handle("transcodeVideo", {"videoId": "x"}, lambda p: None)
