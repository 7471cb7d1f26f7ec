"""
Mock Providers

Deterministic ASR and translation used for local development and demos.
"""

import math
from typing import List

from subburn.models import Cue
from subburn.providers.base import ASRProvider, TranslationProvider

SAMPLE_ENGLISH = [
    "Hello everyone, welcome to this demo video.",
    "This MVP extracts English speech and translates it into Chinese subtitles.",
    "You can edit subtitle style before rendering the final video.",
    "Click render to burn subtitles into the output file.",
]

ZH_MAP = {
    "Hello everyone, welcome to this demo video.": "大家好，欢迎来到这个演示视频。",
    "This MVP extracts English speech and translates it into Chinese subtitles.": "这个 MVP 会提取英文语音并翻译成中文字幕。",
    "You can edit subtitle style before rendering the final video.": "在生成最终视频前，你可以调整字幕样式。",
    "Click render to burn subtitles into the output file.": "点击生成即可将字幕烧录到输出视频中。",
}

FALLBACK_PREFIX = "【中文翻译】"


class MockASRProvider(ASRProvider):
    """Spreads 2-4 sample sentences evenly across the video"""

    name = "mock"

    def transcribe(self, media_path: str, duration_sec: float) -> List[Cue]:
        cue_count = min(len(SAMPLE_ENGLISH), max(2, math.ceil(duration_sec / 12)))
        segment = duration_sec / cue_count

        cues = []
        for index in range(cue_count):
            start = round(index * segment, 3)
            end = round(min(duration_sec, (index + 1) * segment - 0.1), 3)
            cues.append(Cue(start_sec=start, end_sec=max(start + 1, end), text=SAMPLE_ENGLISH[index]))
        return cues


class MockTranslationProvider(TranslationProvider):
    """Looks sentences up in a fixed table, prefixing unknown ones"""

    name = "mock"

    def translate(self, texts: List[str]) -> List[str]:
        return [ZH_MAP.get(text, f"{FALLBACK_PREFIX}{text}") for text in texts]
