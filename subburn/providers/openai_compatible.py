"""
OpenAI-Compatible HTTP Providers

ASR via ``/audio/transcriptions`` (or ``/chat/completions`` with inline
audio for DashScope compatible-mode endpoints) and translation via
``/chat/completions``.

Connection settings are read from the Settings object on every call so
runtime configuration updates take effect without a restart.
"""

import base64
import json
import logging
import os
import re
import tempfile
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from subburn.config import Settings
from subburn.errors import ProviderError
from subburn.models import Cue
from subburn.providers.base import ASRProvider, TranslationProvider
from subburn.utils.media import extract_audio

logger = logging.getLogger(__name__)

_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?。！？])\s+")
_FENCED_JSON = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)

BATCH_SYSTEM_PROMPT = (
    "Translate each English string to Simplified Chinese. Output ONLY a JSON array "
    "of strings in the same order, no extra text."
)
SINGLE_SYSTEM_PROMPT = (
    "Translate English to Simplified Chinese. Return only translated text with no explanation."
)


def is_dashscope_compatible_base(base_url: str) -> bool:
    return "dashscope" in base_url and "compatible-mode" in base_url


def split_text_to_cues(text: str, duration_sec: float) -> List[Cue]:
    """
    Split a plain transcript into sentence cues.

    Each sentence gets a share of the duration proportional to its length;
    the last sentence always ends at ``duration_sec``.
    """
    normalized = re.sub(r"\s+", " ", text).strip()
    if not normalized:
        return []

    parts = [part.strip() for part in _SENTENCE_BOUNDARY.split(normalized) if part.strip()]
    if not parts:
        return []

    total_chars = sum(len(part) for part in parts)
    cursor = 0.0
    cues = []
    for index, part in enumerate(parts):
        portion = len(part) / total_chars if total_chars > 0 else 1 / len(parts)
        start_sec = cursor
        if index == len(parts) - 1:
            end_sec = duration_sec
        else:
            end_sec = min(duration_sec, cursor + duration_sec * portion)
        cursor = end_sec
        cues.append(
            Cue(
                start_sec=round(start_sec, 3),
                end_sec=round(max(start_sec + 0.5, end_sec), 3),
                text=part,
            )
        )
    return cues


def extract_text_from_chat_content(content: Any) -> str:
    """Flatten chat message content (string or list of parts) to text"""
    if isinstance(content, str):
        return content.strip()

    if isinstance(content, list):
        texts = []
        for part in content:
            if isinstance(part, str):
                texts.append(part)
            elif isinstance(part, dict) and isinstance(part.get("text"), str):
                texts.append(part["text"])
        return " ".join(t for t in texts if t).strip()

    return ""


def parse_json_array(content: str) -> Optional[List[str]]:
    """
    Find a JSON array of strings in a model reply.

    Tries the whole reply, a fenced code block, then the outermost
    ``[...]`` span.
    """
    trimmed = content.strip()
    candidates = [trimmed]

    fenced = _FENCED_JSON.search(trimmed)
    if fenced and fenced.group(1):
        candidates.append(fenced.group(1).strip())

    first_bracket = trimmed.find("[")
    last_bracket = trimmed.rfind("]")
    if first_bracket >= 0 and last_bracket > first_bracket:
        candidates.append(trimmed[first_bracket:last_bracket + 1])

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, list) and all(isinstance(item, str) for item in parsed):
            return parsed

    return None


class _OpenAICompatibleProvider:
    """Shared HTTP plumbing for the OpenAI-compatible providers"""

    def __init__(self, settings: Settings, transport: Optional[httpx.BaseTransport] = None):
        self.settings = settings
        self._transport = transport

    def _require_api_key(self, purpose: str) -> str:
        if not self.settings.openai_api_key:
            raise ProviderError(f"OPENAI_API_KEY is required for {purpose} provider")
        return self.settings.openai_api_key

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.settings.openai_base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {self.settings.openai_api_key}"},
            timeout=self.settings.request_timeout_sec,
            transport=self._transport,
        )

    def _post(self, path: str, label: str, **kwargs) -> Dict[str, Any]:
        try:
            with self._client() as client:
                response = client.post(path, **kwargs)
        except httpx.HTTPError as e:
            raise ProviderError(f"{label} failed: {e}") from e

        if response.is_error:
            raise ProviderError(f"{label} failed: {response.status_code} {response.text}")

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(f"{label} returned invalid JSON") from e

    def _chat_content(self, payload: Dict[str, Any]) -> str:
        choices = payload.get("choices") or []
        if not choices:
            return ""
        message = (choices[0] or {}).get("message") or {}
        return extract_text_from_chat_content(message.get("content"))


class OpenAIASRProvider(_OpenAICompatibleProvider, ASRProvider):
    """Speech recognition through an OpenAI-compatible API"""

    name = "openai"

    def transcribe(self, media_path: str, duration_sec: float) -> List[Cue]:
        self._require_api_key("ASR")
        start = time.time()

        if is_dashscope_compatible_base(self.settings.openai_base_url):
            cues = self._transcribe_via_chat(media_path, duration_sec)
        else:
            cues = self._transcribe_via_audio_api(media_path)

        logger.info(
            f"ASR produced {len(cues)} cue(s) in {(time.time() - start) * 1000:.0f}ms",
            extra={"metadata": {"model": self.settings.openai_asr_model, "cues": len(cues)}},
        )
        return cues

    def _transcribe_via_audio_api(self, media_path: str) -> List[Cue]:
        path = Path(media_path)
        payload = self._post(
            "/audio/transcriptions",
            "OpenAI ASR",
            files={"file": (path.name, path.read_bytes(), "video/mp4")},
            data={
                "model": self.settings.openai_asr_model,
                "response_format": "verbose_json",
                "language": "en",
            },
        )

        cues = []
        for segment in payload.get("segments") or []:
            seg_start = segment.get("start")
            seg_end = segment.get("end")
            text = (segment.get("text") or "").strip()
            if not isinstance(seg_start, (int, float)) or not isinstance(seg_end, (int, float)) or not text:
                continue
            cues.append(Cue(start_sec=max(0.0, float(seg_start)), end_sec=max(0.0, float(seg_end)), text=text))
        return cues

    def _transcribe_via_chat(self, media_path: str, duration_sec: float) -> List[Cue]:
        fd, tmp_audio = tempfile.mkstemp(suffix=".mp3", prefix=f"{Path(media_path).name}.")
        os.close(fd)
        try:
            extract_audio(media_path, tmp_audio, ffmpeg_path=self.settings.ffmpeg_path)
            audio_b64 = base64.b64encode(Path(tmp_audio).read_bytes()).decode("ascii")
        finally:
            Path(tmp_audio).unlink(missing_ok=True)

        payload = self._post(
            "/chat/completions",
            "Qwen ASR",
            json={
                "model": self.settings.openai_asr_model,
                "messages": [
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "input_audio",
                                "input_audio": {"data": f"data:audio/mpeg;base64,{audio_b64}"},
                            }
                        ],
                    }
                ],
                "stream": False,
                "extra_body": {"asr_options": {"language": "en", "enable_itn": False}},
            },
        )

        text = self._chat_content(payload)
        if not text:
            raise ProviderError("Qwen ASR returned empty transcript")

        cues = split_text_to_cues(text, duration_sec)
        if not cues:
            raise ProviderError("Qwen ASR transcript parsing failed")
        return cues


class OpenAITranslationProvider(_OpenAICompatibleProvider, TranslationProvider):
    """English to Simplified Chinese through an OpenAI-compatible chat API"""

    name = "openai"

    def _request_chat_completion(self, messages: List[Dict[str, str]]) -> str:
        payload = self._post(
            "/chat/completions",
            "Translation",
            json={
                "model": self.settings.openai_translation_model,
                "temperature": 0,
                "messages": messages,
            },
        )
        return self._chat_content(payload)

    def _translate_one_by_one(self, texts: List[str]) -> List[str]:
        result = []
        for text in texts:
            translated = self._request_chat_completion([
                {"role": "system", "content": SINGLE_SYSTEM_PROMPT},
                {"role": "user", "content": text},
            ]).strip()
            result.append(translated or text)
        return result

    def translate(self, texts: List[str]) -> List[str]:
        self._require_api_key("translation")

        if not texts:
            return []

        batch_content = self._request_chat_completion([
            {"role": "system", "content": BATCH_SYSTEM_PROMPT},
            {"role": "user", "content": json.dumps(texts, ensure_ascii=False)},
        ])

        parsed = parse_json_array(batch_content or "")
        if parsed is not None and len(parsed) == len(texts):
            return parsed

        logger.warning(
            f"Batch translation returned unusable output, translating {len(texts)} line(s) one by one"
        )
        return self._translate_one_by_one(texts)
