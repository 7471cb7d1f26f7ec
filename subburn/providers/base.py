"""
ASR and Translation Provider Interfaces

Defines the abstract interfaces the job processor depends on. Concrete
providers (mock, OpenAI-compatible HTTP) are selected once at startup.
"""

from abc import ABC, abstractmethod
from typing import List

from subburn.models import Cue


class ASRProvider(ABC):
    """
    Abstract base class for speech recognition providers.

    Implementations turn the speech of a media file into ordered English cues.
    """

    name: str = ""

    @abstractmethod
    def transcribe(self, media_path: str, duration_sec: float) -> List[Cue]:
        """
        Transcribe a media file.

        Args:
            media_path: Path to the uploaded video
            duration_sec: Probed duration, used to bound cue timing

        Returns:
            Cues ordered by start time

        Raises:
            ProviderError: If the backend fails
        """
        pass


class TranslationProvider(ABC):
    """
    Abstract base class for translation providers.

    Implementations translate English lines to Simplified Chinese,
    one output per input, in the same order.
    """

    name: str = ""

    @abstractmethod
    def translate(self, texts: List[str]) -> List[str]:
        """
        Translate a batch of texts.

        Args:
            texts: Source lines

        Returns:
            Translated lines, same length and order as ``texts``

        Raises:
            ProviderError: If the backend fails
        """
        pass
