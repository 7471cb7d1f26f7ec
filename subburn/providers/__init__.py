"""
ASR and translation provider implementations and interfaces.
"""

from subburn.providers.base import ASRProvider, TranslationProvider
from subburn.providers.factory import ProviderFactory, build_providers
from subburn.providers.mock import MockASRProvider, MockTranslationProvider
from subburn.providers.openai_compatible import OpenAIASRProvider, OpenAITranslationProvider

__all__ = [
    "ASRProvider",
    "TranslationProvider",
    "ProviderFactory",
    "build_providers",
    "MockASRProvider",
    "MockTranslationProvider",
    "OpenAIASRProvider",
    "OpenAITranslationProvider",
]
