"""
Provider Factory

Builds the configured ASR and translation providers once at startup.
"""

import logging
from typing import Dict, Tuple, Type

from subburn.config import Settings
from subburn.providers.base import ASRProvider, TranslationProvider
from subburn.providers.mock import MockASRProvider, MockTranslationProvider
from subburn.providers.openai_compatible import OpenAIASRProvider, OpenAITranslationProvider

logger = logging.getLogger(__name__)


class ProviderFactory:
    """
    Factory for creating provider instances by configured name.
    """

    # Registry of available providers
    _asr_providers: Dict[str, Type[ASRProvider]] = {
        "mock": MockASRProvider,
        "openai": OpenAIASRProvider,
    }
    _translation_providers: Dict[str, Type[TranslationProvider]] = {
        "mock": MockTranslationProvider,
        "openai": OpenAITranslationProvider,
    }

    @classmethod
    def _resolve(cls, registry: dict, name: str, kind: str):
        name = name.lower()
        if name not in registry:
            available = ", ".join(registry.keys())
            raise ValueError(
                f"Unsupported {kind} provider: '{name}'. "
                f"Available providers: {available}"
            )
        return registry[name]

    @classmethod
    def create_asr_provider(cls, name: str, settings: Settings) -> ASRProvider:
        """
        Create an ASR provider.

        Args:
            name: Provider name ("mock", "openai")
            settings: Settings read by HTTP-backed providers

        Raises:
            ValueError: If the name is unknown
        """
        provider_class = cls._resolve(cls._asr_providers, name, "ASR")
        logger.info(f"Creating ASR provider: {name}")
        if provider_class is OpenAIASRProvider:
            return provider_class(settings)
        return provider_class()

    @classmethod
    def create_translation_provider(cls, name: str, settings: Settings) -> TranslationProvider:
        """
        Create a translation provider.

        Args:
            name: Provider name ("mock", "openai")
            settings: Settings read by HTTP-backed providers

        Raises:
            ValueError: If the name is unknown
        """
        provider_class = cls._resolve(cls._translation_providers, name, "translation")
        logger.info(f"Creating translation provider: {name}")
        if provider_class is OpenAITranslationProvider:
            return provider_class(settings)
        return provider_class()


def build_providers(settings: Settings) -> Tuple[ASRProvider, TranslationProvider]:
    """Create the ASR and translation providers named in ``settings``"""
    return (
        ProviderFactory.create_asr_provider(settings.asr_provider, settings),
        ProviderFactory.create_translation_provider(settings.translation_provider, settings),
    )
