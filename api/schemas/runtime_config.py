"""
Runtime Config Schemas

Provider settings that operators may change without restarting. The API
key is write-only: views only report whether one is set.
"""

from typing import Optional

from pydantic import ConfigDict, Field, HttpUrl
from pydantic.alias_generators import to_camel

from subburn.config import Settings
from subburn.models import CamelModel


class RuntimeConfigUpdate(CamelModel):
    """Partial update; omitted fields keep their current value"""

    open_ai_api_key: Optional[str] = Field(default=None, min_length=1, max_length=300)
    open_ai_base_url: Optional[HttpUrl] = None
    open_ai_asr_model: Optional[str] = Field(default=None, min_length=1, max_length=120)
    open_ai_translation_model: Optional[str] = Field(default=None, min_length=1, max_length=120)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    def apply(self, settings: Settings) -> None:
        """Copy the provided values onto the live settings object"""
        if self.open_ai_api_key is not None:
            settings.openai_api_key = self.open_ai_api_key
        if self.open_ai_base_url is not None:
            settings.openai_base_url = str(self.open_ai_base_url).rstrip("/")
        if self.open_ai_asr_model is not None:
            settings.openai_asr_model = self.open_ai_asr_model
        if self.open_ai_translation_model is not None:
            settings.openai_translation_model = self.open_ai_translation_model


class RuntimeConfigView(CamelModel):
    open_ai_base_url: str
    open_ai_asr_model: str
    open_ai_translation_model: str
    has_open_ai_api_key: bool
    message: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Settings, message: Optional[str] = None) -> "RuntimeConfigView":
        return cls(
            open_ai_base_url=settings.openai_base_url,
            open_ai_asr_model=settings.openai_asr_model,
            open_ai_translation_model=settings.openai_translation_model,
            has_open_ai_api_key=bool(settings.openai_api_key),
            message=message,
        )
