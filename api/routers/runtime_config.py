"""
Runtime Config API Router

View and update the OpenAI-compatible provider settings while the
service runs. Providers read these settings on every request.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from pydantic import ValidationError

from subburn.config import Settings

from api.dependencies import get_app_settings
from api.schemas import RuntimeConfigUpdate, RuntimeConfigView
from api.utils.errors import InvalidRuntimeConfigError, format_validation_issues

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/runtime-config")


@router.get("", response_model=RuntimeConfigView, response_model_exclude_none=True)
def get_runtime_config(settings: Settings = Depends(get_app_settings)):
    """Current provider settings; the API key itself is never returned"""
    return RuntimeConfigView.from_settings(settings)


@router.post("", response_model=RuntimeConfigView, response_model_exclude_none=True)
def update_runtime_config(
    payload: Dict[str, Any] = Body(...),
    settings: Settings = Depends(get_app_settings),
):
    """
    Update provider settings.

    Accepts any subset of ``openAiApiKey``, ``openAiBaseUrl``,
    ``openAiAsrModel`` and ``openAiTranslationModel``; unknown fields are
    rejected.
    """
    try:
        update = RuntimeConfigUpdate.model_validate(payload)
    except ValidationError as e:
        raise InvalidRuntimeConfigError(format_validation_issues(e.errors()))

    update.apply(settings)
    logger.info(
        "Runtime config updated",
        extra={"metadata": {"fields": sorted(update.model_dump(exclude_none=True, by_alias=True))}},
    )
    return RuntimeConfigView.from_settings(settings, message="Runtime config updated")
