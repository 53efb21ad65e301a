"""AI clients: outfit suggestion and garment description."""

from typing import Optional

from openai import AsyncOpenAI

from wardrobe.ai.describe import ImageDescriber, parse_description
from wardrobe.ai.errors import (
    AI_EMPTY_OUTFITS,
    AI_JSON_PARSE_ERROR,
    OPENAI_ERROR,
    AIServiceError,
)
from wardrobe.ai.json_extract import (
    JSONExtractionError,
    extract_json_object,
    strip_code_fences,
)
from wardrobe.ai.suggest import OutfitSuggester, is_capability_error
from wardrobe.config import Settings


def build_openai_client(settings: Settings) -> Optional[AsyncOpenAI]:
    """AsyncOpenAI client, or None when no key is configured."""
    if not settings.openai_api_key:
        return None
    return AsyncOpenAI(
        api_key=settings.openai_api_key,
        timeout=settings.openai_timeout_seconds,
    )


__all__ = [
    "AI_EMPTY_OUTFITS",
    "AI_JSON_PARSE_ERROR",
    "OPENAI_ERROR",
    "AIServiceError",
    "ImageDescriber",
    "JSONExtractionError",
    "OutfitSuggester",
    "build_openai_client",
    "extract_json_object",
    "is_capability_error",
    "parse_description",
    "strip_code_fences",
]
