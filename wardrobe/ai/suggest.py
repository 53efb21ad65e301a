"""Outfit suggestions from the OpenAI completion backend.

The Responses API is tried first. When it is refused for a capability
reason (403 permission denied, 404 model or endpoint unavailable, or a 400
naming an unsupported parameter) the same prompt is sent once to Chat
Completions. Any other failure surfaces without trying the secondary shape.
"""

from typing import Any, Optional, Sequence

import openai
from openai import AsyncOpenAI

from wardrobe.ai.errors import (
    AI_EMPTY_OUTFITS,
    AI_JSON_PARSE_ERROR,
    OPENAI_ERROR,
    AIServiceError,
    snippet,
)
from wardrobe.ai.json_extract import JSONExtractionError, extract_json_object
from wardrobe.ai.prompts import OUTFIT_SYSTEM_PROMPT, build_outfit_prompt
from wardrobe.ai.stub import synthesize_outfits
from wardrobe.logging import get_logger
from wardrobe.models import ClosetItem, SuggestedOutfit
from wardrobe.resilience import FallbackChain, FallbackExhaustedError

logger = get_logger(__name__)

MIN_TOP_K = 1
MAX_TOP_K = 5


def is_capability_error(error: Exception) -> bool:
    """Whether a primary-call failure should move on to the secondary API."""
    if isinstance(error, (openai.PermissionDeniedError, openai.NotFoundError)):
        return True
    if isinstance(error, openai.BadRequestError):
        text = str(error).lower()
        return "unsupported" in text or "not supported" in text
    return False


def status_for(error: Exception) -> int:
    if isinstance(error, openai.RateLimitError):
        return 429
    return 502


class OutfitSuggester:
    """Generate outfits from closet items via the completion backend."""

    def __init__(
        self,
        client: Optional[AsyncOpenAI],
        model: str = "gpt-4o-mini",
        stub: bool = False,
        temperature: float = 0.5,
    ):
        self.client = client
        self.model = model
        self.stub = stub
        self.temperature = temperature
        self._chain = FallbackChain(
            [("responses", self._call_responses), ("chat", self._call_chat)],
            should_fallback=is_capability_error,
            on_fallback=self._log_fallback,
        )

    async def generate_outfits(
        self,
        items: Sequence[ClosetItem],
        occasion: str,
        weather: Optional[str] = None,
        style: Optional[str] = None,
        top_k: int = 3,
        dare: bool = False,
    ) -> list[SuggestedOutfit]:
        """Suggest up to ``top_k`` outfits drawn from ``items``.

        Returned outfits reference items by id and are never empty.

        Raises:
            ValueError: On an empty occasion, no items, or top_k outside 1-5
            AIServiceError: OPENAI_ERROR when the backend fails,
                AI_JSON_PARSE_ERROR when its text holds no parseable object,
                AI_EMPTY_OUTFITS when the object has no usable outfits
        """
        if not occasion or not occasion.strip():
            raise ValueError("occasion is required")
        if not items:
            raise ValueError("at least one closet item is required")
        if not MIN_TOP_K <= top_k <= MAX_TOP_K:
            raise ValueError(f"top_k must be between {MIN_TOP_K} and {MAX_TOP_K}")

        if self.stub:
            logger.info("outfits_stubbed", count=top_k)
            return synthesize_outfits(items, occasion, weather, style, top_k)

        if self.client is None:
            raise AIServiceError(OPENAI_ERROR, "OpenAI API key is not configured")

        user_prompt = build_outfit_prompt(items, occasion, weather, style, top_k, dare)
        text = await self._complete(OUTFIT_SYSTEM_PROMPT, user_prompt)

        try:
            payload = extract_json_object(text)
        except JSONExtractionError as e:
            logger.warning("ai_json_parse_failed", reason=str(e))
            raise AIServiceError(
                AI_JSON_PARSE_ERROR,
                "AI response was not valid JSON",
                details={"raw": snippet(text)},
            ) from e

        outfits = self._coerce_outfits(payload.get("outfits"), items)[:top_k]
        if not outfits:
            raise AIServiceError(
                AI_EMPTY_OUTFITS,
                "AI returned no usable outfits",
                details={"raw": snippet(text)},
            )
        return outfits

    async def _complete(self, system: str, user: str) -> str:
        try:
            result = await self._chain.invoke(system, user)
        except FallbackExhaustedError as e:
            primary = e.first_error
            raise AIServiceError(
                OPENAI_ERROR,
                "AI request failed",
                status_code=status_for(primary),
                details={
                    "detail": snippet(str(primary)),
                    "fallback_detail": snippet(str(e.last_error)),
                },
            ) from primary
        except openai.OpenAIError as e:
            raise AIServiceError(
                OPENAI_ERROR,
                "AI request failed",
                status_code=status_for(e),
                details={"detail": snippet(str(e))},
            ) from e
        return result.result

    async def _call_responses(self, system: str, user: str) -> str:
        response = await self.client.responses.create(
            model=self.model,
            instructions=system,
            input=user,
            temperature=self.temperature,
            text={"format": {"type": "json_object"}},
        )
        return response.output_text or ""

    async def _call_chat(self, system: str, user: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            temperature=self.temperature,
            response_format={"type": "json_object"},
        )
        return response.choices[0].message.content or ""

    def _log_fallback(self, from_name: str, to_name: str, error: Exception) -> None:
        logger.warning(
            "ai_fallback",
            from_strategy=from_name,
            to_strategy=to_name,
            error_type=type(error).__name__,
        )

    @staticmethod
    def _coerce_outfits(raw: Any, items: Sequence[ClosetItem]) -> list[SuggestedOutfit]:
        """Normalize model outfits and map item references to known ids."""
        if not isinstance(raw, list):
            return []

        by_id = {item.id: item.id for item in items}
        by_name = {item.name.strip().lower(): item.id for item in items if item.name}

        outfits = []
        for entry in raw:
            if not isinstance(entry, dict):
                continue
            refs = entry.get("items")
            if not isinstance(refs, list):
                continue
            item_ids: list[str] = []
            for ref in refs:
                key = str(ref).strip()
                item_id = by_id.get(key) or by_name.get(key.lower())
                if item_id and item_id not in item_ids:
                    item_ids.append(item_id)
            if not item_ids:
                continue

            palette = entry.get("palette") or []
            if isinstance(palette, str):
                palette = palette.split(",")
            elif not isinstance(palette, list):
                palette = []
            outfits.append(
                SuggestedOutfit(
                    name=str(entry.get("name") or ""),
                    items=item_ids,
                    reasoning=str(entry.get("reasoning") or ""),
                    palette=[str(p).strip() for p in palette if str(p).strip()],
                    preview=str(entry.get("preview") or "") or None,
                )
            )
        return outfits
