"""Best-effort garment description from a photo URL."""

from typing import Optional

import openai
from openai import AsyncOpenAI

from wardrobe.ai.errors import OPENAI_ERROR, AIServiceError, snippet
from wardrobe.ai.json_extract import JSONExtractionError, extract_json_object
from wardrobe.ai.prompts import DESCRIBE_PROMPT
from wardrobe.ai.suggest import status_for
from wardrobe.logging import get_logger
from wardrobe.models import ItemDescription

logger = get_logger(__name__)


class ImageDescriber:
    """Ask a vision model for {name, category, color, brand}.

    Malformed model output yields an all-empty description instead of an
    error, so callers can fall back to manual entry.
    """

    def __init__(
        self,
        client: Optional[AsyncOpenAI],
        model: str = "gpt-4o-mini",
        stub: bool = False,
    ):
        self.client = client
        self.model = model
        self.stub = stub

    async def describe(self, image_url: str) -> ItemDescription:
        if self.stub:
            return ItemDescription()
        if self.client is None:
            raise AIServiceError(OPENAI_ERROR, "OpenAI API key is not configured")

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": DESCRIBE_PROMPT},
                            {"type": "image_url", "image_url": {"url": image_url}},
                        ],
                    }
                ],
                temperature=0,
                max_tokens=300,
            )
        except openai.OpenAIError as e:
            raise AIServiceError(
                OPENAI_ERROR,
                "AI request failed",
                status_code=status_for(e),
                details={"detail": snippet(str(e))},
            ) from e

        text = response.choices[0].message.content or ""
        return parse_description(text)


def parse_description(text: str) -> ItemDescription:
    """Parse model output; anything unusable becomes an empty description."""
    try:
        payload = extract_json_object(text)
    except JSONExtractionError:
        logger.info("describe_unparseable", raw=snippet(text))
        return ItemDescription()

    def text_value(key: str) -> str:
        value = payload.get(key)
        return value.strip() if isinstance(value, str) else ""

    return ItemDescription(
        name=text_value("name"),
        category=text_value("category"),
        color=text_value("color"),
        brand=text_value("brand"),
    )
