"""Prompt templates for outfit suggestion and garment description."""

import json
from typing import Optional, Sequence

from wardrobe.models import ClosetItem

OUTFIT_SYSTEM_PROMPT = """You are a personal stylist.
Respond with ONLY a JSON object, no prose and no code fences, of this exact shape:
{"outfits": [{"name": string, "items": [string], "reasoning": string, "palette": [string], "preview": string}]}
Rules:
- "items" lists item ids taken from the provided closet list. Never invent items.
- Each outfit should cover a top, a bottom and shoes when the closet allows it.
- "palette" lists the main color names of the outfit.
- "preview" is the photo URL of the most representative item, or an empty string."""

DARE_NOTE = (
    "Make one of the outfits push the user's style slightly ('Dare'): choose "
    "bolder contrast or silhouette while staying occasion-appropriate."
)

DESCRIBE_PROMPT = """Look at this clothing photo and describe the single main garment.
Respond with ONLY a JSON object of this exact shape:
{"name": string, "category": string, "color": string, "brand": string}
Use short values. "category" is a simple type such as tee, jeans, shoes, jacket, hat or bag.
Use an empty string for anything you cannot tell."""


def closet_payload(items: Sequence[ClosetItem]) -> list[dict]:
    """Item list embedded in the prompt, in input order."""
    return [
        {
            "id": item.id,
            "name": item.name,
            "category": item.category,
            "color": item.color or "",
            "brand": item.brand or "",
            "photo": item.image_url or "",
        }
        for item in items
    ]


def build_outfit_prompt(
    items: Sequence[ClosetItem],
    occasion: str,
    weather: Optional[str] = None,
    style: Optional[str] = None,
    top_k: int = 3,
    dare: bool = False,
) -> str:
    """User message for an outfit request. Same inputs give the same text."""
    lines = [
        f"Suggest {top_k} complete outfit{'s' if top_k != 1 else ''}.",
        f"Occasion: {occasion}",
        f"Weather: {weather or 'unspecified'}",
        f"Style: {style or 'unspecified'}",
    ]
    if dare:
        lines.append(DARE_NOTE)
    lines.append("")
    lines.append("Closet items (JSON):")
    lines.append(json.dumps(closet_payload(items), indent=2, ensure_ascii=False))
    return "\n".join(lines)
