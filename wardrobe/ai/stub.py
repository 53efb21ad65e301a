"""Deterministic outfits for running without the completion backend.

Only used when AI_STUB_OUTFITS is set. AI failures never route here.
"""

from typing import Optional, Sequence

from wardrobe.models import ClosetItem, SuggestedOutfit


def synthesize_outfits(
    items: Sequence[ClosetItem],
    occasion: str,
    weather: Optional[str] = None,
    style: Optional[str] = None,
    top_k: int = 1,
) -> list[SuggestedOutfit]:
    """Build up to ``top_k`` outfits taking one item per category.

    Outfit ``n`` uses the ``n``-th item of each category, wrapping around,
    so categories with several items rotate across outfits.
    """
    by_category: dict[str, list[ClosetItem]] = {}
    for item in items:
        key = (item.category or "other").strip().lower()
        by_category.setdefault(key, []).append(item)

    if not by_category:
        return []

    deepest = max(len(group) for group in by_category.values())
    outfits = []
    for n in range(min(top_k, deepest)):
        chosen = [group[n % len(group)] for group in by_category.values()]
        palette: list[str] = []
        for item in chosen:
            if item.color and item.color not in palette:
                palette.append(item.color)
        details = ", ".join(part for part in (weather, style) if part)
        outfits.append(
            SuggestedOutfit(
                name=f"{occasion} look {n + 1}",
                items=[item.id for item in chosen],
                reasoning=(
                    f"One item per category for {occasion}"
                    + (f" ({details})" if details else "")
                    + "."
                ),
                palette=palette,
                preview=next((i.image_url for i in chosen if i.image_url), None),
            )
        )
    return outfits
