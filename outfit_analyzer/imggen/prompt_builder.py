"""Prompt construction for the suggestion image step."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from outfit_analyzer.services.categories import OutfitCategory

CATEGORY_PHRASES: Mapping[OutfitCategory, str] = MappingProxyType(
    {
        OutfitCategory.SPORT: (
            "athletic performance wear such as a breathable training top, "
            "fitted joggers or leggings and cushioned running sneakers"
        ),
        OutfitCategory.CASUAL: (
            "comfortable everyday pieces such as a relaxed t-shirt, "
            "well-fitting jeans and clean white sneakers"
        ),
        OutfitCategory.PROFESSIONAL: (
            "polished business attire such as a tailored blazer, a crisp shirt, "
            "pressed trousers and leather shoes"
        ),
        OutfitCategory.CHILL: (
            "soft laid-back loungewear such as an oversized knit sweater, "
            "cozy sweatpants and slip-on shoes"
        ),
    },
)

SUGGESTION_TEMPLATE = (
    "Generate a single photorealistic fashion illustration of a complete {category} outfit "
    "featuring {phrase}. Show the full outfit from head to toe on a model standing against "
    "a clean, neutral studio background with soft natural lighting. "
    "Do not add text, logos or watermarks."
)


class SuggestionPromptBuilder:
    """Builds the text-to-image prompt for a classified category."""

    def __init__(self, phrases: Mapping[OutfitCategory, str] = CATEGORY_PHRASES) -> None:
        missing = [category.value for category in OutfitCategory if category not in phrases]
        if missing:
            raise ValueError(f"Missing prompt phrases for categories: {', '.join(missing)}")
        self._phrases = phrases

    def build(self, category: OutfitCategory) -> str:
        return SUGGESTION_TEMPLATE.format(
            category=category.value.lower(),
            phrase=self._phrases[category],
        )
