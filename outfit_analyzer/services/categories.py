"""Enumeration of the supported outfit style categories."""

from enum import Enum


class OutfitCategory(str, Enum):
    """Closed set of styles the classifier may return."""

    SPORT = "Sport"
    CASUAL = "Casual"
    PROFESSIONAL = "Professional"
    CHILL = "Chill"
