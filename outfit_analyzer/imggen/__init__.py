"""Prompt building and suggestion image generation."""

from .generator_client import ImageGeneratorClient
from .prompt_builder import CATEGORY_PHRASES, SuggestionPromptBuilder

__all__ = ["CATEGORY_PHRASES", "ImageGeneratorClient", "SuggestionPromptBuilder"]
