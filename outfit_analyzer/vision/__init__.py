"""Vision model integration."""

from .classifier import CLASSIFICATION_PROMPT, OpenAIVisionClassifier

__all__ = ["CLASSIFICATION_PROMPT", "OpenAIVisionClassifier"]
