"""Outfit analysis service: classify an outfit photo and suggest a look."""

__version__ = "0.1.0"
