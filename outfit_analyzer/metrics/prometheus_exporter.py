"""Prometheus exporter helpers."""

from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, Counter, generate_latest


outfit_analysis_total = Counter(
    "outfit_analysis_total",
    "Total number of outfit analysis requests by outcome.",
    ["outcome"],
)

outfit_category_total = Counter(
    "outfit_category_total",
    "Number of outfits classified into each category.",
    ["category"],
)

outfit_suggestion_total = Counter(
    "outfit_suggestion_total",
    "Outcome of the suggestion image step.",
    ["outcome"],
)


def render_latest() -> tuple[bytes, str]:
    """Return the exposition payload and its content type."""

    return generate_latest(), CONTENT_TYPE_LATEST
