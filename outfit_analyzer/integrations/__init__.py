"""Integration check helpers."""

from .checks import (
    IntegrationCheckResult,
    check_image_model,
    check_vision_model,
    run_all_checks,
)

__all__ = [
    "IntegrationCheckResult",
    "check_image_model",
    "check_vision_model",
    "run_all_checks",
]
