"""
Provider selection and fallback rotation.

Both functions are pure: they read the immutable registry and, for rotation,
a caller-supplied timestamp.  Neither ever returns an unavailable provider.
"""

from __future__ import annotations

from enum import Enum

from config.model_params import ROTATION_WINDOW_MS

from .errors import NoProvidersAvailable
from .models import ProviderId, ProviderRegistry, TaskCategory


class FallbackStrategy(str, Enum):
    """
    How the executor picks the provider for its single retry.

    ``EXCLUDE_FAILED`` rotates over available providers other than the one
    that just failed.  ``TIME_BUCKET`` rotates over all available providers;
    when the bucket lands on the failed provider, no retry is made.
    """

    EXCLUDE_FAILED = "exclude_failed"
    TIME_BUCKET = "time_bucket"


def select_provider(registry: ProviderRegistry, task_category: TaskCategory) -> ProviderId:
    """
    Choose the best-fit provider for a task category.

    Among available providers listing the category as a strength, the lowest
    ``cost_per_request`` wins (ties → declaration order).  With no capability
    match, the first available provider in declaration order is used.

    Args:
        registry: Provider registry.
        task_category: Requested task category.

    Returns:
        Selected provider id.

    Raises:
        NoProvidersAvailable: No provider is available at all.
    """
    task_category = TaskCategory(task_category)
    available = registry.available()
    if not available:
        raise NoProvidersAvailable()

    suitable = [p for p in available if p.supports(task_category)]
    if suitable:
        # min() keeps the first of equal-cost candidates → declaration order
        return min(suitable, key=lambda p: p.cost_per_request).provider_id

    return available[0].provider_id


def rotate_provider(
    registry: ProviderRegistry,
    now_ms: int,
    exclude: ProviderId | None = None,
) -> ProviderId:
    """
    Pick a fallback provider by coarse time-bucketed rotation.

    index = ``floor(now_ms / ROTATION_WINDOW_MS) mod len(candidates)``, where
    candidates are the available providers in declaration order, minus
    ``exclude`` when given.  Two calls in the same window get the same answer.

    Args:
        registry: Provider registry.
        now_ms: Current wall-clock time in milliseconds.
        exclude: Provider to leave out of the rotation (the one that failed).

    Returns:
        Fallback provider id.

    Raises:
        NoProvidersAvailable: No candidate remains.
    """
    candidates = [
        p.provider_id for p in registry.available() if p.provider_id != exclude
    ]
    if not candidates:
        raise NoProvidersAvailable()

    index = (int(now_ms) // ROTATION_WINDOW_MS) % len(candidates)
    return candidates[index]
