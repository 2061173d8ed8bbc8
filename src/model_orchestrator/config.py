"""
Registry construction, credential loading, and derived settings.

Static values live in the top-level ``config`` package.  This module turns
them into the immutable objects the orchestrator is constructed with:

- :func:`load_credentials` is the only place the process environment is
  read; the orchestrator never touches ``os.environ`` itself.
- :func:`build_registry` derives each provider's availability from the
  credentials supplied at startup.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from config.api_config import API_CONFIG
from config.model_params import (
    DEFAULT_SYSTEM_PROMPT,
    DEFAULT_TEMPERATURE,
    MIN_REQUEST_TIMEOUT_SECONDS,
    PROVIDER_PROFILES,
    SYSTEM_PROMPTS,
    TIMEOUT_SAFETY_FACTOR,
)

from .models import ProviderConfig, ProviderId, ProviderRegistry, TaskCategory

# Declaration order used for tie-breaking and rotation
PROVIDER_ORDER: list[ProviderId] = [ProviderId(name) for name in API_CONFIG]


def load_credentials(environ: Mapping[str, str] | None = None) -> dict[ProviderId, str]:
    """
    Read provider API keys once from the environment.

    Empty or whitespace-only values count as absent.  No validation beyond
    presence is performed.

    Args:
        environ: Mapping to read from; defaults to ``os.environ``.

    Returns:
        Dict of provider id → API key, only for providers with a key set.
    """
    if environ is None:
        environ = os.environ

    credentials: dict[ProviderId, str] = {}
    for provider_id in PROVIDER_ORDER:
        key = environ.get(API_CONFIG[provider_id.value]["api_key_env"], "")
        if key and key.strip():
            credentials[provider_id] = key.strip()
    return credentials


def build_provider_config(provider_id: ProviderId, is_available: bool) -> ProviderConfig:
    """Combine the wire settings and routing profile for one provider."""
    api = API_CONFIG[provider_id.value]
    profile = PROVIDER_PROFILES[provider_id.value]
    return ProviderConfig(
        provider_id=provider_id,
        display_name=api["display_name"],
        capabilities=frozenset(TaskCategory(s) for s in profile["strengths"]),
        is_available=is_available,
        cost_per_request=float(profile["cost_per_request"]),
        expected_latency_ms=int(profile["expected_latency_ms"]),
        endpoint=api["endpoint"],
        model_id=api["model_id"],
        auth_type=api["auth_type"],
        default_temperature=float(
            profile.get("default_temperature", DEFAULT_TEMPERATURE)
        ),
    )


def build_registry(credentials: Mapping[ProviderId, str]) -> ProviderRegistry:
    """
    Build the provider registry in declaration order.

    A provider is available only when ``credentials`` holds a key for it.

    Args:
        credentials: Output of :func:`load_credentials` (or an equivalent
            mapping from a secrets loader).

    Returns:
        Immutable :class:`ProviderRegistry`.
    """
    return ProviderRegistry(tuple(
        build_provider_config(provider_id, bool(credentials.get(provider_id)))
        for provider_id in PROVIDER_ORDER
    ))


# ---------------------------------------------------------------------------
# Derived settings
# ---------------------------------------------------------------------------

def request_timeout_seconds(config: ProviderConfig) -> float:
    """
    Per-call timeout derived from the provider's expected latency.

    ``max(MIN_REQUEST_TIMEOUT_SECONDS,
    expected_latency_ms / 1000 * TIMEOUT_SAFETY_FACTOR)``
    """
    scaled = config.expected_latency_ms / 1000 * TIMEOUT_SAFETY_FACTOR
    return max(MIN_REQUEST_TIMEOUT_SECONDS, scaled)


def system_prompt_for(task_category: TaskCategory) -> str:
    """System instruction for a task category, with a generic fallback."""
    return SYSTEM_PROMPTS.get(TaskCategory(task_category).value, DEFAULT_SYSTEM_PROMPT)