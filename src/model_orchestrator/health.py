"""Provider reachability probes."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from config.model_params import (
    HEALTH_PROBE_ACK,
    HEALTH_PROBE_MAX_TOKENS,
    HEALTH_PROBE_PROMPT,
    HEALTH_PROBE_TASK,
)

from .models import ProviderId, TaskCategory, TaskRequest

if TYPE_CHECKING:
    from .executor import ModelOrchestrator

logger = logging.getLogger(__name__)


def build_probe_request() -> TaskRequest:
    return TaskRequest(
        task_category=TaskCategory(HEALTH_PROBE_TASK),
        prompt=HEALTH_PROBE_PROMPT,
        max_tokens=HEALTH_PROBE_MAX_TOKENS,
    )


async def probe_provider(
    orchestrator: ModelOrchestrator,
    provider_id: ProviderId,
    probe: TaskRequest,
) -> bool:
    """
    Send the fixed probe to one provider.

    Healthy only if the call succeeds and the reply contains the
    acknowledgment token.  Any exception counts as unhealthy and is logged,
    never raised.
    """
    try:
        text = await orchestrator.call_provider(provider_id, probe)
    except Exception as exc:
        logger.warning("Health check failed for %s: %s", provider_id.value, exc)
        return False

    healthy = isinstance(text, str) and HEALTH_PROBE_ACK in text
    if not healthy:
        logger.warning(
            "Health check for %s returned no acknowledgment: %r",
            provider_id.value, text,
        )
    return healthy


async def health_check(orchestrator: ModelOrchestrator) -> dict[ProviderId, bool]:
    """
    Probe every available provider concurrently.

    Every configured provider appears in the result.  Unavailable providers
    map to ``False`` without any call being made.

    Returns:
        Provider id → healthy flag, in declaration order.
    """
    health = {provider_id: False for provider_id in orchestrator.registry.provider_ids()}
    targets = [config.provider_id for config in orchestrator.registry.available()]
    probe = build_probe_request()

    outcomes = await asyncio.gather(
        *(probe_provider(orchestrator, provider_id, probe) for provider_id in targets)
    )
    health.update(zip(targets, outcomes))

    logger.info(
        "Health check: %s",
        ", ".join(f"{p.value}={'up' if ok else 'down'}" for p, ok in health.items()),
    )
    return health
