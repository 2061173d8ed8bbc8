"""
Shared pytest fixtures for orchestrator tests.

Provider configs are built directly (not from the environment) so every test
controls availability, capabilities and cost explicitly.  Network access is
replaced by ``FakeTransport`` (in-memory, call-counting) or, in the
transport tests, ``httpx.MockTransport``.
"""

from __future__ import annotations

import inspect

import pytest

from src.model_orchestrator.executor import ModelOrchestrator
from src.model_orchestrator.models import (
    ProviderConfig,
    ProviderId,
    ProviderRegistry,
    TaskCategory,
    TaskRequest,
)
from src.model_orchestrator.selector import FallbackStrategy


class FakeTransport:
    """
    In-memory transport double.

    Each positional outcome is consumed by one call; the last one repeats.
    An outcome may be a string (returned), an exception instance (raised),
    or a callable taking the request and returning a string or awaitable.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes) or ["generated text"]
        self.calls: list[TaskRequest] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def generate(self, request: TaskRequest) -> str:
        self.calls.append(request)
        outcome = self.outcomes[min(len(self.calls), len(self.outcomes)) - 1]
        if isinstance(outcome, BaseException):
            raise outcome
        if callable(outcome):
            outcome = outcome(request)
            if inspect.isawaitable(outcome):
                outcome = await outcome
        return outcome


def make_config(
    provider_id: ProviderId,
    capabilities: list[TaskCategory] | tuple = (),
    available: bool = True,
    cost: float = 0.01,
    latency_ms: int = 1000,
    temperature: float = 0.7,
) -> ProviderConfig:
    """Build a ProviderConfig with test-friendly defaults."""
    return ProviderConfig(
        provider_id=provider_id,
        display_name=provider_id.value.title(),
        capabilities=frozenset(capabilities),
        is_available=available,
        cost_per_request=cost,
        expected_latency_ms=latency_ms,
        endpoint=f"https://{provider_id.value}.test/v1/generate",
        model_id=f"{provider_id.value}-test",
        auth_type="x-api-key" if provider_id is ProviderId.CLAUDE else "bearer",
        default_temperature=temperature,
    )


# ---------------------------------------------------------------------------
# Registries
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_transport():
    """The FakeTransport class, for tests that build their own doubles."""
    return FakeTransport


@pytest.fixture
def config_factory():
    """The make_config helper."""
    return make_config


@pytest.fixture
def scenario_registry():
    """
    A: openai  — available, factual only,             cost 0.03
    B: claude  — available, factual + creative,       cost 0.015
    C: grok    — unavailable
    """
    return ProviderRegistry((
        make_config(ProviderId.OPENAI, [TaskCategory.FACTUAL_QUESTIONS], cost=0.03),
        make_config(
            ProviderId.CLAUDE,
            [TaskCategory.FACTUAL_QUESTIONS, TaskCategory.CREATIVE_QUESTIONS],
            cost=0.015,
        ),
        make_config(
            ProviderId.GROK,
            [TaskCategory.CURRENT_AFFAIRS],
            available=False,
            cost=0.01,
            temperature=0.8,
        ),
    ))


@pytest.fixture
def all_available_registry():
    """All three providers available, strengths as in production config."""
    return ProviderRegistry((
        make_config(
            ProviderId.OPENAI,
            [TaskCategory.FACTUAL_QUESTIONS, TaskCategory.EXPLANATION_GENERATION],
            cost=0.03,
            latency_ms=2000,
        ),
        make_config(
            ProviderId.CLAUDE,
            [
                TaskCategory.CREATIVE_QUESTIONS,
                TaskCategory.CONTENT_ANALYSIS,
                TaskCategory.EXPLANATION_GENERATION,
            ],
            cost=0.015,
            latency_ms=1500,
        ),
        make_config(
            ProviderId.GROK,
            [TaskCategory.CURRENT_AFFAIRS, TaskCategory.CREATIVE_QUESTIONS],
            cost=0.01,
            latency_ms=1800,
            temperature=0.8,
        ),
    ))


# ---------------------------------------------------------------------------
# Orchestrator builder
# ---------------------------------------------------------------------------

@pytest.fixture
def make_orchestrator():
    """
    Build an orchestrator over FakeTransports.

    ``transports`` overrides the default FakeTransport for specific
    providers; every other provider in the registry (available or not) gets
    a FakeTransport replying ``"reply from <provider>"`` so tests can assert
    that unavailable ones are never called.

    Returns ``(orchestrator, transports)``.
    """
    def _build(
        registry: ProviderRegistry,
        transports: dict | None = None,
        now_ms: int = 0,
        strategy: FallbackStrategy = FallbackStrategy.EXCLUDE_FAILED,
    ):
        all_transports = {
            config.provider_id: FakeTransport(f"reply from {config.provider_id.value}")
            for config in registry
        }
        all_transports.update(transports or {})
        orchestrator = ModelOrchestrator(
            registry,
            all_transports,
            fallback_strategy=strategy,
            clock=lambda: now_ms / 1000,
        )
        return orchestrator, all_transports

    return _build
