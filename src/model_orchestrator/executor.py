"""
Request execution with provider selection and one-shot fallback.

Design notes:
- ``execute`` never raises; it always returns a :class:`TaskResult`.
  Any exception from a provider call is treated as a transport failure
  and is eligible for the fallback.
- Exactly one fallback attempt is made, and only against a provider that
  differs from the one that just failed.
- The orchestrator holds no per-request state; everything it reads after
  construction is immutable, so concurrent ``execute`` calls need no locking.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping

import httpx

from .batch import execute_batch
from .config import build_registry, load_credentials
from .errors import NoProvidersAvailable, OrchestratorError, as_transport_error
from .health import health_check
from .models import (
    ProviderConfig,
    ProviderId,
    ProviderRegistry,
    TaskCategory,
    TaskRequest,
    TaskResult,
    elapsed_ms_since,
)
from .parser import estimate_tokens
from .selector import FallbackStrategy, rotate_provider, select_provider
from .transport import ProviderTransport, build_transports, resolve_request

logger = logging.getLogger(__name__)


class ModelOrchestrator:
    """
    Routes generation requests across providers.

    Args:
        registry: Immutable provider registry.
        transports: Provider id → transport adapter.  Every available
            provider must have one; entries for unavailable providers are
            ignored so they can never be invoked.
        fallback_strategy: How the single retry picks its provider.
        clock: Wall-clock source in seconds, used only for fallback rotation.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        transports: Mapping[ProviderId, ProviderTransport],
        fallback_strategy: FallbackStrategy = FallbackStrategy.EXCLUDE_FAILED,
        clock: Callable[[], float] = time.time,
    ) -> None:
        missing = [
            p.provider_id.value for p in registry.available()
            if p.provider_id not in transports
        ]
        if missing:
            raise ValueError(f"Available providers without a transport: {missing}")

        self.registry = registry
        self.fallback_strategy = FallbackStrategy(fallback_strategy)
        self._transports: dict[ProviderId, ProviderTransport] = {
            p.provider_id: transports[p.provider_id] for p in registry.available()
        }
        self._clock = clock

    @classmethod
    def from_environment(
        cls,
        environ: Mapping[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
        fallback_strategy: FallbackStrategy = FallbackStrategy.EXCLUDE_FAILED,
    ) -> ModelOrchestrator:
        """
        Build an orchestrator from API keys in the environment.

        Credentials are read once here; availability is fixed afterwards.
        """
        credentials = load_credentials(environ)
        registry = build_registry(credentials)
        transports = build_transports(registry, credentials, client=client)
        available = [p.provider_id.value for p in registry.available()]
        logger.info("Model orchestrator configured; available providers: %s", available)
        return cls(registry, transports, fallback_strategy=fallback_strategy)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_provider(self, task_category: TaskCategory) -> ProviderId:
        return select_provider(self.registry, task_category)

    def rotate_provider(self, exclude: ProviderId | None = None) -> ProviderId:
        now_ms = int(self._clock() * 1000)
        return rotate_provider(self.registry, now_ms, exclude=exclude)

    def _pick_fallback(self, failed: ProviderId) -> ProviderId | None:
        exclude = failed if self.fallback_strategy is FallbackStrategy.EXCLUDE_FAILED else None
        try:
            fallback = self.rotate_provider(exclude=exclude)
        except NoProvidersAvailable:
            return None
        if fallback == failed:
            return None
        return fallback

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def call_provider(self, provider_id: ProviderId, request: TaskRequest) -> str:
        """
        Send ``request`` straight to one provider's transport, bypassing
        selection.  Generation defaults are applied here.

        Raises:
            NoProvidersAvailable: The provider is not available.
            ProviderTransportError: The provider call failed.
        """
        config = self.registry.get(provider_id)
        if not config.is_available:
            raise NoProvidersAvailable(f"Provider '{provider_id.value}' is not available")
        transport = self._transports[provider_id]
        return await transport.generate(resolve_request(request, config))

    async def execute(self, request: TaskRequest) -> TaskResult:
        """
        Run one request to completion, with at most one fallback attempt.

        Args:
            request: Task request.

        Returns:
            Success result attributed to the provider that produced the text,
            or a failure result carrying the last error and the last provider
            attempted.
        """
        start = time.monotonic()

        try:
            primary = self.select_provider(request.task_category)
        except NoProvidersAvailable as exc:
            logger.error("AI request failed for %s: %s", request.task_category.value, exc)
            return self._failure(None, exc, start, attempts=0)

        try:
            data = await self.call_provider(primary, request)
            return self._success(primary, request, data, start, attempts=1)
        except Exception as exc:
            primary_error = as_transport_error(primary.value, exc)

        logger.warning(
            "AI request to %s failed [%s]: %s",
            primary.value, primary_error.category, primary_error,
        )

        fallback = self._pick_fallback(primary)
        if fallback is None:
            logger.error("No fallback provider distinct from %s; request failed", primary.value)
            return self._failure(primary, primary_error, start, attempts=1)

        try:
            data = await self.call_provider(fallback, request)
        except Exception as exc:
            fallback_error = as_transport_error(fallback.value, exc)
            logger.error(
                "Fallback model %s also failed [%s]: %s",
                fallback.value, fallback_error.category, fallback_error,
            )
            return self._failure(fallback, fallback_error, start, attempts=2)

        logger.info("Fallback from %s to %s succeeded", primary.value, fallback.value)
        return self._success(fallback, request, data, start, attempts=2)

    async def execute_batch(
        self,
        requests: list[TaskRequest],
        max_concurrency: int | None = None,
    ) -> list[TaskResult]:
        """See :func:`batch.execute_batch`."""
        return await execute_batch(self, requests, max_concurrency=max_concurrency)

    async def health_check(self) -> dict[ProviderId, bool]:
        """See :func:`health.health_check`."""
        return await health_check(self)

    def get_model_stats(self) -> dict[ProviderId, ProviderConfig]:
        """Read-only snapshot of provider configuration, in declaration order."""
        return {config.provider_id: config for config in self.registry}

    # ------------------------------------------------------------------
    # Result construction
    # ------------------------------------------------------------------

    @staticmethod
    def _success(
        provider: ProviderId,
        request: TaskRequest,
        data: str,
        start: float,
        attempts: int,
    ) -> TaskResult:
        return TaskResult(
            success=True,
            provider=provider,
            elapsed_ms=elapsed_ms_since(start),
            data=data,
            tokens_used=estimate_tokens(request.prompt, data),
            attempts=attempts,
        )

    @staticmethod
    def _failure(
        provider: ProviderId | None,
        error: OrchestratorError,
        start: float,
        attempts: int,
    ) -> TaskResult:
        return TaskResult(
            success=False,
            provider=provider,
            elapsed_ms=elapsed_ms_since(start),
            error=str(error),
            error_category=error.category,
            attempts=attempts,
        )
