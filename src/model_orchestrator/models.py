"""
Data model for the orchestrator: provider identities, task categories,
provider configuration, the registry, and the request/result envelopes.

Everything here is immutable except ``TaskResult``, which is built once per
request and handed back to the caller.
"""

from __future__ import annotations

import dataclasses
import time
from dataclasses import dataclass
from enum import Enum

from config.model_params import DEFAULT_PRIORITY


class ProviderId(str, Enum):
    """Fixed set of text-generation providers, in declaration order."""

    OPENAI = "openai"
    CLAUDE = "claude"
    GROK = "grok"


class TaskCategory(str, Enum):
    """Fixed classification of generation intent used to rank providers."""

    CREATIVE_QUESTIONS = "creative_questions"
    FACTUAL_QUESTIONS = "factual_questions"
    CURRENT_AFFAIRS = "current_affairs"
    EXPLANATION_GENERATION = "explanation_generation"
    CONTENT_ANALYSIS = "content_analysis"


PRIORITIES: frozenset[str] = frozenset({"low", "medium", "high"})


def elapsed_ms_since(start: float) -> int:
    """Whole milliseconds since ``start``, a ``time.monotonic()`` reading."""
    return int(round((time.monotonic() - start) * 1000))


@dataclass(frozen=True)
class ProviderConfig:
    """
    Static configuration for one provider.

    ``is_available`` is derived from credential presence when the registry is
    built and is never mutated afterwards; use
    :meth:`ProviderRegistry.with_availability` to obtain a modified copy.
    """

    provider_id: ProviderId
    display_name: str
    capabilities: frozenset[TaskCategory]
    is_available: bool
    cost_per_request: float
    expected_latency_ms: int
    endpoint: str = ""
    model_id: str = ""
    auth_type: str = "bearer"
    default_temperature: float = 0.7

    def __post_init__(self) -> None:
        if self.cost_per_request < 0:
            raise ValueError(
                f"cost_per_request must be non-negative for "
                f"'{self.provider_id.value}', got {self.cost_per_request}"
            )
        if self.expected_latency_ms < 0:
            raise ValueError(
                f"expected_latency_ms must be non-negative for "
                f"'{self.provider_id.value}', got {self.expected_latency_ms}"
            )

    def supports(self, task_category: TaskCategory) -> bool:
        return task_category in self.capabilities


@dataclass(frozen=True)
class ProviderRegistry:
    """Ordered, read-only collection of provider configs."""

    providers: tuple[ProviderConfig, ...]

    def __post_init__(self) -> None:
        ids = [p.provider_id for p in self.providers]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate provider ids in registry: {ids}")

    def __iter__(self):
        return iter(self.providers)

    def __len__(self) -> int:
        return len(self.providers)

    def get(self, provider_id: ProviderId) -> ProviderConfig:
        for config in self.providers:
            if config.provider_id == provider_id:
                return config
        raise KeyError(f"Provider '{provider_id}' is not configured")

    def provider_ids(self) -> list[ProviderId]:
        return [p.provider_id for p in self.providers]

    def available(self) -> list[ProviderConfig]:
        """Available providers in declaration order."""
        return [p for p in self.providers if p.is_available]

    def with_availability(
        self, provider_id: ProviderId, is_available: bool
    ) -> ProviderRegistry:
        """Return a new registry with one provider's availability replaced."""
        self.get(provider_id)  # raises KeyError for unknown providers
        return ProviderRegistry(tuple(
            dataclasses.replace(p, is_available=is_available)
            if p.provider_id == provider_id else p
            for p in self.providers
        ))


@dataclass(frozen=True)
class TaskRequest:
    """
    One unit of generation work submitted by a caller.

    ``max_tokens`` and ``temperature`` left as ``None`` are filled with
    defaults by the executor.  An explicit ``temperature=0.0`` is kept.
    ``priority`` is accepted for callers' bookkeeping and does not affect
    scheduling.
    """

    task_category: TaskCategory
    prompt: str
    max_tokens: int | None = None
    temperature: float | None = None
    priority: str = DEFAULT_PRIORITY

    def __post_init__(self) -> None:
        # Accept plain strings from callers ("factual_questions")
        if not isinstance(self.task_category, TaskCategory):
            object.__setattr__(self, "task_category", TaskCategory(self.task_category))
        if self.priority not in PRIORITIES:
            raise ValueError(
                f"Unknown priority '{self.priority}'; "
                f"expected one of {sorted(PRIORITIES)}"
            )
        if self.max_tokens is not None and self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")

    def with_defaults(self, max_tokens: int, temperature: float) -> TaskRequest:
        """Fill unset generation parameters; caller-supplied values win."""
        return dataclasses.replace(
            self,
            max_tokens=self.max_tokens if self.max_tokens is not None else max_tokens,
            temperature=(
                self.temperature if self.temperature is not None else temperature
            ),
        )


@dataclass
class TaskResult:
    """
    Uniform success/failure envelope returned for every request.

    ``tokens_used`` is an estimate (characters / 4), not tokenizer output.
    ``provider`` is ``None`` when no provider could be attempted.
    """

    success: bool
    provider: ProviderId | None
    elapsed_ms: int
    data: str | None = None
    tokens_used: int = 0
    error: str | None = None
    error_category: str | None = None
    attempts: int = 0

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "provider": self.provider.value if self.provider else None,
            "elapsed_ms": self.elapsed_ms,
            "data": self.data,
            "tokens_used": self.tokens_used,
            "error": self.error,
            "error_category": self.error_category,
            "attempts": self.attempts,
        }
