"""
src/model_orchestrator — multi-provider LLM routing with one-shot fallback.

Module layout
-------------
models.py     — ProviderId, TaskCategory, ProviderConfig, ProviderRegistry,
                TaskRequest, TaskResult
config.py     — credential loading, registry construction, derived timeouts
errors.py     — error taxonomy and failure categorization
parser.py     — provider response envelope parsing, token estimation
transport.py  — per-provider HTTP adapters (OpenAI, Claude, Grok)
selector.py   — cost/capability selection, fallback rotation
executor.py   — ModelOrchestrator: execute with one fallback attempt
batch.py      — concurrent batch execution with failure isolation
health.py     — per-provider reachability probes
reporting.py  — DataFrame summaries of results, stats and health

Public interface
----------------
Build from environment credentials:
    orchestrator = ModelOrchestrator.from_environment()

Run requests:
    await orchestrator.execute(TaskRequest(TaskCategory.FACTUAL_QUESTIONS, prompt))
    await orchestrator.execute_batch(requests)

Inspect providers:
    await orchestrator.health_check()
    orchestrator.get_model_stats()
"""

from .config import build_registry, load_credentials
from .errors import (
    ErrorCategory,
    NoProvidersAvailable,
    OrchestratorError,
    ProviderTransportError,
    UnexpectedExecutionError,
)
from .executor import ModelOrchestrator
from .models import (
    ProviderConfig,
    ProviderId,
    ProviderRegistry,
    TaskCategory,
    TaskRequest,
    TaskResult,
)
from .selector import FallbackStrategy, rotate_provider, select_provider
from .transport import build_transports

__all__ = [
    # Orchestrator
    "ModelOrchestrator",
    "FallbackStrategy",
    "select_provider",
    "rotate_provider",
    # Configuration
    "load_credentials",
    "build_registry",
    "build_transports",
    # Data model
    "ProviderId",
    "TaskCategory",
    "ProviderConfig",
    "ProviderRegistry",
    "TaskRequest",
    "TaskResult",
    # Errors
    "ErrorCategory",
    "OrchestratorError",
    "NoProvidersAvailable",
    "ProviderTransportError",
    "UnexpectedExecutionError",
]
