"""
Provider profiles, generation defaults, timeouts and system prompts.

This is the AUTHORITATIVE source for all routing and parameter constants.
src/model_orchestrator/config.py imports from here — do not maintain
parallel copies.

Design rationale:
- cost_per_request is an estimate used only to rank otherwise-equal
  candidates; it is never billed or enforced.
- expected_latency_ms is informational, but also seeds the per-call
  timeout (latency × TIMEOUT_SAFETY_FACTOR, floored).
- Strengths are task category names, matching TaskCategory values.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Provider profiles (keys must match config/api_config.py API_CONFIG)
# ---------------------------------------------------------------------------

PROVIDER_PROFILES: dict[str, dict] = {
    "openai": {
        "strengths": ["factual_questions", "explanation_generation"],
        "cost_per_request": 0.03,
        "expected_latency_ms": 2000,
        "default_temperature": 0.7,
    },
    "claude": {
        "strengths": [
            "creative_questions",
            "content_analysis",
            "explanation_generation",
        ],
        "cost_per_request": 0.015,
        "expected_latency_ms": 1500,
        "default_temperature": 0.7,
    },
    "grok": {
        "strengths": ["current_affairs", "creative_questions"],
        "cost_per_request": 0.01,
        "expected_latency_ms": 1800,
        "default_temperature": 0.8,   # Grok runs slightly hotter by default
    },
}

# ---------------------------------------------------------------------------
# Generation defaults
# ---------------------------------------------------------------------------

# Applied when a TaskRequest leaves max_tokens unset.
DEFAULT_MAX_TOKENS: int = 2000

# Fallback when a provider profile does not declare its own temperature.
DEFAULT_TEMPERATURE: float = 0.7

DEFAULT_PRIORITY: str = "medium"

# ---------------------------------------------------------------------------
# Timeouts
# ---------------------------------------------------------------------------

# Per-call timeout = max(MIN_REQUEST_TIMEOUT_SECONDS,
#                        expected_latency_ms / 1000 * TIMEOUT_SAFETY_FACTOR)
TIMEOUT_SAFETY_FACTOR: float = 15.0
MIN_REQUEST_TIMEOUT_SECONDS: float = 10.0

# ---------------------------------------------------------------------------
# Fallback rotation
# ---------------------------------------------------------------------------

# Width of one rotation window; retries inside one window land on the
# same fallback candidate.
ROTATION_WINDOW_MS: int = 10_000

# ---------------------------------------------------------------------------
# Health probe
# ---------------------------------------------------------------------------

HEALTH_PROBE_PROMPT: str = 'Test connection. Respond with "OK".'
HEALTH_PROBE_ACK: str = "OK"
HEALTH_PROBE_MAX_TOKENS: int = 10
HEALTH_PROBE_TASK: str = "factual_questions"

# ---------------------------------------------------------------------------
# Token estimation
# ---------------------------------------------------------------------------

# Rough heuristic only; not a tokenizer.
CHARS_PER_TOKEN: int = 4

# ---------------------------------------------------------------------------
# System instructions per task category
# ---------------------------------------------------------------------------

SYSTEM_PROMPTS: dict[str, str] = {
    "creative_questions": (
        "You are a creative educational content creator specializing in "
        "engaging, memorable quiz questions for Indian competitive exams. "
        "Make questions interesting and thought-provoking."
    ),
    "factual_questions": (
        "You are a factual accuracy expert for Indian competitive exams. "
        "Generate precise, well-researched questions with verified information."
    ),
    "current_affairs": (
        "You are a current affairs specialist with real-time knowledge of "
        "recent events in India and globally. Focus on exam-relevant recent "
        "developments."
    ),
    "explanation_generation": (
        "You are an expert educator who creates clear, comprehensive "
        "explanations for complex topics. Make explanations accessible and "
        "exam-focused."
    ),
    "content_analysis": (
        "You are a content analysis expert who can break down educational "
        "material into structured, learnable components."
    ),
}

DEFAULT_SYSTEM_PROMPT: str = (
    "You are an AI assistant helping with educational content creation."
)
