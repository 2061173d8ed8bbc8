"""
Provider endpoint and authentication configuration.

This is the AUTHORITATIVE source for provider wire configuration.
src/model_orchestrator/config.py imports from here — do not maintain
parallel copies.

ENVIRONMENT VARIABLES (presence decides provider availability):
    OPENAI_API_KEY   — OpenAI GPT-4o
    CLAUDE_API_KEY   — Claude 3.5 Sonnet (Anthropic)
    GROK_API_KEY     — Grok Beta (xAI)
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# API configuration — one entry per provider, in declaration order
# ---------------------------------------------------------------------------
#
# Fields:
#   display_name  — Human-readable name shown in stats and reports
#   endpoint      — Full URL for the generation API
#   model_id      — Provider-specific model identifier string
#   auth_type     — Authentication mechanism:
#                     'bearer'     → Authorization: Bearer <key> header
#                     'x-api-key'  → x-api-key header (Anthropic)
#   api_key_env   — Name of the environment variable holding the API key
#
# Declaration order matters: it breaks cost ties in selection and defines
# the rotation order for fallback.

API_CONFIG: dict[str, dict[str, str]] = {
    "openai": {
        "display_name": "OpenAI GPT-4",
        "endpoint": "https://api.openai.com/v1/chat/completions",
        "model_id": "gpt-4o",
        "auth_type": "bearer",
        "api_key_env": "OPENAI_API_KEY",
    },
    "claude": {
        "display_name": "Claude 3.5 Sonnet",
        "endpoint": "https://api.anthropic.com/v1/messages",
        "model_id": "claude-3-5-sonnet-20241022",
        "auth_type": "x-api-key",
        "api_key_env": "CLAUDE_API_KEY",
    },
    "grok": {
        "display_name": "Grok Beta",
        "endpoint": "https://api.x.ai/v1/chat/completions",
        "model_id": "grok-beta",
        "auth_type": "bearer",
        "api_key_env": "GROK_API_KEY",
    },
}

# ---------------------------------------------------------------------------
# Anthropic-specific header
# ---------------------------------------------------------------------------

ANTHROPIC_API_VERSION: str = "2023-06-01"
