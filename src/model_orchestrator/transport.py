"""
Per-provider HTTP transport adapters.

Every adapter exposes the same coroutine, ``generate(request) -> str``, and
raises :class:`ProviderTransportError` for any failure (bad status, network
error, timeout, malformed body).  Only request/response shaping differs
between providers:

- OpenAI, Grok (OpenAI-compatible): system + user messages,
  text at ``choices[0].message.content``
- Claude (Anthropic Messages API): top-level ``system``,
  text at ``content[0].text``

Requests passed to ``generate`` are expected to have generation defaults
applied already; see :func:`resolve_request`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

import httpx

from config.api_config import ANTHROPIC_API_VERSION
from config.model_params import DEFAULT_MAX_TOKENS

from .config import request_timeout_seconds, system_prompt_for
from .errors import (
    ErrorCategory,
    ProviderTransportError,
    categorize_status,
    categorize_transport_failure,
)
from .models import ProviderConfig, ProviderId, ProviderRegistry, TaskRequest
from .parser import extract_chat_completion_text, extract_messages_text


class ProviderTransport(Protocol):
    """Capability shared by all providers: prompt in, text out (or raise)."""

    async def generate(self, request: TaskRequest) -> str:
        """Generate text for ``request`` or raise ProviderTransportError."""


def resolve_request(request: TaskRequest, config: ProviderConfig) -> TaskRequest:
    """Apply the fixed max_tokens default and the provider's default temperature."""
    return request.with_defaults(DEFAULT_MAX_TOKENS, config.default_temperature)


def build_request_headers(config: ProviderConfig, api_key: str) -> dict[str, str]:
    """
    Construct HTTP authentication headers for a provider call.

    Raises:
        ValueError: If ``auth_type`` is not recognized.
    """
    if config.auth_type == "bearer":
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    if config.auth_type == "x-api-key":
        return {
            "x-api-key": api_key,
            "Content-Type": "application/json",
            "anthropic-version": ANTHROPIC_API_VERSION,
        }

    raise ValueError(
        f"Unknown auth_type '{config.auth_type}' in config for "
        f"'{config.provider_id.value}'."
    )


class HttpProviderTransport:
    """
    Shared POST/status/decode handling; subclasses shape the wire format.

    If ``client`` is given it is reused across calls (the caller owns its
    lifecycle); otherwise a short-lived ``httpx.AsyncClient`` is opened per
    call.
    """

    api_label = "Provider"

    def __init__(
        self,
        config: ProviderConfig,
        api_key: str,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self.config = config
        self._api_key = api_key
        self._client = client
        self.timeout = timeout if timeout is not None else request_timeout_seconds(config)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(provider={self.config.provider_id.value!r})"

    def build_payload(self, request: TaskRequest) -> dict:
        raise NotImplementedError

    def extract_text(self, response_json: dict) -> str:
        raise NotImplementedError

    async def _post(self, payload: dict) -> httpx.Response:
        headers = build_request_headers(self.config, self._api_key)
        if self._client is not None:
            return await self._client.post(
                self.config.endpoint,
                headers=headers,
                json=payload,
                timeout=self.timeout,
            )
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.config.endpoint, headers=headers, json=payload)

    async def generate(self, request: TaskRequest) -> str:
        provider = self.config.provider_id.value
        payload = self.build_payload(request)

        try:
            response = await self._post(payload)
        except httpx.HTTPError as exc:
            detail = str(exc) or type(exc).__name__
            raise ProviderTransportError(
                provider,
                f"{self.api_label} API request failed: {detail}",
                category=categorize_transport_failure(exc),
            ) from exc

        if not response.is_success:
            raise ProviderTransportError(
                provider,
                f"{self.api_label} API error: {response.status_code}",
                status_code=response.status_code,
                category=categorize_status(response.status_code),
            )

        try:
            return self.extract_text(response.json())
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as exc:
            raise ProviderTransportError(
                provider,
                f"{self.api_label} API returned a malformed response: {exc}",
                status_code=response.status_code,
                category=ErrorCategory.INVALID_RESPONSE,
            ) from exc


class OpenAITransport(HttpProviderTransport):
    """OpenAI chat completions."""

    api_label = "OpenAI"

    def build_payload(self, request: TaskRequest) -> dict:
        return {
            "model": self.config.model_id,
            "messages": [
                {"role": "system", "content": system_prompt_for(request.task_category)},
                {"role": "user", "content": request.prompt},
            ],
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
        }

    def extract_text(self, response_json: dict) -> str:
        return extract_chat_completion_text(response_json)


class GrokTransport(OpenAITransport):
    """xAI Grok; OpenAI-compatible wire format on its own endpoint."""

    api_label = "Grok"


class ClaudeTransport(HttpProviderTransport):
    """Anthropic Messages API."""

    api_label = "Claude"

    def build_payload(self, request: TaskRequest) -> dict:
        # Anthropic takes the system instruction at the top level, not as a message
        return {
            "model": self.config.model_id,
            "system": system_prompt_for(request.task_category),
            "messages": [{"role": "user", "content": request.prompt}],
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
        }

    def extract_text(self, response_json: dict) -> str:
        return extract_messages_text(response_json)


TRANSPORT_CLASSES: dict[ProviderId, type[HttpProviderTransport]] = {
    ProviderId.OPENAI: OpenAITransport,
    ProviderId.CLAUDE: ClaudeTransport,
    ProviderId.GROK: GrokTransport,
}


def build_transports(
    registry: ProviderRegistry,
    credentials: Mapping[ProviderId, str],
    client: httpx.AsyncClient | None = None,
) -> dict[ProviderId, ProviderTransport]:
    """
    Instantiate one adapter per available provider.

    Unavailable providers get no transport, so they cannot be invoked even
    by mistake.

    Args:
        registry: Provider registry (availability already derived).
        credentials: Provider id → API key.
        client: Optional shared ``httpx.AsyncClient``.

    Returns:
        Dict of provider id → transport adapter.
    """
    return {
        config.provider_id: TRANSPORT_CLASSES[config.provider_id](
            config, credentials[config.provider_id], client=client
        )
        for config in registry.available()
    }
