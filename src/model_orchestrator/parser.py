"""
Response envelope parsing and token estimation.

No I/O occurs here; all functions are pure transformations of dicts and
strings to support easy unit testing.
"""

from __future__ import annotations

import math

from config.model_params import CHARS_PER_TOKEN


def extract_chat_completion_text(response_json: dict) -> str:
    """
    Extract generated text from an OpenAI-compatible chat completion.

    Used for OpenAI and Grok: ``choices[0].message.content``.

    Raises:
        ValueError: ``choices`` is missing or empty, or content is not text.
        KeyError: The message object lacks ``content``.
    """
    choices = response_json.get("choices")
    if not choices:
        raise ValueError(
            "Chat completion response has no choices. "
            f"Top-level keys present: {list(response_json.keys())}"
        )
    content = choices[0]["message"]["content"]
    if not isinstance(content, str):
        raise ValueError(f"Expected text content, got {type(content).__name__}")
    return content


def extract_messages_text(response_json: dict) -> str:
    """
    Extract generated text from an Anthropic Messages API response.

    Takes the first ``text`` block in ``content``; tool-use or other block
    types are skipped.

    Raises:
        ValueError: No text block is present.
    """
    blocks = response_json.get("content") or []
    for block in blocks:
        if block.get("type", "text") == "text" and isinstance(block.get("text"), str):
            return block["text"]
    raise ValueError(
        "Messages response has no text content block. "
        f"Top-level keys present: {list(response_json.keys())}"
    )


def estimate_tokens(prompt: str, response: str | None) -> int:
    """
    Roughly estimate tokens consumed by a request.

    Uses ~4 characters per token for prompt and response separately, each
    rounded up.  This is an estimate only; providers bill from their own
    tokenizer counts.

    Args:
        prompt: Prompt text sent to the provider.
        response: Generated text, or ``None``.

    Returns:
        Estimated prompt tokens + response tokens.
    """
    prompt_tokens = math.ceil(len(prompt) / CHARS_PER_TOKEN)
    response_tokens = math.ceil(len(response or "") / CHARS_PER_TOKEN)
    return prompt_tokens + response_tokens
