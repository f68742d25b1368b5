"""DeepSeek provider metadata (OpenAI-compatible API)."""

from __future__ import annotations

from prompt_models.providers.openai import OpenAICompatibleProvider


class DeepSeekProvider(OpenAICompatibleProvider):
    """DeepSeek chat and reasoning models."""

    provider_id = "deepseek"
    display_name = "DeepSeek"
    description = "DeepSeek OpenAI-compatible models"
    default_base_url = "https://api.deepseek.com/v1"

    MODEL_OVERRIDES = (
        (
            "deepseek-chat",
            "DeepSeek Chat",
            "DeepSeek chat model via OpenAI-compatible API",
            {"supports_tools": True, "max_context_length": 64000},
        ),
        (
            "deepseek-reasoner",
            "DeepSeek Reasoner",
            "DeepSeek reasoning model with step-by-step thinking outputs",
            {"supports_reasoning": True, "max_context_length": 64000},
        ),
    )
