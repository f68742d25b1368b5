"""SiliconFlow provider metadata (OpenAI-compatible API)."""

from __future__ import annotations

from prompt_models.providers.openai import OpenAICompatibleProvider


class SiliconFlowProvider(OpenAICompatibleProvider):
    """Open-weight models hosted by SiliconFlow."""

    provider_id = "siliconflow"
    display_name = "SiliconFlow"
    description = "SiliconFlow OpenAI-compatible models"
    default_base_url = "https://api.siliconflow.cn/v1"

    MODEL_OVERRIDES = (
        (
            "Qwen/Qwen3-8B",
            "Qwen3-8B",
            "Qwen3-8B model via SiliconFlow",
            {"supports_tools": False, "max_context_length": 8192},
        ),
    )
