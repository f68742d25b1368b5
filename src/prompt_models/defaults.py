"""Built-in model configurations."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from prompt_models.models.provider import ConnectionConfig, TextModelConfig
from prompt_models.providers import provider_registry
from prompt_models.settings import settings as global_settings

if TYPE_CHECKING:
    from prompt_models.settings import Settings

# Built-in key -> (provider ID, default model ID, display name)
BUILTIN_MODELS = {
    "openai": ("openai", "gpt-4o-mini", "OpenAI"),
    "anthropic": ("anthropic", "claude-sonnet-4-20250514", "Anthropic"),
    "gemini": ("gemini", "gemini-2.5-flash", "Gemini"),
    "deepseek": ("deepseek", "deepseek-chat", "DeepSeek"),
    "siliconflow": ("siliconflow", "Qwen/Qwen3-8B", "SiliconFlow"),
}


def _custom_model(settings: Settings) -> TextModelConfig:
    """Custom OpenAI-compatible endpoint configured through settings."""
    adapter = provider_registry.get_adapter("openai")
    provider_meta = adapter.get_provider().model_copy(
        update={
            "id": "custom",
            "name": "Custom API",
            "description": "Custom OpenAI-compatible endpoint",
            "default_base_url": settings.custom_api_base_url,
            "supports_dynamic_models": False,
        }
    )
    model_meta = adapter.build_default_model(settings.custom_api_model).model_copy(
        update={"provider_id": "custom"}
    )
    api_key = settings.get_api_key("custom")

    return TextModelConfig(
        id="custom",
        name="Custom",
        enabled=bool(api_key),
        provider_meta=provider_meta,
        model_meta=model_meta,
        connection_config=ConnectionConfig(
            api_key=api_key or "",
            base_url=settings.custom_api_base_url,
        ),
        param_overrides={},
    )


def build_default_models(settings: Settings) -> dict[str, TextModelConfig]:
    """Build the built-in configurations.

    A built-in model is enabled when its API key is configured.

    Args:
        settings: Settings supplying API keys and the custom endpoint.

    Returns:
        Mapping of built-in key to configuration.
    """
    defaults: dict[str, TextModelConfig] = {}

    for key, (provider_id, model_id, name) in BUILTIN_MODELS.items():
        adapter = provider_registry.get_adapter(provider_id)
        provider_meta = adapter.get_provider()
        model_meta = adapter.get_model(model_id) or adapter.build_default_model(model_id)
        api_key = settings.get_api_key(key)

        defaults[key] = TextModelConfig(
            id=key,
            name=name,
            enabled=bool(api_key),
            provider_meta=provider_meta,
            model_meta=model_meta,
            connection_config=ConnectionConfig(
                api_key=api_key or "",
                base_url=provider_meta.default_base_url,
            ),
            param_overrides={},
        )

    defaults["custom"] = _custom_model(settings)
    return defaults


# Computed once from the process settings; never mutated
DEFAULT_MODELS: Mapping[str, TextModelConfig] = MappingProxyType(
    build_default_models(global_settings)
)
