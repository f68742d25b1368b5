"""Provider metadata adapters and their registry."""

from prompt_models.providers.base import BaseProvider, ProviderError
from prompt_models.providers.registry import ProviderRegistry, provider_registry

# Import providers to trigger registration
from prompt_models.providers.anthropic import AnthropicProvider
from prompt_models.providers.deepseek import DeepSeekProvider
from prompt_models.providers.google import GeminiProvider
from prompt_models.providers.openai import OpenAICompatibleProvider, OpenAIProvider
from prompt_models.providers.siliconflow import SiliconFlowProvider

# Register all providers
provider_registry.register(OpenAIProvider)
provider_registry.register(AnthropicProvider)
provider_registry.register(GeminiProvider)
provider_registry.register(DeepSeekProvider)
provider_registry.register(SiliconFlowProvider)

__all__ = [
    "BaseProvider",
    "ProviderError",
    "ProviderRegistry",
    "provider_registry",
    "OpenAIProvider",
    "OpenAICompatibleProvider",
    "AnthropicProvider",
    "GeminiProvider",
    "DeepSeekProvider",
    "SiliconFlowProvider",
]
