"""Registry for provider metadata adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING

from prompt_models.logging import get_logger
from prompt_models.providers.base import ProviderError

if TYPE_CHECKING:
    from prompt_models.models.provider import ParameterDefinition
    from prompt_models.providers.base import BaseProvider

logger = get_logger(__name__)

# Provider names found in legacy configurations that map onto a registered adapter
LEGACY_PROVIDER_ALIASES = {
    "custom": "openai",
    "zhipu": "openai",
    "google": "gemini",
}


class ProviderRegistry:
    """Registry for provider adapters.

    Resolves provider IDs (including legacy aliases) to adapter instances
    used for metadata lookup during legacy conversion and validation.
    """

    def __init__(self) -> None:
        """Initialize the registry."""
        self._provider_classes: dict[str, type[BaseProvider]] = {}

    def register(self, provider_class: type[BaseProvider]) -> type[BaseProvider]:
        """Register a provider class.

        Can be used as a decorator:
            @provider_registry.register
            class OpenAIProvider(BaseProvider):
                ...

        Args:
            provider_class: The provider class to register.

        Returns:
            The provider class (for decorator use).
        """
        provider_id = provider_class.provider_id
        self._provider_classes[provider_id] = provider_class
        logger.debug("Registered provider", provider_id=provider_id)
        return provider_class

    def resolve_id(self, provider_id: str) -> str:
        """Map a possibly-legacy provider name to a registered provider ID."""
        normalized = (provider_id or "").strip().lower()
        if normalized in self._provider_classes:
            return normalized
        return LEGACY_PROVIDER_ALIASES.get(normalized, normalized)

    def get(self, provider_id: str) -> BaseProvider | None:
        """Get a provider instance by ID.

        Args:
            provider_id: Provider identifier or legacy alias.

        Returns:
            Provider instance or None if not registered.
        """
        provider_class = self._provider_classes.get(self.resolve_id(provider_id))
        if provider_class is None:
            return None
        return provider_class()

    def get_adapter(self, provider_id: str) -> BaseProvider:
        """Get a provider instance, failing if it is not registered.

        Raises:
            ProviderError: If no adapter is registered for the provider.
        """
        provider = self.get(provider_id)
        if provider is None:
            raise ProviderError(provider_id, "No adapter registered for provider")
        return provider

    def get_all(self) -> list[BaseProvider]:
        """Get all registered provider instances."""
        return [provider_class() for provider_class in self._provider_classes.values()]

    def get_provider_ids(self) -> list[str]:
        """Get all registered provider IDs."""
        return list(self._provider_classes.keys())

    def get_parameter_definitions(
        self,
        provider_id: str,
        model_id: str = "",
    ) -> list[ParameterDefinition]:
        """Get parameter definitions for a provider.

        Unknown providers fall back to the OpenAI-compatible definitions.
        """
        provider = self.get(provider_id) or self.get("openai")
        if provider is None:
            return []
        return provider.get_parameter_definitions(model_id)


# Global registry instance
provider_registry = ProviderRegistry()
