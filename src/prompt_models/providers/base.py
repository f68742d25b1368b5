"""Abstract base class for provider metadata adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from prompt_models.models.provider import (
    ModelCapabilities,
    ParameterDefinition,
    TextModel,
    TextProvider,
)


class BaseProvider(ABC):
    """Abstract base class for provider metadata adapters.

    Each provider describes itself, lists its known models and builds
    metadata for model IDs it has no static entry for.
    """

    # Provider identifier (e.g., "openai", "anthropic")
    provider_id: str

    @abstractmethod
    def get_provider(self) -> TextProvider:
        """Get provider metadata."""

    @abstractmethod
    def get_models(self) -> list[TextModel]:
        """Get the static list of known models."""

    @abstractmethod
    def get_parameter_definitions(self, model_id: str) -> list[ParameterDefinition]:
        """Get tunable parameter definitions for a model."""

    def get_default_parameter_values(self, model_id: str) -> dict[str, Any]:
        """Get default parameter values for a model.

        Defaults to every definition that declares a default.
        """
        return {
            definition.name: definition.default
            for definition in self.get_parameter_definitions(model_id)
            if definition.default is not None
        }

    def get_model(self, model_id: str) -> TextModel | None:
        """Find a static model by ID."""
        for model in self.get_models():
            if model.id == model_id:
                return model
        return None

    def build_default_model(self, model_id: str) -> TextModel:
        """Build metadata for a model ID with generic capabilities.

        Args:
            model_id: Model identifier, possibly unknown to the static list.

        Returns:
            A TextModel using this provider's parameter definitions.
        """
        return TextModel(
            id=model_id,
            name=model_id,
            description=f"{self.get_provider().name} model {model_id}",
            provider_id=self.provider_id,
            capabilities=ModelCapabilities(supports_tools=False),
            parameter_definitions=self.get_parameter_definitions(model_id),
            default_parameter_values=self.get_default_parameter_values(model_id),
        )


class ProviderError(Exception):
    """Error from a provider lookup or conversion."""

    def __init__(self, provider_id: str, message: str) -> None:
        self.provider_id = provider_id
        super().__init__(f"{provider_id}: {message}")
