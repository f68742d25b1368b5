"""OpenAI provider metadata.

Also serves OpenAI-compatible endpoints (DeepSeek, SiliconFlow, custom).
"""

from __future__ import annotations

from typing import Any

from prompt_models.models.provider import (
    ConnectionSchema,
    ModelCapabilities,
    ParameterDefinition,
    TextModel,
    TextProvider,
)
from prompt_models.providers.base import BaseProvider

OPENAI_PARAMETER_DEFINITIONS = [
    ParameterDefinition(
        name="temperature",
        type="number",
        description="Sampling temperature (0-2)",
        default=1,
        min=0,
        max=2,
    ),
    ParameterDefinition(
        name="top_p",
        type="number",
        description="Nucleus sampling parameter",
        default=1,
        min=0,
        max=1,
    ),
    ParameterDefinition(
        name="max_tokens",
        type="number",
        description="Maximum tokens to generate",
        min=1,
    ),
    ParameterDefinition(
        name="presence_penalty",
        type="number",
        description="Presence penalty (-2 to 2)",
        default=0,
        min=-2,
        max=2,
    ),
    ParameterDefinition(
        name="frequency_penalty",
        type="number",
        description="Frequency penalty (-2 to 2)",
        default=0,
        min=-2,
        max=2,
    ),
]


class OpenAIProvider(BaseProvider):
    """OpenAI provider with a static list of official models."""

    provider_id = "openai"

    # (id, name, description, tools, reasoning, context length)
    STATIC_MODELS = (
        ("gpt-4o", "GPT-4o", "Latest GPT-4o model with vision capabilities", True, False, 128000),
        (
            "gpt-4o-mini",
            "GPT-4o Mini",
            "Affordable and intelligent small model for fast, lightweight tasks",
            True,
            False,
            128000,
        ),
        ("o1", "o1", "Advanced reasoning model for complex tasks", False, True, 200000),
        (
            "o1-mini",
            "o1 Mini",
            "Faster and cheaper reasoning model for coding, math, and science",
            False,
            True,
            128000,
        ),
        ("gpt-4-turbo", "GPT-4 Turbo", "GPT-4 Turbo model with vision capabilities", True, False, 128000),
        ("gpt-3.5-turbo", "GPT-3.5 Turbo", "Fast and affordable model for simple tasks", True, False, 16385),
    )

    def get_provider(self) -> TextProvider:
        """Get OpenAI provider metadata."""
        return TextProvider(
            id="openai",
            name="OpenAI",
            description="OpenAI GPT models and OpenAI-compatible APIs",
            requires_api_key=True,
            default_base_url="https://api.openai.com/v1",
            supports_dynamic_models=True,
            connection_schema=ConnectionSchema(
                required=["apiKey"],
                optional=["baseURL", "organization", "timeout"],
                field_types={
                    "apiKey": "string",
                    "baseURL": "string",
                    "organization": "string",
                    "timeout": "number",
                },
            ),
        )

    def get_models(self) -> list[TextModel]:
        """Get the static list of official OpenAI models."""
        return [
            TextModel(
                id=model_id,
                name=name,
                description=description,
                provider_id=self.provider_id,
                capabilities=ModelCapabilities(
                    supports_tools=tools,
                    supports_reasoning=reasoning,
                    max_context_length=context_length,
                ),
                parameter_definitions=self.get_parameter_definitions(model_id),
                default_parameter_values=self.get_default_parameter_values(model_id),
            )
            for model_id, name, description, tools, reasoning, context_length in self.STATIC_MODELS
        ]

    def get_parameter_definitions(self, model_id: str) -> list[ParameterDefinition]:
        """OpenAI models share one parameter set."""
        return list(OPENAI_PARAMETER_DEFINITIONS)

    def get_default_parameter_values(self, model_id: str) -> dict[str, Any]:
        """Get default parameter values."""
        return {
            "temperature": 1,
            "top_p": 1,
            "presence_penalty": 0,
            "frequency_penalty": 0,
        }


class OpenAICompatibleProvider(OpenAIProvider):
    """Base for vendors exposing an OpenAI-compatible API.

    Subclasses declare provider metadata and a table of model overrides
    applied on top of ``build_default_model``.
    """

    display_name: str
    description: str
    default_base_url: str

    # (id, name, description, capability overrides)
    MODEL_OVERRIDES: tuple[tuple[str, str, str, dict[str, Any]], ...] = ()

    def get_provider(self) -> TextProvider:
        """Get provider metadata."""
        return TextProvider(
            id=self.provider_id,
            name=self.display_name,
            description=self.description,
            requires_api_key=True,
            default_base_url=self.default_base_url,
            supports_dynamic_models=True,
            connection_schema=ConnectionSchema(
                required=["apiKey"],
                optional=["baseURL", "timeout"],
                field_types={
                    "apiKey": "string",
                    "baseURL": "string",
                    "timeout": "number",
                },
            ),
        )

    def get_models(self) -> list[TextModel]:
        """Get the static models with their overrides applied."""
        models = []
        for model_id, name, description, capability_overrides in self.MODEL_OVERRIDES:
            base_model = self.build_default_model(model_id)
            capabilities = base_model.capabilities.model_copy(update=capability_overrides)
            models.append(
                base_model.model_copy(
                    update={
                        "name": name,
                        "description": description,
                        "capabilities": capabilities,
                    }
                )
            )
        return models
