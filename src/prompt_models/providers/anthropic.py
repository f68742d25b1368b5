"""Anthropic provider metadata."""

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

DEFAULT_MAX_TOKENS = 8192


class AnthropicProvider(BaseProvider):
    """Anthropic provider (static model list only)."""

    provider_id = "anthropic"

    # (id, name, description)
    STATIC_MODELS = (
        ("claude-opus-4-20250514", "Claude 4.0 Opus", "Most powerful Claude model for complex tasks"),
        ("claude-sonnet-4-20250514", "Claude 4.0 Sonnet", "Balanced Claude model for most tasks"),
        ("claude-3-7-sonnet-latest", "Claude 3.7 Sonnet", "Latest Claude 3.7 Sonnet model"),
        ("claude-3-5-haiku-latest", "Claude 3.5 Haiku", "Fast and affordable Claude model"),
    )

    def get_provider(self) -> TextProvider:
        """Get Anthropic provider metadata."""
        return TextProvider(
            id="anthropic",
            name="Anthropic",
            description="Anthropic Claude models",
            requires_api_key=True,
            default_base_url="https://api.anthropic.com",
            supports_dynamic_models=False,
            connection_schema=ConnectionSchema(
                required=["apiKey"],
                optional=["baseURL"],
                field_types={"apiKey": "string", "baseURL": "string"},
            ),
        )

    def get_models(self) -> list[TextModel]:
        """Get the static list of Claude models."""
        return [
            TextModel(
                id=model_id,
                name=name,
                description=description,
                provider_id=self.provider_id,
                capabilities=ModelCapabilities(
                    supports_tools=True,
                    supports_reasoning=False,
                    max_context_length=200000,
                ),
                parameter_definitions=self.get_parameter_definitions(model_id),
                default_parameter_values=self.get_default_parameter_values(model_id),
            )
            for model_id, name, description in self.STATIC_MODELS
        ]

    def get_parameter_definitions(self, model_id: str) -> list[ParameterDefinition]:
        """Claude models share one parameter set."""
        return [
            ParameterDefinition(
                name="temperature",
                type="number",
                description="Sampling temperature (0-1)",
                default=1,
                min=0,
                max=1,
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
                name="top_k",
                type="number",
                description="Top-k sampling parameter",
                min=1,
            ),
            ParameterDefinition(
                name="max_tokens",
                type="number",
                description="Maximum tokens to generate",
                default=DEFAULT_MAX_TOKENS,
                min=1,
            ),
            ParameterDefinition(
                name="thinking_budget_tokens",
                type="number",
                description="Extended thinking budget in tokens (requires >= 1024)",
                min=1024,
            ),
        ]

    def get_default_parameter_values(self, model_id: str) -> dict[str, Any]:
        """Get default parameter values."""
        return {
            "temperature": 1,
            "top_p": 1,
            "max_tokens": DEFAULT_MAX_TOKENS,
        }
