"""Google Gemini provider metadata."""

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


class GeminiProvider(BaseProvider):
    """Google Gemini provider."""

    provider_id = "gemini"

    # (id, name, description, reasoning)
    STATIC_MODELS = (
        ("gemini-2.5-flash", "Gemini 2.5 Flash", "Fast Gemini model with thinking support", True),
        ("gemini-2.5-pro", "Gemini 2.5 Pro", "Most capable Gemini model with thinking support", True),
        ("gemini-2.0-flash", "Gemini 2.0 Flash", "Previous generation fast Gemini model", False),
    )

    def get_provider(self) -> TextProvider:
        """Get Gemini provider metadata."""
        return TextProvider(
            id="gemini",
            name="Google Gemini",
            description="Google Gemini models",
            requires_api_key=True,
            default_base_url="https://generativelanguage.googleapis.com",
            supports_dynamic_models=True,
            connection_schema=ConnectionSchema(
                required=["apiKey"],
                optional=["baseURL"],
                field_types={"apiKey": "string", "baseURL": "string"},
            ),
        )

    def get_models(self) -> list[TextModel]:
        """Get the static list of Gemini models."""
        return [
            TextModel(
                id=model_id,
                name=name,
                description=description,
                provider_id=self.provider_id,
                capabilities=ModelCapabilities(
                    supports_tools=True,
                    supports_reasoning=reasoning,
                    max_context_length=1048576,
                ),
                parameter_definitions=self.get_parameter_definitions(model_id),
                default_parameter_values=self.get_default_parameter_values(model_id),
            )
            for model_id, name, description, reasoning in self.STATIC_MODELS
        ]

    def get_parameter_definitions(self, model_id: str) -> list[ParameterDefinition]:
        """Sampling parameters plus the Gemini 2.5+ thinking controls."""
        return [
            ParameterDefinition(
                name="temperature",
                type="number",
                description="Sampling temperature (0-2)",
                default=1,
                min=0,
                max=2,
            ),
            ParameterDefinition(
                name="topP",
                type="number",
                description="Nucleus sampling parameter",
                default=0.95,
                min=0,
                max=1,
            ),
            ParameterDefinition(
                name="topK",
                type="number",
                description="Top-k sampling parameter",
                min=1,
            ),
            ParameterDefinition(
                name="maxOutputTokens",
                type="number",
                description="Maximum tokens to generate",
                default=8192,
                min=1,
            ),
            ParameterDefinition(
                name="thinkingBudget",
                type="number",
                description="Thinking budget in tokens, 0 disables thinking (Gemini 2.5+)",
                min=0,
                max=8192,
            ),
            ParameterDefinition(
                name="includeThoughts",
                type="boolean",
                description="Return thought summaries in responses (Gemini 2.5+)",
            ),
        ]

    def get_default_parameter_values(self, model_id: str) -> dict[str, Any]:
        """Thinking parameters stay unset by default."""
        return {
            "temperature": 1,
            "topP": 0.95,
            "maxOutputTokens": 8192,
        }
