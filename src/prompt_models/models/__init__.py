"""Pydantic models for prompt-models."""

from prompt_models.models.provider import (
    ConfigShape,
    ConnectionConfig,
    ConnectionSchema,
    LegacyModelConfig,
    ModelCapabilities,
    ParameterDefinition,
    TextModel,
    TextModelConfig,
    TextModelConfigUpdate,
    TextProvider,
)
from prompt_models.models.results import ImportFailure, ImportResult

__all__ = [
    # Provider and model metadata
    "ConnectionSchema",
    "TextProvider",
    "ModelCapabilities",
    "ParameterDefinition",
    "TextModel",
    # Configurations
    "ConnectionConfig",
    "TextModelConfig",
    "TextModelConfigUpdate",
    "LegacyModelConfig",
    "ConfigShape",
    # Bulk operations
    "ImportFailure",
    "ImportResult",
]
