"""Pydantic models for provider, model and configuration metadata.

Serialised field names use the camelCase layout of the persisted store
(``providerMeta``, ``connectionConfig``, ``defaultBaseURL``...). Python code
may use either the alias or the snake_case field name on input.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ParameterType = Literal["number", "string", "boolean"]


class CamelModel(BaseModel):
    """Base model serialised with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        """Dump to the JSON layout used in storage and import/export files."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ConnectionSchema(CamelModel):
    """Connection fields a provider requires or accepts."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    required: list[str] = Field(default_factory=list)
    optional: list[str] = Field(default_factory=list)
    field_types: dict[str, ParameterType] = Field(default_factory=dict)


class TextProvider(CamelModel):
    """Vendor integration metadata (reference data, not user-editable)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = ""
    name: str = ""
    description: str | None = None
    requires_api_key: bool = True
    default_base_url: str = Field(default="", alias="defaultBaseURL")
    supports_dynamic_models: bool = False
    connection_schema: ConnectionSchema | None = None


class ParameterDefinition(CamelModel):
    """A single tunable inference parameter and its valid range."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    name: str
    type: ParameterType
    description: str = ""
    default: Any = None
    min: float | None = None
    max: float | None = None


class ModelCapabilities(CamelModel):
    """Capabilities of a model."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    supports_tools: bool = False
    supports_reasoning: bool | None = None
    max_context_length: int | None = None


class TextModel(CamelModel):
    """Metadata for one model variant."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = ""
    name: str = ""
    description: str | None = None
    provider_id: str = ""
    capabilities: ModelCapabilities = Field(default_factory=ModelCapabilities)
    parameter_definitions: list[ParameterDefinition] = Field(default_factory=list)
    default_parameter_values: dict[str, Any] | None = None


class ConnectionConfig(CamelModel):
    """Secrets and endpoint for a configuration. Extra keys are preserved."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    api_key: str | None = None
    base_url: str | None = Field(default=None, alias="baseURL")


class TextModelConfig(CamelModel):
    """User-facing persisted model configuration.

    Parsing is lenient so that incomplete entries can be represented;
    integrity is checked by ``validate_text_model_config``.
    """

    id: str = ""
    name: str = ""
    enabled: bool = False
    provider_meta: TextProvider | None = None
    model_meta: TextModel | None = None
    connection_config: ConnectionConfig | None = None
    param_overrides: dict[str, Any] | None = None
    # Deprecated: folded into param_overrides on read, never written.
    custom_param_overrides: dict[str, Any] | None = None


class TextModelConfigUpdate(CamelModel):
    """Partial update for a TextModelConfig. Only fields explicitly set apply."""

    id: str | None = None
    name: str | None = None
    enabled: bool | None = None
    provider_meta: TextProvider | None = None
    model_meta: TextModel | None = None
    connection_config: ConnectionConfig | None = None
    param_overrides: dict[str, Any] | None = None

    def to_partial_dict(self) -> dict[str, Any]:
        """Dump only the fields that were explicitly set.

        Nested metadata is dumped whole; connection config keeps only the
        keys that carry a value.
        """
        partial: dict[str, Any] = {}
        for field_name in self.model_fields_set:
            value = getattr(self, field_name)
            alias = type(self).model_fields[field_name].alias or field_name
            if isinstance(value, CamelModel):
                partial[alias] = value.to_json_dict()
            else:
                partial[alias] = value
        return partial


class LegacyModelConfig(CamelModel):
    """Flat configuration shape that predates provider/model metadata."""

    name: str = ""
    base_url: str = Field(default="", alias="baseURL")
    api_key: str | None = None
    models: list[str] | None = None
    default_model: str = ""
    enabled: bool = Field(default=False, strict=True)
    provider: str = "custom"
    llm_params: dict[str, Any] | None = None


class ConfigShape(str, Enum):
    """Classification of a raw stored configuration entry."""

    NEW = "new"
    LEGACY = "legacy"
    UNKNOWN = "unknown"
