"""Validation of model configurations and parameter overrides."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, Field

from prompt_models.models.provider import ParameterDefinition, TextModelConfig
from prompt_models.providers import provider_registry


class ModelConfigError(Exception):
    """Invalid model configuration or violated precondition."""


class ParamValidationError(BaseModel):
    """One offending parameter."""

    parameter_name: str
    message: str


class ParamValidationResult(BaseModel):
    """Outcome of validating a parameter mapping."""

    errors: list[ParamValidationError] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _type_matches(value: Any, expected: str) -> bool:
    if expected == "number":
        # bool is an int subclass but never a valid number here
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if expected == "boolean":
        return isinstance(value, bool)
    return isinstance(value, str)


def validate_llm_params(
    params: Mapping[str, Any],
    provider_id: str,
    definitions: Iterable[ParameterDefinition] | None = None,
    strict: bool = False,
) -> ParamValidationResult:
    """Validate parameter overrides against parameter definitions.

    Args:
        params: Parameter name to value mapping.
        provider_id: Provider whose catalog definitions apply when
            ``definitions`` is not given.
        definitions: Explicit definitions (usually the model's own).
        strict: Reject parameters that have no definition.

    Returns:
        ParamValidationResult with one error per offending parameter.
    """
    if definitions is None:
        definitions = provider_registry.get_parameter_definitions(provider_id)
    known = {definition.name: definition for definition in definitions}
    result = ParamValidationResult()

    for name, value in params.items():
        if not isinstance(name, str) or not name.strip():
            result.errors.append(
                ParamValidationError(
                    parameter_name=str(name),
                    message="parameter name must be a non-empty string",
                )
            )
            continue

        # None means "unset"
        if value is None:
            continue

        definition = known.get(name)
        if definition is None:
            if strict:
                result.errors.append(
                    ParamValidationError(
                        parameter_name=name,
                        message=f"unknown parameter for provider {provider_id}",
                    )
                )
            continue

        if not _type_matches(value, definition.type):
            result.errors.append(
                ParamValidationError(
                    parameter_name=name,
                    message=f"expected {definition.type}, got {type(value).__name__}",
                )
            )
            continue

        if definition.type != "number":
            continue
        if definition.min is not None and value < definition.min:
            result.errors.append(
                ParamValidationError(
                    parameter_name=name,
                    message=f"value {value} is below minimum {definition.min:g}",
                )
            )
        elif definition.max is not None and value > definition.max:
            result.errors.append(
                ParamValidationError(
                    parameter_name=name,
                    message=f"value {value} is above maximum {definition.max:g}",
                )
            )

    return result


def _parameter_definitions_for(config: Mapping[str, Any]) -> list[ParameterDefinition] | None:
    """Use the model's own definitions when it carries any."""
    model_meta = config.get("modelMeta")
    if not isinstance(model_meta, Mapping):
        return None
    raw_definitions = model_meta.get("parameterDefinitions") or []
    definitions = []
    for raw in raw_definitions:
        try:
            definitions.append(ParameterDefinition.model_validate(raw))
        except ValueError:
            continue
    return definitions or None


def validate_text_model_config(config: TextModelConfig | Mapping[str, Any]) -> None:
    """Check a configuration for completeness and valid parameter overrides.

    Collects every problem before failing.

    Args:
        config: A TextModelConfig or its JSON dict form.

    Raises:
        ModelConfigError: Listing all errors found.
    """
    if isinstance(config, TextModelConfig):
        config = config.to_json_dict()

    errors: list[str] = []

    if not config.get("id"):
        errors.append("Missing configuration id")
    if not config.get("name"):
        errors.append("Missing model name (name)")

    provider_meta = config.get("providerMeta")
    if not isinstance(provider_meta, Mapping) or not provider_meta.get("id"):
        errors.append("Missing or invalid provider metadata (providerMeta)")

    model_meta = config.get("modelMeta")
    if not isinstance(model_meta, Mapping) or not model_meta.get("id"):
        errors.append("Missing or invalid model metadata (modelMeta)")

    if not isinstance(config.get("connectionConfig"), Mapping):
        errors.append("Missing connection configuration (connectionConfig)")

    param_overrides = config.get("paramOverrides")
    if "paramOverrides" in config and not isinstance(param_overrides, Mapping):
        errors.append("paramOverrides must be an object")
    elif isinstance(param_overrides, Mapping):
        provider_id = "openai"
        if isinstance(provider_meta, Mapping) and provider_meta.get("id"):
            provider_id = provider_meta["id"]
        validation = validate_llm_params(
            param_overrides,
            provider_id,
            definitions=_parameter_definitions_for(config),
        )
        errors.extend(
            f"Parameter {error.parameter_name}: {error.message}" for error in validation.errors
        )

    if errors:
        raise ModelConfigError("Invalid TextModelConfig: " + ", ".join(errors))


def is_valid_text_model_entry(item: Any, require_enabled: bool = True) -> bool:
    """Structural check for a new-shape entry in import/export data."""
    if not isinstance(item, Mapping):
        return False
    if require_enabled and not isinstance(item.get("enabled"), bool):
        return False
    if "enabled" in item and not isinstance(item["enabled"], bool):
        return False
    return (
        isinstance(item.get("id"), str)
        and isinstance(item.get("name"), str)
        and isinstance(item.get("providerMeta"), Mapping)
        and isinstance(item.get("modelMeta"), Mapping)
        and isinstance(item.get("connectionConfig"), Mapping)
    )


def is_valid_legacy_entry(item: Any) -> bool:
    """Structural check for a legacy entry in import data (must carry ``key``)."""
    return (
        isinstance(item, Mapping)
        and isinstance(item.get("key"), str)
        and isinstance(item.get("name"), str)
        and isinstance(item.get("baseURL"), str)
        and isinstance(item.get("defaultModel"), str)
        and isinstance(item.get("enabled"), bool)
        and isinstance(item.get("provider"), str)
    )
