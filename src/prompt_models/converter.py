"""Shape detection and legacy-to-current conversion for stored configurations.

Stored entries carry no version tag. Their shape is decided structurally:
``providerMeta`` + ``modelMeta`` objects mean the current TextModelConfig
layout, ``baseURL`` + ``defaultModel`` strings mean the flat legacy layout.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from prompt_models.logging import get_logger
from prompt_models.models.provider import (
    ConfigShape,
    ConnectionConfig,
    LegacyModelConfig,
    ModelCapabilities,
    TextModel,
    TextModelConfig,
    TextProvider,
)
from prompt_models.providers.base import ProviderError

if TYPE_CHECKING:
    from prompt_models.providers.registry import ProviderRegistry

logger = get_logger(__name__)

# Display names for provider values found in legacy configurations
LEGACY_PROVIDER_NAMES = {
    "openai": "OpenAI",
    "anthropic": "Anthropic",
    "gemini": "Google Gemini",
    "deepseek": "DeepSeek",
    "siliconflow": "SiliconFlow",
    "zhipu": "Zhipu AI",
    "custom": "Custom",
}


def is_text_model_config(value: Any) -> bool:
    """Check whether a raw entry has the current TextModelConfig shape."""
    return (
        isinstance(value, Mapping)
        and isinstance(value.get("providerMeta"), Mapping)
        and isinstance(value.get("modelMeta"), Mapping)
    )


def is_legacy_config(value: Any) -> bool:
    """Check whether a raw entry has the legacy flat shape."""
    return (
        isinstance(value, Mapping)
        and isinstance(value.get("baseURL"), str)
        and isinstance(value.get("defaultModel"), str)
        and not is_text_model_config(value)
    )


def classify_config(value: Any) -> ConfigShape:
    """Classify a raw stored entry."""
    if is_text_model_config(value):
        return ConfigShape.NEW
    if is_legacy_config(value):
        return ConfigShape.LEGACY
    return ConfigShape.UNKNOWN


def _str_field(data: Mapping[str, Any], name: str) -> str:
    value = data.get(name)
    return value if isinstance(value, str) else ""


def _legacy_model_id(legacy: Mapping[str, Any]) -> str:
    model_id = _str_field(legacy, "defaultModel")
    if model_id:
        return model_id
    models = legacy.get("models")
    if isinstance(models, list):
        for candidate in models:
            if isinstance(candidate, str) and candidate:
                return candidate
    return ""


def _legacy_param_overrides(legacy: Mapping[str, Any]) -> dict[str, Any] | None:
    llm_params = legacy.get("llmParams")
    if isinstance(llm_params, Mapping):
        return dict(llm_params)
    return None


def _legacy_enabled(legacy: Mapping[str, Any]) -> bool:
    enabled = legacy.get("enabled")
    return enabled if isinstance(enabled, bool) else False


def _legacy_api_key(legacy: Mapping[str, Any]) -> str | None:
    return _str_field(legacy, "apiKey") or None


def convert_legacy_to_text_model_config(key: str, legacy: Mapping[str, Any]) -> TextModelConfig:
    """Convert a legacy entry using static knowledge only.

    Never fails: missing or mistyped fields fall back to empty values, so
    this is the guaranteed fallback for every other conversion path.

    Args:
        key: Storage key of the entry, used as the configuration ID.
        legacy: Raw legacy (or unrecognised) entry.

    Returns:
        The equivalent TextModelConfig.
    """
    if not isinstance(legacy, Mapping):
        legacy = {}

    provider_id = _str_field(legacy, "provider") or "custom"
    base_url = _str_field(legacy, "baseURL")
    model_id = _legacy_model_id(legacy)

    provider_meta = TextProvider(
        id=provider_id,
        name=LEGACY_PROVIDER_NAMES.get(provider_id, provider_id),
        requires_api_key=True,
        default_base_url=base_url,
        supports_dynamic_models=False,
    )
    model_meta = TextModel(
        id=model_id,
        name=model_id,
        provider_id=provider_id,
        capabilities=ModelCapabilities(supports_tools=False),
    )

    return TextModelConfig(
        id=key,
        name=_str_field(legacy, "name") or key,
        enabled=_legacy_enabled(legacy),
        provider_meta=provider_meta,
        model_meta=model_meta,
        connection_config=ConnectionConfig(
            api_key=_legacy_api_key(legacy),
            base_url=base_url or None,
        ),
        param_overrides=_legacy_param_overrides(legacy),
    )


async def convert_legacy_to_text_model_config_with_registry(
    key: str,
    legacy: Mapping[str, Any],
    registry: ProviderRegistry,
) -> TextModelConfig:
    """Convert a legacy entry using the provider registry's metadata.

    Produces correct capability flags and parameter definitions for the
    legacy entry's provider and model.

    Args:
        key: Storage key of the entry, used as the configuration ID.
        legacy: Raw legacy entry.
        registry: Registry used to resolve the provider adapter.

    Returns:
        The equivalent TextModelConfig.

    Raises:
        ValidationError: If the entry has mistyped legacy fields.
        ProviderError: If the provider is unknown or no model can be
            determined. Callers fall back to the static converter.
    """
    parsed = LegacyModelConfig.model_validate(legacy)
    provider_name = parsed.provider or "custom"
    adapter = registry.get_adapter(provider_name)

    model_id = parsed.default_model or next((m for m in parsed.models or [] if m), "")
    if not model_id:
        raise ProviderError(provider_name, f"Legacy configuration {key} has no model")

    provider_meta = adapter.get_provider()
    model_meta = adapter.get_model(model_id) or adapter.build_default_model(model_id)
    base_url = parsed.base_url or provider_meta.default_base_url

    logger.debug(
        "Resolved legacy configuration via registry",
        key=key,
        provider=provider_meta.id,
        model=model_meta.id,
    )

    return TextModelConfig(
        id=key,
        name=parsed.name or key,
        enabled=parsed.enabled,
        provider_meta=provider_meta,
        model_meta=model_meta,
        connection_config=ConnectionConfig(
            api_key=parsed.api_key or None,
            base_url=base_url or None,
        ),
        param_overrides=parsed.llm_params,
    )


def fold_custom_param_overrides(entry: Mapping[str, Any]) -> dict[str, Any]:
    """Merge the deprecated ``customParamOverrides`` into ``paramOverrides``.

    Explicit ``paramOverrides`` keys win. The deprecated key is dropped.
    """
    folded = dict(entry)
    custom = folded.pop("customParamOverrides", None)
    if isinstance(custom, Mapping) and custom:
        overrides = folded.get("paramOverrides")
        folded["paramOverrides"] = {
            **custom,
            **(overrides if isinstance(overrides, Mapping) else {}),
        }
    return folded


def resolve_text_model_config(key: str, raw: Any) -> dict[str, Any]:
    """Turn any raw stored entry into current-shape JSON.

    Current-shape entries stay current-shape: one with mistyped fields is
    returned as stored (minus the deprecated field) so its metadata is never
    replaced. Only legacy and unrecognised entries are converted.

    Args:
        key: Storage key of the entry.
        raw: Entry as decoded from storage.

    Returns:
        Current-shape JSON dict (never the deprecated field).
    """
    if classify_config(raw) is not ConfigShape.NEW:
        return convert_legacy_to_text_model_config(key, raw).to_json_dict()

    folded = fold_custom_param_overrides(raw)
    try:
        return TextModelConfig.model_validate(folded).to_json_dict()
    except ValidationError as e:
        logger.warning("Stored configuration has invalid fields", key=key, error=str(e))
        return folded


def parse_text_model_config(key: str, raw: Any) -> TextModelConfig:
    """Parse any raw stored entry for reading.

    Top-level fields that fail validation are left out of the result; the
    stored entry is not touched.
    """
    data = resolve_text_model_config(key, raw)
    try:
        return TextModelConfig.model_validate(data)
    except ValidationError as e:
        invalid = {error["loc"][0] for error in e.errors() if error["loc"]}
        return TextModelConfig.model_validate({k: v for k, v in data.items() if k not in invalid})
