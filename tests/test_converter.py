"""Tests for shape detection and legacy conversion."""

from __future__ import annotations

import pytest
from conftest import legacy_entry, new_model
from pydantic import ValidationError

from prompt_models.converter import (
    classify_config,
    convert_legacy_to_text_model_config,
    convert_legacy_to_text_model_config_with_registry,
    fold_custom_param_overrides,
    is_legacy_config,
    is_text_model_config,
    parse_text_model_config,
    resolve_text_model_config,
)
from prompt_models.models import ConfigShape
from prompt_models.providers import ProviderError, provider_registry


class TestShapeDetection:
    """Tests for structural shape detection."""

    def test_current_shape(self) -> None:
        """Test providerMeta and modelMeta objects mark the current shape."""
        entry = {"id": "a", "providerMeta": {"id": "openai"}, "modelMeta": {"id": "gpt-4o"}}
        assert is_text_model_config(entry)
        assert classify_config(entry) is ConfigShape.NEW

    def test_legacy_shape(self) -> None:
        """Test baseURL and defaultModel strings mark the legacy shape."""
        entry = legacy_entry()
        assert is_legacy_config(entry)
        assert classify_config(entry) is ConfigShape.LEGACY

    def test_current_shape_wins(self) -> None:
        """Test an entry with both layouts is treated as current."""
        entry = {**legacy_entry(), "providerMeta": {"id": "openai"}, "modelMeta": {"id": "gpt-4o"}}
        assert not is_legacy_config(entry)
        assert classify_config(entry) is ConfigShape.NEW

    @pytest.mark.parametrize(
        "value",
        [None, "openai", [], {}, {"baseURL": "https://x"}, {"providerMeta": "openai", "modelMeta": {}}],
    )
    def test_unknown_shape(self, value: object) -> None:
        """Test anything else is unknown."""
        assert classify_config(value) is ConfigShape.UNKNOWN


class TestStaticConversion:
    """Tests for conversion without the registry."""

    def test_fields_carried_over(self) -> None:
        """Test legacy fields map onto the current shape."""
        config = convert_legacy_to_text_model_config(
            "legacy-openai",
            legacy_entry(llmParams={"temperature": 0.3}),
        )

        assert config.id == "legacy-openai"
        assert config.name == "Legacy OpenAI"
        assert config.enabled is True
        assert config.provider_meta.id == "openai"
        assert config.provider_meta.name == "OpenAI"
        assert config.provider_meta.default_base_url == "https://api.openai.com/v1"
        assert config.model_meta.id == "gpt-4o"
        assert config.model_meta.capabilities.supports_tools is False
        assert config.connection_config.api_key == "sk-legacy"
        assert config.connection_config.base_url == "https://api.openai.com/v1"
        assert config.param_overrides == {"temperature": 0.3}

    def test_custom_provider_entry(self) -> None:
        """Test a custom-endpoint entry keeps its key, state and model."""
        config = convert_legacy_to_text_model_config(
            "k",
            {
                "name": "X",
                "baseURL": "https://a",
                "defaultModel": "m1",
                "models": ["m1"],
                "enabled": True,
                "provider": "custom",
            },
        )

        assert config.id == "k"
        assert config.enabled is True
        assert config.model_meta.id == "m1"
        assert config.provider_meta.name == "Custom"
        assert config.connection_config.api_key is None

    def test_model_falls_back_to_first_listed(self) -> None:
        """Test the first listed model is used without a default model."""
        config = convert_legacy_to_text_model_config("k", legacy_entry(defaultModel=""))
        assert config.model_meta.id == "gpt-4o"

    def test_never_fails(self) -> None:
        """Test conversion of an empty entry falls back to defaults."""
        config = convert_legacy_to_text_model_config("broken", {})

        assert config.id == "broken"
        assert config.name == "broken"
        assert config.enabled is False
        assert config.provider_meta.id == "custom"
        assert config.param_overrides is None

    def test_non_boolean_enabled(self) -> None:
        """Test a non-boolean enabled flag converts to disabled."""
        config = convert_legacy_to_text_model_config("k", legacy_entry(enabled="yes"))
        assert config.enabled is False


class TestRegistryConversion:
    """Tests for conversion through the provider registry."""

    async def test_catalog_metadata_used(self) -> None:
        """Test a known model gets its catalog capabilities."""
        config = await convert_legacy_to_text_model_config_with_registry(
            "openai", legacy_entry(), provider_registry
        )

        assert config.model_meta.name == "GPT-4o"
        assert config.model_meta.capabilities.supports_tools is True
        assert config.model_meta.capabilities.max_context_length == 128000
        assert config.model_meta.parameter_definitions
        assert config.connection_config.api_key == "sk-legacy"

    async def test_unknown_model_built(self) -> None:
        """Test an unlisted model gets generic metadata."""
        config = await convert_legacy_to_text_model_config_with_registry(
            "ds", legacy_entry(provider="deepseek", defaultModel="deepseek-v9"), provider_registry
        )

        assert config.provider_meta.id == "deepseek"
        assert config.model_meta.id == "deepseek-v9"
        assert config.model_meta.capabilities.supports_tools is False

    async def test_legacy_alias_resolved(self) -> None:
        """Test legacy provider names map to registered adapters."""
        config = await convert_legacy_to_text_model_config_with_registry(
            "zhipu", legacy_entry(provider="zhipu", defaultModel="glm-4"), provider_registry
        )
        assert config.provider_meta.id == "openai"

    async def test_unknown_provider_raises(self) -> None:
        """Test an unregistered provider is rejected."""
        with pytest.raises(ProviderError):
            await convert_legacy_to_text_model_config_with_registry(
                "x", legacy_entry(provider="mystery"), provider_registry
            )

    async def test_missing_model_raises(self) -> None:
        """Test an entry without any model is rejected."""
        with pytest.raises(ProviderError):
            await convert_legacy_to_text_model_config_with_registry(
                "x", legacy_entry(defaultModel="", models=[]), provider_registry
            )

    async def test_mistyped_fields_raise(self) -> None:
        """Test a legacy entry with a non-boolean enabled flag is rejected."""
        with pytest.raises(ValidationError):
            await convert_legacy_to_text_model_config_with_registry(
                "openai", legacy_entry(enabled="yes"), provider_registry
            )

    async def test_name_defaults_to_key(self) -> None:
        """Test an unnamed legacy entry is named after its key."""
        config = await convert_legacy_to_text_model_config_with_registry(
            "my-openai", legacy_entry(name=""), provider_registry
        )
        assert config.name == "my-openai"


class TestFoldCustomParamOverrides:
    """Tests for folding the deprecated override field."""

    def test_explicit_overrides_win(self) -> None:
        """Test paramOverrides takes precedence over the deprecated field."""
        folded = fold_custom_param_overrides(
            {
                "paramOverrides": {"temperature": 0.5},
                "customParamOverrides": {"temperature": 1.5, "top_p": 0.9},
            }
        )
        assert folded == {"paramOverrides": {"temperature": 0.5, "top_p": 0.9}}

    def test_input_not_modified(self) -> None:
        """Test the original entry is left intact."""
        entry = {"customParamOverrides": {"top_p": 0.9}}
        fold_custom_param_overrides(entry)
        assert entry == {"customParamOverrides": {"top_p": 0.9}}


class TestResolve:
    """Tests for resolving raw stored entries."""

    def test_legacy_resolved(self) -> None:
        """Test a legacy entry resolves to the current shape."""
        data = resolve_text_model_config("k", legacy_entry())

        assert data["providerMeta"]["id"] == "openai"
        assert data["modelMeta"]["id"] == "gpt-4o"
        assert data["connectionConfig"]["baseURL"] == "https://api.openai.com/v1"

    def test_current_deprecated_field_dropped(self) -> None:
        """Test resolved entries never carry the deprecated field."""
        data = resolve_text_model_config(
            "k",
            {
                "id": "k",
                "name": "K",
                "enabled": True,
                "providerMeta": {"id": "openai"},
                "modelMeta": {"id": "gpt-4o"},
                "connectionConfig": {"apiKey": "sk-1"},
                "customParamOverrides": {"temperature": 0.2},
            },
        )

        assert "customParamOverrides" not in data
        assert data["paramOverrides"] == {"temperature": 0.2}
        assert data["enabled"] is True

    @pytest.mark.parametrize(
        "overrides",
        [
            {"connectionConfig": "broken"},
            {"paramOverrides": ["temperature"]},
            {
                "providerMeta": {
                    "id": "openai",
                    "name": "OpenAI",
                    "connectionSchema": {"fieldTypes": {"apiKey": "secret"}},
                }
            },
        ],
    )
    def test_mistyped_current_entry_not_converted(self, overrides: dict) -> None:
        """Test a current-shape entry with a mistyped field keeps its metadata."""
        data = resolve_text_model_config("mine", new_model("mine", **overrides))

        assert data["providerMeta"]["id"] == "openai"
        assert data["modelMeta"]["id"] == "gpt-4o"
        assert data["name"] == "My Model"


class TestParse:
    """Tests for parsing raw stored entries for reading."""

    def test_invalid_fields_left_out(self) -> None:
        """Test only the mistyped top-level field is dropped."""
        config = parse_text_model_config("mine", new_model("mine", connectionConfig="broken"))

        assert config.connection_config is None
        assert config.provider_meta.id == "openai"
        assert config.model_meta.id == "gpt-4o"
        assert config.param_overrides == {"temperature": 0.4}
        assert config.enabled is True

    def test_legacy_parsed(self) -> None:
        """Test a legacy entry parses in the current shape."""
        config = parse_text_model_config("k", legacy_entry())

        assert config.id == "k"
        assert config.provider_meta.id == "openai"
