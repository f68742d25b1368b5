"""Tests for settings and host configuration."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from prompt_models.host_config import EnvFileConfigSource, apply_host_config
from prompt_models.settings import Settings


class TestSettings:
    """Tests for Settings."""

    def test_vendor_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test API keys are read from the plain vendor variables."""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-from-env")
        monkeypatch.setenv("PROMPT_MODELS_STORAGE_KEY", "configs")

        settings = Settings(_env_file=None)

        assert settings.get_api_key("openai") == "sk-from-env"
        assert settings.storage_key == "configs"
        assert "openai" in settings.configured_providers

    def test_keys_hidden(self, make_settings: Callable[..., Settings]) -> None:
        """Test API keys are not shown in the settings repr."""
        settings = make_settings(openai_api_key="sk-secret")
        assert "sk-secret" not in repr(settings)

    def test_empty_key_is_unset(self, make_settings: Callable[..., Settings]) -> None:
        """Test an empty API key counts as not configured."""
        settings = make_settings(gemini_api_key="")

        assert settings.get_api_key("gemini") is None
        assert settings.configured_providers == []


class TestEnvFileConfigSource:
    """Tests for EnvFileConfigSource."""

    async def test_parse(self, tmp_path: Path) -> None:
        """Test KEY=value lines are read and comments skipped."""
        env_file = tmp_path / "host.env"
        env_file.write_text(
            "# host configuration\n"
            "OPENAI_API_KEY=sk-host\n"
            "\n"
            'CUSTOM_API_BASE_URL="http://gpu-box:8000/v1"\n'
            "not a pair\n",
            encoding="utf-8",
        )

        values = await EnvFileConfigSource(env_file).sync()

        assert values == {
            "OPENAI_API_KEY": "sk-host",
            "CUSTOM_API_BASE_URL": "http://gpu-box:8000/v1",
        }

    async def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file yields no values."""
        assert await EnvFileConfigSource(tmp_path / "absent.env").sync() == {}


class TestApplyHostConfig:
    """Tests for apply_host_config."""

    def test_host_values_take_precedence(self, make_settings: Callable[..., Settings]) -> None:
        """Test host values override settings."""
        settings = make_settings(openai_api_key="sk-local")

        applied = apply_host_config(
            settings,
            {"OPENAI_API_KEY": "sk-host", "CUSTOM_API_MODEL": "llama-3"},
        )

        assert applied.get_api_key("openai") == "sk-host"
        assert applied.custom_api_model == "llama-3"
        assert settings.get_api_key("openai") == "sk-local"

    def test_unknown_and_empty_ignored(self, make_settings: Callable[..., Settings]) -> None:
        """Test unknown variables and empty values change nothing."""
        settings = make_settings(anthropic_api_key="sk-ant")

        applied = apply_host_config(settings, {"ANTHROPIC_API_KEY": "", "PATH": "/usr/bin"})

        assert applied.get_api_key("anthropic") == "sk-ant"
