"""Shared test fixtures for prompt-models."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest

if TYPE_CHECKING:
    from prompt_models.manager import ModelManager
    from prompt_models.settings import Settings
    from prompt_models.storage import FileStorageProvider, MemoryStorageProvider

API_KEY_FIELDS = (
    "openai_api_key",
    "anthropic_api_key",
    "gemini_api_key",
    "deepseek_api_key",
    "siliconflow_api_key",
    "custom_api_key",
)


@pytest.fixture
def make_settings(tmp_path: Path) -> Callable[..., Settings]:
    """Build settings isolated from the environment.

    Every API key is unset unless passed explicitly.
    """
    from prompt_models.settings import Settings

    def factory(**overrides: Any) -> Settings:
        values: dict[str, Any] = {field: None for field in API_KEY_FIELDS}
        values.update(
            storage_dir=tmp_path / "models",
            storage_key="models",
            custom_api_base_url="http://localhost:11434/v1",
            custom_api_model="custom-model",
        )
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return factory


@pytest.fixture
def mock_settings(make_settings: Callable[..., Settings]) -> Settings:
    """Create settings with no API keys configured."""
    return make_settings()


@pytest.fixture
def memory_storage() -> MemoryStorageProvider:
    """Create an empty in-memory storage."""
    from prompt_models.storage import MemoryStorageProvider

    return MemoryStorageProvider()


@pytest.fixture
def file_storage(tmp_path: Path) -> FileStorageProvider:
    """Create a file storage in a temporary directory."""
    from prompt_models.storage import FileStorageProvider

    return FileStorageProvider(tmp_path / "storage")


@pytest.fixture
async def manager(memory_storage: MemoryStorageProvider, mock_settings: Settings) -> ModelManager:
    """Create an initialized model manager over memory storage."""
    from prompt_models.manager import ModelManager
    from prompt_models.providers import provider_registry

    model_manager = ModelManager(memory_storage, provider_registry, settings=mock_settings)
    await model_manager.ensure_initialized()
    return model_manager


async def read_stored(storage: MemoryStorageProvider, key: str = "models") -> dict[str, Any]:
    """Decode the stored configuration map."""
    raw = await storage.get_item(key)
    assert raw is not None
    return json.loads(raw)


def legacy_entry(**overrides: Any) -> dict[str, Any]:
    """A valid legacy configuration entry."""
    entry: dict[str, Any] = {
        "name": "Legacy OpenAI",
        "apiKey": "sk-legacy",
        "baseURL": "https://api.openai.com/v1",
        "models": ["gpt-4o", "gpt-4o-mini"],
        "defaultModel": "gpt-4o",
        "enabled": True,
        "provider": "openai",
    }
    entry.update(overrides)
    return entry


def new_model(key: str = "my-model", **overrides: Any) -> dict[str, Any]:
    """A complete user-defined configuration."""
    config: dict[str, Any] = {
        "id": key,
        "name": "My Model",
        "enabled": True,
        "providerMeta": {"id": "openai", "name": "OpenAI", "defaultBaseURL": "https://api.openai.com/v1"},
        "modelMeta": {"id": "gpt-4o", "name": "GPT-4o", "providerId": "openai"},
        "connectionConfig": {"apiKey": "sk-mine", "baseURL": "https://proxy.example.com/v1"},
        "paramOverrides": {"temperature": 0.4},
    }
    config.update(overrides)
    return config
