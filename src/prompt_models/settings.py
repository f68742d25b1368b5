"""Application settings using pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


def _api_key_field(env_name: str) -> SecretStr | None:
    """Declare an API key read from the vendor's own variable name.

    The prefixed form (PROMPT_MODELS_<NAME>) is accepted as well.
    """
    return Field(
        default=None,
        validation_alias=AliasChoices(
            env_name,
            f"PROMPT_MODELS_{env_name}",
            env_name.lower(),
        ),
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables with the
    PROMPT_MODELS_ prefix. API keys are also read from the plain vendor
    variables (OPENAI_API_KEY, ANTHROPIC_API_KEY, ...).
    """

    model_config = SettingsConfigDict(
        env_prefix="PROMPT_MODELS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Storage
    storage_dir: Path = Path.home() / ".prompt-models"
    storage_key: str = "models"

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    # API keys for the built-in models
    openai_api_key: SecretStr | None = _api_key_field("OPENAI_API_KEY")
    anthropic_api_key: SecretStr | None = _api_key_field("ANTHROPIC_API_KEY")
    gemini_api_key: SecretStr | None = _api_key_field("GEMINI_API_KEY")
    deepseek_api_key: SecretStr | None = _api_key_field("DEEPSEEK_API_KEY")
    siliconflow_api_key: SecretStr | None = _api_key_field("SILICONFLOW_API_KEY")

    # Custom OpenAI-compatible endpoint
    custom_api_key: SecretStr | None = _api_key_field("CUSTOM_API_KEY")
    custom_api_base_url: str = Field(
        default="http://localhost:11434/v1",
        validation_alias=AliasChoices(
            "CUSTOM_API_BASE_URL",
            "PROMPT_MODELS_CUSTOM_API_BASE_URL",
            "custom_api_base_url",
        ),
    )
    custom_api_model: str = Field(
        default="custom-model",
        validation_alias=AliasChoices(
            "CUSTOM_API_MODEL",
            "PROMPT_MODELS_CUSTOM_API_MODEL",
            "custom_api_model",
        ),
    )

    def get_api_key(self, provider_id: str) -> str | None:
        """Get the plain API key configured for a built-in model key.

        Args:
            provider_id: Built-in key (e.g., "openai", "custom").

        Returns:
            API key string or None if not configured.
        """
        secret = getattr(self, f"{provider_id}_api_key", None)
        if secret is None:
            return None
        value = secret.get_secret_value()
        return value or None

    @property
    def configured_providers(self) -> list[str]:
        """Built-in keys that have an API key configured."""
        return [
            provider_id
            for provider_id in ("openai", "anthropic", "gemini", "deepseek", "siliconflow", "custom")
            if self.get_api_key(provider_id)
        ]


# Global settings instance
settings = Settings()
