"""Configuration injected by a host process.

A desktop shell or launcher may hold API keys the application should use
on first run. The host exposes them as environment-style variables; they
are applied on top of the process settings before defaults are built.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import aiofiles
from pydantic import SecretStr

from prompt_models.logging import get_logger

if TYPE_CHECKING:
    from prompt_models.settings import Settings

logger = get_logger(__name__)

# Host variable -> settings field
HOST_VARIABLES = {
    "OPENAI_API_KEY": "openai_api_key",
    "ANTHROPIC_API_KEY": "anthropic_api_key",
    "GEMINI_API_KEY": "gemini_api_key",
    "DEEPSEEK_API_KEY": "deepseek_api_key",
    "SILICONFLOW_API_KEY": "siliconflow_api_key",
    "CUSTOM_API_KEY": "custom_api_key",
    "CUSTOM_API_BASE_URL": "custom_api_base_url",
    "CUSTOM_API_MODEL": "custom_api_model",
}

SECRET_FIELDS = {field for field in HOST_VARIABLES.values() if field.endswith("_api_key")}


class HostConfigSource(Protocol):
    """Source of host-provided configuration values."""

    async def sync(self) -> dict[str, str]:
        """Fetch the current host values keyed by variable name."""
        ...


class EnvFileConfigSource:
    """Host configuration read from a .env-style file."""

    def __init__(self, env_path: Path) -> None:
        self.env_path = Path(env_path).expanduser()

    async def sync(self) -> dict[str, str]:
        """Read KEY=value lines, ignoring blanks and comments."""
        if not self.env_path.exists():
            logger.debug("Host config file does not exist", path=str(self.env_path))
            return {}

        async with aiofiles.open(self.env_path, encoding="utf-8") as f:
            content = await f.read()

        values: dict[str, str] = {}
        for line in content.splitlines():
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, _, value = line.partition("=")
                values[key.strip()] = value.strip().strip('"').strip("'")
        return values


def apply_host_config(settings: Settings, values: dict[str, str]) -> Settings:
    """Return a copy of settings with host values taking precedence.

    Unknown variables and empty values are ignored.
    """
    update: dict[str, object] = {}
    for variable, value in values.items():
        field = HOST_VARIABLES.get(variable.upper())
        if field is None or not value:
            continue
        update[field] = SecretStr(value) if field in SECRET_FIELDS else value

    if update:
        logger.info("Applied host configuration", fields=sorted(update))
    return settings.model_copy(update=update)
