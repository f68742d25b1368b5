"""Model configuration manager.

Owns the persisted map of model configurations: reconciles it with the
built-in defaults on first use, upgrades legacy entries, validates changes
and supports bulk import/export.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from prompt_models.converter import (
    classify_config,
    convert_legacy_to_text_model_config,
    convert_legacy_to_text_model_config_with_registry,
    fold_custom_param_overrides,
    is_text_model_config,
    parse_text_model_config,
    resolve_text_model_config,
)
from prompt_models.defaults import DEFAULT_MODELS, build_default_models
from prompt_models.host_config import apply_host_config
from prompt_models.import_export import ImportExportable, ImportExportError
from prompt_models.logging import get_logger
from prompt_models.models.provider import ConfigShape, TextModelConfig, TextModelConfigUpdate
from prompt_models.models.results import ImportFailure, ImportResult
from prompt_models.providers import provider_registry
from prompt_models.settings import settings as global_settings
from prompt_models.validation import (
    ModelConfigError,
    is_valid_legacy_entry,
    is_valid_text_model_entry,
    validate_text_model_config,
)

if TYPE_CHECKING:
    from prompt_models.host_config import HostConfigSource
    from prompt_models.providers.registry import ProviderRegistry
    from prompt_models.settings import Settings
    from prompt_models.storage import StorageProvider

logger = get_logger(__name__)

# Partial-update fields that force re-validation
SIGNIFICANT_FIELDS = ("name", "providerMeta", "modelMeta", "connectionConfig", "paramOverrides")


class ManagerState(str, Enum):
    """Lifecycle of a ModelManager instance."""

    CONSTRUCTING = "constructing"
    INITIALIZING = "initializing"
    READY = "ready"


def _merge_nested(existing: Any, change: Any) -> Any:
    """Merge a nested mapping update key by key.

    A stored value that is not a mapping is kept unless the update sets the field.
    """
    if not isinstance(existing, Mapping):
        if change is None:
            return existing
        existing = {}
    return {**existing, **(change if isinstance(change, Mapping) else {})}


def merge_with_default(default: Mapping[str, Any], stored: Mapping[str, Any]) -> dict[str, Any]:
    """Merge a stored current-shape entry onto a fresh default.

    The stored entry keeps ``enabled``, ``connectionConfig`` and
    ``paramOverrides``; everything else comes from the default so catalog
    fixes reach previously saved entries.

    Args:
        default: Built-in entry as JSON (not modified).
        stored: Stored entry as JSON (not modified).

    Returns:
        A new merged entry.
    """
    stored = fold_custom_param_overrides(stored)
    merged = dict(default)

    enabled = stored.get("enabled")
    if isinstance(enabled, bool):
        merged["enabled"] = enabled

    stored_connection = stored.get("connectionConfig")
    merged["connectionConfig"] = {
        **(default.get("connectionConfig") or {}),
        **(stored_connection if isinstance(stored_connection, Mapping) else {}),
    }

    default_overrides = default.get("paramOverrides")
    stored_overrides = stored.get("paramOverrides")
    if default_overrides is not None or isinstance(stored_overrides, Mapping):
        merged["paramOverrides"] = {
            **(default_overrides or {}),
            **(stored_overrides if isinstance(stored_overrides, Mapping) else {}),
        }

    return merged


class ModelManager(ImportExportable):
    """Persisted model configurations with default reconciliation.

    Initialization runs once per instance. It is scheduled on construction
    when an event loop is running, otherwise on first use; every public
    method awaits the same initialization before touching storage. Each
    mutation is a single ``update_data`` call on the storage provider.
    """

    DATA_TYPE = "models"

    def __init__(
        self,
        storage: StorageProvider,
        registry: ProviderRegistry | None = None,
        *,
        defaults: Mapping[str, TextModelConfig] | None = None,
        host_config: HostConfigSource | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            storage: Storage provider holding the configuration map.
            registry: Provider registry for legacy conversion. Without one,
                legacy entries are converted with static knowledge only.
            defaults: Built-in configurations. Built from ``settings`` if omitted.
            host_config: Host-provided values applied before defaults are built.
            settings: Settings for the storage key and default catalog.
        """
        self.storage = storage
        self.registry = registry
        self._settings = settings or global_settings
        self.storage_key = self._settings.storage_key
        self._host_config = host_config
        self._explicit_defaults = defaults is not None

        if defaults is not None:
            self._defaults: Mapping[str, TextModelConfig] = MappingProxyType(dict(defaults))
        elif settings is None:
            self._defaults = DEFAULT_MODELS
        else:
            self._defaults = MappingProxyType(build_default_models(settings))

        self.state = ManagerState.CONSTRUCTING
        self._init_task: asyncio.Task[None] | None = None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            self._init_task = loop.create_task(self._initialize())

    @property
    def default_keys(self) -> list[str]:
        """Keys of the built-in configurations."""
        return list(self._defaults.keys())

    def _default_entries(self) -> dict[str, dict[str, Any]]:
        """Fresh JSON copies of the defaults."""
        return {key: config.to_json_dict() for key, config in self._defaults.items()}

    def _models_or_defaults(self, current: Any) -> dict[str, Any]:
        """Stored map for an update, or the defaults if nothing usable is stored."""
        if isinstance(current, dict):
            return dict(current)
        return self._default_entries()

    async def _save(self, models: Mapping[str, Any]) -> None:
        await self.storage.set_item(self.storage_key, json.dumps(models, ensure_ascii=False))

    # Initialization

    async def ensure_initialized(self) -> None:
        """Wait for initialization to complete, starting it if needed."""
        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._initialize())
        # Shielded so one cancelled caller does not cancel it for the others
        await asyncio.shield(self._init_task)

    async def is_initialized(self) -> bool:
        """Check whether configuration data has been persisted."""
        return await self.storage.get_item(self.storage_key) is not None

    async def _initialize(self) -> None:
        """Load, reconcile and persist the configuration map.

        Never raises: on failure the defaults are written (best effort)
        and the manager is still marked ready.
        """
        self.state = ManagerState.INITIALIZING
        logger.info("Initializing model manager", storage_key=self.storage_key)

        try:
            if self._host_config is not None:
                await self._sync_host_config()

            stored_data = await self.storage.get_item(self.storage_key)
            if stored_data is None:
                logger.info("No stored models found, initializing with defaults")
                await self._save(self._default_entries())
            else:
                await self._reconcile(stored_data)

            logger.info("Model manager initialized", model_count=len(self._defaults))
        except Exception as e:
            logger.error("Model manager initialization failed, saving defaults", error=str(e))
            try:
                await self._save(self._default_entries())
            except Exception as save_error:
                logger.error("Failed to save default models", error=str(save_error))
        finally:
            self.state = ManagerState.READY

    async def _sync_host_config(self) -> None:
        """Pull host-provided values so they shape the defaults."""
        values = await self._host_config.sync()
        logger.info("Synced host configuration", variable_count=len(values))
        if self._explicit_defaults:
            return
        host_settings = apply_host_config(self._settings, values)
        self._defaults = MappingProxyType(build_default_models(host_settings))

    async def _reconcile(self, stored_data: str) -> None:
        """Bring a stored map up to date with the defaults in one write."""
        try:
            stored = json.loads(stored_data)
        except json.JSONDecodeError as e:
            logger.error("Failed to parse stored models, initializing with defaults", error=str(e))
            await self._save(self._default_entries())
            return

        if not isinstance(stored, dict):
            logger.error("Stored models are not a mapping, initializing with defaults")
            await self._save(self._default_entries())
            return

        updated = dict(stored)
        has_updates = False

        for key, default in self._default_entries().items():
            existing = updated.get(key)

            if existing is None:
                updated[key] = default
                has_updates = True
                logger.info("Added missing default model", key=key)
                continue

            shape = classify_config(existing)
            if shape is ConfigShape.NEW:
                merged = merge_with_default(default, existing)
                if merged != existing:
                    updated[key] = merged
                    has_updates = True
                    logger.info("Updated default model", key=key)
            elif shape is ConfigShape.LEGACY:
                converted = await self._convert_legacy(key, existing)
                updated[key] = converted.to_json_dict()
                has_updates = True
            else:
                updated[key] = default
                has_updates = True
                logger.info("Replaced unrecognized model entry with default", key=key)

        if has_updates:
            await self._save(updated)
            logger.info("Saved reconciled models", model_count=len(updated))

    async def _convert_legacy(self, key: str, legacy: Mapping[str, Any]) -> TextModelConfig:
        """Convert via the registry, falling back to static conversion."""
        if self.registry is not None:
            try:
                converted = await convert_legacy_to_text_model_config_with_registry(
                    key, legacy, self.registry
                )
                logger.info("Converted legacy model via registry", key=key)
                return converted
            except Exception as e:
                logger.warning("Registry conversion failed, using fallback", key=key, error=str(e))

        converted = convert_legacy_to_text_model_config(key, legacy)
        logger.info("Converted legacy model via fallback", key=key)
        return converted

    # Reads

    async def _get_models_from_storage(self) -> dict[str, Any]:
        """Stored map, or the defaults if nothing usable is stored."""
        stored_data = await self.storage.get_item(self.storage_key)
        if stored_data is not None:
            try:
                models = json.loads(stored_data)
            except json.JSONDecodeError as e:
                logger.error("Failed to parse stored models, using defaults", error=str(e))
            else:
                if isinstance(models, dict):
                    return models
        return self._default_entries()

    async def get_all_models(self) -> list[TextModelConfig]:
        """Get every configuration in the current shape.

        Legacy entries are upgraded in the returned value only.
        """
        await self.ensure_initialized()
        models = await self._get_models_from_storage()
        return [parse_text_model_config(key, config) for key, config in models.items()]

    async def get_model(self, key: str) -> TextModelConfig | None:
        """Get one configuration in the current shape.

        Args:
            key: Configuration key.

        Returns:
            The configuration, or None if the key is not stored.
        """
        await self.ensure_initialized()
        models = await self._get_models_from_storage()
        config = models.get(key)
        if config is None:
            return None
        return parse_text_model_config(key, config)

    async def get_enabled_models(self) -> list[TextModelConfig]:
        """Get the configurations that are enabled."""
        return [model for model in await self.get_all_models() if model.enabled]

    # Writes

    @staticmethod
    def _normalize_config(config: TextModelConfig | Mapping[str, Any]) -> dict[str, Any]:
        if isinstance(config, TextModelConfig):
            return config.to_json_dict()
        try:
            return TextModelConfig.model_validate(fold_custom_param_overrides(config)).to_json_dict()
        except ValidationError as e:
            raise ModelConfigError(f"Invalid TextModelConfig: {e}") from e

    @staticmethod
    def _normalize_update(
        partial: TextModelConfigUpdate | Mapping[str, Any],
    ) -> dict[str, Any]:
        if isinstance(partial, TextModelConfigUpdate):
            return partial.to_partial_dict()
        try:
            return TextModelConfigUpdate.model_validate(partial).to_partial_dict()
        except ValidationError as e:
            raise ModelConfigError(f"Invalid model update: {e}") from e

    def _seed_from_defaults(self, models: dict[str, Any], key: str, error: str) -> None:
        """Insert a built-in entry that is not stored yet.

        Raises:
            ModelConfigError: If the key is not a built-in either.
        """
        if key in models:
            return
        defaults = self._default_entries()
        if key not in defaults:
            raise ModelConfigError(error)
        models[key] = defaults[key]

    async def add_model(self, key: str, config: TextModelConfig | Mapping[str, Any]) -> None:
        """Add a new configuration.

        Args:
            key: Configuration key (must not exist).
            config: Complete configuration.

        Raises:
            ModelConfigError: If the configuration is invalid or the key exists.
        """
        await self.ensure_initialized()
        entry = self._normalize_config(config)
        validate_text_model_config(entry)

        def add(current: Any) -> dict[str, Any]:
            models = self._models_or_defaults(current)
            if key in models:
                raise ModelConfigError(f"Model {key} already exists")
            return {**models, key: entry}

        await self.storage.update_data(self.storage_key, add)
        logger.info("Added model", key=key)

    async def update_model(
        self,
        key: str,
        partial: TextModelConfigUpdate | Mapping[str, Any],
    ) -> None:
        """Update a configuration.

        ``connectionConfig`` and ``paramOverrides`` are merged key by key;
        other fields are replaced. Built-in models can be updated before
        they were ever stored.

        Args:
            key: Configuration key.
            partial: Fields to change.

        Raises:
            ModelConfigError: If the key is unknown or the result is invalid.
        """
        await self.ensure_initialized()
        changes = self._normalize_update(partial)

        def update(current: Any) -> dict[str, Any]:
            models = self._models_or_defaults(current)
            self._seed_from_defaults(models, key, f"Model {key} does not exist")

            existing = resolve_text_model_config(key, models[key])
            updated = {**existing, **changes}
            updated["enabled"] = (
                changes["enabled"] if changes.get("enabled") is not None else existing.get("enabled", False)
            )
            for field in ("connectionConfig", "paramOverrides"):
                merged = _merge_nested(existing.get(field), changes.get(field))
                if merged is not None:
                    updated[field] = merged

            # Disabling alone never needs validation
            if any(field in changes for field in SIGNIFICANT_FIELDS) or changes.get("enabled"):
                validate_text_model_config(updated)

            return {**models, key: updated}

        await self.storage.update_data(self.storage_key, update)
        logger.info("Updated model", key=key, fields=sorted(changes))

    async def delete_model(self, key: str) -> None:
        """Delete a configuration.

        Raises:
            ModelConfigError: If the key is not stored.
        """
        await self.ensure_initialized()

        def delete(current: Any) -> dict[str, Any]:
            models = self._models_or_defaults(current)
            if key not in models:
                raise ModelConfigError(f"Model {key} does not exist")
            return {k: v for k, v in models.items() if k != key}

        await self.storage.update_data(self.storage_key, delete)
        logger.info("Deleted model", key=key)

    async def _set_enabled(self, key: str, enabled: bool) -> None:
        def toggle(current: Any) -> dict[str, Any]:
            models = self._models_or_defaults(current)
            self._seed_from_defaults(models, key, f"Unknown model: {key}")

            entry = resolve_text_model_config(key, models[key])
            if enabled:
                validate_text_model_config(entry)
            return {**models, key: {**entry, "enabled": enabled}}

        await self.storage.update_data(self.storage_key, toggle)

    async def enable_model(self, key: str) -> None:
        """Enable a configuration after validating it.

        Raises:
            ModelConfigError: If the key is unknown or the configuration is invalid.
        """
        await self.ensure_initialized()
        await self._set_enabled(key, True)
        logger.info("Enabled model", key=key)

    async def disable_model(self, key: str) -> None:
        """Disable a configuration. Succeeds even for incomplete entries.

        Raises:
            ModelConfigError: If the key is unknown.
        """
        await self.ensure_initialized()
        await self._set_enabled(key, False)
        logger.info("Disabled model", key=key)

    # Import/export

    async def get_data_type(self) -> str:
        return self.DATA_TYPE

    async def export_data(self) -> list[TextModelConfig]:
        """Export every configuration in the current shape.

        Raises:
            ImportExportError: If the configurations cannot be read.
        """
        try:
            return await self.get_all_models()
        except Exception as e:
            raise ImportExportError("Failed to export model data", await self.get_data_type(), e) from e

    async def import_data(self, data: Any) -> ImportResult:
        """Import configurations, skipping entries that cannot be imported.

        Current-shape entries are keyed by ``id``; legacy entries must carry
        ``key``. Existing keys are updated (keeping their ``enabled`` state
        when the entry omits it); new keys are added.

        Args:
            data: List of current-shape or legacy entries.

        Returns:
            ImportResult listing added, updated and skipped entries.

        Raises:
            ModelConfigError: If data is not a list.
        """
        if not isinstance(data, list):
            raise ModelConfigError(
                "Invalid model data format: data must be a list of model configurations"
            )

        result = ImportResult()

        for index, item in enumerate(data):
            key: str | None = None
            try:
                if is_text_model_config(item):
                    key = item.get("id") if isinstance(item.get("id"), str) else None
                    if not key:
                        result.failures.append(ImportFailure(index=index, error="Missing id field"))
                        continue
                    if not is_valid_text_model_entry(item, require_enabled=False):
                        result.failures.append(
                            ImportFailure(index=index, key=key, error="Invalid model configuration")
                        )
                        continue
                    config = TextModelConfig.model_validate(fold_custom_param_overrides(item))
                    has_enabled = "enabled" in item
                else:
                    if isinstance(item, Mapping) and isinstance(item.get("key"), str):
                        key = item["key"]
                    if not key:
                        result.failures.append(ImportFailure(index=index, error="Missing key field"))
                        continue
                    if not is_valid_legacy_entry(item):
                        result.failures.append(
                            ImportFailure(index=index, key=key, error="Invalid model configuration")
                        )
                        continue
                    config = convert_legacy_to_text_model_config(key, item)
                    has_enabled = True

                existing = await self.get_model(key)
                if existing is not None:
                    changes = config.to_json_dict()
                    if not has_enabled:
                        changes["enabled"] = existing.enabled
                    await self.update_model(key, changes)
                    result.updated.append(key)
                    logger.info("Imported model over existing configuration", key=key)
                else:
                    await self.add_model(key, config)
                    result.imported.append(key)
                    logger.info("Imported new model", key=key)
            except Exception as e:
                logger.warning("Error importing model", index=index, key=key, error=str(e))
                result.failures.append(ImportFailure(index=index, key=key, error=str(e)))

        if result.failures:
            logger.warning("Some models failed to import", failed=result.failed_count)

        return result

    async def validate_data(self, data: Any) -> bool:
        """Check that data is a list of importable entries."""
        if not isinstance(data, list):
            return False
        return all(
            is_valid_text_model_entry(item, require_enabled=False)
            if is_text_model_config(item) else is_valid_legacy_entry(item)
            for item in data
        )


def create_model_manager(
    storage: StorageProvider,
    settings: Settings | None = None,
    registry: ProviderRegistry | None = None,
    host_config: HostConfigSource | None = None,
) -> ModelManager:
    """Create a model manager wired to the global provider registry.

    Args:
        storage: Storage provider instance.
        settings: Settings for the default catalog (global settings if omitted).
        registry: Provider registry (the global registry if omitted).
        host_config: Optional host configuration source.

    Returns:
        A model manager instance.
    """
    return ModelManager(
        storage,
        registry or provider_registry,
        settings=settings,
        host_config=host_config,
    )
