import logging
from dataclasses import fields
from typing import Any

from portfolio_tracker.db import Database
from portfolio_tracker.models import AppSettings
from portfolio_tracker.repositories.kv_repository import KeyValueRepository, STORAGE_KEY_SETTINGS
from portfolio_tracker.utils.model_utils import ModelFactory, to_snake_case

logger: logging.Logger = logging.getLogger(__name__)


class SettingsRepository:
    def __init__(self, db: Database):
        self.kv: KeyValueRepository = KeyValueRepository(db)

    def get(self) -> AppSettings:
        """Stored settings merged over the defaults."""
        stored: Any = self.kv.get_json(STORAGE_KEY_SETTINGS, default={})
        if not isinstance(stored, dict):
            logger.error(f"Expected a JSON object for settings, got {type(stored).__name__}")
            return AppSettings()

        merged: dict[str, Any] = ModelFactory.to_dict(AppSettings())
        merged.update(stored)
        try:
            return ModelFactory.create_from_dict(AppSettings, merged)
        except (ValueError, TypeError) as e:
            logger.error(f"Invalid stored settings, using defaults: {e}")
            return AppSettings()

    def save(self, **updates: Any) -> AppSettings:
        """
        Merge partial updates into the current settings and store the result.

        Raises:
            KeyError: If an update names an unknown setting
            ValueError: If a value can't be converted to the setting's type
        """
        known: set[str] = {f.name for f in fields(AppSettings)}
        for name in updates:
            if to_snake_case(name) not in known:
                raise KeyError(f"Unknown setting '{name}'")

        current: dict[str, Any] = {
            to_snake_case(k): v for k, v in ModelFactory.to_dict(self.get()).items()
        }
        current.update({to_snake_case(k): v for k, v in updates.items()})
        settings: AppSettings = ModelFactory.create_from_dict(AppSettings, current)
        self.kv.set_json(STORAGE_KEY_SETTINGS, ModelFactory.to_dict(settings))
        return settings
