"""Persistence for the column configuration."""

import logging

from pydantic import ValidationError as PydanticValidationError

from card_scanner.models.columns import ColumnConfig, default_columns
from card_scanner.storage.local import CONFIG_KEY, LocalStorage

logger = logging.getLogger(__name__)


class ColumnConfigStore:
    """Loads and saves the column configuration in a LocalStorage."""

    def __init__(self, storage: LocalStorage):
        self._storage = storage

    def load(self) -> ColumnConfig:
        """
        Return the saved configuration.

        Falls back to the built-in defaults when nothing is saved or the
        saved value cannot be parsed. Never raises.
        """
        raw = self._storage.get_item(CONFIG_KEY)
        if not raw:
            return default_columns()
        try:
            return ColumnConfig.model_validate_json(raw)
        except (PydanticValidationError, ValueError, RecursionError) as e:
            logger.warning("Saved column config is invalid, using defaults: %s", e)
            return default_columns()

    def save(self, config: ColumnConfig) -> None:
        """Overwrite the saved configuration."""
        self._storage.set_item(CONFIG_KEY, config.model_dump_json())

    def reset(self) -> ColumnConfig:
        """Save and return the built-in defaults."""
        config = default_columns()
        self.save(config)
        return config
