"""Global default-model settings."""

import logging

from webaffe_console.db.client import DatabaseClient
from webaffe_console.exceptions import ConfigStoreError
from webaffe_console.models.identity import GlobalConfig, GlobalConfigUpdate

logger = logging.getLogger(__name__)


class SettingsAdmin:
    """Reads and writes the default provider/model used by non-admin sessions."""

    def __init__(self, db: DatabaseClient) -> None:
        self.db = db

    async def load(self) -> GlobalConfig:
        """Current config; defaults if it cannot be read."""
        try:
            return await self.db.get_global_config()
        except ConfigStoreError as e:
            logger.error(f"Error loading config: {e}")
            return GlobalConfig()

    async def save(self, update: GlobalConfigUpdate) -> GlobalConfig:
        """Merge the named fields into the stored config.

        Raises:
            ConfigStoreError: If the write fails
        """
        return await self.db.set_global_config(update)
