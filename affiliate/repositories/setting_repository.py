"""
Setting repository.

Data access layer for the key/value settings table.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.models.setting import Setting
from affiliate.repositories.base import BaseRepository


class SettingRepository(BaseRepository[Setting]):
    """Repository for settings documents."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(Setting, session)

    async def get_value(self, key: str) -> dict[str, Any] | None:
        """
        Get stored document by key.

        Args:
            key: Setting key

        Returns:
            Stored document or None if missing
        """
        setting = await self.get_by(key=key)
        if setting is None:
            return None
        return setting.value

    async def upsert(self, key: str, value: dict[str, Any]) -> Setting:
        """
        Create or replace a document.

        Args:
            key: Setting key
            value: JSON document

        Returns:
            Stored setting
        """
        setting = await self.get_by(key=key)
        if setting is None:
            return await self.create(key=key, value=value)

        setting.value = value
        await self.session.flush()
        await self.session.refresh(setting)
        return setting
