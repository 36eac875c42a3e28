"""
Affiliate setting service.

Reads and writes the typed affiliate configuration stored under the
"affiliate_config" settings key.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.config.affiliate_setting import AffiliateSetting
from affiliate.config.business_constants import SETTING_KEY_AFFILIATE_CONFIG
from affiliate.repositories.setting_repository import SettingRepository
from affiliate.services.base_service import BaseService, transaction
from affiliate.utils.exceptions import AffiliateConfigInvalidError


class AffiliateSettingService(BaseService):
    """Affiliate configuration backed by the settings table."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.setting_repo = SettingRepository(session)

    async def get_affiliate_setting(self) -> AffiliateSetting:
        """
        Get current affiliate configuration.

        Missing or malformed documents yield the defaults (program disabled).

        Returns:
            Normalized setting
        """
        raw = await self.setting_repo.get_value(SETTING_KEY_AFFILIATE_CONFIG)
        if raw is None:
            return AffiliateSetting()
        return AffiliateSetting.from_storage(raw)

    @transaction
    async def update_affiliate_setting(
        self, data: AffiliateSetting | Mapping[str, Any]
    ) -> AffiliateSetting:
        """
        Normalize and persist affiliate configuration.

        Args:
            data: Setting instance or a loose mapping of fields

        Returns:
            Setting as stored

        Raises:
            AffiliateConfigInvalidError: If data is not a setting document
        """
        if isinstance(data, AffiliateSetting):
            setting = data
        elif isinstance(data, Mapping):
            try:
                setting = AffiliateSetting.from_storage(dict(data))
            except ValidationError as e:
                raise AffiliateConfigInvalidError() from e
        else:
            raise AffiliateConfigInvalidError()

        await self.setting_repo.upsert(
            SETTING_KEY_AFFILIATE_CONFIG, setting.to_storage()
        )

        self.logger.info(
            "Affiliate setting updated",
            extra={
                "enabled": setting.enabled,
                "commission_rate": str(setting.commission_rate),
                "confirm_days": setting.confirm_days,
            },
        )
        return setting
