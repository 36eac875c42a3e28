"""
Promotion click ledger.
"""

from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.config.business_constants import CLICK_DEDUPE_WINDOW
from affiliate.models.affiliate_click import AffiliateClick
from affiliate.repositories.affiliate_click_repository import AffiliateClickRepository
from affiliate.repositories.affiliate_profile_repository import (
    AffiliateProfileRepository,
)
from affiliate.services.affiliate.code_generator import normalize_affiliate_code
from affiliate.services.base_service import BaseService, transaction
from affiliate.services.ports import AffiliateSettingProvider, ClickInput
from affiliate.utils.datetime_utils import utc_now


def _clip(value: str | None, limit: int) -> str:
    return (value or "").strip()[:limit]


class ClickTracker(BaseService):
    """Records promotion clicks, suppressing quick repeats."""

    def __init__(
        self,
        session: AsyncSession,
        setting_provider: AffiliateSettingProvider,
        dedupe_window: timedelta = CLICK_DEDUPE_WINDOW,
    ) -> None:
        super().__init__(session)
        self.profile_repo = AffiliateProfileRepository(session)
        self.click_repo = AffiliateClickRepository(session)
        self.setting_provider = setting_provider
        self.dedupe_window = dedupe_window

    @transaction
    async def track_click(self, click: ClickInput) -> AffiliateClick | None:
        """
        Record a click on a promotion link.

        Blank, unknown or disabled codes and a disabled program are silently
        ignored, as is a repeat click of the same visitor on the same
        profile and path within the dedupe window.

        Args:
            click: Raw click data

        Returns:
            Created click, or None when nothing was recorded
        """
        code = normalize_affiliate_code(click.affiliate_code)
        if not code:
            return None

        setting = await self.setting_provider.get_affiliate_setting()
        if not setting.enabled:
            return None

        profile = await self.profile_repo.get_by_code(code)
        if profile is None or not profile.is_active:
            return None

        visitor_key = _clip(click.visitor_key, 128)
        landing_path = _clip(click.landing_path, 512)
        if visitor_key:
            duplicated = await self.click_repo.has_recent_click(
                profile.id,
                visitor_key,
                landing_path,
                since=utc_now() - self.dedupe_window,
            )
            if duplicated:
                self.logger.debug(
                    "Duplicate click suppressed",
                    extra={"profile_id": profile.id, "visitor_key": visitor_key},
                )
                return None

        return await self.click_repo.create(
            affiliate_profile_id=profile.id,
            visitor_key=visitor_key,
            landing_path=landing_path,
            referrer=_clip(click.referrer, 1024),
            client_ip=_clip(click.client_ip, 64),
            user_agent=_clip(click.user_agent, 1024),
            created_at=utc_now(),
        )
