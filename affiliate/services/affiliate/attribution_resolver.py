"""
Order attribution.

Chooses the referrer credited for a new order: the last click of the
visitor within the attribution window wins, then an explicit code.
"""

from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.config.business_constants import ATTRIBUTION_WINDOW
from affiliate.repositories.affiliate_profile_repository import (
    AffiliateProfileRepository,
)
from affiliate.services.affiliate.code_generator import normalize_affiliate_code
from affiliate.services.base_service import BaseService
from affiliate.services.ports import AffiliateSettingProvider, AttributionSnapshot
from affiliate.utils.datetime_utils import utc_now


class AttributionResolver(BaseService):
    """Resolves the affiliate snapshot stamped onto new orders."""

    def __init__(
        self,
        session: AsyncSession,
        setting_provider: AffiliateSettingProvider,
        window: timedelta = ATTRIBUTION_WINDOW,
    ) -> None:
        super().__init__(session)
        self.profile_repo = AffiliateProfileRepository(session)
        self.setting_provider = setting_provider
        self.window = window

    async def resolve_order_affiliate_snapshot(
        self,
        user_id: int,
        raw_code: str = "",
        raw_visitor_key: str = "",
    ) -> AttributionSnapshot:
        """
        Decide which profile, if any, is credited for the buyer's order.

        A visitor click inside the window takes priority over the code.
        A buyer never gets credited for their own order: if the last click
        belongs to the buyer, nobody is credited.

        Args:
            user_id: Buyer ID
            raw_code: Referral code from the request
            raw_visitor_key: Visitor identifier from the request

        Returns:
            Attribution snapshot, empty when nobody is credited
        """
        code = normalize_affiliate_code(raw_code)
        visitor_key = (raw_visitor_key or "").strip()

        setting = await self.setting_provider.get_affiliate_setting()
        if not setting.enabled:
            return AttributionSnapshot()

        if visitor_key:
            profile = await self.profile_repo.get_latest_active_by_visitor_key(
                visitor_key, since=utc_now() - self.window
            )
            if profile is not None:
                if user_id > 0 and profile.user_id == user_id:
                    return AttributionSnapshot()
                return AttributionSnapshot(profile.id, profile.affiliate_code)

        if not code:
            return AttributionSnapshot()

        profile = await self.profile_repo.get_by_code(code)
        if profile is None or not profile.is_active:
            return AttributionSnapshot()
        if user_id > 0 and profile.user_id == user_id:
            return AttributionSnapshot()

        return AttributionSnapshot(profile.id, profile.affiliate_code)
