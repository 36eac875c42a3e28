"""
AffiliateClick repository.

Data access layer for AffiliateClick model.
"""

from datetime import datetime

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.models.affiliate_click import AffiliateClick
from affiliate.repositories.base import BaseRepository


class AffiliateClickRepository(BaseRepository[AffiliateClick]):
    """Repository for affiliate click operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(AffiliateClick, session)

    async def has_recent_click(
        self,
        profile_id: int,
        visitor_key: str,
        landing_path: str,
        since: datetime,
    ) -> bool:
        """
        Check for a click of the same visitor on the same profile since a moment.

        A blank landing path matches clicks on any path.

        Args:
            profile_id: Profile ID
            visitor_key: Visitor identifier
            landing_path: Landing path, may be blank
            since: Window start

        Returns:
            True if a matching click exists
        """
        conditions = [
            AffiliateClick.affiliate_profile_id == profile_id,
            AffiliateClick.visitor_key == visitor_key,
            AffiliateClick.created_at >= since,
        ]
        if landing_path:
            conditions.append(AffiliateClick.landing_path == landing_path)

        query = select(AffiliateClick.id).where(and_(*conditions)).limit(1)
        result = await self.session.execute(query)
        return result.scalar_one_or_none() is not None

    async def count_by_profiles(self, profile_ids: list[int]) -> dict[int, int]:
        """
        Count clicks for many profiles in one query.

        Args:
            profile_ids: Profile IDs

        Returns:
            Mapping profile ID -> click count (profiles without clicks omitted)
        """
        if not profile_ids:
            return {}
        query = (
            select(AffiliateClick.affiliate_profile_id, func.count())
            .where(AffiliateClick.affiliate_profile_id.in_(profile_ids))
            .group_by(AffiliateClick.affiliate_profile_id)
        )
        result = await self.session.execute(query)
        return {profile_id: total for profile_id, total in result.all()}
