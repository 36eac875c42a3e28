"""
AffiliateProfile repository.

Data access layer for AffiliateProfile model.
"""

from datetime import UTC, datetime

from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.models.affiliate_click import AffiliateClick
from affiliate.models.affiliate_profile import AffiliateProfile
from affiliate.models.enums import AffiliateProfileStatus
from affiliate.repositories.base import BaseRepository
from affiliate.repositories.filters import ProfileListFilter


class AffiliateProfileRepository(BaseRepository[AffiliateProfile]):
    """Repository for affiliate profile operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(AffiliateProfile, session)

    async def get_by_user_id(self, user_id: int) -> AffiliateProfile | None:
        """
        Get profile owned by user.

        Args:
            user_id: User ID

        Returns:
            Profile or None
        """
        return await self.get_by(user_id=user_id)

    async def get_by_code(self, code: str) -> AffiliateProfile | None:
        """
        Get profile by affiliate code (case-insensitive).

        Args:
            code: Affiliate code

        Returns:
            Profile or None
        """
        code = code.strip().upper()
        if not code:
            return None
        return await self.get_by(affiliate_code=code)

    async def get_latest_active_by_visitor_key(
        self, visitor_key: str, since: datetime
    ) -> AffiliateProfile | None:
        """
        Get the active profile owning the most recent click of a visitor.

        Only clicks created at or after `since` count. Ties on click time
        are broken by the highest click id.

        Args:
            visitor_key: Anonymous visitor identifier
            since: Attribution window start

        Returns:
            Profile of the last touch or None
        """
        query = (
            select(AffiliateProfile)
            .join(
                AffiliateClick,
                AffiliateClick.affiliate_profile_id == AffiliateProfile.id,
            )
            .where(
                and_(
                    AffiliateClick.visitor_key == visitor_key,
                    AffiliateClick.created_at >= since,
                    AffiliateProfile.status == AffiliateProfileStatus.ACTIVE.value,
                )
            )
            .order_by(AffiliateClick.created_at.desc(), AffiliateClick.id.desc())
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def batch_update_status(self, profile_ids: list[int], status: str) -> int:
        """
        Set status on many profiles at once.

        Args:
            profile_ids: Profile IDs
            status: New status

        Returns:
            Number of affected rows
        """
        if not profile_ids:
            return 0
        stmt = (
            update(AffiliateProfile)
            .where(AffiliateProfile.id.in_(profile_ids))
            .values(status=status, updated_at=datetime.now(UTC))
            .execution_options(synchronize_session="evaluate")
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def list_profiles(
        self, filters: ProfileListFilter, page: int, page_size: int
    ) -> tuple[list[AffiliateProfile], int]:
        """
        List profiles for admin screens.

        Args:
            filters: User, code and status filters
            page: Page number
            page_size: Items per page

        Returns:
            Tuple of (profiles, total)
        """
        stmt = select(AffiliateProfile)
        if filters.user_id:
            stmt = stmt.where(AffiliateProfile.user_id == filters.user_id)
        if code := filters.code.strip():
            stmt = stmt.where(AffiliateProfile.affiliate_code == code.upper())
        if status := filters.status.strip():
            stmt = stmt.where(AffiliateProfile.status == status)
        return await self.paginate(stmt, page, page_size)
