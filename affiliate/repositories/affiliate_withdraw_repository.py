"""
AffiliateWithdrawRequest repository.

Data access layer for AffiliateWithdrawRequest model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.models.affiliate_withdraw_request import AffiliateWithdrawRequest
from affiliate.repositories.base import BaseRepository
from affiliate.repositories.filters import WithdrawListFilter


class AffiliateWithdrawRepository(BaseRepository[AffiliateWithdrawRequest]):
    """Repository for affiliate withdrawal request operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(AffiliateWithdrawRequest, session)

    async def list_withdraws(
        self, filters: WithdrawListFilter, page: int, page_size: int
    ) -> tuple[list[AffiliateWithdrawRequest], int]:
        """
        List withdrawal requests, newest first.

        Args:
            filters: Profile, status, account keyword and created range filters
            page: Page number
            page_size: Items per page

        Returns:
            Tuple of (requests, total)
        """
        stmt = select(AffiliateWithdrawRequest)
        if filters.profile_id:
            stmt = stmt.where(
                AffiliateWithdrawRequest.affiliate_profile_id == filters.profile_id
            )
        if status := filters.status.strip():
            stmt = stmt.where(AffiliateWithdrawRequest.status == status)
        if keyword := filters.keyword.strip():
            stmt = stmt.where(AffiliateWithdrawRequest.account.contains(keyword))
        if filters.created_from is not None:
            stmt = stmt.where(AffiliateWithdrawRequest.created_at >= filters.created_from)
        if filters.created_to is not None:
            stmt = stmt.where(AffiliateWithdrawRequest.created_at <= filters.created_to)
        return await self.paginate(stmt, page, page_size)
