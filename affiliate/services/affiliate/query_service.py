"""
Affiliate read model: dashboard, stats and listings.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.config.business_constants import PROMOTION_PATH_TEMPLATE
from affiliate.models.affiliate_commission import AffiliateCommission
from affiliate.models.affiliate_profile import AffiliateProfile
from affiliate.models.affiliate_withdraw_request import AffiliateWithdrawRequest
from affiliate.repositories.affiliate_click_repository import AffiliateClickRepository
from affiliate.repositories.affiliate_commission_repository import (
    AffiliateCommissionRepository,
    CommissionTotals,
)
from affiliate.repositories.affiliate_profile_repository import (
    AffiliateProfileRepository,
)
from affiliate.repositories.affiliate_withdraw_repository import (
    AffiliateWithdrawRepository,
)
from affiliate.repositories.filters import (
    CommissionListFilter,
    Page,
    ProfileListFilter,
    WithdrawListFilter,
    normalize_pagination,
)
from affiliate.services.base_service import BaseService
from affiliate.utils.money import ZERO, round_money


def calc_conversion_rate(valid_orders: int, clicks: int) -> Decimal:
    """Orders per click in percent, two places; zero when either side is zero."""
    if clicks <= 0 or valid_orders <= 0:
        return ZERO
    return round_money(Decimal(valid_orders) / Decimal(clicks) * 100)


@dataclass
class AffiliateStats:
    """Performance figures of one profile."""

    click_count: int = 0
    valid_order_count: int = 0
    conversion_rate: Decimal = field(default_factory=lambda: ZERO)
    pending_commission: Decimal = field(default_factory=lambda: ZERO)
    available_commission: Decimal = field(default_factory=lambda: ZERO)
    withdrawn_commission: Decimal = field(default_factory=lambda: ZERO)

    @classmethod
    def from_totals(cls, click_count: int, totals: CommissionTotals) -> "AffiliateStats":
        return cls(
            click_count=click_count,
            valid_order_count=totals.valid_order_count,
            conversion_rate=calc_conversion_rate(totals.valid_order_count, click_count),
            pending_commission=totals.pending,
            available_commission=totals.available,
            withdrawn_commission=totals.withdrawn,
        )


@dataclass
class AffiliateDashboard:
    """User-facing affiliate center."""

    opened: bool = False
    affiliate_code: str = ""
    promotion_path: str = ""
    stats: AffiliateStats = field(default_factory=AffiliateStats)


@dataclass
class AdminProfileItem:
    """Profile row of the admin listing."""

    profile: AffiliateProfile
    stats: AffiliateStats


class AffiliateQueryService(BaseService):
    """Read-only affiliate queries; never locks, never commits."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.profile_repo = AffiliateProfileRepository(session)
        self.click_repo = AffiliateClickRepository(session)
        self.commission_repo = AffiliateCommissionRepository(session)
        self.withdraw_repo = AffiliateWithdrawRepository(session)

    async def get_profile_stats(self, profile_id: int) -> AffiliateStats:
        """
        Build stats of one profile.

        Args:
            profile_id: Profile ID

        Returns:
            Stats (all zero for an unknown profile)
        """
        click_counts = await self.click_repo.count_by_profiles([profile_id])
        totals = await self.commission_repo.totals_by_profiles([profile_id])
        return AffiliateStats.from_totals(
            click_counts.get(profile_id, 0), totals[profile_id]
        )

    async def get_user_dashboard(self, user_id: int) -> AffiliateDashboard:
        """
        Get affiliate center data of a user.

        Args:
            user_id: User ID

        Returns:
            Dashboard; opened is False when the user has no profile
        """
        if user_id <= 0:
            return AffiliateDashboard()
        profile = await self.profile_repo.get_by_user_id(user_id)
        if profile is None:
            return AffiliateDashboard()

        return AffiliateDashboard(
            opened=True,
            affiliate_code=profile.affiliate_code,
            promotion_path=PROMOTION_PATH_TEMPLATE.format(code=profile.affiliate_code),
            stats=await self.get_profile_stats(profile.id),
        )

    async def list_user_commissions(
        self,
        user_id: int,
        page: int = 1,
        page_size: int = 0,
        status: str = "",
    ) -> Page[AffiliateCommission]:
        """List commissions of the user's profile, newest first."""
        page, page_size = normalize_pagination(page, page_size)
        profile = await self.profile_repo.get_by_user_id(user_id) if user_id > 0 else None
        if profile is None:
            return Page([], 0, page, page_size)

        items, total = await self.commission_repo.list_commissions(
            CommissionListFilter(profile_id=profile.id, status=status or ""),
            page,
            page_size,
        )
        return Page(items, total, page, page_size)

    async def list_user_withdraws(
        self,
        user_id: int,
        page: int = 1,
        page_size: int = 0,
        status: str = "",
    ) -> Page[AffiliateWithdrawRequest]:
        """List withdrawal requests of the user's profile, newest first."""
        page, page_size = normalize_pagination(page, page_size)
        profile = await self.profile_repo.get_by_user_id(user_id) if user_id > 0 else None
        if profile is None:
            return Page([], 0, page, page_size)

        items, total = await self.withdraw_repo.list_withdraws(
            WithdrawListFilter(profile_id=profile.id, status=status or ""),
            page,
            page_size,
        )
        return Page(items, total, page, page_size)

    async def list_admin_profiles(
        self,
        filters: ProfileListFilter | None = None,
        page: int = 1,
        page_size: int = 0,
    ) -> Page[AdminProfileItem]:
        """
        List profiles with their stats.

        Stats for the whole page are loaded with two grouped queries.
        """
        page, page_size = normalize_pagination(page, page_size)
        profiles, total = await self.profile_repo.list_profiles(
            filters or ProfileListFilter(), page, page_size
        )

        ids = [profile.id for profile in profiles]
        click_counts = await self.click_repo.count_by_profiles(ids)
        totals = await self.commission_repo.totals_by_profiles(ids)

        items = [
            AdminProfileItem(
                profile=profile,
                stats=AffiliateStats.from_totals(
                    click_counts.get(profile.id, 0), totals[profile.id]
                ),
            )
            for profile in profiles
        ]
        return Page(items, total, page, page_size)

    async def list_admin_commissions(
        self,
        filters: CommissionListFilter | None = None,
        page: int = 1,
        page_size: int = 0,
    ) -> Page[AffiliateCommission]:
        """List commissions across profiles, newest first."""
        page, page_size = normalize_pagination(page, page_size)
        items, total = await self.commission_repo.list_commissions(
            filters or CommissionListFilter(), page, page_size
        )
        return Page(items, total, page, page_size)

    async def list_admin_withdraws(
        self,
        filters: WithdrawListFilter | None = None,
        page: int = 1,
        page_size: int = 0,
    ) -> Page[AffiliateWithdrawRequest]:
        """List withdrawal requests across profiles, newest first."""
        page, page_size = normalize_pagination(page, page_size)
        items, total = await self.withdraw_repo.list_withdraws(
            filters or WithdrawListFilter(), page, page_size
        )
        return Page(items, total, page, page_size)
