"""
AffiliateCommission repository.

Data access layer for AffiliateCommission model, including the locked
reads used by allocation, refund proration and review.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import and_, case, distinct, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.config.business_constants import COMMISSION_TYPE_ORDER
from affiliate.models.affiliate_commission import AffiliateCommission
from affiliate.models.enums import OPEN_COMMISSION_STATUSES, AffiliateCommissionStatus
from affiliate.repositories.base import BaseRepository
from affiliate.repositories.filters import CommissionListFilter
from affiliate.utils.money import ZERO, round_money, to_decimal


def _as_money(value: Any) -> Decimal:
    if value is None:
        return ZERO
    return round_money(to_decimal(value))


@dataclass
class CommissionTotals:
    """Per-profile commission aggregates."""

    valid_order_count: int = 0
    pending: Decimal = field(default_factory=lambda: ZERO)
    available: Decimal = field(default_factory=lambda: ZERO)
    withdrawn: Decimal = field(default_factory=lambda: ZERO)


class AffiliateCommissionRepository(BaseRepository[AffiliateCommission]):
    """Repository for affiliate commission operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(AffiliateCommission, session)

    async def get_by_order_and_profile(
        self,
        order_id: int,
        profile_id: int,
        commission_type: str = COMMISSION_TYPE_ORDER,
    ) -> AffiliateCommission | None:
        """
        Get commission by its natural key.

        Args:
            order_id: Order ID
            profile_id: Profile ID
            commission_type: Commission type

        Returns:
            Commission or None
        """
        return await self.get_by(
            order_id=order_id,
            affiliate_profile_id=profile_id,
            commission_type=commission_type,
        )

    async def list_open_by_order(
        self, order_id: int, for_update: bool = False
    ) -> list[AffiliateCommission]:
        """
        Get pending and available commissions of an order.

        Args:
            order_id: Order ID
            for_update: Lock rows until the transaction ends

        Returns:
            Commissions ordered by id
        """
        query = (
            select(AffiliateCommission)
            .where(
                and_(
                    AffiliateCommission.order_id == order_id,
                    AffiliateCommission.status.in_(OPEN_COMMISSION_STATUSES),
                )
            )
            .order_by(AffiliateCommission.id.asc())
        )
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_available_for_update(self, profile_id: int) -> list[AffiliateCommission]:
        """
        Lock available, unattached commissions of a profile.

        Args:
            profile_id: Profile ID

        Returns:
            Locked commissions ordered by id
        """
        query = (
            select(AffiliateCommission)
            .where(
                and_(
                    AffiliateCommission.affiliate_profile_id == profile_id,
                    AffiliateCommission.status == AffiliateCommissionStatus.AVAILABLE.value,
                    AffiliateCommission.withdraw_request_id.is_(None),
                )
            )
            .order_by(AffiliateCommission.id.asc())
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_by_withdraw_for_update(self, withdraw_id: int) -> list[AffiliateCommission]:
        """
        Lock commissions attached to a withdrawal request.

        Args:
            withdraw_id: Withdrawal request ID

        Returns:
            Locked commissions ordered by id
        """
        query = (
            select(AffiliateCommission)
            .where(AffiliateCommission.withdraw_request_id == withdraw_id)
            .order_by(AffiliateCommission.id.asc())
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def mark_pending_available(self, now: datetime) -> int:
        """
        Move due pending commissions to available in one statement.

        Rows attached to a withdrawal or without confirm_at are skipped.
        Matching rows already loaded in the session are updated in place.

        Args:
            now: Sweep time; rows with confirm_at <= now are due

        Returns:
            Number of rows moved
        """
        stmt = (
            update(AffiliateCommission)
            .where(
                and_(
                    AffiliateCommission.status
                    == AffiliateCommissionStatus.PENDING_CONFIRM.value,
                    AffiliateCommission.withdraw_request_id.is_(None),
                    AffiliateCommission.confirm_at.is_not(None),
                    AffiliateCommission.confirm_at <= now,
                )
            )
            .values(
                status=AffiliateCommissionStatus.AVAILABLE.value,
                available_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session="evaluate")
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def batch_update(self, ids: Iterable[int], **values: Any) -> int:
        """
        Apply the same column values to many commissions.

        Args:
            ids: Commission IDs
            **values: Column values

        Returns:
            Number of affected rows
        """
        ids = list(ids)
        if not ids:
            return 0
        stmt = (
            update(AffiliateCommission)
            .where(AffiliateCommission.id.in_(ids))
            .values(**values)
            .execution_options(synchronize_session="evaluate")
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def totals_by_profiles(
        self, profile_ids: list[int]
    ) -> dict[int, CommissionTotals]:
        """
        Aggregate commissions for many profiles in one query.

        Available only counts unattached rows.

        Args:
            profile_ids: Profile IDs

        Returns:
            Mapping profile ID -> totals; every requested ID is present
        """
        totals = {profile_id: CommissionTotals() for profile_id in profile_ids}
        if not profile_ids:
            return totals

        amount = AffiliateCommission.commission_amount
        status = AffiliateCommission.status
        query = (
            select(
                AffiliateCommission.affiliate_profile_id,
                func.count(
                    distinct(
                        case(
                            (
                                status != AffiliateCommissionStatus.REJECTED.value,
                                AffiliateCommission.order_id,
                            ),
                            else_=None,
                        )
                    )
                ),
                func.sum(
                    case(
                        (status == AffiliateCommissionStatus.PENDING_CONFIRM.value, amount),
                        else_=0,
                    )
                ),
                func.sum(
                    case(
                        (
                            and_(
                                status == AffiliateCommissionStatus.AVAILABLE.value,
                                AffiliateCommission.withdraw_request_id.is_(None),
                            ),
                            amount,
                        ),
                        else_=0,
                    )
                ),
                func.sum(
                    case(
                        (status == AffiliateCommissionStatus.WITHDRAWN.value, amount),
                        else_=0,
                    )
                ),
            )
            .where(AffiliateCommission.affiliate_profile_id.in_(profile_ids))
            .group_by(AffiliateCommission.affiliate_profile_id)
        )
        result = await self.session.execute(query)
        for profile_id, orders, pending, available, withdrawn in result.all():
            totals[profile_id] = CommissionTotals(
                valid_order_count=orders or 0,
                pending=_as_money(pending),
                available=_as_money(available),
                withdrawn=_as_money(withdrawn),
            )
        return totals

    async def list_commissions(
        self, filters: CommissionListFilter, page: int, page_size: int
    ) -> tuple[list[AffiliateCommission], int]:
        """
        List commissions, newest first.

        Args:
            filters: Profile, order, status and created range filters
            page: Page number
            page_size: Items per page

        Returns:
            Tuple of (commissions, total)
        """
        stmt = select(AffiliateCommission)
        if filters.profile_id:
            stmt = stmt.where(AffiliateCommission.affiliate_profile_id == filters.profile_id)
        if filters.order_id:
            stmt = stmt.where(AffiliateCommission.order_id == filters.order_id)
        if status := filters.status.strip():
            stmt = stmt.where(AffiliateCommission.status == status)
        if filters.created_from is not None:
            stmt = stmt.where(AffiliateCommission.created_at >= filters.created_from)
        if filters.created_to is not None:
            stmt = stmt.where(AffiliateCommission.created_at <= filters.created_to)
        return await self.paginate(stmt, page, page_size)
