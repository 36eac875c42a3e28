"""
Withdrawal allocation.

Funds a withdrawal request from available commission rows, oldest first,
splitting the last row when it is larger than what is still needed.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.models.affiliate_withdraw_request import AffiliateWithdrawRequest
from affiliate.models.enums import AffiliateCommissionStatus, AffiliateWithdrawStatus
from affiliate.repositories.affiliate_commission_repository import (
    AffiliateCommissionRepository,
)
from affiliate.repositories.affiliate_profile_repository import (
    AffiliateProfileRepository,
)
from affiliate.repositories.affiliate_withdraw_repository import (
    AffiliateWithdrawRepository,
)
from affiliate.services.affiliate.code_generator import build_split_commission_type
from affiliate.services.affiliate.confirmation_sweep import ConfirmationSweep
from affiliate.services.base_service import BaseService, transaction
from affiliate.services.ports import AffiliateSettingProvider
from affiliate.utils.datetime_utils import utc_now
from affiliate.utils.exceptions import (
    AffiliateDisabledError,
    AffiliateNotOpenedError,
    InsufficientFundsError,
    WithdrawAmountInvalidError,
    WithdrawChannelInvalidError,
)
from affiliate.utils.money import ZERO, round_money, to_decimal


@dataclass(frozen=True)
class AllocationPlan:
    """
    Result of planning an allocation.

    Attributes:
        whole_ids: Rows attached in full
        split_id: Row that is shrunk to split_amount and attached
        split_amount: Amount left on the split row
        split_remainder: Amount moved to a new unattached sibling row
    """

    whole_ids: tuple[int, ...]
    split_id: int | None = None
    split_amount: Decimal = ZERO
    split_remainder: Decimal = ZERO

    @property
    def attached_ids(self) -> list[int]:
        ids = list(self.whole_ids)
        if self.split_id is not None:
            ids.append(self.split_id)
        return ids


def plan_allocation(
    rows: Iterable[tuple[int, Decimal]], amount: Decimal
) -> AllocationPlan:
    """
    Choose rows to fund an amount exactly.

    Rows are taken in the given order. Whole rows are attached while they
    fit; the first row that would overshoot is split. Rows with a zero
    amount are skipped.

    Args:
        rows: (row id, commission amount) pairs in allocation order
        amount: Amount to fund

    Returns:
        Allocation plan

    Raises:
        InsufficientFundsError: If the rows do not cover the amount
    """
    remaining = round_money(amount)
    whole: list[int] = []
    for row_id, row_amount in rows:
        if remaining <= ZERO:
            break
        row_amount = round_money(row_amount)
        if row_amount <= ZERO:
            continue
        if row_amount <= remaining:
            whole.append(row_id)
            remaining = round_money(remaining - row_amount)
            continue
        return AllocationPlan(
            whole_ids=tuple(whole),
            split_id=row_id,
            split_amount=remaining,
            split_remainder=round_money(row_amount - remaining),
        )

    if remaining > ZERO:
        raise InsufficientFundsError()
    return AllocationPlan(whole_ids=tuple(whole))


class WithdrawalAllocator(BaseService):
    """Creates withdrawal requests backed by attached commissions."""

    def __init__(
        self,
        session: AsyncSession,
        setting_provider: AffiliateSettingProvider,
        sweep: ConfirmationSweep | None = None,
    ) -> None:
        """
        Initialize allocator.

        Args:
            session: Database session
            setting_provider: Affiliate configuration source
            sweep: Confirmation sweep run before each allocation
        """
        super().__init__(session)
        self.profile_repo = AffiliateProfileRepository(session)
        self.commission_repo = AffiliateCommissionRepository(session)
        self.withdraw_repo = AffiliateWithdrawRepository(session)
        self.setting_provider = setting_provider
        self.sweep = sweep or ConfirmationSweep(session)

    async def apply_withdraw(
        self,
        user_id: int,
        amount: Any,
        channel: str,
        account: str,
    ) -> AffiliateWithdrawRequest:
        """
        Submit a withdrawal request.

        Validates the request, runs the confirmation sweep, then allocates
        commissions in a single transaction that rolls back entirely when
        funds are insufficient.

        Args:
            user_id: Requesting user
            amount: Requested amount
            channel: Payout channel
            account: Payout account

        Returns:
            Created request in pending_review

        Raises:
            AffiliateNotOpenedError: No active profile
            AffiliateDisabledError: Program is disabled
            WithdrawAmountInvalidError: Amount not positive or below minimum
            WithdrawChannelInvalidError: Channel/account blank or channel not allowed
            InsufficientFundsError: Available commissions do not cover amount
        """
        if user_id <= 0:
            raise AffiliateNotOpenedError()

        setting = await self.setting_provider.get_affiliate_setting()
        if not setting.enabled:
            raise AffiliateDisabledError()

        try:
            amount = round_money(to_decimal(amount))
        except ValueError as e:
            raise WithdrawAmountInvalidError() from e
        if amount <= ZERO or amount < round_money(setting.min_withdraw_amount):
            raise WithdrawAmountInvalidError()

        channel = (channel or "").strip()
        account = (account or "").strip()
        if not channel or not account:
            raise WithdrawChannelInvalidError()
        if not setting.allows_channel(channel):
            raise WithdrawChannelInvalidError()

        await self.sweep.confirm_due_commissions(utc_now())

        return await self._allocate(user_id, amount, channel, account)

    @transaction
    async def _allocate(
        self,
        user_id: int,
        amount: Decimal,
        channel: str,
        account: str,
    ) -> AffiliateWithdrawRequest:
        profile = await self.profile_repo.get_by_user_id(user_id)
        if profile is None or not profile.is_active:
            raise AffiliateNotOpenedError()

        rows = await self.commission_repo.list_available_for_update(profile.id)
        plan = plan_allocation(((row.id, row.commission_amount) for row in rows), amount)
        now = utc_now()

        if plan.split_id is not None:
            source = next(row for row in rows if row.id == plan.split_id)
            source.commission_amount = plan.split_amount
            source.updated_at = now
            await self.session.flush()

            remainder = await self.commission_repo.create(
                affiliate_profile_id=source.affiliate_profile_id,
                order_id=source.order_id,
                commission_type=build_split_commission_type(source.id),
                base_amount=source.base_amount,
                rate_percent=source.rate_percent,
                commission_amount=plan.split_remainder,
                status=AffiliateCommissionStatus.AVAILABLE.value,
                confirm_at=source.confirm_at,
                available_at=source.available_at,
                withdraw_request_id=None,
                invalid_reason="",
                created_at=now,
                updated_at=now,
            )
            self.logger.debug(
                "Commission split for withdrawal",
                extra={
                    "source_id": source.id,
                    "remainder_id": remainder.id,
                    "attached": str(plan.split_amount),
                    "remainder": str(plan.split_remainder),
                },
            )

        request = await self.withdraw_repo.create(
            affiliate_profile_id=profile.id,
            amount=amount,
            channel=channel,
            account=account,
            status=AffiliateWithdrawStatus.PENDING_REVIEW.value,
            created_at=now,
            updated_at=now,
        )
        await self.commission_repo.batch_update(
            plan.attached_ids,
            withdraw_request_id=request.id,
            updated_at=now,
        )

        self.logger.info(
            "Withdrawal requested",
            extra={
                "user_id": user_id,
                "profile_id": profile.id,
                "withdraw_id": request.id,
                "amount": str(amount),
                "commission_count": len(plan.attached_ids),
            },
        )
        return request
