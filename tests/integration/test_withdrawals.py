"""
Integration tests for withdrawal allocation and review.

Covers:
- Oldest-first allocation with split of the last row
- Validation and all-or-nothing failure
- Pay and reject transitions
"""

from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from affiliate.models import (
    AffiliateCommission,
    AffiliateCommissionStatus,
    AffiliateWithdrawRequest,
    AffiliateWithdrawStatus,
)
from affiliate.utils.exceptions import (
    AffiliateDisabledError,
    AffiliateNotOpenedError,
    InsufficientFundsError,
    NotFoundError,
    WithdrawAmountInvalidError,
    WithdrawChannelInvalidError,
    WithdrawStatusInvalidError,
)
from tests.helpers import PAID_AT, add_commission, reload


pytestmark = pytest.mark.integration


async def _all_commissions(session) -> list[AffiliateCommission]:
    session.expire_all()
    result = await session.execute(
        select(AffiliateCommission).order_by(AffiliateCommission.id)
    )
    return list(result.scalars().all())


async def _withdraw_count(session) -> int:
    result = await session.execute(
        select(func.count()).select_from(AffiliateWithdrawRequest)
    )
    return result.scalar_one()


@pytest_asyncio.fixture
async def two_rows(session, affiliate):
    """Two available 10.00 commissions, oldest first."""
    first = await add_commission(session, affiliate.id, 1, "10.00")
    second = await add_commission(session, affiliate.id, 2, "10.00")
    return first.id, second.id


class TestApplyWithdraw:
    """Tests for WithdrawalAllocator.apply_withdraw."""

    @pytest.mark.asyncio
    async def test_split_allocation(self, service, session, two_rows):
        """15.00 from two 10.00 rows: first attached whole, second split 5 + 5."""
        first_id, second_id = two_rows

        request = await service.apply_withdraw(1, "15", "bank", " acct-1 ")
        request_id = request.id

        assert request.amount == Decimal("15.00")
        assert request.status == AffiliateWithdrawStatus.PENDING_REVIEW
        assert request.account == "acct-1"

        rows = await _all_commissions(session)
        assert len(rows) == 3
        first, second, remainder = rows
        assert (first.id, first.commission_amount, first.withdraw_request_id) == (
            first_id, Decimal("10.00"), request_id
        )
        assert (second.id, second.commission_amount, second.withdraw_request_id) == (
            second_id, Decimal("5.00"), request_id
        )
        assert remainder.commission_amount == Decimal("5.00")
        assert remainder.withdraw_request_id is None
        assert remainder.status == AffiliateCommissionStatus.AVAILABLE
        assert remainder.order_id == 2
        assert remainder.commission_type.startswith("sp")

    @pytest.mark.asyncio
    async def test_insufficient_funds_changes_nothing(self, service, session, affiliate):
        row = await add_commission(session, affiliate.id, 1, "4.99")
        row_id = row.id

        with pytest.raises(InsufficientFundsError):
            await service.apply_withdraw(1, "5.00", "bank", "acct-1")

        reloaded = await reload(session, AffiliateCommission, row_id)
        assert reloaded.withdraw_request_id is None
        assert reloaded.commission_amount == Decimal("4.99")
        assert await _withdraw_count(session) == 0

    @pytest.mark.asyncio
    async def test_attached_rows_not_reused(self, service, session, two_rows):
        await service.apply_withdraw(1, "20", "bank", "acct-1")

        with pytest.raises(InsufficientFundsError):
            await service.apply_withdraw(1, "0.01", "bank", "acct-1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["0", "-1", "abc", "", "1e30"])
    async def test_invalid_amount(self, service, two_rows, amount):
        with pytest.raises(WithdrawAmountInvalidError):
            await service.apply_withdraw(1, amount, "bank", "acct-1")

    @pytest.mark.asyncio
    async def test_below_minimum(self, service, two_rows):
        await service.update_affiliate_setting(
            {"enabled": True, "commission_rate": "10", "min_withdraw_amount": "20"}
        )

        with pytest.raises(WithdrawAmountInvalidError):
            await service.apply_withdraw(1, "15", "bank", "acct-1")

    @pytest.mark.asyncio
    async def test_channel_rules(self, service, two_rows):
        with pytest.raises(WithdrawChannelInvalidError):
            await service.apply_withdraw(1, "5", "bank", "   ")

        await service.update_affiliate_setting(
            {"enabled": True, "commission_rate": "10", "withdraw_channels": ["Bank"]}
        )
        with pytest.raises(WithdrawChannelInvalidError):
            await service.apply_withdraw(1, "5", "paypal", "acct-1")

        request = await service.apply_withdraw(1, "5", "bank", "acct-1")
        assert request.channel == "bank"

    @pytest.mark.asyncio
    async def test_profile_required(self, service, users, enabled_program):
        users.add(2)

        with pytest.raises(AffiliateNotOpenedError):
            await service.apply_withdraw(2, "5", "bank", "acct-1")

    @pytest.mark.asyncio
    async def test_disabled_program(self, service, two_rows):
        await service.update_affiliate_setting({"enabled": False})

        with pytest.raises(AffiliateDisabledError):
            await service.apply_withdraw(1, "5", "bank", "acct-1")

    @pytest.mark.asyncio
    async def test_due_pending_rows_confirmed_first(self, service, session, affiliate):
        row = await add_commission(
            session, affiliate.id, 1, "8.00", status=AffiliateCommissionStatus.PENDING_CONFIRM
        )
        row.confirm_at = PAID_AT
        await session.commit()

        request = await service.apply_withdraw(1, "8", "bank", "acct-1")
        request_id = request.id

        reloaded = await reload(session, AffiliateCommission, row.id)
        assert reloaded.status == AffiliateCommissionStatus.AVAILABLE
        assert reloaded.withdraw_request_id == request_id


class TestReviewWithdraw:
    """Tests for WithdrawalReviewer.review_withdraw."""

    @pytest.mark.asyncio
    async def test_pay(self, service, session, two_rows):
        request = await service.apply_withdraw(1, "15", "bank", "acct-1")

        reviewed = await service.review_withdraw(99, request.id, " PAY ")

        assert reviewed.status == AffiliateWithdrawStatus.PAID
        assert reviewed.processed_by == 99
        assert reviewed.processed_at is not None
        statuses = {
            row.id: row.status for row in await _all_commissions(session)
        }
        assert statuses[two_rows[0]] == AffiliateCommissionStatus.WITHDRAWN
        assert statuses[two_rows[1]] == AffiliateCommissionStatus.WITHDRAWN
        assert list(statuses.values()).count("available") == 1

    @pytest.mark.asyncio
    async def test_reject_releases_rows(self, service, session, two_rows):
        """Rejected rows are detached and keep their status."""
        request = await service.apply_withdraw(1, "15", "bank", "acct-1")

        reviewed = await service.review_withdraw(99, request.id, "reject", "wrong account")

        assert reviewed.status == AffiliateWithdrawStatus.REJECTED
        assert reviewed.reject_reason == "wrong account"
        rows = await _all_commissions(session)
        assert all(row.withdraw_request_id is None for row in rows)
        assert all(row.status == AffiliateCommissionStatus.AVAILABLE for row in rows)

        again = await service.apply_withdraw(1, "20", "bank", "acct-2")
        assert again.amount == Decimal("20.00")

    @pytest.mark.asyncio
    async def test_only_pending_can_be_reviewed(self, service, two_rows):
        request = await service.apply_withdraw(1, "15", "bank", "acct-1")
        await service.review_withdraw(99, request.id, "pay")

        with pytest.raises(WithdrawStatusInvalidError):
            await service.review_withdraw(99, request.id, "reject")

    @pytest.mark.asyncio
    async def test_unknown_action(self, service, two_rows):
        request = await service.apply_withdraw(1, "15", "bank", "acct-1")

        with pytest.raises(WithdrawStatusInvalidError):
            await service.review_withdraw(99, request.id, "approve")

    @pytest.mark.asyncio
    async def test_missing_request(self, service, enabled_program):
        with pytest.raises(NotFoundError):
            await service.review_withdraw(99, 404, "pay")
        with pytest.raises(NotFoundError):
            await service.review_withdraw(99, 0, "pay")
        with pytest.raises(NotFoundError):
            await service.review_withdraw(99, 0, "bogus")
