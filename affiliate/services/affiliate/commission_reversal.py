"""
Commission reversal on order cancellation and refunds.

Rows attached to a withdrawal request are never touched here; they only
become reversible again after the request is rejected and detaches them.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.config.business_constants import (
    DEFAULT_CANCEL_REASON,
    DEFAULT_REFUND_REASON,
)
from affiliate.models.affiliate_commission import AffiliateCommission
from affiliate.models.enums import AffiliateCommissionStatus
from affiliate.repositories.affiliate_commission_repository import (
    AffiliateCommissionRepository,
)
from affiliate.services.base_service import BaseService, transaction
from affiliate.utils.datetime_utils import utc_now
from affiliate.utils.money import ZERO, clamp_non_negative, round_money, to_decimal


class RefundableOrder(Protocol):
    id: int
    total_amount: Decimal


@dataclass(frozen=True)
class RefundWindow:
    """Refund slice being applied: delta out of the still-unrefunded remaining."""

    delta: Decimal
    remaining: Decimal


def is_reversal_protected(commission: AffiliateCommission) -> bool:
    """Check if a commission is locked into a withdrawal and must not be reversed."""
    return commission.is_attached


def compute_refund_window(
    total_amount: Decimal, refund_delta: Decimal, refunded_before: Decimal
) -> RefundWindow | None:
    """
    Normalize refund inputs.

    Args:
        total_amount: Order total
        refund_delta: Amount refunded now
        refunded_before: Amount refunded by earlier refunds

    Returns:
        Window with delta clamped to the remaining amount, or None when
        there is nothing to prorate

    Raises:
        ValueError: If an amount has too many digits to round
    """
    delta = round_money(refund_delta)
    if delta <= ZERO:
        return None
    total = round_money(total_amount)
    if total <= ZERO:
        return None
    before = min(clamp_non_negative(round_money(refunded_before)), total)
    remaining = round_money(total - before)
    if remaining <= ZERO:
        return None
    return RefundWindow(delta=min(delta, remaining), remaining=remaining)


def prorate_amount(amount: Decimal, window: RefundWindow) -> Decimal:
    """Reduce amount by the share delta/remaining, never below zero."""
    deduct = round_money(amount * window.delta / window.remaining)
    return clamp_non_negative(round_money(amount - deduct))


class CommissionReversalEngine(BaseService):
    """Rejects or reduces commissions of canceled and refunded orders."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.commission_repo = AffiliateCommissionRepository(session)

    @transaction
    async def handle_order_canceled(self, order_id: int, reason: str = "") -> int:
        """
        Reject open commissions of a canceled order.

        Args:
            order_id: Canceled order ID
            reason: Rejection reason (defaults to "order_canceled")

        Returns:
            Number of commissions rejected
        """
        if order_id <= 0:
            return 0

        rows = await self.commission_repo.list_open_by_order(order_id, for_update=True)
        reason_text = (reason or "").strip() or DEFAULT_CANCEL_REASON
        now = utc_now()

        rejected = 0
        for row in rows:
            if is_reversal_protected(row):
                continue
            row.status = AffiliateCommissionStatus.REJECTED.value
            row.invalid_reason = reason_text
            row.updated_at = now
            rejected += 1

        await self.session.flush()

        if rejected:
            self.logger.info(
                "Commissions rejected for canceled order",
                extra={"order_id": order_id, "count": rejected, "reason": reason_text},
            )
        return rejected

    async def handle_order_refunded_tx(
        self,
        session: AsyncSession,
        order: RefundableOrder,
        refund_delta: Decimal,
        refunded_before: Decimal,
        reason: str = "",
    ) -> int:
        """
        Prorate open commissions of an order for a partial or full refund.

        Runs inside the caller's session and transaction; flushes but never
        commits, so the caller's refund and this reversal land together.

        Each unprotected row loses commission and base in the ratio
        delta / remaining; a row that drops to zero is rejected.

        Args:
            session: Caller's session with an open transaction
            order: Refunded order (id and total_amount)
            refund_delta: Amount refunded by this refund
            refunded_before: Amount refunded before this refund
            reason: Rejection reason (defaults to "order_refunded")

        Returns:
            Number of commissions changed

        Raises:
            ValueError: If an amount is not numeric or out of range
        """
        if order is None or order.id <= 0:
            return 0

        window = compute_refund_window(
            to_decimal(order.total_amount),
            to_decimal(refund_delta),
            to_decimal(refunded_before),
        )
        if window is None:
            return 0

        commission_repo = AffiliateCommissionRepository(session)
        rows = await commission_repo.list_open_by_order(order.id, for_update=True)
        if not rows:
            return 0

        reason_text = (reason or "").strip() or DEFAULT_REFUND_REASON
        now = utc_now()

        changed = 0
        for row in rows:
            if is_reversal_protected(row):
                continue

            current = round_money(row.commission_amount)
            if current <= ZERO:
                next_commission = ZERO
            else:
                next_commission = prorate_amount(current, window)
                current_base = round_money(row.base_amount)
                if current_base > ZERO:
                    row.base_amount = prorate_amount(current_base, window)
                row.commission_amount = next_commission

            if next_commission <= ZERO:
                row.status = AffiliateCommissionStatus.REJECTED.value
                row.invalid_reason = reason_text
                row.confirm_at = None
                row.available_at = None
            row.updated_at = now
            changed += 1

        await session.flush()

        self.logger.info(
            "Commissions prorated for refund",
            extra={
                "order_id": order.id,
                "delta": str(window.delta),
                "remaining": str(window.remaining),
                "count": changed,
            },
        )
        return changed
