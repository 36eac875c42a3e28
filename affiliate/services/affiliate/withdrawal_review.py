"""
Withdrawal review.

pending_review -> paid | rejected. Paying finalizes the attached
commissions; rejecting releases them back to the affiliate.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.models.affiliate_withdraw_request import AffiliateWithdrawRequest
from affiliate.models.enums import (
    AffiliateCommissionStatus,
    AffiliateWithdrawAction,
    AffiliateWithdrawStatus,
)
from affiliate.repositories.affiliate_commission_repository import (
    AffiliateCommissionRepository,
)
from affiliate.repositories.affiliate_withdraw_repository import (
    AffiliateWithdrawRepository,
)
from affiliate.services.base_service import BaseService, transaction
from affiliate.utils.datetime_utils import utc_now
from affiliate.utils.exceptions import NotFoundError, WithdrawStatusInvalidError


def parse_withdraw_action(raw: str) -> AffiliateWithdrawAction:
    """
    Parse review action, case-insensitively.

    Raises:
        WithdrawStatusInvalidError: If action is not pay/reject
    """
    try:
        return AffiliateWithdrawAction((raw or "").strip().lower())
    except ValueError as e:
        raise WithdrawStatusInvalidError("Unknown withdrawal review action") from e


class WithdrawalReviewer(BaseService):
    """Admin review of withdrawal requests."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.withdraw_repo = AffiliateWithdrawRepository(session)
        self.commission_repo = AffiliateCommissionRepository(session)

    @transaction
    async def review_withdraw(
        self,
        admin_id: int,
        withdraw_id: int,
        action: str,
        reject_reason: str = "",
    ) -> AffiliateWithdrawRequest:
        """
        Pay or reject a pending withdrawal request.

        Args:
            admin_id: Reviewing admin
            withdraw_id: Withdrawal request ID
            action: "pay" or "reject"
            reject_reason: Reason stored on rejection

        Returns:
            Reviewed request

        Raises:
            WithdrawStatusInvalidError: Unknown action or request not pending
            NotFoundError: Request does not exist
        """
        if withdraw_id <= 0:
            raise NotFoundError("Withdrawal request not found")
        act = parse_withdraw_action(action)

        request = await self.withdraw_repo.get_by_id_for_update(withdraw_id)
        if request is None:
            raise NotFoundError("Withdrawal request not found")
        if not request.is_pending:
            raise WithdrawStatusInvalidError()

        rows = await self.commission_repo.list_by_withdraw_for_update(withdraw_id)
        ids = [row.id for row in rows]
        now = utc_now()

        if act == AffiliateWithdrawAction.REJECT:
            # Rows keep their status; they become available to new requests again
            await self.commission_repo.batch_update(
                ids, withdraw_request_id=None, updated_at=now
            )
            request.status = AffiliateWithdrawStatus.REJECTED.value
            request.reject_reason = (reject_reason or "").strip()[:255]
        else:
            await self.commission_repo.batch_update(
                ids,
                status=AffiliateCommissionStatus.WITHDRAWN.value,
                updated_at=now,
            )
            request.status = AffiliateWithdrawStatus.PAID.value
            request.reject_reason = ""

        request.processed_by = admin_id
        request.processed_at = now
        request.updated_at = now
        await self.session.flush()

        self.logger.info(
            "Withdrawal reviewed",
            extra={
                "withdraw_id": withdraw_id,
                "admin_id": admin_id,
                "action": act.value,
                "commission_count": len(ids),
                "amount": str(request.amount),
            },
        )
        return request
