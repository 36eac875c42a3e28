"""
Confirmation sweep.

Promotes pending commissions whose confirm window has passed.
"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.repositories.affiliate_commission_repository import (
    AffiliateCommissionRepository,
)
from affiliate.services.base_service import BaseService, log_operation, transaction
from affiliate.utils.datetime_utils import ensure_utc, utc_now


class ConfirmationSweep(BaseService):
    """Moves due pending commissions to available."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.commission_repo = AffiliateCommissionRepository(session)

    @transaction
    @log_operation
    async def confirm_due_commissions(self, now: datetime | None = None) -> int:
        """
        Make every unattached pending commission with confirm_at <= now available.

        Runs as one predicate-guarded update, so concurrent sweeps are safe.

        Args:
            now: Sweep time (defaults to current UTC time)

        Returns:
            Number of commissions moved
        """
        now = ensure_utc(now) if now else utc_now()
        moved = await self.commission_repo.mark_pending_available(now)
        if moved:
            self.logger.info(
                "Pending commissions confirmed",
                extra={"count": moved, "now": now.isoformat()},
            )
        return moved
