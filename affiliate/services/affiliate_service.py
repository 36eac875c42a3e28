"""
Affiliate service - Main service facade.

This service acts as a facade that delegates to specialized modules.
Callers own the session; each mutating operation commits its own unit
of work except handle_order_refunded_tx, which joins the caller's
transaction.

Module structure:
- affiliate/click_tracker: Click ledger
- affiliate/attribution_resolver: Order attribution
- affiliate/commission_accrual: Accrual on paid orders
- affiliate/confirmation_sweep: Pending -> available
- affiliate/commission_reversal: Cancellation and refund proration
- affiliate/withdrawal_allocator: Withdrawal requests
- affiliate/withdrawal_review: Admin review
- affiliate/profile_manager: Profiles
- affiliate/query_service: Dashboard and listings
"""

from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.config.affiliate_setting import AffiliateSetting
from affiliate.models.affiliate_click import AffiliateClick
from affiliate.models.affiliate_commission import AffiliateCommission
from affiliate.models.affiliate_profile import AffiliateProfile
from affiliate.models.affiliate_withdraw_request import AffiliateWithdrawRequest
from affiliate.repositories.filters import (
    CommissionListFilter,
    Page,
    ProfileListFilter,
    WithdrawListFilter,
)
from affiliate.services.affiliate import (
    AdminProfileItem,
    AffiliateDashboard,
    AffiliateProfileManager,
    AffiliateQueryService,
    AffiliateStats,
    AttributionResolver,
    ClickTracker,
    CommissionAccrualEngine,
    CommissionReversalEngine,
    ConfirmationSweep,
    WithdrawalAllocator,
    WithdrawalReviewer,
)
from affiliate.services.affiliate.commission_reversal import RefundableOrder
from affiliate.services.affiliate_setting_service import AffiliateSettingService
from affiliate.services.base_service import BaseService
from affiliate.services.ports import (
    AffiliateSettingProvider,
    AttributionSnapshot,
    ClickInput,
    OrderLookup,
    ProductLookup,
    UserLookup,
)


class AffiliateService(BaseService):
    """
    Affiliate program service.

    This is a facade over the specialized affiliate components, all
    sharing one session and one configuration source.
    """

    def __init__(
        self,
        session: AsyncSession,
        user_lookup: UserLookup,
        order_lookup: OrderLookup,
        product_lookup: ProductLookup,
        setting_provider: AffiliateSettingProvider | None = None,
    ) -> None:
        """
        Initialize affiliate service and all sub-components.

        Args:
            session: Database session
            user_lookup: User collaborator
            order_lookup: Order collaborator
            product_lookup: Product collaborator
            setting_provider: Configuration source; defaults to the
                settings table
        """
        super().__init__(session)

        self.setting_service = AffiliateSettingService(session)
        setting_provider = setting_provider or self.setting_service

        self.click_tracker = ClickTracker(session, setting_provider)
        self.attribution_resolver = AttributionResolver(session, setting_provider)
        self.accrual_engine = CommissionAccrualEngine(
            session, setting_provider, order_lookup, product_lookup
        )
        self.sweep = ConfirmationSweep(session)
        self.reversal_engine = CommissionReversalEngine(session)
        self.withdrawal_allocator = WithdrawalAllocator(
            session, setting_provider, self.sweep
        )
        self.withdrawal_reviewer = WithdrawalReviewer(session)
        self.profile_manager = AffiliateProfileManager(
            session, setting_provider, user_lookup
        )
        self.query_service = AffiliateQueryService(session)

    # ========================================================================
    # SETTINGS (delegates to AffiliateSettingService)
    # ========================================================================

    async def get_affiliate_setting(self) -> AffiliateSetting:
        """Get stored affiliate configuration."""
        return await self.setting_service.get_affiliate_setting()

    async def update_affiliate_setting(
        self, data: AffiliateSetting | Mapping[str, Any]
    ) -> AffiliateSetting:
        """Normalize and store affiliate configuration."""
        return await self.setting_service.update_affiliate_setting(data)

    # ========================================================================
    # PROFILES (delegates to AffiliateProfileManager)
    # ========================================================================

    async def open_affiliate(self, user_id: int) -> AffiliateProfile:
        """Open (or return existing) affiliate profile of a user."""
        return await self.profile_manager.open_affiliate(user_id)

    async def update_profile_status(
        self, profile_id: int, status: str
    ) -> AffiliateProfile:
        """Set profile status (admin)."""
        return await self.profile_manager.update_profile_status(profile_id, status)

    async def batch_update_profile_status(
        self, profile_ids: list[int], status: str
    ) -> int:
        """Set status of many profiles (admin)."""
        return await self.profile_manager.batch_update_profile_status(
            profile_ids, status
        )

    # ========================================================================
    # CLICKS AND ATTRIBUTION
    # ========================================================================

    async def track_click(
        self,
        affiliate_code: str,
        visitor_key: str = "",
        landing_path: str = "",
        referrer: str = "",
        client_ip: str = "",
        user_agent: str = "",
    ) -> AffiliateClick | None:
        """
        Record a promotion click.

        Returns:
            Created click, or None if the click was ignored
        """
        return await self.click_tracker.track_click(
            ClickInput(
                affiliate_code=affiliate_code,
                visitor_key=visitor_key,
                landing_path=landing_path,
                referrer=referrer,
                client_ip=client_ip,
                user_agent=user_agent,
            )
        )

    async def resolve_order_affiliate_snapshot(
        self, user_id: int, raw_code: str = "", raw_visitor_key: str = ""
    ) -> AttributionSnapshot:
        """Choose the referrer to stamp onto a new order."""
        return await self.attribution_resolver.resolve_order_affiliate_snapshot(
            user_id, raw_code, raw_visitor_key
        )

    # ========================================================================
    # COMMISSIONS
    # ========================================================================

    async def handle_order_paid(self, order_id: int) -> AffiliateCommission | None:
        """Accrue commission for a paid order (idempotent)."""
        return await self.accrual_engine.handle_order_paid(order_id)

    async def confirm_due_commissions(self, now: datetime | None = None) -> int:
        """Promote due pending commissions; returns rows moved."""
        return await self.sweep.confirm_due_commissions(now)

    async def handle_order_canceled(self, order_id: int, reason: str = "") -> int:
        """Reject open commissions of a canceled order."""
        return await self.reversal_engine.handle_order_canceled(order_id, reason)

    async def handle_order_refunded_tx(
        self,
        session: AsyncSession,
        order: RefundableOrder,
        refund_delta: Decimal,
        refunded_before: Decimal,
        reason: str = "",
    ) -> int:
        """Prorate commissions for a refund inside the caller's transaction."""
        return await self.reversal_engine.handle_order_refunded_tx(
            session, order, refund_delta, refunded_before, reason
        )

    # ========================================================================
    # WITHDRAWALS
    # ========================================================================

    async def apply_withdraw(
        self,
        user_id: int,
        amount: Any,
        channel: str,
        account: str,
    ) -> AffiliateWithdrawRequest:
        """Submit a withdrawal request funded by available commissions."""
        return await self.withdrawal_allocator.apply_withdraw(
            user_id, amount, channel, account
        )

    async def review_withdraw(
        self,
        admin_id: int,
        withdraw_id: int,
        action: str,
        reject_reason: str = "",
    ) -> AffiliateWithdrawRequest:
        """Pay or reject a pending withdrawal request."""
        return await self.withdrawal_reviewer.review_withdraw(
            admin_id, withdraw_id, action, reject_reason
        )

    # ========================================================================
    # QUERIES (delegates to AffiliateQueryService)
    # ========================================================================

    async def get_user_dashboard(self, user_id: int) -> AffiliateDashboard:
        return await self.query_service.get_user_dashboard(user_id)

    async def get_profile_stats(self, profile_id: int) -> AffiliateStats:
        return await self.query_service.get_profile_stats(profile_id)

    async def list_user_commissions(
        self, user_id: int, page: int = 1, page_size: int = 0, status: str = ""
    ) -> Page[AffiliateCommission]:
        return await self.query_service.list_user_commissions(
            user_id, page, page_size, status
        )

    async def list_user_withdraws(
        self, user_id: int, page: int = 1, page_size: int = 0, status: str = ""
    ) -> Page[AffiliateWithdrawRequest]:
        return await self.query_service.list_user_withdraws(
            user_id, page, page_size, status
        )

    async def list_admin_profiles(
        self,
        filters: ProfileListFilter | None = None,
        page: int = 1,
        page_size: int = 0,
    ) -> Page[AdminProfileItem]:
        return await self.query_service.list_admin_profiles(filters, page, page_size)

    async def list_admin_commissions(
        self,
        filters: CommissionListFilter | None = None,
        page: int = 1,
        page_size: int = 0,
    ) -> Page[AffiliateCommission]:
        return await self.query_service.list_admin_commissions(filters, page, page_size)

    async def list_admin_withdraws(
        self,
        filters: WithdrawListFilter | None = None,
        page: int = 1,
        page_size: int = 0,
    ) -> Page[AffiliateWithdrawRequest]:
        return await self.query_service.list_admin_withdraws(filters, page, page_size)
