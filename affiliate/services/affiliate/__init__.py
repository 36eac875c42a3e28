"""
Affiliate services package.

This package provides the affiliate program engine:
- click_tracker: Promotion click ledger with dedupe
- attribution_resolver: Referrer choice for new orders
- commission_accrual: Commission creation for paid orders
- confirmation_sweep: Pending -> available promotion
- commission_reversal: Cancellation and refund proration
- withdrawal_allocator: Withdrawal requests funded by commissions
- withdrawal_review: Admin pay/reject
- profile_manager: Profile opening and status changes
- query_service: Dashboard, stats and listings
- code_generator: Referral codes and split commission types

All components are re-exported for easy importing.
"""

from affiliate.services.affiliate.attribution_resolver import AttributionResolver
from affiliate.services.affiliate.click_tracker import ClickTracker
from affiliate.services.affiliate.commission_accrual import CommissionAccrualEngine
from affiliate.services.affiliate.commission_reversal import (
    CommissionReversalEngine,
    is_reversal_protected,
)
from affiliate.services.affiliate.confirmation_sweep import ConfirmationSweep
from affiliate.services.affiliate.profile_manager import AffiliateProfileManager
from affiliate.services.affiliate.query_service import (
    AdminProfileItem,
    AffiliateDashboard,
    AffiliateQueryService,
    AffiliateStats,
)
from affiliate.services.affiliate.withdrawal_allocator import (
    AllocationPlan,
    WithdrawalAllocator,
    plan_allocation,
)
from affiliate.services.affiliate.withdrawal_review import WithdrawalReviewer


__all__ = [
    "AttributionResolver",
    "ClickTracker",
    "CommissionAccrualEngine",
    "CommissionReversalEngine",
    "ConfirmationSweep",
    "AffiliateProfileManager",
    "AffiliateQueryService",
    "AffiliateDashboard",
    "AffiliateStats",
    "AdminProfileItem",
    "WithdrawalAllocator",
    "WithdrawalReviewer",
    "AllocationPlan",
    "plan_allocation",
    "is_reversal_protected",
]
