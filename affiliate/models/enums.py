"""
Affiliate status enumerations.

Stored as plain strings; StrEnum members compare equal to their values.
"""

from enum import StrEnum


class AffiliateProfileStatus(StrEnum):
    """Affiliate profile status."""

    ACTIVE = "active"
    DISABLED = "disabled"


class AffiliateCommissionStatus(StrEnum):
    """Commission lifecycle status."""

    PENDING_CONFIRM = "pending_confirm"  # Waiting for confirm window
    AVAILABLE = "available"  # Withdrawable
    REJECTED = "rejected"  # Reversed (cancel/refund)
    WITHDRAWN = "withdrawn"  # Paid out


class AffiliateWithdrawStatus(StrEnum):
    """Withdrawal request status."""

    PENDING_REVIEW = "pending_review"
    REJECTED = "rejected"
    PAID = "paid"


class AffiliateWithdrawAction(StrEnum):
    """Admin review action on a withdrawal request."""

    REJECT = "reject"
    PAY = "pay"


# Commissions that still count toward an affiliate's funds
OPEN_COMMISSION_STATUSES = (
    AffiliateCommissionStatus.PENDING_CONFIRM,
    AffiliateCommissionStatus.AVAILABLE,
)
