"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from affiliate.models.affiliate_click import AffiliateClick
from affiliate.models.affiliate_commission import AffiliateCommission
from affiliate.models.affiliate_profile import AffiliateProfile
from affiliate.models.affiliate_withdraw_request import AffiliateWithdrawRequest
from affiliate.models.base import Base
from affiliate.models.enums import (
    OPEN_COMMISSION_STATUSES,
    AffiliateCommissionStatus,
    AffiliateProfileStatus,
    AffiliateWithdrawAction,
    AffiliateWithdrawStatus,
)
from affiliate.models.setting import Setting


__all__ = [
    "Base",
    "AffiliateProfile",
    "AffiliateClick",
    "AffiliateCommission",
    "AffiliateWithdrawRequest",
    "Setting",
    "AffiliateProfileStatus",
    "AffiliateCommissionStatus",
    "AffiliateWithdrawStatus",
    "AffiliateWithdrawAction",
    "OPEN_COMMISSION_STATUSES",
]
