"""
Repositories.

Data access layer; repositories flush, services commit.
"""

from affiliate.repositories.affiliate_click_repository import AffiliateClickRepository
from affiliate.repositories.affiliate_commission_repository import (
    AffiliateCommissionRepository,
    CommissionTotals,
)
from affiliate.repositories.affiliate_profile_repository import AffiliateProfileRepository
from affiliate.repositories.affiliate_withdraw_repository import AffiliateWithdrawRepository
from affiliate.repositories.base import BaseRepository
from affiliate.repositories.filters import (
    CommissionListFilter,
    Page,
    ProfileListFilter,
    WithdrawListFilter,
    normalize_pagination,
)
from affiliate.repositories.setting_repository import SettingRepository


__all__ = [
    "BaseRepository",
    "AffiliateProfileRepository",
    "AffiliateClickRepository",
    "AffiliateCommissionRepository",
    "AffiliateWithdrawRepository",
    "SettingRepository",
    "CommissionTotals",
    "CommissionListFilter",
    "ProfileListFilter",
    "WithdrawListFilter",
    "Page",
    "normalize_pagination",
]
