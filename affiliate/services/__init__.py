"""
Services.

AffiliateService is the entry point; components live in services.affiliate.
"""

from affiliate.services.affiliate_service import AffiliateService
from affiliate.services.affiliate_setting_service import AffiliateSettingService
from affiliate.services.ports import (
    AttributionSnapshot,
    ClickInput,
    OrderItemSnapshot,
    OrderSnapshot,
    ProductSnapshot,
    UserSnapshot,
)


__all__ = [
    "AffiliateService",
    "AffiliateSettingService",
    "AttributionSnapshot",
    "ClickInput",
    "OrderItemSnapshot",
    "OrderSnapshot",
    "ProductSnapshot",
    "UserSnapshot",
]
