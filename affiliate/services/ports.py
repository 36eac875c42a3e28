"""
Collaborator ports.

The affiliate core does not own users, orders or products. The host
application passes in objects implementing these protocols; the
snapshots are plain read-only values.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Protocol

from affiliate.config.affiliate_setting import AffiliateSetting


@dataclass(frozen=True)
class UserSnapshot:
    """User as seen by the affiliate program."""

    id: int
    is_disabled: bool = False


@dataclass(frozen=True)
class ProductSnapshot:
    """Product eligibility for commissions."""

    id: int
    is_affiliate_enabled: bool = False


@dataclass(frozen=True)
class OrderItemSnapshot:
    """Order line: total price and the coupon discount applied to it."""

    product_id: int
    total_price: Decimal
    coupon_discount: Decimal = Decimal("0.00")


@dataclass(frozen=True)
class OrderSnapshot:
    """
    Order with its lines and child orders.

    A parent order that was split into children carries its lines on the
    children; commissions are computed from those.
    """

    id: int
    user_id: int
    total_amount: Decimal
    items: tuple[OrderItemSnapshot, ...] = ()
    children: tuple["OrderSnapshot", ...] = ()
    affiliate_profile_id: int | None = None
    affiliate_code: str = ""
    paid_at: datetime | None = None


@dataclass(frozen=True)
class AttributionSnapshot:
    """Referrer chosen for a new order; empty when nobody gets credit."""

    profile_id: int | None = None
    code: str = ""

    @property
    def is_empty(self) -> bool:
        return self.profile_id is None


@dataclass(frozen=True)
class ClickInput:
    """Raw promotion click data from the web layer."""

    affiliate_code: str
    visitor_key: str = ""
    landing_path: str = ""
    referrer: str = ""
    client_ip: str = ""
    user_agent: str = ""


class UserLookup(Protocol):
    async def get_user(self, user_id: int) -> UserSnapshot | None: ...


class OrderLookup(Protocol):
    async def get_order(self, order_id: int) -> OrderSnapshot | None: ...


class ProductLookup(Protocol):
    async def list_by_ids(self, product_ids: list[int]) -> list[ProductSnapshot]: ...


class AffiliateSettingProvider(Protocol):
    async def get_affiliate_setting(self) -> AffiliateSetting: ...
