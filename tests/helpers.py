"""Fake collaborators and row helpers shared by the tests."""

from datetime import UTC, datetime
from decimal import Decimal

from affiliate.models import AffiliateCommission, AffiliateCommissionStatus
from affiliate.services import (
    OrderItemSnapshot,
    OrderSnapshot,
    ProductSnapshot,
    UserSnapshot,
)


PAID_AT = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


class FakeUserLookup:
    """In-memory UserLookup."""

    def __init__(self) -> None:
        self.users: dict[int, UserSnapshot] = {}

    def add(self, user_id: int, is_disabled: bool = False) -> UserSnapshot:
        user = UserSnapshot(id=user_id, is_disabled=is_disabled)
        self.users[user_id] = user
        return user

    async def get_user(self, user_id: int) -> UserSnapshot | None:
        return self.users.get(user_id)


class FakeOrderLookup:
    """In-memory OrderLookup."""

    def __init__(self) -> None:
        self.orders: dict[int, OrderSnapshot] = {}

    def add(self, order: OrderSnapshot) -> OrderSnapshot:
        self.orders[order.id] = order
        return order

    async def get_order(self, order_id: int) -> OrderSnapshot | None:
        return self.orders.get(order_id)


class FakeProductLookup:
    """In-memory ProductLookup recording batched calls."""

    def __init__(self) -> None:
        self.products: dict[int, ProductSnapshot] = {}
        self.calls: list[list[int]] = []

    def add(self, product_id: int, is_affiliate_enabled: bool = True) -> ProductSnapshot:
        product = ProductSnapshot(id=product_id, is_affiliate_enabled=is_affiliate_enabled)
        self.products[product_id] = product
        return product

    async def list_by_ids(self, product_ids: list[int]) -> list[ProductSnapshot]:
        self.calls.append(list(product_ids))
        return [self.products[pid] for pid in product_ids if pid in self.products]


def make_order(
    order_id: int,
    buyer_id: int,
    amount: str,
    profile_id: int | None = None,
    product_id: int = 100,
    paid_at: datetime | None = PAID_AT,
) -> OrderSnapshot:
    """Single-line order crediting profile_id."""
    total = Decimal(amount)
    return OrderSnapshot(
        id=order_id,
        user_id=buyer_id,
        total_amount=total,
        items=(OrderItemSnapshot(product_id=product_id, total_price=total),),
        affiliate_profile_id=profile_id,
        paid_at=paid_at,
    )


async def reload(session, model, row_id):
    """Re-read a row from the database, discarding session state."""
    session.expire_all()
    return await session.get(model, row_id)


async def add_commission(
    session,
    profile_id: int,
    order_id: int,
    amount: str,
    status: AffiliateCommissionStatus = AffiliateCommissionStatus.AVAILABLE,
    withdraw_request_id: int | None = None,
    commission_type: str = "order",
) -> AffiliateCommission:
    """Insert a commission row directly and commit."""
    commission = AffiliateCommission(
        affiliate_profile_id=profile_id,
        order_id=order_id,
        commission_type=commission_type,
        base_amount=Decimal(amount) * 10,
        rate_percent=Decimal("10.00"),
        commission_amount=Decimal(amount),
        status=status.value,
        withdraw_request_id=withdraw_request_id,
    )
    session.add(commission)
    await session.commit()
    return commission
