"""
Commission accrual on paid orders.
"""

from collections.abc import Mapping
from datetime import timedelta
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.config.business_constants import COMMISSION_TYPE_ORDER
from affiliate.models.affiliate_commission import AffiliateCommission
from affiliate.models.affiliate_profile import AffiliateProfile
from affiliate.models.enums import AffiliateCommissionStatus
from affiliate.repositories.affiliate_commission_repository import (
    AffiliateCommissionRepository,
)
from affiliate.repositories.affiliate_profile_repository import (
    AffiliateProfileRepository,
)
from affiliate.services.base_service import BaseService, transaction
from affiliate.services.ports import (
    AffiliateSettingProvider,
    OrderLookup,
    OrderSnapshot,
    ProductLookup,
    ProductSnapshot,
)
from affiliate.utils.datetime_utils import ensure_utc, utc_now
from affiliate.utils.money import ZERO, clamp_non_negative, round_money


def collect_product_ids(order: OrderSnapshot) -> list[int]:
    """Distinct positive product IDs of the order and its children, in order of appearance."""
    seen: set[int] = set()
    ids: list[int] = []
    for current in (order, *order.children):
        for item in current.items:
            if item.product_id <= 0 or item.product_id in seen:
                continue
            seen.add(item.product_id)
            ids.append(item.product_id)
    return ids


def calculate_base_amount(
    order: OrderSnapshot, products: Mapping[int, ProductSnapshot]
) -> Decimal:
    """
    Sum eligible line amounts of an order.

    Lines come from the child orders, or from the order itself when it has
    none. Each line contributes (total price - coupon discount), floored at
    zero, if its product is affiliate-enabled.

    Args:
        order: Paid order
        products: Product snapshots by ID

    Returns:
        Base amount rounded to cents
    """
    targets = order.children or (order,)
    total = ZERO
    for current in targets:
        for item in current.items:
            product = products.get(item.product_id)
            if product is None or not product.is_affiliate_enabled:
                continue
            payable = clamp_non_negative(
                round_money(item.total_price - item.coupon_discount)
            )
            total = round_money(total + payable)
    return total


def calculate_commission(base_amount: Decimal, rate_percent: Decimal) -> Decimal:
    """Commission = base x rate / 100, rounded half-up to cents."""
    return round_money(base_amount * rate_percent / Decimal(100))


class CommissionAccrualEngine(BaseService):
    """Creates commission records for paid orders."""

    def __init__(
        self,
        session: AsyncSession,
        setting_provider: AffiliateSettingProvider,
        order_lookup: OrderLookup,
        product_lookup: ProductLookup,
    ) -> None:
        """
        Initialize accrual engine.

        Args:
            session: Database session
            setting_provider: Affiliate configuration source
            order_lookup: Order collaborator
            product_lookup: Product collaborator
        """
        super().__init__(session)
        self.profile_repo = AffiliateProfileRepository(session)
        self.commission_repo = AffiliateCommissionRepository(session)
        self.setting_provider = setting_provider
        self.order_lookup = order_lookup
        self.product_lookup = product_lookup

    @transaction
    async def handle_order_paid(self, order_id: int) -> AffiliateCommission | None:
        """
        Accrue commission for a paid order.

        Safe to call repeatedly for the same order: an existing commission,
        or losing the insert race to a concurrent call, makes it a no-op.

        Args:
            order_id: Paid order ID

        Returns:
            Created commission, or None when nothing was accrued
        """
        if order_id <= 0:
            return None

        setting = await self.setting_provider.get_affiliate_setting()
        if not setting.enabled or setting.commission_rate <= ZERO:
            return None

        order = await self.order_lookup.get_order(order_id)
        if order is None:
            return None

        profile = await self._resolve_profile(order)
        if profile is None or not profile.is_active:
            return None
        if order.user_id > 0 and profile.user_id == order.user_id:
            return None

        existing = await self.commission_repo.get_by_order_and_profile(
            order.id, profile.id, COMMISSION_TYPE_ORDER
        )
        if existing:
            return None

        base_amount = await self._calculate_base_amount(order)
        if base_amount <= ZERO:
            return None

        rate = round_money(setting.commission_rate)
        commission_amount = calculate_commission(base_amount, rate)
        if commission_amount <= ZERO:
            return None

        paid_at = ensure_utc(order.paid_at) if order.paid_at else utc_now()
        if setting.confirm_days <= 0:
            status = AffiliateCommissionStatus.AVAILABLE
            confirm_at = None
            available_at = paid_at
        else:
            status = AffiliateCommissionStatus.PENDING_CONFIRM
            confirm_at = paid_at + timedelta(days=setting.confirm_days)
            available_at = None

        profile_id = profile.id
        try:
            # A lost unique-key race rolls back only this savepoint
            async with self.session.begin_nested():
                commission = await self.commission_repo.create(
                    affiliate_profile_id=profile_id,
                    order_id=order.id,
                    commission_type=COMMISSION_TYPE_ORDER,
                    base_amount=base_amount,
                    rate_percent=rate,
                    commission_amount=commission_amount,
                    status=status.value,
                    confirm_at=confirm_at,
                    available_at=available_at,
                )
        except IntegrityError:
            self.logger.info(
                "Commission already accrued by a concurrent call",
                extra={"order_id": order.id, "profile_id": profile_id},
            )
            return None

        self.logger.info(
            "Commission accrued",
            extra={
                "order_id": order.id,
                "profile_id": profile_id,
                "commission_id": commission.id,
                "amount": str(commission_amount),
                "status": status.value,
            },
        )
        return commission

    async def _resolve_profile(self, order: OrderSnapshot) -> AffiliateProfile | None:
        if order.affiliate_profile_id and order.affiliate_profile_id > 0:
            return await self.profile_repo.get_by_id(order.affiliate_profile_id)
        if order.affiliate_code.strip():
            return await self.profile_repo.get_by_code(order.affiliate_code)
        return None

    async def _calculate_base_amount(self, order: OrderSnapshot) -> Decimal:
        product_ids = collect_product_ids(order)
        if not product_ids:
            return ZERO
        products = await self.product_lookup.list_by_ids(product_ids)
        return calculate_base_amount(order, {p.id: p for p in products})
