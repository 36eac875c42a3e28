"""
AffiliateCommission model.

One row per (order, profile, commission type). Rows are reduced by refunds,
rejected by cancellation, attached to withdrawals and split when a
withdrawal needs only part of a row.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from affiliate.config.business_constants import COMMISSION_TYPE_ORDER
from affiliate.models.base import Base
from affiliate.models.enums import AffiliateCommissionStatus
from affiliate.models.types import MoneyType, RatePercentType, UTCDateTime


class AffiliateCommission(Base):
    """
    AffiliateCommission entity.

    Attributes:
        id: Primary key
        affiliate_profile_id: Earning profile
        order_id: Source order
        commission_type: "order" for accruals, synthesized type for split remainders
        base_amount: Eligible order amount the commission was computed from
        rate_percent: Commission rate at accrual time
        commission_amount: Current commission value (never negative)
        status: pending_confirm / available / rejected / withdrawn
        confirm_at: When a pending row becomes available
        available_at: When the row became available
        withdraw_request_id: Withdrawal the row is attached to
        invalid_reason: Reversal reason for rejected rows
        created_at: Accrual time
        updated_at: Last modification
    """

    __tablename__ = "affiliate_commissions"
    __table_args__ = (
        UniqueConstraint(
            "order_id",
            "affiliate_profile_id",
            "commission_type",
            name="uq_affiliate_commission_order_profile_type",
        ),
        Index(
            "idx_affiliate_commissions_profile_status",
            "affiliate_profile_id",
            "status",
        ),
        Index("idx_affiliate_commissions_confirm", "status", "confirm_at"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    affiliate_profile_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("affiliate_profiles.id"),
        nullable=False,
        index=True,
    )
    order_id: Mapped[int] = mapped_column(
        Integer, nullable=False, index=True
    )
    commission_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=COMMISSION_TYPE_ORDER,
    )

    # Amounts
    base_amount: Mapped[Decimal] = mapped_column(
        MoneyType,
        nullable=False,
        default=Decimal("0.00"),
        comment="Eligible order amount",
    )
    rate_percent: Mapped[Decimal] = mapped_column(
        RatePercentType,
        nullable=False,
        default=Decimal("0.00"),
        comment="Commission rate, percent",
    )
    commission_amount: Mapped[Decimal] = mapped_column(
        MoneyType,
        nullable=False,
        default=Decimal("0.00"),
        comment="Current commission value",
    )

    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=AffiliateCommissionStatus.PENDING_CONFIRM.value,
        index=True,
    )
    confirm_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True
    )
    available_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True
    )

    # Settlement
    withdraw_request_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("affiliate_withdraw_requests.id"),
        nullable=True,
        index=True,
    )
    invalid_reason: Mapped[str] = mapped_column(
        String(255), nullable=False, default=""
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    @property
    def is_attached(self) -> bool:
        """Check if row is attached to a withdrawal request."""
        return self.withdraw_request_id is not None

    def __repr__(self) -> str:
        return (
            f"<AffiliateCommission(id={self.id}, order_id={self.order_id}, "
            f"profile_id={self.affiliate_profile_id}, "
            f"amount={self.commission_amount}, status={self.status})>"
        )
