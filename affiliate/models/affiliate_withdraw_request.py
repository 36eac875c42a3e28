"""
AffiliateWithdrawRequest model.

Payout request funded by attached commission rows.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from affiliate.models.base import Base
from affiliate.models.enums import AffiliateWithdrawStatus
from affiliate.models.types import MoneyType, UTCDateTime


class AffiliateWithdrawRequest(Base):
    """
    AffiliateWithdrawRequest entity.

    Attributes:
        id: Primary key
        affiliate_profile_id: Requesting profile
        amount: Requested amount, equal to the attached commission sum
        channel: Payout channel
        account: Payout account within the channel
        status: pending_review / paid / rejected
        processed_by: Admin who reviewed the request
        processed_at: Review time
        reject_reason: Reason given on rejection
        created_at: Request time
        updated_at: Last modification
    """

    __tablename__ = "affiliate_withdraw_requests"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    affiliate_profile_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("affiliate_profiles.id"),
        nullable=False,
        index=True,
    )

    amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False
    )
    channel: Mapped[str] = mapped_column(
        String(50), nullable=False
    )
    account: Mapped[str] = mapped_column(
        String(255), nullable=False
    )

    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=AffiliateWithdrawStatus.PENDING_REVIEW.value,
        index=True,
    )

    # Review
    processed_by: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )
    processed_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True
    )
    reject_reason: Mapped[str] = mapped_column(
        String(255), nullable=False, default=""
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=lambda: datetime.now(UTC),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    @property
    def is_pending(self) -> bool:
        """Check if request is still awaiting review."""
        return self.status == AffiliateWithdrawStatus.PENDING_REVIEW

    def __repr__(self) -> str:
        return (
            f"<AffiliateWithdrawRequest(id={self.id}, "
            f"profile_id={self.affiliate_profile_id}, "
            f"amount={self.amount}, status={self.status})>"
        )
