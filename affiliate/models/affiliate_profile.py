"""
AffiliateProfile model.

One affiliate account per user, identified publicly by its code.
"""

from datetime import UTC, datetime

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from affiliate.models.base import Base
from affiliate.models.enums import AffiliateProfileStatus
from affiliate.models.types import UTCDateTime


class AffiliateProfile(Base):
    """
    AffiliateProfile entity.

    Created once per user and never deleted; admins toggle the status.

    Attributes:
        id: Primary key
        user_id: Owning user (unique)
        affiliate_code: Public referral code, stored upper-case (unique)
        status: active / disabled
        created_at: When the profile was opened
        updated_at: Last status change
    """

    __tablename__ = "affiliate_profiles"

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Owner
    user_id: Mapped[int] = mapped_column(
        Integer, nullable=False, unique=True, index=True
    )

    # Public code used in promotion links
    affiliate_code: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        unique=True,
        index=True,
        comment="Upper-case referral code",
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=AffiliateProfileStatus.ACTIVE.value,
        index=True,
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
    def is_active(self) -> bool:
        """Check if profile can earn commissions."""
        return self.status == AffiliateProfileStatus.ACTIVE

    def __repr__(self) -> str:
        return (
            f"<AffiliateProfile(id={self.id}, user_id={self.user_id}, "
            f"code={self.affiliate_code}, status={self.status})>"
        )
