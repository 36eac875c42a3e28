"""
AffiliateClick model.

Append-only log of promotion link visits.
"""

from datetime import UTC, datetime

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from affiliate.models.base import Base
from affiliate.models.types import UTCDateTime


class AffiliateClick(Base):
    """
    AffiliateClick entity.

    Attributes:
        id: Primary key
        affiliate_profile_id: Profile whose link was clicked
        visitor_key: Anonymous visitor identifier (cookie)
        landing_path: Path the visitor landed on
        referrer: HTTP referrer
        client_ip: Visitor IP
        user_agent: Visitor user agent
        created_at: Click time
    """

    __tablename__ = "affiliate_clicks"
    __table_args__ = (
        Index(
            "idx_affiliate_clicks_dedupe",
            "affiliate_profile_id",
            "visitor_key",
            "created_at",
        ),
        Index("idx_affiliate_clicks_visitor", "visitor_key", "created_at"),
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

    # Visit details
    visitor_key: Mapped[str] = mapped_column(
        String(128), nullable=False, default=""
    )
    landing_path: Mapped[str] = mapped_column(
        String(512), nullable=False, default=""
    )
    referrer: Mapped[str] = mapped_column(
        String(1024), nullable=False, default=""
    )
    client_ip: Mapped[str] = mapped_column(
        String(64), nullable=False, default=""
    )
    user_agent: Mapped[str] = mapped_column(
        String(1024), nullable=False, default=""
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=lambda: datetime.now(UTC),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return (
            f"<AffiliateClick(id={self.id}, "
            f"profile_id={self.affiliate_profile_id}, "
            f"visitor_key={self.visitor_key})>"
        )
