"""
Setting model.

Key/value store for runtime configuration documents.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from affiliate.models.base import Base
from affiliate.models.types import UTCDateTime


class Setting(Base):
    """
    Setting entity.

    Attributes:
        id: Primary key
        key: Unique setting key
        value: JSON document
        updated_at: Last write
    """

    __tablename__ = "settings"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    key: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True, index=True
    )
    value: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Setting(key={self.key})>"
