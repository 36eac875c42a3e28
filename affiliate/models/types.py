"""
Standard type definitions for database models.

Provides consistent types for monetary, percentage and timestamp fields
across all models.
"""

from datetime import UTC, datetime

from sqlalchemy import DECIMAL, DateTime
from sqlalchemy.types import TypeDecorator

# Standard money type for amounts and commissions
# Precision: 20 digits total, 2 after decimal point
# Suitable for: order totals, commissions, withdrawals
MoneyType = DECIMAL(20, 2)

# Commission rate percentage
# Precision: 10 digits total, 2 after decimal point
# Range: 0.00 to 100.00 after setting normalization
RatePercentType = DECIMAL(10, 2)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime column.

    Backends without timezone support (SQLite) hand back naive values;
    those are re-tagged as UTC on load so comparisons with utc_now()
    stay valid everywhere.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(UTC)
            if dialect.name == "sqlite":
                value = value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value
