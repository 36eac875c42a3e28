"""
Affiliate program configuration record.

Stored as the "affiliate_config" JSON document in the settings table.
Every field is coerced and clamped on construction, so an instance is
always valid regardless of what was stored.
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from affiliate.config.business_constants import (
    COMMISSION_RATE_MAX,
    COMMISSION_RATE_MIN,
    CONFIRM_DAYS_MAX,
    CONFIRM_DAYS_MIN,
    MIN_WITHDRAW_AMOUNT_MIN,
    WITHDRAW_CHANNEL_MAX_LENGTH,
    WITHDRAW_CHANNELS_MAX_SIZE,
)
from affiliate.utils.money import ZERO, round_money, to_decimal


_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off", ""}


def parse_loose_bool(value: Any, default: bool = False) -> bool:
    """Parse bool from bool, number or common string spellings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float | Decimal):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    return default


def parse_loose_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """Parse Decimal from number or numeric string, falling back to default."""
    try:
        return to_decimal(value)
    except ValueError:
        return default


def parse_loose_int(value: Any, default: int = 0) -> int:
    """Parse int from number or numeric string; fractions are truncated."""
    try:
        return int(to_decimal(value))
    except ValueError:
        return default


def normalize_channels(value: Any) -> tuple[str, ...]:
    """
    Normalize withdrawal channel whitelist.

    Entries are trimmed and cut to max length; blanks are dropped;
    duplicates are removed case-insensitively keeping the first spelling;
    at most WITHDRAW_CHANNELS_MAX_SIZE entries survive. Anything that is
    not a list yields an empty whitelist.
    """
    if isinstance(value, str | bytes) or not isinstance(value, Iterable):
        return ()

    result: list[str] = []
    seen: set[str] = set()
    for item in value:
        if item is None:
            continue
        channel = str(item).strip()[:WITHDRAW_CHANNEL_MAX_LENGTH].strip()
        if not channel:
            continue
        folded = channel.casefold()
        if folded in seen:
            continue
        seen.add(folded)
        result.append(channel)
        if len(result) >= WITHDRAW_CHANNELS_MAX_SIZE:
            break
    return tuple(result)


class AffiliateSetting(BaseModel):
    """
    Typed affiliate configuration.

    Attributes:
        enabled: Program switch
        commission_rate: Percent of eligible order amount, 0-100
        confirm_days: Days before a commission becomes withdrawable, 0-3650
        min_withdraw_amount: Minimum withdrawal amount, >= 0
        withdraw_channels: Allowed payout channels; empty allows any
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    commission_rate: Decimal = Decimal("0.00")
    confirm_days: int = 0
    min_withdraw_amount: Decimal = Decimal("0.00")
    withdraw_channels: tuple[str, ...] = ()

    @field_validator("enabled", mode="before")
    @classmethod
    def coerce_enabled(cls, v: Any) -> bool:
        return parse_loose_bool(v)

    @field_validator("commission_rate", mode="before")
    @classmethod
    def coerce_commission_rate(cls, v: Any) -> Decimal:
        rate = round_money(parse_loose_decimal(v))
        return min(max(rate, COMMISSION_RATE_MIN), COMMISSION_RATE_MAX)

    @field_validator("confirm_days", mode="before")
    @classmethod
    def coerce_confirm_days(cls, v: Any) -> int:
        days = parse_loose_int(v)
        return min(max(days, CONFIRM_DAYS_MIN), CONFIRM_DAYS_MAX)

    @field_validator("min_withdraw_amount", mode="before")
    @classmethod
    def coerce_min_withdraw_amount(cls, v: Any) -> Decimal:
        amount = round_money(parse_loose_decimal(v))
        return max(amount, MIN_WITHDRAW_AMOUNT_MIN)

    @field_validator("withdraw_channels", mode="before")
    @classmethod
    def coerce_withdraw_channels(cls, v: Any) -> tuple[str, ...]:
        return normalize_channels(v)

    @classmethod
    def from_storage(cls, raw: Any) -> "AffiliateSetting":
        """Build from a stored JSON document; non-dict documents yield defaults."""
        if not isinstance(raw, dict):
            return cls()
        known = {key: raw[key] for key in cls.model_fields if key in raw}
        return cls(**known)

    def to_storage(self) -> dict[str, Any]:
        """Serialize to a JSON-safe document (money as strings)."""
        return {
            "enabled": self.enabled,
            "commission_rate": str(self.commission_rate),
            "confirm_days": self.confirm_days,
            "min_withdraw_amount": str(self.min_withdraw_amount),
            "withdraw_channels": list(self.withdraw_channels),
        }

    def allows_channel(self, channel: str) -> bool:
        """Check channel against the whitelist (case-insensitive)."""
        if not self.withdraw_channels:
            return True
        folded = channel.strip().casefold()
        return any(c.casefold() == folded for c in self.withdraw_channels)
