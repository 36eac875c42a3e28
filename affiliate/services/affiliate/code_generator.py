"""
Affiliate code and commission type helpers.
"""

import secrets
import time

from affiliate.config.business_constants import (
    AFFILIATE_CODE_ALPHABET,
    AFFILIATE_CODE_LENGTH,
    COMMISSION_TYPE_MAX_LENGTH,
    SPLIT_COMMISSION_TYPE_PREFIX,
)

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def generate_affiliate_code(length: int = AFFILIATE_CODE_LENGTH) -> str:
    """Generate a random referral code from the unambiguous alphabet."""
    return "".join(secrets.choice(AFFILIATE_CODE_ALPHABET) for _ in range(length))


def normalize_affiliate_code(raw: str | None) -> str:
    """Strip and upper-case a user-supplied code."""
    if not raw:
        return ""
    return raw.strip().upper()


def to_base36(value: int) -> str:
    """Format a non-negative integer in lower-case base 36."""
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_DIGITS[rem])
    return "".join(reversed(digits))


def build_split_commission_type(source_id: int, suffix: int | None = None) -> str:
    """
    Build the commission type for the remainder row of a split.

    Format: "sp" + base-36 source id + numeric suffix, cut to the column
    width. The suffix defaults to the current nanosecond clock modulo 10^6
    so repeated splits of one source get distinct types.

    Args:
        source_id: ID of the commission being split
        suffix: Explicit numeric suffix

    Returns:
        Commission type of at most COMMISSION_TYPE_MAX_LENGTH characters
    """
    if suffix is None:
        suffix = time.time_ns() % 1_000_000
    result = f"{SPLIT_COMMISSION_TYPE_PREFIX}{to_base36(source_id)}{suffix}"
    return result[:COMMISSION_TYPE_MAX_LENGTH]
