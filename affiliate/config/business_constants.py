"""
Business logic constants for the affiliate program.

Central location for affiliate rules shared by models, repositories
and services.
"""

from datetime import timedelta
from decimal import Decimal


# Referral codes
AFFILIATE_CODE_LENGTH = 8
# No 0/O, 1/I: codes are read aloud and typed by hand
AFFILIATE_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
AFFILIATE_CODE_MAX_RETRY = 8
PROMOTION_PATH_TEMPLATE = "/?aff={code}"

# Attribution and click tracking windows
ATTRIBUTION_WINDOW = timedelta(days=30)
CLICK_DEDUPE_WINDOW = timedelta(minutes=10)

# Commission types
COMMISSION_TYPE_ORDER = "order"
COMMISSION_TYPE_MAX_LENGTH = 20
SPLIT_COMMISSION_TYPE_PREFIX = "sp"

# Default reversal reasons
DEFAULT_CANCEL_REASON = "order_canceled"
DEFAULT_REFUND_REASON = "order_refunded"

# Settings storage
SETTING_KEY_AFFILIATE_CONFIG = "affiliate_config"

# Affiliate config bounds
COMMISSION_RATE_MIN = Decimal("0")
COMMISSION_RATE_MAX = Decimal("100")
CONFIRM_DAYS_MIN = 0
CONFIRM_DAYS_MAX = 3650
MIN_WITHDRAW_AMOUNT_MIN = Decimal("0")
WITHDRAW_CHANNELS_MAX_SIZE = 20
WITHDRAW_CHANNEL_MAX_LENGTH = 50

# Listing pagination
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
