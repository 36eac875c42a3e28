"""
Affiliate program core.

Attribution, commission accrual, refund proration and withdrawal
settlement for the storefront affiliate program.
"""

__version__ = "1.0.0"
