"""
Affiliate error types.

Every business failure is a typed AffiliateError with a stable code and
a user-facing message. Storage errors (SQLAlchemyError) are never
wrapped; they propagate to the caller as-is.
"""


GENERIC_FAILURE_MESSAGE = "Operation failed, please try again later"


class AffiliateError(Exception):
    """Base class for affiliate business errors."""

    code = "affiliate_error"
    message = "Affiliate operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.message
        super().__init__(self.message)


# Validation errors

class AffiliateValidationError(AffiliateError):
    """Request or state does not satisfy a business rule."""

    code = "validation_error"
    message = "Invalid request"


class AffiliateDisabledError(AffiliateValidationError):
    code = "affiliate_disabled"
    message = "Affiliate program is not enabled"


class AffiliateConfigInvalidError(AffiliateValidationError):
    code = "affiliate_config_invalid"
    message = "Affiliate configuration is invalid"


class ProfileStatusInvalidError(AffiliateValidationError):
    code = "affiliate_profile_status_invalid"
    message = "Affiliate profile status is invalid"


class WithdrawAmountInvalidError(AffiliateValidationError):
    code = "affiliate_withdraw_amount_invalid"
    message = "Withdrawal amount is invalid or below the minimum"


class WithdrawChannelInvalidError(AffiliateValidationError):
    code = "affiliate_withdraw_channel_invalid"
    message = "Withdrawal channel or account is invalid"


class WithdrawStatusInvalidError(AffiliateValidationError):
    """Action not allowed from the withdrawal request's current status."""

    code = "affiliate_withdraw_status_invalid"
    message = "Withdrawal request cannot be processed in its current status"


class UserDisabledError(AffiliateValidationError):
    code = "user_disabled"
    message = "User account is disabled"


# Not-found errors

class NotFoundError(AffiliateError):
    code = "not_found"
    message = "Record not found"


class AffiliateNotOpenedError(NotFoundError):
    code = "affiliate_not_opened"
    message = "Affiliate account is not opened or is disabled"


# Funds

class InsufficientFundsError(AffiliateError):
    code = "affiliate_withdraw_insufficient"
    message = "Available commission is not enough for this withdrawal"


# Code generation

class CodeGenerationError(AffiliateError):
    code = "affiliate_code_generation_failed"
    message = "Failed to generate a unique affiliate code"


def user_message(exc: Exception) -> str:
    """
    Map an exception to the text shown to the user.

    Business errors keep their own message; anything else (storage,
    programming errors) becomes a generic failure without internals.
    """
    if isinstance(exc, AffiliateError):
        return exc.message
    return GENERIC_FAILURE_MESSAGE
