from fastapi import status

from app.platform.exceptions import AppException


class DuplicateEmailError(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "This email is already on the waitlist"


class InvalidReferralCodeError(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid referral code"


class ReferralCodeNotFoundError(AppException):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Referral code not found"


class ReferralCodeGenerationError(AppException):
    """Every generated code collided with an existing one."""
