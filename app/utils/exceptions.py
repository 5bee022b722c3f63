"""
Exception handling utilities.

Defines the referral domain exceptions and helpers for classifying
database errors.
"""

from sqlalchemy.exc import IntegrityError


class ReferralError(Exception):
    """Base class for referral linking errors."""
    pass


class InvalidReferralCodeError(ReferralError):
    """Raised when a referral code does not belong to any user."""
    pass


class SelfReferralError(ReferralError):
    """Raised when a user tries to use their own referral code."""
    pass


class ReferralCycleError(ReferralError):
    """Raised when linking would make a user their own ancestor."""
    pass


class ReferralAlreadyLinkedError(ReferralError):
    """Raised when a user already has a referrer."""
    pass


class UserAlreadyExistsError(ReferralError):
    """Raised when creating a user whose email is already registered."""
    pass


def is_duplicate_violation(exc: Exception) -> bool:
    """
    Check if exception is a unique constraint violation.

    Args:
        exc: Exception to check

    Returns:
        True for IntegrityError raised by a UNIQUE constraint
    """
    if not isinstance(exc, IntegrityError):
        return False
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate" in message
