"""
Error taxonomy for otpkit.

All errors derive from :class:`ValueError` so callers that already guard
OTP calls with ``except ValueError`` keep working. A failed verification is
not an error: it is reported as ``None`` / ``False``.
"""


class OTPError(ValueError):
    """Base class for every error raised by otpkit."""


class InvalidEncoding(OTPError):
    """Secret text does not decode under its declared encoding."""


class MissingToken(OTPError):
    """Verification was requested without a token to check."""


class ValidationError(OTPError):
    """A parameter (digits, period, counter, algorithm, ...) is out of range."""
