"""
otpkit core: HOTP (RFC 4226) and TOTP (RFC 6238) tokens.

Operations live in :mod:`otp.hotp` and :mod:`otp.totp`; secret encodings in
:mod:`otp.utils`; HMAC, truncation and secret generation in :mod:`otp.crypto`.
"""

import logging

from otp.config import Algorithm, Encoding, Secret
from otp.exceptions import InvalidEncoding, MissingToken, OTPError, ValidationError

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Algorithm",
    "Encoding",
    "InvalidEncoding",
    "MissingToken",
    "OTPError",
    "Secret",
    "ValidationError",
]
