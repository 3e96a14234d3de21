"""
HOTP (HMAC-based One-Time Password) implementation following RFC 4226.

Also hosts the window scan used by both HOTP and TOTP verification.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Union

from otp import crypto
from otp.config import (
    DEFAULT_DIGITS,
    DEFAULT_WINDOW,
    MAX_COUNTER,
    Secret,
    to_counter,
    validate_digits,
    validate_window,
)
from otp.exceptions import MissingToken, ValidationError
from otp.utils import get_secrets, secret_bytes
from provisioning.uri import build_uri

logger = logging.getLogger(__name__)

Token = Union[str, int]


@dataclass
class HOTPDetails:
    """Everything needed to display or provision one HOTP credential."""

    code: str
    counter: int
    auth_url: str
    digits: int
    secret: Secret
    secrets: Dict[str, str]


def counter(value: int) -> str:
    """Format a HOTP counter as the 16-hex-digit string fed to the HMAC."""
    return crypto.format_counter(value)


def digest(secret: Secret, counter: int = 0) -> bytes:
    """Return the raw HMAC digest of ``counter`` under ``secret``."""
    return crypto.digest(secret.algorithm, secret_bytes(secret), to_counter(counter))


def get_token(secret: Secret, counter: int = 0, digits: int = DEFAULT_DIGITS) -> str:
    """
    Generate an HOTP code.

    Args:
        secret:  Shared secret.
        counter: Synchronisation counter value (default 0).
        digits:  Number of OTP digits (6, 7 or 8).

    Returns:
        Zero-padded OTP string.
    """
    validate_digits(digits)
    counter = to_counter(counter)
    return crypto.truncate(digest(secret, counter), digits)


def normalise_token(token: Optional[Token]) -> str:
    """Return ``token`` as a string, raising MissingToken when it is absent."""
    if token is None or token == "":
        raise MissingToken("No token has been provided.")
    if isinstance(token, bool):
        raise ValidationError("Token must be a string.")
    if isinstance(token, int):
        return str(token)
    if not isinstance(token, str):
        raise ValidationError("Token must be a string.")
    return token


def get_delta(
    secret: Secret,
    token: Optional[Token],
    counter: int = 0,
    window: int = DEFAULT_WINDOW,
    digits: int = DEFAULT_DIGITS,
    two_sided: bool = False,
) -> Optional[int]:
    """
    Find the step offset at which ``token`` was generated.

    One-sided (HOTP) windows search ``[counter, counter + window]``; two-sided
    (TOTP) windows search ``[counter - window, counter + window]``. Candidates
    are scanned in ascending order and compared in constant time.

    Args:
        secret:    Shared secret.
        token:     Token supplied by the user.
        counter:   Expected counter.
        window:    Allowed drift in steps.
        digits:    Expected OTP length.
        two_sided: Also search counters before ``counter``.

    Returns:
        ``i - counter`` for the first matching counter ``i`` (negative only for
        two-sided windows), or None if nothing in the window matches.

    Raises:
        MissingToken: If ``token`` is None or empty.
        ValidationError: On invalid digits, window or counter.
    """
    token = normalise_token(token)
    validate_digits(digits)
    validate_window(window)
    counter = to_counter(counter)
    key = secret_bytes(secret)

    if len(token) != digits:
        return None

    low = max(counter - window, 0) if two_sided else counter
    high = min(counter + window, MAX_COUNTER)
    logger.debug("Scanning counters %d..%d (two_sided=%s)", low, high, two_sided)

    for i in range(low, high + 1):
        expected = crypto.truncate(crypto.digest(secret.algorithm, key, i), digits)
        if crypto.constant_time_compare(token, expected):
            logger.debug("Token matched at delta %d", i - counter)
            return i - counter

    logger.debug("No match in window")
    return None


def verify(
    secret: Secret,
    token: Optional[Token],
    counter: int = 0,
    window: int = DEFAULT_WINDOW,
    digits: int = DEFAULT_DIGITS,
) -> bool:
    """Return True if ``token`` matches a counter in ``[counter, counter + window]``."""
    return get_delta(secret, token, counter=counter, window=window, digits=digits) is not None


def auth_url(
    secret: Secret,
    label: str,
    issuer: Optional[str] = None,
    counter: int = 0,
    digits: int = DEFAULT_DIGITS,
) -> str:
    """Build the ``otpauth://hotp/...`` provisioning URI."""
    return build_uri(
        "hotp",
        secret,
        label,
        digits=digits,
        issuer=issuer,
        counter=counter,
    )


def get(
    secret: Secret,
    label: str,
    counter: int = 0,
    digits: int = DEFAULT_DIGITS,
    issuer: Optional[str] = None,
) -> HOTPDetails:
    """Collect code, provisioning URI and secret encodings for one credential."""
    counter = to_counter(counter)
    return HOTPDetails(
        code=get_token(secret, counter=counter, digits=digits),
        counter=counter,
        auth_url=auth_url(secret, label, issuer=issuer, counter=counter, digits=digits),
        digits=digits,
        secret=secret,
        secrets=get_secrets(secret),
    )
