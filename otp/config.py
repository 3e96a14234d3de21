"""
Shared types, defaults and boundary validation for otpkit.

Nothing in here is mutable at runtime: every operation receives its settings
as keyword arguments and falls back to the defaults below.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Union

from otp.exceptions import ValidationError

logger = logging.getLogger(__name__)


class Algorithm(str, Enum):
    """Supported HMAC hash algorithms, named as they appear in otpauth URIs."""

    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA384 = "SHA384"
    SHA512 = "SHA512"

    @classmethod
    def parse(cls, value: Union["Algorithm", str]) -> "Algorithm":
        """
        Resolve ``value`` to an :class:`Algorithm`.

        Accepts enum members and strings such as ``"SHA-1"``, ``"sha256"``
        or ``"SHA512"``.

        Raises:
            ValidationError: If the algorithm is not supported.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValidationError(f"Unsupported algorithm {value!r}.")
        try:
            return cls(value.replace("-", "").upper())
        except ValueError:
            raise ValidationError(
                f"Unsupported algorithm '{value}'. "
                "Supported: SHA1, SHA256, SHA384, SHA512."
            ) from None


class Encoding(str, Enum):
    """Textual encodings a secret key may be supplied in."""

    ASCII = "ascii"
    HEX = "hex"
    BASE64URL = "base64url"
    BASE32 = "base32"

    @classmethod
    def parse(cls, value: Union["Encoding", str]) -> "Encoding":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValidationError(
                f"Unsupported encoding '{value}'. "
                "Supported: ascii, hex, base64url, base32."
            ) from None


# ── Defaults ──────────────────────────────────────────────────────────────────

DEFAULT_DIGITS = 6
DEFAULT_PERIOD = 30
DEFAULT_WINDOW = 0
DEFAULT_ENCODING = Encoding.HEX
DEFAULT_ALGORITHM = Algorithm.SHA1

ALLOWED_DIGITS = (6, 7, 8)
ALLOWED_PERIODS = (15, 30, 60)

MAX_COUNTER = 2**64 - 1  # counters are unsigned 64-bit


# ── Secret ────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Secret:
    """
    A shared secret as supplied by the caller.

    ``encoding`` and ``algorithm`` may be given as plain strings; they are
    coerced to their enums on construction.
    """

    key: str
    encoding: Encoding = DEFAULT_ENCODING
    algorithm: Algorithm = DEFAULT_ALGORITHM

    def __post_init__(self) -> None:
        if not isinstance(self.key, str):
            raise ValidationError("Secret key must be a string.")
        object.__setattr__(self, "encoding", Encoding.parse(self.encoding))
        object.__setattr__(self, "algorithm", Algorithm.parse(self.algorithm))


# ── Validation ────────────────────────────────────────────────────────────────

def validate_digits(digits: int) -> int:
    if isinstance(digits, bool) or not isinstance(digits, int) or digits not in ALLOWED_DIGITS:
        logger.debug("Rejected digits=%r", digits)
        raise ValidationError("Digits must be 6, 7 or 8.")
    return digits


def validate_period(period: int) -> int:
    if isinstance(period, bool) or not isinstance(period, int) or period not in ALLOWED_PERIODS:
        logger.debug("Rejected period=%r", period)
        raise ValidationError("Period must be 15, 30 or 60 seconds.")
    return period


def validate_window(window: int) -> int:
    if isinstance(window, bool) or not isinstance(window, int) or window < 0:
        logger.debug("Rejected window=%r", window)
        raise ValidationError("Window must be a non-negative integer.")
    return window


def to_counter(value: Union[int, float, str]) -> int:
    """
    Convert caller input to an unsigned 64-bit counter.

    Integral floats and decimal strings are accepted; fractional, negative,
    non-finite or oversized values are rejected rather than truncated.

    Args:
        value: Counter as ``int``, ``float`` or decimal ``str``.

    Returns:
        The counter as an ``int`` in ``[0, 2**64 - 1]``.

    Raises:
        ValidationError: If the value cannot be represented exactly.
    """
    if isinstance(value, bool):
        raise ValidationError("Counter must be an integer, not a bool.")
    if isinstance(value, int):
        counter = value
    elif isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise ValidationError(f"Counter {value!r} is not a whole number.")
        counter = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text.isdigit() or not text.isascii():
            raise ValidationError(f"Counter {value!r} is not a decimal integer.")
        counter = int(text)
    else:
        raise ValidationError(f"Unsupported counter type {type(value).__name__}.")

    if counter < 0 or counter > MAX_COUNTER:
        logger.debug("Rejected out-of-range counter %d", counter)
        raise ValidationError("Counter must be between 0 and 2**64 - 1.")
    return counter


def to_seconds(value: Union[int, float], name: str = "time") -> int:
    """Floor a Unix timestamp to whole seconds, rejecting NaN and infinity."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number of seconds.")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValidationError(f"{name} must be finite.")
        return math.floor(value)
    return value


def to_epoch(value: Union[int, float]) -> int:
    """
    Convert a TOTP epoch to whole Unix seconds.

    Fractional epochs are rejected rather than floored.

    Raises:
        ValidationError: If the epoch is not a finite whole number of seconds.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError("epoch must be a number of seconds.")
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            logger.debug("Rejected epoch=%r", value)
            raise ValidationError(f"Epoch {value!r} is not a whole number of seconds.")
        return int(value)
    return value
