"""
TOTP (Time-based One-Time Password) implementation following RFC 6238.

A TOTP is a HOTP whose counter is derived from wall-clock time. Token
generation and verification delegate to :mod:`otp.hotp` once the counter is
known.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from time import time as _now
from typing import Dict, Optional, Union

from otp import hotp
from otp.config import (
    DEFAULT_DIGITS,
    DEFAULT_PERIOD,
    DEFAULT_WINDOW,
    MAX_COUNTER,
    Secret,
    to_epoch,
    to_seconds,
    validate_digits,
    validate_period,
)
from otp.exceptions import ValidationError
from otp.utils import get_secrets
from provisioning.uri import build_uri

logger = logging.getLogger(__name__)

Timestamp = Union[int, float]


@dataclass
class TOTPDetails:
    """Everything needed to display or provision one TOTP credential."""

    code: str
    counter: int
    period: int
    next_tick: datetime
    remaining_seconds: int
    auth_url: str
    digits: int
    secret: Secret
    secrets: Dict[str, str]


# ── Counter derivation ───────────────────────────────────────────────────────

def _counter_from_time(period: int, time: Optional[Timestamp], epoch: Timestamp) -> int:
    validate_period(period)
    seconds = to_seconds(_now() if time is None else time)
    origin = to_epoch(epoch)
    if seconds < origin:
        logger.debug("Rejected time %d before epoch %d", seconds, origin)
        raise ValidationError("Time must not precede the epoch.")
    steps = (seconds - origin) // period
    if steps > MAX_COUNTER:
        raise ValidationError("Time is too far past the epoch for a 64-bit counter.")
    return steps


def counter(
    period: int = DEFAULT_PERIOD,
    time: Optional[Timestamp] = None,
    epoch: Timestamp = 0,
) -> int:
    """
    Number of whole periods elapsed between ``epoch`` and ``time``.

    Args:
        period: Time step in seconds (15, 30 or 60).
        time:   Unix timestamp in seconds (uses the current time if None).
        epoch:  Unix time from which steps are counted (default 0).

    Returns:
        ``floor((time - epoch) / period)``.

    Raises:
        ValidationError: On an invalid period or a time before ``epoch``.
    """
    return _counter_from_time(period, time, epoch)


def next_tick(
    period: int = DEFAULT_PERIOD,
    time: Optional[Timestamp] = None,
    epoch: Timestamp = 0,
) -> datetime:
    """Return the UTC instant at which the current time step ends."""
    steps = _counter_from_time(period, time, epoch)
    tick = to_epoch(epoch) + (steps + 1) * period
    return datetime.fromtimestamp(tick, tz=timezone.utc)


def remaining_seconds(
    period: int = DEFAULT_PERIOD,
    time: Optional[Timestamp] = None,
    epoch: Timestamp = 0,
) -> int:
    """Return seconds until the current TOTP window expires."""
    seconds = to_seconds(_now() if time is None else time)
    steps = _counter_from_time(period, seconds, epoch)
    return to_epoch(epoch) + (steps + 1) * period - seconds


# ── Tokens ───────────────────────────────────────────────────────────────────

def get_token(
    secret: Secret,
    digits: int = DEFAULT_DIGITS,
    period: int = DEFAULT_PERIOD,
    time: Optional[Timestamp] = None,
    epoch: Timestamp = 0,
    counter: Optional[int] = None,
) -> str:
    """
    Generate a TOTP code.

    Args:
        secret:  Shared secret.
        digits:  Number of digits in the OTP (default 6).
        period:  Time step in seconds (default 30).
        time:    Override Unix timestamp (uses the current time if None).
        epoch:   Unix time from which steps are counted.
        counter: Explicit counter; skips the time derivation when given.

    Returns:
        OTP string, zero-padded to ``digits`` characters.
    """
    validate_digits(digits)
    if counter is None:
        counter = _counter_from_time(period, time, epoch)
    return hotp.get_token(secret, counter=counter, digits=digits)


def get_delta(
    secret: Secret,
    token: Optional[hotp.Token],
    digits: int = DEFAULT_DIGITS,
    period: int = DEFAULT_PERIOD,
    time: Optional[Timestamp] = None,
    epoch: Timestamp = 0,
    window: int = DEFAULT_WINDOW,
    counter: Optional[int] = None,
) -> Optional[int]:
    """
    Locate ``token`` within ±``window`` time steps of ``time``.

    Returns:
        0 for a match in the current step, a negative delta when the token
        came from an earlier step (client clock behind), a positive delta
        for a later step, or None when nothing in the window matches.

    Raises:
        MissingToken: If ``token`` is None or empty.
    """
    token = hotp.normalise_token(token)
    if counter is None:
        counter = _counter_from_time(period, time, epoch)
    return hotp.get_delta(
        secret,
        token,
        counter=counter,
        window=window,
        digits=digits,
        two_sided=True,
    )


def verify(
    secret: Secret,
    token: Optional[hotp.Token],
    digits: int = DEFAULT_DIGITS,
    period: int = DEFAULT_PERIOD,
    time: Optional[Timestamp] = None,
    epoch: Timestamp = 0,
    window: int = DEFAULT_WINDOW,
    counter: Optional[int] = None,
) -> bool:
    """Return True if ``token`` is valid within ±``window`` time steps."""
    delta = get_delta(
        secret,
        token,
        digits=digits,
        period=period,
        time=time,
        epoch=epoch,
        window=window,
        counter=counter,
    )
    return delta is not None


# ── Provisioning ─────────────────────────────────────────────────────────────

def auth_url(
    secret: Secret,
    label: str,
    issuer: Optional[str] = None,
    period: Optional[int] = None,
    digits: int = DEFAULT_DIGITS,
) -> str:
    """Build the ``otpauth://totp/...`` provisioning URI."""
    return build_uri("totp", secret, label, digits=digits, issuer=issuer, period=period)


def get(
    secret: Secret,
    label: str,
    digits: int = DEFAULT_DIGITS,
    period: int = DEFAULT_PERIOD,
    time: Optional[Timestamp] = None,
    epoch: Timestamp = 0,
    issuer: Optional[str] = None,
) -> TOTPDetails:
    """Collect the current code, timing and provisioning data for one credential."""
    seconds = to_seconds(_now() if time is None else time)
    steps = _counter_from_time(period, seconds, epoch)
    return TOTPDetails(
        code=hotp.get_token(secret, counter=steps, digits=digits),
        counter=steps,
        period=period,
        next_tick=next_tick(period, seconds, epoch),
        remaining_seconds=remaining_seconds(period, seconds, epoch),
        auth_url=auth_url(secret, label, issuer=issuer, period=period, digits=digits),
        digits=digits,
        secret=secret,
        secrets=get_secrets(secret),
    )
