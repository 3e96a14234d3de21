"""
Build and parse otpauth:// URIs as defined by the Google Authenticator Key URI Format.

Reference: https://github.com/google/google-authenticator/wiki/Key-Uri-Format
"""

import logging
import unicodedata
import urllib.parse
from dataclasses import dataclass
from typing import List, Optional, Tuple

from otp.config import (
    DEFAULT_DIGITS,
    DEFAULT_PERIOD,
    Algorithm,
    Encoding,
    Secret,
    to_counter,
    validate_digits,
    validate_period,
)
from otp.exceptions import ValidationError
from otp.utils import decode_secret, encode_secret, normalize_secret, secret_bytes

logger = logging.getLogger(__name__)

SCHEME = "otpauth"
OTP_TYPES = ("hotp", "totp")


@dataclass
class AuthURI:
    """Parsed representation of an otpauth:// URI."""

    otp_type: str                  # "totp" or "hotp"
    label: str                     # full label (issuer:account or just account)
    account_name: str              # account name extracted from label
    issuer: str                    # issuer parameter (may be empty)
    secret: Secret                 # base32 secret with its algorithm
    digits: int
    period: Optional[int] = None   # TOTP only
    counter: Optional[int] = None  # HOTP only


def _sanitise_label(text: str) -> str:
    """Remove control characters and surrounding whitespace."""
    text = unicodedata.normalize("NFC", text)
    text = "".join(ch for ch in text if unicodedata.category(ch)[0] != "C")
    return text.strip()


def _check_type(otp_type: str) -> str:
    otp_type = str(otp_type).lower()
    if otp_type not in OTP_TYPES:
        raise ValidationError(f"Unknown OTP type '{otp_type}'. Expected totp or hotp.")
    return otp_type


# ── Builder ───────────────────────────────────────────────────────────────────

def build_uri(
    otp_type: str,
    secret: Secret,
    label: str,
    digits: int = DEFAULT_DIGITS,
    issuer: Optional[str] = None,
    counter: Optional[int] = None,
    period: Optional[int] = None,
) -> str:
    """
    Build an otpauth:// URI.

    The secret is re-encoded as base32 whatever its original encoding, and
    the label is percent-encoded as a whole (``Issuer:alice`` becomes
    ``Issuer%3Aalice``).

    Args:
        otp_type: ``"hotp"`` or ``"totp"``.
        secret:   Shared secret.
        label:    Account label, optionally prefixed with ``Issuer:``.
        digits:   OTP length.
        issuer:   Issuer query parameter.
        counter:  HOTP counter (required for HOTP, ignored for TOTP).
        period:   TOTP period, included only when given.

    Returns:
        The provisioning URI.

    Raises:
        ValidationError: On an unknown type, empty label or invalid parameter.
        InvalidEncoding: If the secret does not decode.
    """
    otp_type = _check_type(otp_type)
    if not label:
        raise ValidationError("Missing label for otpauth URI.")
    validate_digits(digits)

    params: List[Tuple[str, str]] = [
        ("secret", encode_secret(secret_bytes(secret), Encoding.BASE32)),
        ("algorithm", secret.algorithm.value),
        ("digits", str(digits)),
    ]
    if issuer:
        params.append(("issuer", issuer))

    if otp_type == "hotp":
        if counter is None:
            raise ValidationError("HOTP URI requires a 'counter' parameter.")
        params.append(("counter", str(to_counter(counter))))
    elif period is not None:
        params.append(("period", str(validate_period(period))))

    query = urllib.parse.urlencode(params, quote_via=urllib.parse.quote)
    label_encoded = urllib.parse.quote(label, safe="")
    return f"{SCHEME}://{otp_type}/{label_encoded}?{query}"


# ── Parser ────────────────────────────────────────────────────────────────────

def parse_uri(uri: str) -> AuthURI:
    """
    Parse and validate an ``otpauth://`` URI.

    Args:
        uri: Full otpauth URI string.

    Returns:
        Populated :class:`AuthURI` dataclass.

    Raises:
        ValidationError: If the URI is malformed or contains invalid values.
        InvalidEncoding: If the secret is not valid base32.
    """
    parsed = urllib.parse.urlparse(uri.strip())

    if parsed.scheme.lower() != SCHEME:
        raise ValidationError(f"Expected 'otpauth' scheme, got '{parsed.scheme}'.")

    otp_type = _check_type(parsed.netloc)

    # Label is the path component (strip leading slash)
    raw_label = urllib.parse.unquote(parsed.path.lstrip("/"))
    if not raw_label:
        raise ValidationError("Missing label in otpauth URI.")

    # "Issuer:AccountName"
    if ":" in raw_label:
        label_issuer, account_name = raw_label.split(":", 1)
        label_issuer = _sanitise_label(label_issuer)
    else:
        label_issuer = ""
        account_name = raw_label
    account_name = _sanitise_label(account_name)

    params = dict(urllib.parse.parse_qsl(parsed.query))

    raw_secret = params.get("secret", "")
    if not raw_secret:
        raise ValidationError("Missing 'secret' parameter in otpauth URI.")
    key = normalize_secret(raw_secret)
    decode_secret(key, Encoding.BASE32)

    issuer = _sanitise_label(params.get("issuer", label_issuer))
    if label_issuer and issuer != label_issuer:
        raise ValidationError("Issuer in label and 'issuer' parameter differ.")

    algorithm = Algorithm.parse(params.get("algorithm", Algorithm.SHA1.value))

    try:
        digits = int(params.get("digits", DEFAULT_DIGITS))
    except ValueError:
        raise ValidationError("'digits' must be an integer.") from None
    validate_digits(digits)

    period: Optional[int] = None
    counter: Optional[int] = None

    if otp_type == "totp":
        try:
            period = int(params.get("period", DEFAULT_PERIOD))
        except ValueError:
            raise ValidationError("'period' must be an integer.") from None
        validate_period(period)
    else:
        raw_counter = params.get("counter")
        if raw_counter is None:
            raise ValidationError("HOTP URI requires a 'counter' parameter.")
        counter = to_counter(raw_counter)

    full_label = f"{issuer}:{account_name}" if issuer else account_name
    logger.debug("Parsed %s URI for issuer %r", otp_type, issuer)

    return AuthURI(
        otp_type=otp_type,
        label=full_label,
        account_name=account_name,
        issuer=issuer,
        secret=Secret(key, encoding=Encoding.BASE32, algorithm=algorithm),
        digits=digits,
        period=period,
        counter=counter,
    )
