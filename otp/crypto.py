"""
Cryptographic primitives for otpkit.

HMAC            : cryptography (SHA-1 / SHA-256 / SHA-384 / SHA-512)
Truncation      : RFC 4226 section 5.3 dynamic truncation
Random secrets  : ``secrets`` (CSPRNG)
"""

import hmac
import secrets
import string
from typing import Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac as crypto_hmac

from otp.config import Algorithm, to_counter, validate_digits
from otp.exceptions import ValidationError

# ── Constants ────────────────────────────────────────────────────────────────

COUNTER_HEX_DIGITS = 16  # 8-byte big-endian counter
SEED_KEY_SIZE = 32
DEFAULT_SECRET_LENGTH = 40

_HASHES = {
    Algorithm.SHA1: hashes.SHA1,
    Algorithm.SHA256: hashes.SHA256,
    Algorithm.SHA384: hashes.SHA384,
    Algorithm.SHA512: hashes.SHA512,
}

_SECRET_CHARS = string.digits + string.ascii_uppercase + string.ascii_lowercase
_SECRET_SYMBOLS = "!@#$%^&*()<>?/[]{},.:;"


# ── Counter formatting ───────────────────────────────────────────────────────

def format_counter(counter: int) -> str:
    """
    Render ``counter`` as 16 zero-padded lower-case hex digits.

    Example::

        >>> format_counter(10)
        '000000000000000a'
    """
    return format(to_counter(counter), f"0{COUNTER_HEX_DIGITS}x")


def counter_bytes(counter: int) -> bytes:
    """Return the 8-byte big-endian HMAC message for ``counter``."""
    return bytes.fromhex(format_counter(counter))


# ── HMAC digest / truncation ─────────────────────────────────────────────────

def digest(algorithm: Algorithm, key: bytes, counter: int) -> bytes:
    """
    Compute HMAC(``key``, counter) with ``algorithm``.

    Args:
        algorithm: Hash algorithm.
        key:       Raw (decoded) secret bytes.
        counter:   Counter value, 0 to 2**64 - 1.

    Returns:
        Raw digest (20, 32, 48 or 64 bytes).

    Raises:
        ValidationError: On an empty key, unsupported algorithm or bad counter.
    """
    if not key:
        raise ValidationError("Secret key must not be empty.")
    hash_cls = _HASHES[Algorithm.parse(algorithm)]
    msg = counter_bytes(counter)
    h = crypto_hmac.HMAC(key, hash_cls())
    h.update(msg)
    return h.finalize()


def truncate(digest_bytes: bytes, digits: int = 6) -> str:
    """
    Dynamic truncation (RFC 4226 section 5.3).

    Bytes past the end of a short digest are read as zero.

    Args:
        digest_bytes: HMAC output.
        digits:       Token length (6, 7 or 8).

    Returns:
        Zero-padded decimal token.
    """
    validate_digits(digits)

    def at(index: int) -> int:
        return digest_bytes[index] if 0 <= index < len(digest_bytes) else 0

    offset = at(len(digest_bytes) - 1) & 0x0F
    code = (
        (at(offset) & 0x7F) << 24
        | (at(offset + 1) & 0xFF) << 16
        | (at(offset + 2) & 0xFF) << 8
        | (at(offset + 3) & 0xFF)
    )
    otp = code % (10**digits)
    return str(otp).zfill(digits)


def constant_time_compare(a: str, b: str) -> bool:
    """Return True if *a* == *b* in constant time (timing-safe)."""
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


# ── Secret generation ────────────────────────────────────────────────────────

def seed(serial: Optional[str] = None) -> str:
    """
    Generate a 20-byte HMAC-SHA-1 secret as 40 upper-case hex characters.

    ``serial`` (for example a device serial number) is MACed under a fresh
    random key, so the same serial never yields the same seed twice.
    """
    message = serial if serial else secrets.token_hex(4)
    h = crypto_hmac.HMAC(secrets.token_bytes(SEED_KEY_SIZE), hashes.SHA1())
    h.update(message.encode("utf-8"))
    return h.finalize().hex().upper()


def generate_secret_ascii(length: int = DEFAULT_SECRET_LENGTH, symbols: bool = False) -> str:
    """
    Generate a random printable secret.

    Args:
        length:  Number of characters (default 40).
        symbols: Also draw from ``!@#$%^&*()<>?/[]{},.:;``.

    Returns:
        Random ASCII string, usable with ``Encoding.ASCII``.
    """
    if isinstance(length, bool) or not isinstance(length, int) or length < 1:
        raise ValidationError("Secret length must be a positive integer.")
    alphabet = _SECRET_CHARS + (_SECRET_SYMBOLS if symbols else "")
    return "".join(secrets.choice(alphabet) for _ in range(length))
