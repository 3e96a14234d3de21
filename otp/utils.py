"""
Secret encoding helpers for otpkit.

Converts a shared secret between its four textual encodings without losing
any of the underlying bytes.
"""

import base64
import binascii
import re
from typing import Dict, Union

from otp.config import Encoding, Secret
from otp.exceptions import InvalidEncoding

# Base32 uses the RFC 4648 alphabet with padding (the RFC 3548 variant) in
# both directions.
_BASE32_RE = re.compile(r"[A-Z2-7]*=*")
_BASE64URL_RE = re.compile(r"[A-Za-z0-9_-]*={0,2}")


# ── Base32 ────────────────────────────────────────────────────────────────────

def normalize_secret(secret: str) -> str:
    """
    Normalise a base32 secret: strip spaces, uppercase, add padding.

    Args:
        secret: Raw user-supplied secret string.

    Returns:
        Uppercase base32 string with correct padding.

    Raises:
        InvalidEncoding: If the string contains invalid base32 characters.
    """
    secret = secret.strip().upper().replace(" ", "").replace("-", "")
    if not _BASE32_RE.fullmatch(secret):
        raise InvalidEncoding("Secret contains invalid base32 characters.")
    secret = secret.rstrip("=")
    # Pad to multiple of 8
    pad = (8 - len(secret) % 8) % 8
    return secret + "=" * pad


def _decode_base32(secret: str) -> bytes:
    try:
        return base64.b32decode(normalize_secret(secret))
    except binascii.Error as exc:
        raise InvalidEncoding(f"Invalid base32 secret: {exc}") from exc


# ── Other encodings ───────────────────────────────────────────────────────────

def _decode_hex(secret: str) -> bytes:
    try:
        return base64.b16decode(secret, casefold=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidEncoding(f"Invalid hex secret: {exc}") from exc


def _decode_base64url(secret: str) -> bytes:
    if not _BASE64URL_RE.fullmatch(secret):
        raise InvalidEncoding("Secret contains invalid base64url characters.")
    secret = secret.rstrip("=")
    padded = secret + "=" * ((4 - len(secret) % 4) % 4)
    try:
        return base64.urlsafe_b64decode(padded)
    except binascii.Error as exc:
        raise InvalidEncoding(f"Invalid base64url secret: {exc}") from exc


def _decode_ascii(secret: str) -> bytes:
    # One byte per character; latin-1 keeps bytes 0x80-0xFF intact.
    try:
        return secret.encode("latin-1")
    except UnicodeEncodeError as exc:
        raise InvalidEncoding(
            "ASCII secrets may only contain characters U+0000 to U+00FF."
        ) from exc


_DECODERS = {
    Encoding.ASCII: _decode_ascii,
    Encoding.HEX: _decode_hex,
    Encoding.BASE64URL: _decode_base64url,
    Encoding.BASE32: _decode_base32,
}


# ── Public API ────────────────────────────────────────────────────────────────

def decode_secret(secret: str, encoding: Union[Encoding, str] = Encoding.BASE32) -> bytes:
    """
    Decode a secret string to raw bytes.

    Args:
        secret:   Encoded secret.
        encoding: How ``secret`` is encoded.

    Returns:
        Raw key bytes.

    Raises:
        InvalidEncoding: If ``secret`` is malformed for ``encoding``.
    """
    if not isinstance(secret, str):
        raise InvalidEncoding("Secret must be a string.")
    return _DECODERS[Encoding.parse(encoding)](secret)


def encode_secret(raw: bytes, encoding: Union[Encoding, str] = Encoding.BASE32) -> str:
    """
    Encode raw bytes in ``encoding``.

    Hex is lower-case, base64url is unpadded and base32 keeps its padding.
    """
    encoding = Encoding.parse(encoding)
    if encoding is Encoding.HEX:
        return raw.hex()
    if encoding is Encoding.BASE64URL:
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")
    if encoding is Encoding.BASE32:
        return base64.b32encode(raw).decode("ascii")
    return raw.decode("latin-1")


def secret_bytes(secret: Secret) -> bytes:
    """Decode ``secret.key`` according to ``secret.encoding``."""
    return decode_secret(secret.key, secret.encoding)


def get_secrets(secret: Secret) -> Dict[str, str]:
    """
    Return ``secret`` in every supported encoding.

    The entry for the secret's own encoding is the key exactly as supplied;
    the others are re-encodings of the same bytes.

    Raises:
        InvalidEncoding: If the key does not decode.
    """
    raw = secret_bytes(secret)
    return {
        enc.value: secret.key if enc is secret.encoding else encode_secret(raw, enc)
        for enc in Encoding
    }
