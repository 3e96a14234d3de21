"""Tests for provisioning.uri."""

import pytest

from otp.config import Algorithm, Encoding, Secret
from otp.exceptions import InvalidEncoding, ValidationError
from otp.utils import secret_bytes
from provisioning.uri import AuthURI, build_uri, parse_uri

HEX_SECRET = Secret("DC0E3D9E461BC0341F6C451B848B312DE9537EB7")


# ── Builder ───────────────────────────────────────────────────────────────────

def test_build_totp_exact() -> None:
    assert build_uri("totp", HEX_SECRET, "alice") == (
        "otpauth://totp/alice?secret=3QHD3HSGDPADIH3MIUNYJCZRFXUVG7VX"
        "&algorithm=SHA1&digits=6"
    )


def test_build_hotp_exact() -> None:
    uri = build_uri("hotp", HEX_SECRET, "Issuer:bob", issuer="Issuer", counter=10, digits=8)
    assert uri == (
        "otpauth://hotp/Issuer%3Abob?secret=3QHD3HSGDPADIH3MIUNYJCZRFXUVG7VX"
        "&algorithm=SHA1&digits=8&issuer=Issuer&counter=10"
    )


def test_build_encodes_whole_label() -> None:
    uri = build_uri("totp", HEX_SECRET, "Big Corp: alice@bigco.com")
    assert uri.startswith("otpauth://totp/Big%20Corp%3A%20alice%40bigco.com?")


def test_build_issuer_uses_percent_encoding() -> None:
    assert "issuer=Big%20Corp" in build_uri("totp", HEX_SECRET, "a", issuer="Big Corp")


def test_build_algorithm_name() -> None:
    secret = Secret(HEX_SECRET.key, algorithm="SHA-512")
    assert "algorithm=SHA512" in build_uri("totp", secret, "a")


def test_build_canonicalises_secret_to_base32() -> None:
    secret = Secret("DC0E3D9E461BC0341F6FER", encoding=Encoding.ASCII)
    uri = build_uri("totp", secret, "a")
    # 22 bytes need base32 padding, which is percent-encoded in the query
    assert "secret=IRBTARJTIQ4UKNBWGFBEGMBTGQYUMNSGIVJA%3D%3D%3D%3D" in uri


def test_build_totp_period_only_when_given() -> None:
    assert "period" not in build_uri("totp", HEX_SECRET, "a")
    assert "period=30" in build_uri("totp", HEX_SECRET, "a", period=30)


def test_build_totp_never_has_counter() -> None:
    assert "counter" not in build_uri("totp", HEX_SECRET, "a", counter=5)


def test_build_hotp_requires_counter() -> None:
    with pytest.raises(ValidationError, match="counter"):
        build_uri("hotp", HEX_SECRET, "a")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"otp_type": "steam"},
        {"label": ""},
        {"digits": 5},
        {"period": 45},
    ],
)
def test_build_rejects_invalid(kwargs: dict) -> None:
    args = {"otp_type": "totp", "secret": HEX_SECRET, "label": "a", **kwargs}
    with pytest.raises(ValidationError):
        build_uri(**args)


def test_build_invalid_secret() -> None:
    with pytest.raises(InvalidEncoding):
        build_uri("totp", Secret("XYZ"), "a")


# ── Parser: valid URIs ────────────────────────────────────────────────────────

def test_parse_basic_totp() -> None:
    uri = "otpauth://totp/Example%3Aalice%40example.com?secret=JBSWY3DPEHPK3PXP&issuer=Example"
    result = parse_uri(uri)
    assert result.otp_type == "totp"
    assert result.account_name == "alice@example.com"
    assert result.issuer == "Example"
    assert result.label == "Example:alice@example.com"
    assert result.secret.key == "JBSWY3DPEHPK3PXP"
    assert result.secret.encoding is Encoding.BASE32
    assert result.secret.algorithm is Algorithm.SHA1
    assert result.digits == 6
    assert result.period == 30
    assert result.counter is None


def test_parse_totp_with_sha256() -> None:
    uri = (
        "otpauth://totp/Issuer%3Auser?secret=JBSWY3DPEHPK3PXP"
        "&algorithm=SHA256&digits=8&period=60"
    )
    result = parse_uri(uri)
    assert result.secret.algorithm is Algorithm.SHA256
    assert result.digits == 8
    assert result.period == 60


def test_parse_totp_no_issuer() -> None:
    result = parse_uri("otpauth://totp/myaccount?secret=JBSWY3DPEHPK3PXP")
    assert result.account_name == "myaccount"
    assert result.issuer == ""


def test_parse_issuer_from_label() -> None:
    result = parse_uri("otpauth://totp/GitHub%3Ajohn?secret=JBSWY3DPEHPK3PXP")
    assert result.issuer == "GitHub"
    assert result.account_name == "john"


def test_parse_hotp() -> None:
    result = parse_uri("otpauth://hotp/Example%3Aeve?secret=JBSWY3DPEHPK3PXP&counter=5")
    assert result.otp_type == "hotp"
    assert result.counter == 5
    assert result.period is None


# ── Parser: error cases ───────────────────────────────────────────────────────

def test_parse_wrong_scheme() -> None:
    with pytest.raises(ValidationError, match="scheme"):
        parse_uri("http://totp/acc?secret=ABC")


def test_parse_unknown_type() -> None:
    with pytest.raises(ValidationError, match="OTP type"):
        parse_uri("otpauth://steam/acc?secret=JBSWY3DPEHPK3PXP")


def test_parse_missing_label() -> None:
    with pytest.raises(ValidationError, match="label"):
        parse_uri("otpauth://totp/?secret=JBSWY3DPEHPK3PXP")


def test_parse_missing_secret() -> None:
    with pytest.raises(ValidationError, match="secret"):
        parse_uri("otpauth://totp/acc")


def test_parse_invalid_secret() -> None:
    with pytest.raises(InvalidEncoding):
        parse_uri("otpauth://totp/acc?secret=JBSWY3D1")


def test_parse_invalid_algorithm() -> None:
    with pytest.raises(ValidationError, match="algorithm"):
        parse_uri("otpauth://totp/acc?secret=JBSWY3DPEHPK3PXP&algorithm=MD5")


def test_parse_invalid_digits() -> None:
    with pytest.raises(ValidationError):
        parse_uri("otpauth://totp/acc?secret=JBSWY3DPEHPK3PXP&digits=5")


def test_parse_invalid_period() -> None:
    with pytest.raises(ValidationError):
        parse_uri("otpauth://totp/acc?secret=JBSWY3DPEHPK3PXP&period=abc")


def test_parse_hotp_missing_counter() -> None:
    with pytest.raises(ValidationError, match="counter"):
        parse_uri("otpauth://hotp/acc?secret=JBSWY3DPEHPK3PXP")


def test_parse_conflicting_issuer() -> None:
    with pytest.raises(ValidationError, match="Issuer"):
        parse_uri("otpauth://totp/GitHub%3Ajohn?secret=JBSWY3DPEHPK3PXP&issuer=GitLab")


# ── Build / parse ─────────────────────────────────────────────────────────────

def test_build_then_parse() -> None:
    uri = build_uri(
        "totp",
        HEX_SECRET,
        "Example:alice@example.com",
        issuer="Example",
        digits=8,
        period=60,
    )
    parsed = parse_uri(uri)
    assert isinstance(parsed, AuthURI)
    assert parsed.account_name == "alice@example.com"
    assert parsed.issuer == "Example"
    assert parsed.digits == 8
    assert parsed.period == 60
    assert secret_bytes(parsed.secret) == secret_bytes(HEX_SECRET)


def test_build_then_parse_padded_secret() -> None:
    secret = Secret("DC0E3D9E461BC0341F6FER", encoding=Encoding.ASCII)
    parsed = parse_uri(build_uri("hotp", secret, "bob", counter=3))
    assert secret_bytes(parsed.secret) == b"DC0E3D9E461BC0341F6FER"
    assert parsed.counter == 3
