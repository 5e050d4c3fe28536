import logging

import pytest

from cryptocore import base32
from cryptocore.config import OtpSettings
from cryptocore.errors import InvalidArgument, InvalidKeyLength
from cryptocore.security import otp

from conftest import DeterministicRandom


RFC_SECRET = "12345678901234567890"

# RFC 4226, Appendix D
HOTP_VECTORS = [
    "755224", "287082", "359152", "969429", "338314",
    "254676", "287922", "162583", "399871", "520489",
]

# RFC 6238, Appendix B (SHA-1 rows)
TOTP_VECTORS = [
    (59, "94287082"),
    (1111111109, "07081804"),
    (1111111111, "14050471"),
    (1234567890, "89005924"),
    (2000000000, "69279037"),
    (20000000000, "65353130"),
]

SECRET = "ABCDEFGHIJ23456"
NOW = 1_700_000_000.0


@pytest.mark.parametrize("counter,expected", list(enumerate(HOTP_VECTORS)))
def test_hotp_rfc4226(counter, expected):
    assert otp.hotp(RFC_SECRET, counter) == expected


def test_hotp_accepts_bytes_secret():
    assert otp.hotp(RFC_SECRET.encode("ascii"), 1) == "287082"


@pytest.mark.parametrize("now,expected", TOTP_VECTORS)
def test_totp_rfc6238(now, expected):
    settings = OtpSettings(secret_length=None, digits=8)
    assert otp.totp(RFC_SECRET, now=now, settings=settings) == expected


def test_hotp_zero_padding():
    # truncated value 1284755224 for counter 0
    assert otp.hotp(RFC_SECRET, 0, digits=10) == "1284755224"
    assert otp.hotp(RFC_SECRET, 0, digits=24) == "0" * 14 + "1284755224"
    assert otp.hotp(RFC_SECRET, 0, digits=1) == "4"


@pytest.mark.parametrize("digits", [0, 25, -3])
def test_hotp_digits_range(digits):
    with pytest.raises(InvalidArgument) as exc:
        otp.hotp(RFC_SECRET, 0, digits=digits)
    assert exc.value.reason == "digits_out_of_range"


def test_hotp_negative_counter():
    with pytest.raises(InvalidArgument):
        otp.hotp(RFC_SECRET, -1)


def test_hotp_empty_secret():
    with pytest.raises(InvalidArgument):
        otp.hotp("", 0)


def test_dynamic_truncate_rfc_example():
    # RFC 4226 section 5.4
    digest = bytes.fromhex("1f8698690e02ca16618550ef7f19da8e945b555a")
    assert otp.dynamic_truncate(digest) == 0x50EF7F19


def test_current_counter():
    assert otp.current_counter(59) == 1
    assert otp.current_counter(60) == 2
    assert otp.current_counter(0) == 0
    assert otp.current_counter(NOW, time_step=60) == int(NOW // 60)


def test_totp_uses_current_counter():
    counter = otp.current_counter(NOW)
    assert otp.totp(SECRET, now=NOW) == otp.hotp(SECRET, counter, 6)
    assert otp.totp_at(SECRET, counter) == otp.totp(SECRET, now=NOW)


def test_totp_secret_length_enforced():
    with pytest.raises(InvalidKeyLength):
        otp.totp("TOO-SHORT", now=NOW)
    with pytest.raises(InvalidKeyLength):
        otp.check_code(RFC_SECRET, "123456", now=NOW)


def test_check_code_current_step():
    assert otp.check_code(SECRET, otp.totp(SECRET, now=NOW), now=NOW)


def test_check_code_window_tolerance():
    counter = otp.current_counter(NOW)
    ahead = otp.totp_at(SECRET, counter + 1)
    behind = otp.totp_at(SECRET, counter - 1)
    current = otp.totp_at(SECRET, counter)
    assert ahead != current and behind != current

    assert otp.check_code(SECRET, ahead, window=1, now=NOW)
    assert otp.check_code(SECRET, behind, window=1, now=NOW)
    assert not otp.check_code(SECRET, ahead, window=0, now=NOW)
    assert not otp.check_code(SECRET, behind, window=0, now=NOW)


def test_check_code_wider_window():
    counter = otp.current_counter(NOW)
    far = otp.totp_at(SECRET, counter + 3)
    assert otp.check_code(SECRET, far, window=3, now=NOW)


def test_check_code_near_epoch_skips_negative_steps():
    assert otp.check_code(SECRET, otp.totp_at(SECRET, 0), window=2, now=10)


@pytest.mark.parametrize("window", [-1, 11])
def test_check_code_window_range(window):
    with pytest.raises(InvalidArgument):
        otp.check_code(SECRET, "000000", window=window, now=NOW)


def test_check_code_rejects_garbage(caplog):
    with caplog.at_level(logging.INFO, logger="cryptocore.security.otp"):
        assert not otp.check_code(SECRET, "", now=NOW)
        assert not otp.check_code(SECRET, "not-a-code", now=NOW)
        assert not otp.check_code(SECRET, "１２３４５６", now=NOW)
    assert "otp_code_rejected" in caplog.text


def test_generate_secret():
    secret = otp.generate_secret(rng=DeterministicRandom())
    assert len(secret) == 15
    assert set(secret) <= set("ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789")
    # usable as a TOTP secret straight away
    assert len(otp.totp(secret, now=NOW)) == 6


def test_generate_secret_base32_projection():
    plain = otp.generate_secret(rng=DeterministicRandom())
    encoded = otp.generate_secret(encode_base32=True, rng=DeterministicRandom())
    assert len(encoded) % 8 == 0
    assert base32.decode_string(encoded) == plain


def test_generate_secret_uses_configured_length():
    secret = otp.generate_secret(settings=OtpSettings(secret_length=20), rng=DeterministicRandom())
    assert len(secret) == 20


def test_configured_max_digits_is_honoured():
    settings = OtpSettings(secret_length=None, digits=8, max_digits=8)
    assert otp.totp_at(RFC_SECRET, 1, settings) == otp.hotp(RFC_SECRET, 1, 8)
    with pytest.raises(InvalidArgument) as exc:
        otp.hotp(RFC_SECRET, 1, digits=10, max_digits=8)
    assert exc.value.reason == "digits_out_of_range"


def test_check_code_window_capped_at_ten():
    with pytest.raises(InvalidArgument):
        OtpSettings(max_window=500)
    far = otp.totp_at(SECRET, 1000)
    with pytest.raises(InvalidArgument) as exc:
        otp.check_code(SECRET, far, window=400, now=999 * 30)
    assert exc.value.reason == "window_out_of_range"


@pytest.mark.parametrize("secret", [None, "", b""])
def test_missing_secret_is_invalid_argument(secret):
    with pytest.raises(InvalidArgument) as exc:
        otp.totp(secret, now=NOW)
    assert exc.value.reason == "secret_empty"
    with pytest.raises(InvalidArgument):
        otp.check_code(secret, "123456", now=NOW)
