import json

from cryptocore.audit_logging import (
    audit_line,
    build_audit_context,
    compact_reason,
    encode_audit_context,
)
from cryptocore.errors import (
    AuthenticationFailed,
    CryptoError,
    ErrorKind,
    InvalidArgument,
    InvalidCharacter,
    InvalidKeyLength,
    MalformedPayload,
)


def test_errors_are_value_errors():
    for cls in (InvalidArgument, InvalidKeyLength, AuthenticationFailed, MalformedPayload):
        err = cls("some_reason")
        assert isinstance(err, CryptoError)
        assert isinstance(err, ValueError)
        assert str(err) == "some_reason"


def test_error_kinds():
    assert AuthenticationFailed("x").kind is ErrorKind.AUTHENTICATION_FAILED
    assert InvalidCharacter("x").kind is ErrorKind.INVALID_CHARACTER
    assert isinstance(InvalidCharacter("x"), InvalidArgument)


def test_audit_reason_packs_kind_reason_and_context():
    err = InvalidKeyLength("crypt_key_wrong_size", key_size=16, expected=32)
    line = err.audit_reason()
    reason, ctx = line.split("|ctx=", 1)
    assert reason == "invalid_key_length:crypt_key_wrong_size"
    data = json.loads(ctx)
    assert data["key_size"] == 16
    assert data["expected"] == 32
    assert data["context"] == "invalid_key_length"
    assert "host" in data


def test_raw_bytes_never_reach_the_log():
    ctx = build_audit_context(extra={"key": b"\x01" * 32})
    assert ctx["key"] == "<32 bytes>"


def test_encode_truncates():
    ctx = build_audit_context(extra={"blob": "x" * 1000})
    s = encode_audit_context(ctx, max_len=64)
    assert len(s) == 64
    assert s.endswith("...")


def test_compact_reason():
    assert compact_reason("  ") == "unknown"
    assert compact_reason("bad", None) == "bad"
    assert compact_reason("bad", "{}") == "bad|ctx={}"


def test_audit_line():
    line = audit_line("otp_code_rejected", operation="check_code", counter=5)
    reason, ctx = line.split("|ctx=", 1)
    assert reason == "otp_code_rejected"
    assert json.loads(ctx)["op"] == "check_code"
    assert json.loads(ctx)["counter"] == 5
