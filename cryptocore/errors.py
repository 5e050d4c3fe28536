# cryptocore/errors.py
from __future__ import annotations

from enum import Enum
from typing import Any, Dict

from .audit_logging import build_audit_context, compact_reason, encode_audit_context


class ErrorKind(str, Enum):
    INVALID_ARGUMENT = "invalid_argument"
    INVALID_KEY_LENGTH = "invalid_key_length"
    AUTHENTICATION_FAILED = "authentication_failed"
    MALFORMED_PAYLOAD = "malformed_payload"
    UNSUPPORTED_ALGORITHM = "unsupported_algorithm"
    INVALID_CHARACTER = "invalid_character"
    INVALID_PADDING = "invalid_padding"


class CryptoError(ValueError):
    """
    Base error for every rejected input or failed verification.

    `reason` is a short snake_case code (stable, log-friendly).
    `context` holds non-secret details only: sizes, lengths, algorithm names.
    """

    kind: ErrorKind = ErrorKind.INVALID_ARGUMENT

    def __init__(self, reason: str, **context: Any) -> None:
        super().__init__(reason)
        self.reason = reason
        self.context: Dict[str, Any] = dict(context)

    def audit_reason(self) -> str:
        """
        Pack kind + reason + context into a single string, e.g.
          "invalid_key_length:crypt_key_wrong_size|ctx={...}"
        """
        ctx = build_audit_context(context=self.kind.value, extra=self.context)
        return compact_reason(f"{self.kind.value}:{self.reason}", encode_audit_context(ctx))


class InvalidArgument(CryptoError):
    kind = ErrorKind.INVALID_ARGUMENT


class InvalidKeyLength(CryptoError):
    kind = ErrorKind.INVALID_KEY_LENGTH


class AuthenticationFailed(CryptoError):
    kind = ErrorKind.AUTHENTICATION_FAILED


class MalformedPayload(CryptoError):
    kind = ErrorKind.MALFORMED_PAYLOAD


class UnsupportedAlgorithm(CryptoError):
    kind = ErrorKind.UNSUPPORTED_ALGORITHM


class InvalidCharacter(InvalidArgument):
    kind = ErrorKind.INVALID_CHARACTER


class InvalidPadding(CryptoError):
    kind = ErrorKind.INVALID_PADDING
