# cryptocore/audit_logging.py
from __future__ import annotations

import json
import platform
from typing import Any, Dict, Optional


def _host_identity() -> str:
    """
    Best-effort host identifier for audit logs.
    Not a security guarantee; lets an operator tell which process rejected an input.
    """
    host = platform.node() or "unknown-host"
    sysname = platform.system() or "unknown-os"
    return f"{sysname}:{host}"


def build_audit_context(
    *,
    operation: Optional[str] = None,
    algorithm: Optional[str] = None,
    key_size: Optional[int] = None,
    payload_length: Optional[int] = None,
    counter: Optional[int] = None,
    context: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Build a JSON-serializable dict for audit logs.

    Callers must only pass non-secret values (sizes, lengths, names).
    """
    d: Dict[str, Any] = {
        "host": _host_identity(),
    }

    if operation is not None:
        d["op"] = str(operation)
    if algorithm is not None:
        d["algorithm"] = str(algorithm)
    if key_size is not None:
        d["key_size"] = int(key_size)
    if payload_length is not None:
        d["payload_length"] = int(payload_length)
    if counter is not None:
        d["counter"] = int(counter)
    if context is not None:
        d["context"] = str(context)

    if extra:
        for k, v in extra.items():
            if isinstance(v, (bytes, bytearray)):
                # never log raw bytes, only how many there were
                v = f"<{len(v)} bytes>"
            d[str(k)] = v

    return d


def encode_audit_context(ctx: Dict[str, Any], max_len: int = 512) -> str:
    """
    Encode context as compact JSON string.
    If too long, truncate deterministically.
    """
    s = json.dumps(ctx, separators=(",", ":"), ensure_ascii=False, default=str)
    if len(s) <= max_len:
        return s
    return s[: max_len - 3] + "..."


def compact_reason(reason: str, audit_context_json: Optional[str] = None) -> str:
    """
    Pack reason + audit context into a single log line.

    Example:
      "authentication_failed:tag_mismatch|ctx={...}"
    """
    r = (reason or "").strip() or "unknown"
    if not audit_context_json:
        return r
    return f"{r}|ctx={audit_context_json}"


def audit_line(reason: str, **kwargs: Any) -> str:
    """Shorthand used by the services: reason + a context built from kwargs."""
    return compact_reason(reason, encode_audit_context(build_audit_context(**kwargs)))
