"""Signature verification for processor webhooks.

The processor signs ``"<timestamp>." + raw_body`` with HMAC-SHA256 using the
shared webhook secret and sends ``t=<timestamp>,v1=<hex digest>`` in the
``Mux-Signature`` header. Verification must see the body bytes exactly as
received, so callers capture them before any JSON parsing.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from hashlib import sha256
import hmac

SIGNATURE_HEADER = "Mux-Signature"
SIGNATURE_SCHEME = "v1"


@dataclass(frozen=True, slots=True)
class VerificationResult:
    ok: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.ok


VERIFIED = VerificationResult(ok=True)


def _invalid(reason: str) -> VerificationResult:
    return VerificationResult(ok=False, reason=reason)


def compute_signature(raw_body: bytes, secret: str, timestamp: int) -> str:
    signed_payload = f"{timestamp}.".encode("utf-8") + raw_body
    return hmac.new(secret.encode("utf-8"), signed_payload, sha256).hexdigest()


def sign_payload(raw_body: bytes, secret: str, timestamp: int) -> str:
    """Build a signature header value for ``raw_body``."""
    return f"t={timestamp},{SIGNATURE_SCHEME}={compute_signature(raw_body, secret, timestamp)}"


def _parse_header(signature_header: str) -> tuple[int, list[str]] | None:
    timestamp: int | None = None
    signatures: list[str] = []
    for part in signature_header.split(","):
        key, sep, value = part.strip().partition("=")
        if not sep or not value:
            return None
        if key == "t":
            if not (value.isascii() and value.isdigit()):
                return None
            timestamp = int(value)
        elif key == SIGNATURE_SCHEME:
            signatures.append(value)
    if timestamp is None or not signatures:
        return None
    return timestamp, signatures


def verify(
    raw_body: bytes,
    signature_header: str | None,
    secret: str,
    *,
    tolerance_seconds: int | None = None,
    now: datetime | None = None,
) -> VerificationResult:
    """Check ``signature_header`` against ``raw_body``; never mutates anything."""
    if not signature_header or not signature_header.strip():
        return _invalid("missing_header")

    parsed = _parse_header(signature_header)
    if parsed is None:
        return _invalid("malformed_header")
    timestamp, signatures = parsed

    if tolerance_seconds is not None:
        current = (now or datetime.now(UTC)).timestamp()
        if abs(current - timestamp) > tolerance_seconds:
            return _invalid("timestamp_outside_tolerance")

    expected = compute_signature(raw_body, secret, timestamp)
    matches = [hmac.compare_digest(expected, candidate) for candidate in signatures]
    if not any(matches):
        return _invalid("signature_mismatch")
    return VERIFIED


__all__ = [
    "SIGNATURE_HEADER",
    "VerificationResult",
    "compute_signature",
    "sign_payload",
    "verify",
]
