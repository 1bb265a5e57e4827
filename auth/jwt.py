"""
JWT token creation and verification.

Compact HS256 tokens: ``base64url(header).base64url(claims).base64url(sig)``
where ``sig = HMAC-SHA256(key, header + "." + claims)``.  Keys come from
``auth.keys.KeyMaterial``.

Verification order matters: structure, then signature, then payload, then
expiry.  An unverified payload is never inspected for ``exp``.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from auth.errors import (
    ExpiredToken,
    InvalidSignature,
    MalformedToken,
    TokenCreationError,
)
from auth.keys import KeyMaterial

ALGORITHM = "HS256"
_HEADER = {"alg": ALGORITHM, "typ": "JWT"}


class Claims(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    id: int
    name: str
    exp: int

    def describe(self, utc_offset_hours: int = 0) -> str:
        """Human-readable summary used by the protected endpoint."""
        offset = timedelta(hours=utc_offset_hours)
        expire = datetime.fromtimestamp(self.exp, tz=timezone(offset))
        sign = "-" if offset < timedelta(0) else "+"
        minutes = abs(utc_offset_hours) * 60
        stamp = f"{expire:%Y-%m-%d %H:%M:%S} {sign}{minutes // 60:02d}:{minutes % 60:02d}"
        return f"ID: {self.id}\nName: {self.name}\nExpire: {stamp}"


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64decode(segment: str) -> bytes:
    """Strict base64url decode; only the canonical unpadded form is accepted."""
    if not segment:
        raise MalformedToken("empty segment")
    try:
        data = base64.b64decode(
            segment + "=" * (-len(segment) % 4), altchars=b"-_", validate=True
        )
    except (binascii.Error, ValueError) as exc:
        raise MalformedToken(f"bad base64url segment: {exc}") from exc
    if _b64encode(data) != segment:
        raise MalformedToken("non-canonical base64url segment")
    return data


def _json_segment(obj: Mapping[str, Any]) -> str:
    return _b64encode(json.dumps(obj, separators=(",", ":")).encode())


def _sign(key: bytes, signing_input: str) -> bytes:
    return hmac.new(key, signing_input.encode("ascii"), hashlib.sha256).digest()


def issue_token(
    subject: Mapping[str, Any],
    ttl_seconds: int,
    keys: KeyMaterial,
    now: Optional[int] = None,
) -> str:
    """Create a signed token for ``subject`` (``id`` + ``name``) valid for ``ttl_seconds``."""
    issued_at = int(time.time()) if now is None else now
    try:
        claims = Claims(id=subject["id"], name=subject["name"], exp=issued_at + ttl_seconds)
        signing_input = _json_segment(_HEADER) + "." + _json_segment(claims.model_dump())
        signature = _sign(keys.encoding_key, signing_input)
    except (KeyError, TypeError, ValueError, ValidationError) as exc:
        raise TokenCreationError(f"cannot build token: {exc}") from exc
    return signing_input + "." + _b64encode(signature)


def verify_token(token: str, keys: KeyMaterial, now: Optional[int] = None) -> Claims:
    """
    Verify ``token`` and return its ``Claims``.

    Raises ``MalformedToken``, ``InvalidSignature`` or ``ExpiredToken``.
    """
    parts = token.split(".")
    if len(parts) != 3:
        raise MalformedToken(f"expected 3 segments, got {len(parts)}")
    header_seg, payload_seg, signature_seg = parts

    raw_header = _b64decode(header_seg)
    try:
        header = json.loads(raw_header)
    except (ValueError, RecursionError) as exc:
        raise MalformedToken(f"bad header: {exc}") from exc
    if not isinstance(header, dict) or header.get("alg") != ALGORITHM:
        raise MalformedToken("unsupported token header")
    raw_payload = _b64decode(payload_seg)
    signature = _b64decode(signature_seg)

    expected = _sign(keys.decoding_key, header_seg + "." + payload_seg)
    if not hmac.compare_digest(signature, expected):
        raise InvalidSignature("signature mismatch")

    try:
        claims = Claims.model_validate(json.loads(raw_payload))
    except (ValueError, RecursionError, ValidationError) as exc:
        raise MalformedToken(f"bad claims: {exc}") from exc

    current = int(time.time()) if now is None else now
    if claims.exp <= current:
        raise ExpiredToken(f"token expired at {claims.exp}")
    return claims
