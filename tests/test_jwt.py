"""
Tests for HS256 token issue / verify.
"""

import base64
import json
import string

import pytest
from pydantic import ValidationError

from auth.errors import (
    ExpiredToken,
    InvalidSignature,
    MalformedToken,
    TokenCreationError,
    TokenError,
)
from auth.jwt import Claims, _sign, issue_token, verify_token
from auth.keys import KeyMaterial

KEYS = KeyMaterial.from_secret(b"Free as in Freedom")
NOW = 1_700_000_000
SUBJECT = {"id": 7, "name": "alice"}

_URLSAFE = string.ascii_letters + string.digits + "-_"


def _segment(obj) -> str:
    return base64.urlsafe_b64encode(json.dumps(obj).encode()).rstrip(b"=").decode()


def _decode(segment: str) -> dict:
    return json.loads(base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4)))


def _signed(header: dict, payload: dict, keys: KeyMaterial = KEYS) -> str:
    signing_input = _segment(header) + "." + _segment(payload)
    sig = base64.urlsafe_b64encode(_sign(keys.encoding_key, signing_input)).rstrip(b"=").decode()
    return signing_input + "." + sig


class TestIssue:
    def test_compact_three_segments(self):
        token = issue_token(SUBJECT, 3600, KEYS, now=NOW)
        header, payload, signature = token.split(".")
        assert _decode(header) == {"alg": "HS256", "typ": "JWT"}
        assert _decode(payload) == {"id": 7, "name": "alice", "exp": NOW + 3600}
        assert "=" not in token and "+" not in token and "/" not in token

    def test_missing_field(self):
        with pytest.raises(TokenCreationError):
            issue_token({"id": 7}, 3600, KEYS, now=NOW)

    def test_wrong_type(self):
        with pytest.raises(TokenCreationError):
            issue_token({"id": "seven", "name": "alice"}, 3600, KEYS, now=NOW)


class TestVerify:
    def test_round_trip(self):
        token = issue_token(SUBJECT, 3600, KEYS, now=NOW)
        claims = verify_token(token, KEYS, now=NOW + 10)
        assert claims == Claims(id=7, name="alice", exp=NOW + 3600)

    def test_round_trip_wall_clock(self):
        claims = verify_token(issue_token(SUBJECT, 60, KEYS), KEYS)
        assert (claims.id, claims.name) == (7, "alice")

    def test_already_expired(self):
        token = issue_token(SUBJECT, -1, KEYS, now=NOW)
        with pytest.raises(ExpiredToken):
            verify_token(token, KEYS, now=NOW)

    def test_expiry_boundary_has_no_leeway(self):
        token = issue_token(SUBJECT, 60, KEYS, now=NOW)
        assert verify_token(token, KEYS, now=NOW + 59).exp == NOW + 60
        with pytest.raises(ExpiredToken):
            verify_token(token, KEYS, now=NOW + 60)

    def test_every_signature_byte_is_checked(self):
        token = issue_token(SUBJECT, 3600, KEYS, now=NOW)
        head, _, signature = token.rpartition(".")
        for i, char in enumerate(signature):
            replacement = _URLSAFE[(_URLSAFE.index(char) + 1) % len(_URLSAFE)]
            tampered = head + "." + signature[:i] + replacement + signature[i + 1:]
            with pytest.raises(TokenError):
                verify_token(tampered, KEYS, now=NOW)

    def test_flipped_signature_byte(self):
        token = issue_token(SUBJECT, 3600, KEYS, now=NOW)
        head, _, signature = token.rpartition(".")
        raw = bytearray(base64.urlsafe_b64decode(signature + "="))
        raw[0] ^= 0x01
        flipped = base64.urlsafe_b64encode(bytes(raw)).rstrip(b"=").decode()
        with pytest.raises(InvalidSignature):
            verify_token(head + "." + flipped, KEYS, now=NOW)

    def test_tampered_payload(self):
        token = issue_token(SUBJECT, 3600, KEYS, now=NOW)
        header, _, signature = token.split(".")
        forged = _segment({"id": 1, "name": "admin", "exp": NOW + 3600})
        with pytest.raises(InvalidSignature):
            verify_token(f"{header}.{forged}.{signature}", KEYS, now=NOW)

    def test_wrong_key(self):
        token = issue_token(SUBJECT, 3600, KeyMaterial.from_secret(b"other"), now=NOW)
        with pytest.raises(InvalidSignature):
            verify_token(token, KEYS, now=NOW)

    def test_signature_checked_before_expiry(self):
        token = issue_token(SUBJECT, -100, KeyMaterial.from_secret(b"other"), now=NOW)
        with pytest.raises(InvalidSignature):
            verify_token(token, KEYS, now=NOW)

    @pytest.mark.parametrize(
        "token",
        ["", "abc", "a.b", "a.b.c.d", "..", "!!!.e30.sig", "e30..c2ln"],
    )
    def test_malformed_structure(self, token):
        with pytest.raises(MalformedToken):
            verify_token(token, KEYS, now=NOW)

    def test_deeply_nested_header(self):
        nested = base64.urlsafe_b64encode(b"[" * 5000).rstrip(b"=").decode()
        token = nested + "." + _segment({}) + "." + _segment("x" * 32)
        with pytest.raises(MalformedToken):
            verify_token(token, KEYS, now=NOW)

    def test_deeply_nested_signed_payload(self):
        header = _segment({"alg": "HS256", "typ": "JWT"})
        payload = base64.urlsafe_b64encode(b"[" * 5000).rstrip(b"=").decode()
        signing_input = header + "." + payload
        sig = base64.urlsafe_b64encode(_sign(KEYS.encoding_key, signing_input)).rstrip(b"=").decode()
        with pytest.raises(MalformedToken):
            verify_token(signing_input + "." + sig, KEYS, now=NOW)

    def test_unsupported_algorithm(self):
        token = _signed({"alg": "none", "typ": "JWT"}, {"id": 7, "name": "alice", "exp": NOW + 60})
        with pytest.raises(MalformedToken):
            verify_token(token, KEYS, now=NOW)

    def test_signed_payload_without_claims(self):
        token = _signed({"alg": "HS256", "typ": "JWT"}, {"user": "alice"})
        with pytest.raises(MalformedToken):
            verify_token(token, KEYS, now=NOW)

    def test_signed_payload_with_string_id(self):
        token = _signed({"alg": "HS256", "typ": "JWT"}, {"id": "7", "name": "alice", "exp": NOW + 60})
        with pytest.raises(MalformedToken):
            verify_token(token, KEYS, now=NOW)


class TestClaimsDescribe:
    def test_utc_plus_eight(self):
        claims = Claims(id=1, name="alice", exp=0)
        assert claims.describe(8) == "ID: 1\nName: alice\nExpire: 1970-01-01 08:00:00 +08:00"

    def test_utc(self):
        assert Claims(id=1, name="a", exp=0).describe().endswith("1970-01-01 00:00:00 +00:00")

    def test_negative_offset(self):
        assert Claims(id=1, name="a", exp=0).describe(-5).endswith("1969-12-31 19:00:00 -05:00")

    def test_claims_are_immutable(self):
        claims = Claims(id=1, name="a", exp=0)
        with pytest.raises(ValidationError):
            claims.exp = 10
