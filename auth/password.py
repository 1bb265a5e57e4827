"""
Password hashing and verification.

Uses bcrypt with an explicit 16-byte salt so both the deterministic
(fixed-salt) and the production (random-salt) paths go through the same
primitive.  The deployment picks one policy object at startup; the two
policy types expose only their own hashing path so a fixed salt can't be
used by accident where a random one is expected.
"""

from __future__ import annotations

import base64
import os
from dataclasses import dataclass

import bcrypt

from auth.errors import HashFailure, RandomSourceFailure

SALT_SIZE = 16
MAX_PASSWORD_BYTES = 72
MIN_COST = 4
MAX_COST = 31

_STD_ALPHABET = b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_BCRYPT_ALPHABET = b"./ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
_TO_BCRYPT = bytes.maketrans(_STD_ALPHABET, _BCRYPT_ALPHABET)


def _check_cost(cost: int) -> None:
    if not MIN_COST <= cost <= MAX_COST:
        raise HashFailure(f"bcrypt cost must be between {MIN_COST} and {MAX_COST}, got {cost}")


def _check_salt(salt: bytes) -> None:
    if len(salt) != SALT_SIZE:
        raise HashFailure(f"salt must be exactly {SALT_SIZE} bytes, got {len(salt)}")


def _check_password(password: str) -> None:
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        raise HashFailure(f"password longer than {MAX_PASSWORD_BYTES} bytes")


def _encode_salt(cost: int, salt: bytes) -> bytes:
    """Build the ``$2b$<cost>$<22 chars>`` salt string bcrypt expects."""
    encoded = base64.b64encode(salt).rstrip(b"=").translate(_TO_BCRYPT)
    return b"$2b$%02d$" % cost + encoded


def hash_with_salt(password: str, cost: int, salt: bytes) -> str:
    """Deterministic bcrypt hash.  Only for fixtures and legacy data."""
    _check_cost(cost)
    _check_salt(salt)
    _check_password(password)
    try:
        return bcrypt.hashpw(password.encode(), _encode_salt(cost, salt)).decode()
    except (ValueError, TypeError) as exc:
        raise HashFailure(str(exc)) from exc


def hash_with_random_salt(password: str, cost: int) -> str:
    """bcrypt hash with 16 fresh bytes from the OS CSPRNG."""
    try:
        salt = os.urandom(SALT_SIZE)
    except (OSError, NotImplementedError) as exc:
        raise RandomSourceFailure(f"random source unavailable: {exc}") from exc
    return hash_with_salt(password, cost, salt)


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a self-describing bcrypt hash."""
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        # bcrypt rejects these, so no stored hash can match
        return False
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except (ValueError, TypeError) as exc:
        raise HashFailure(f"cannot verify against stored hash: {exc}") from exc


@dataclass(frozen=True)
class FixedSaltPolicy:
    cost: int
    salt: bytes

    def __post_init__(self):
        _check_cost(self.cost)
        _check_salt(self.salt)

    def hash(self, password: str) -> str:
        return hash_with_salt(password, self.cost, self.salt)


@dataclass(frozen=True)
class RandomSaltPolicy:
    cost: int

    def __post_init__(self):
        _check_cost(self.cost)

    def hash(self, password: str) -> str:
        return hash_with_random_salt(password, self.cost)


PasswordPolicy = FixedSaltPolicy | RandomSaltPolicy


def policy_from_settings(settings) -> PasswordPolicy:
    """Build the deployment's password policy from ``config.settings``."""
    mode = settings.password_salt_mode.lower()
    if mode == "random":
        return RandomSaltPolicy(cost=settings.password_cost)
    if mode == "fixed":
        try:
            salt = bytes.fromhex(settings.password_fixed_salt)
        except ValueError as exc:
            raise HashFailure(f"password_fixed_salt is not valid hex: {exc}") from exc
        return FixedSaltPolicy(cost=settings.password_cost, salt=salt)
    raise HashFailure(f"unknown password_salt_mode {settings.password_salt_mode!r}")
