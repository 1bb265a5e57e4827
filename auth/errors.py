"""
Error taxonomy for the authentication subsystem.

Library code raises the specific exceptions below.  Only ``AuthError``
reaches the HTTP boundary, where it is rendered as a fixed
status + ``{"error": message}`` pair (see ``api.errors``).
"""

from __future__ import annotations

from enum import Enum


class HashFailure(Exception):
    """bcrypt rejected its input (bad cost, bad salt, malformed hash, …)."""


class RandomSourceFailure(HashFailure):
    """The OS random source could not supply salt bytes."""


class KeyMaterialError(Exception):
    """Signing keys missing, empty, or initialised twice with different secrets."""


class TokenError(Exception):
    """Base class for every token verification failure."""


class MalformedToken(TokenError):
    pass


class InvalidSignature(TokenError):
    pass


class ExpiredToken(TokenError):
    pass


class TokenCreationError(Exception):
    """Claims could not be serialised or signed."""


class UserExistsError(Exception):
    """A user with the same name is already stored."""


class AuthErrorKind(str, Enum):
    WRONG_CREDENTIALS = "wrong_credentials"
    MISSING_CREDENTIALS = "missing_credentials"
    TOKEN_CREATION = "token_creation"
    INVALID_TOKEN = "invalid_token"
    MISSING_TOKEN = "missing_token"
    HASH_FAILURE = "hash_failure"


_RESPONSES = {
    AuthErrorKind.WRONG_CREDENTIALS: (401, "Wrong credentials"),
    AuthErrorKind.MISSING_CREDENTIALS: (400, "Missing credentials"),
    AuthErrorKind.TOKEN_CREATION: (500, "Token creation error"),
    AuthErrorKind.INVALID_TOKEN: (400, "Invalid token"),
    AuthErrorKind.MISSING_TOKEN: (400, "Missing token"),
    AuthErrorKind.HASH_FAILURE: (500, "Password hashing error"),
}


class AuthError(Exception):
    """Caller-visible authentication outcome with a fixed status and message."""

    def __init__(self, kind: AuthErrorKind):
        self.kind = kind
        self.status_code, self.message = _RESPONSES[kind]
        super().__init__(self.message)

    @property
    def is_server_fault(self) -> bool:
        return self.status_code >= 500

    def to_dict(self) -> dict:
        return {"error": self.message}
