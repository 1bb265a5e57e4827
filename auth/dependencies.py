"""
FastAPI dependencies for authentication.

``get_current_claims`` is the bearer-token gate used by every protected
route.  Whatever went wrong with the token, the caller only ever sees
``Invalid token``; the real reason goes to the debug log.
"""

from __future__ import annotations

import logging

from fastapi import Depends, Request

from auth.errors import AuthError, AuthErrorKind, TokenError
from auth.jwt import Claims, verify_token
from auth.keys import KeyMaterial

logger = logging.getLogger(__name__)


def get_key_material(request: Request) -> KeyMaterial:
    """Return the signing keys initialised at startup."""
    return request.app.state.key_holder.get()


def extract_bearer(authorization: str) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` value."""
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise AuthError(AuthErrorKind.INVALID_TOKEN)
    return token


async def get_current_claims(
    request: Request,
    keys: KeyMaterial = Depends(get_key_material),
) -> Claims:
    authorization = request.headers.get("Authorization")
    if authorization is None:
        raise AuthError(AuthErrorKind.MISSING_TOKEN)
    token = extract_bearer(authorization)
    try:
        return verify_token(token, keys)
    except TokenError as exc:
        logger.debug("Token rejected: %s: %s", type(exc).__name__, exc)
        raise AuthError(AuthErrorKind.INVALID_TOKEN)
