"""
Login and registration flows.

Both run bcrypt in a worker thread so a slow hash never stalls the event
loop for unrelated requests.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from auth.errors import (
    AuthError,
    AuthErrorKind,
    HashFailure,
    TokenCreationError,
)
from auth.jwt import issue_token
from auth.keys import KeyMaterial
from auth.models import CredentialStore
from auth.password import PasswordPolicy, verify_password

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL_SECONDS = 3600


async def authenticate(
    store: CredentialStore,
    keys: KeyMaterial,
    *,
    password: str,
    user_id: Optional[int] = None,
    name: Optional[str] = None,
    ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS,
) -> str:
    """
    Check a password against the stored credential and return a signed token.

    A missing user and a malformed token both surface as ``INVALID_TOKEN``
    so callers cannot enumerate which names exist.
    """
    if not password:
        raise AuthError(AuthErrorKind.MISSING_CREDENTIALS)

    if user_id is not None:
        credential = await store.find_by_id(user_id)
    elif name is not None:
        credential = await store.find_by_name(name)
    else:
        raise AuthError(AuthErrorKind.MISSING_TOKEN)

    if credential is None:
        logger.info("Login rejected: no user for id=%s name=%s", user_id, name)
        raise AuthError(AuthErrorKind.INVALID_TOKEN)

    try:
        matches = await asyncio.to_thread(verify_password, password, credential.password_hash)
    except HashFailure:
        logger.exception("Password verification failed for user %s", credential.id)
        raise AuthError(AuthErrorKind.HASH_FAILURE)
    if not matches:
        logger.info("Login rejected: wrong password for user %s", credential.id)
        raise AuthError(AuthErrorKind.WRONG_CREDENTIALS)

    try:
        token = issue_token(
            {"id": credential.id, "name": credential.name}, ttl_seconds, keys
        )
    except TokenCreationError:
        logger.exception("Token creation failed for user %s", credential.id)
        raise AuthError(AuthErrorKind.TOKEN_CREATION)

    logger.info("Login: %s (%s)", credential.name, credential.id)
    return token


async def register(
    store: CredentialStore,
    policy: PasswordPolicy,
    name: str,
    password: str,
):
    """Hash ``password`` with the deployment policy and store a new user."""
    try:
        password_hash = await asyncio.to_thread(policy.hash, password)
    except HashFailure:
        logger.exception("Password hashing failed while registering %s", name)
        raise AuthError(AuthErrorKind.HASH_FAILURE)
    record = await store.insert(name, password_hash)
    logger.info("Registered user %s", name)
    return record
