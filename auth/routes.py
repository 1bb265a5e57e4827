"""
Auth API routes: authorize, protected.

Route prefix: /auth
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from api.dependencies import user_store
from auth.dependencies import get_current_claims, get_key_material
from auth.jwt import Claims
from auth.keys import KeyMaterial
from auth.service import authenticate
from database.users import UserStore

router = APIRouter(tags=["auth"])


# ── Request / response schemas ─────────────────────────────────────────


class AuthPayload(BaseModel):
    id: Optional[int] = None
    name: Optional[str] = None
    password: str


class AuthBody(BaseModel):
    access_token: str
    token_type: str = "Bearer"


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post("/authorize", response_model=AuthBody)
async def authorize(
    payload: AuthPayload,
    request: Request,
    store: UserStore = Depends(user_store),
    keys: KeyMaterial = Depends(get_key_material),
) -> AuthBody:
    """Exchange id/name + password for a bearer token."""
    token = await authenticate(
        store,
        keys,
        password=payload.password,
        user_id=payload.id,
        name=payload.name,
        ttl_seconds=request.app.state.settings.token_ttl_seconds,
    )
    return AuthBody(access_token=token)


@router.get("/protected", response_class=PlainTextResponse)
async def protected(
    request: Request,
    claims: Claims = Depends(get_current_claims),
) -> str:
    offset = request.app.state.settings.claims_utc_offset_hours
    return "Welcome to the protected area :)\nYour data:\n" + claims.describe(offset)
