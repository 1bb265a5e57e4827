"""
User routes: register and look up users.

Route prefix: /users
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field, field_validator

from api.dependencies import password_policy, user_store
from auth.password import MAX_PASSWORD_BYTES, PasswordPolicy
from auth.service import register
from database.users import UserStore

router = APIRouter(tags=["users"])


class CreateUserRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode()) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


@router.post("", response_class=PlainTextResponse)
async def create_user(
    req: CreateUserRequest,
    store: UserStore = Depends(user_store),
    policy: PasswordPolicy = Depends(password_policy),
) -> str:
    await register(store, policy, req.name, req.password)
    return "ok"


@router.get("")
async def query_users(
    id: Optional[int] = None,
    name: Optional[str] = None,
    store: UserStore = Depends(user_store),
) -> List[Dict[str, Any]]:
    """Filter by id and/or name.  Password hashes are never returned."""
    records = await store.query(user_id=id, name=name)
    return [record.public_dict() for record in records]
