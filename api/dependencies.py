"""
FastAPI dependencies (shared across routes).
"""

from __future__ import annotations

from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from auth.password import PasswordPolicy
from database.session import get_db_session
from database.users import UserStore


async def db_session(session: AsyncSession = Depends(get_db_session)) -> AsyncGenerator[AsyncSession, None]:
    """Re-export so routes import from a single place."""
    yield session


def user_store(session: AsyncSession = Depends(db_session)) -> UserStore:
    return UserStore(session)


def password_policy(request: Request) -> PasswordPolicy:
    """The hashing policy built once in ``create_app``."""
    return request.app.state.password_policy
