"""
Credential store: user lookups and inserts on top of an ``AsyncSession``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.errors import UserExistsError
from auth.models import Credential
from database.models import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserRecord:
    id: int
    name: str
    password_hash: str
    created_at: Optional[datetime]

    @property
    def credential(self) -> Credential:
        return Credential(id=self.id, name=self.name, password_hash=self.password_hash)

    def public_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


def to_record(row: User) -> UserRecord:
    return UserRecord(
        id=row.id,
        name=row.name,
        password_hash=row.password_hash,
        created_at=row.created_at,
    )


class UserStore:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def _first(self, stmt) -> Optional[Credential]:
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return to_record(row).credential if row is not None else None

    async def find_by_id(self, user_id: int) -> Optional[Credential]:
        return await self._first(select(User).where(User.id == user_id))

    async def find_by_name(self, name: str) -> Optional[Credential]:
        return await self._first(select(User).where(User.name == name))

    async def insert(self, name: str, password_hash: str) -> UserRecord:
        """Insert a user; raises ``UserExistsError`` on a duplicate name."""
        if await self.find_by_name(name) is not None:
            raise UserExistsError(name)
        user = User(name=name, password_hash=password_hash)
        self._session.add(user)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            # lost a race with a concurrent insert of the same name
            raise UserExistsError(name) from exc
        logger.debug("Stored user %s (%s)", name, user.id)
        return to_record(user)

    async def query(
        self,
        user_id: Optional[int] = None,
        name: Optional[str] = None,
    ) -> List[UserRecord]:
        """Both filters are AND-ed; with no filter nothing is returned."""
        if user_id is None and name is None:
            return []
        stmt = select(User)
        if user_id is not None:
            stmt = stmt.where(User.id == user_id)
        if name is not None:
            stmt = stmt.where(User.name == name)
        result = await self._session.execute(stmt.order_by(User.id))
        return [to_record(row) for row in result.scalars().all()]
