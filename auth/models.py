"""Types shared between the auth core and the credential store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class Credential:
    id: int
    name: str
    password_hash: str

    def __repr__(self) -> str:
        return f"Credential(id={self.id!r}, name={self.name!r})"


class CredentialStore(Protocol):
    async def find_by_id(self, user_id: int) -> Optional[Credential]: ...

    async def find_by_name(self, name: str) -> Optional[Credential]: ...

    async def insert(self, name: str, password_hash: str): ...
