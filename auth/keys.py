"""
Signing key material for auth tokens.

``KeyHolder`` is created once by the application factory and initialised
from ``config.jwt_secret`` at startup.  After the first ``init`` the keys
are immutable and readers need no further locking.
"""

from __future__ import annotations

import hmac
import logging
import threading
from dataclasses import dataclass
from typing import Optional

from auth.errors import KeyMaterialError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyMaterial:
    """Symmetric HS256 keys; both halves come from the same secret."""

    encoding_key: bytes
    decoding_key: bytes

    @classmethod
    def from_secret(cls, secret: bytes) -> "KeyMaterial":
        if not secret:
            raise KeyMaterialError("signing secret must not be empty")
        secret = bytes(secret)
        return cls(encoding_key=secret, decoding_key=secret)

    def __repr__(self) -> str:
        return "KeyMaterial(<redacted>)"


class KeyHolder:
    """Exactly-once, thread-safe holder for the process ``KeyMaterial``."""

    def __init__(self):
        self._keys: Optional[KeyMaterial] = None
        self._lock = threading.Lock()

    def init(self, secret: bytes) -> KeyMaterial:
        keys = self._keys
        if keys is None:
            with self._lock:
                if self._keys is None:
                    self._keys = KeyMaterial.from_secret(secret)
                    logger.info("Signing keys initialised")
                keys = self._keys
        if not hmac.compare_digest(keys.encoding_key, bytes(secret)):
            raise KeyMaterialError("signing keys already initialised with a different secret")
        return keys

    def get(self) -> KeyMaterial:
        keys = self._keys
        if keys is None:
            raise KeyMaterialError("signing keys have not been initialised")
        return keys

    @property
    def initialised(self) -> bool:
        return self._keys is not None
