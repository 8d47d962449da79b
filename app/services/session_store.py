"""Server-side session state keyed by an opaque token."""
import logging
import secrets
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

from app.config import settings

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """Maps session tokens to identity projections (user dicts without credentials)."""

    @abstractmethod
    async def create(self, identity: dict) -> str: ...

    @abstractmethod
    async def get(self, token: str) -> dict | None: ...

    @abstractmethod
    async def replace(self, token: str, identity: dict) -> None: ...

    @abstractmethod
    async def delete(self, token: str) -> None: ...

    @abstractmethod
    async def revoke_user(self, user_id: str) -> int: ...

    @abstractmethod
    async def refresh_user(self, user_id: str, identity: dict) -> int: ...


@dataclass
class _Entry:
    identity: dict
    expires_at: float


class InMemorySessionStore(SessionStore):
    def __init__(self, ttl_seconds: int, clock=time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _Entry] = {}

    async def create(self, identity: dict) -> str:
        self._purge_expired()
        token = secrets.token_urlsafe(32)
        self._entries[token] = _Entry(dict(identity), self._clock() + self.ttl_seconds)
        logger.info("Session created for user %s", identity.get("id"))
        return token

    async def get(self, token: str) -> dict | None:
        entry = self._entries.get(token)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[token]
            return None
        return dict(entry.identity)

    async def replace(self, token: str, identity: dict) -> None:
        entry = self._entries.get(token)
        if entry is not None:
            entry.identity = dict(identity)

    async def delete(self, token: str) -> None:
        self._entries.pop(token, None)

    async def revoke_user(self, user_id: str) -> int:
        tokens = [t for t, e in self._entries.items() if e.identity.get("id") == user_id]
        for token in tokens:
            del self._entries[token]
        if tokens:
            logger.info("Revoked %d session(s) for user %s", len(tokens), user_id)
        return len(tokens)

    async def refresh_user(self, user_id: str, identity: dict) -> int:
        entries = [e for e in self._entries.values() if e.identity.get("id") == user_id]
        for entry in entries:
            entry.identity = dict(identity)
        return len(entries)

    def _purge_expired(self) -> None:
        now = self._clock()
        for token in [t for t, e in self._entries.items() if e.expires_at <= now]:
            del self._entries[token]


session_store: SessionStore = InMemorySessionStore(settings.session_ttl_seconds)


def get_session_store() -> SessionStore:
    return session_store
