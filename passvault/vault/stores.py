"""
Vault Stores — Key/value collaborators for salts and session keys.

Two storage areas with different lifetime contracts:

- **Salt store**: durable and non-secret. A user's salt is written once and
  read on every unlock afterwards.
- **Session store**: volatile and scoped to one session. Everything in it
  disappears when the session ends and it is never persisted across
  sessions.

Both hold strings (base64 text) keyed by a namespaced user key.
"""
import os
import logging
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional, Union

import orjson

from ..data import SessionData

logger = logging.getLogger("passvault.vault")


class SaltStore(ABC):
    """Durable, non-secret key/value area for per-user salts."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        ...


class SessionStore(ABC):
    """Volatile key/value area cleared when the session ends."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    async def remove(self, key: str) -> None:
        ...


# ---------------------------------------------------------------------------
# Salt stores
# ---------------------------------------------------------------------------

class MemorySaltStore(SaltStore):
    """Salt store held in a plain dict (tests, embedding)."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._values: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        self._values[key] = value


class FileSaltStore(SaltStore):
    """Salt store persisted as a JSON object in a local file.

    The file is rewritten atomically on every ``set`` and restricted to
    owner read/write.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        data = self.path.read_bytes()
        if not data:
            return {}
        values = orjson.loads(data)
        if not isinstance(values, dict):
            raise ValueError(f"Salt store {self.path} is not a JSON object")
        return values

    def _write(self, values: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}."
        )
        try:
            with os.fdopen(fd, "wb") as fp:
                fp.write(orjson.dumps(values, option=orjson.OPT_SORT_KEYS))
            os.chmod(tmp, 0o600)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    async def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    async def set(self, key: str, value: str) -> None:
        values = self._read()
        values[key] = value
        self._write(values)
        logger.debug("Salt store updated: path=%s key=%s", self.path, key)


# ---------------------------------------------------------------------------
# Session stores
# ---------------------------------------------------------------------------

class MemorySessionStore(SessionStore):
    """Session store backed by an in-process :class:`SessionData`.

    Reads on an expired session invalidate it first, so nothing outlives
    the session's ``max_age``.
    """

    def __init__(self, session: Optional[SessionData] = None):
        self.session = session if session is not None else SessionData(new=True)

    def _live(self) -> SessionData:
        if self.session.expired and not self.session.empty:
            logger.info(
                "Session %s expired; dropping cached values",
                self.session.session_id,
            )
            self.session.invalidate()
        return self.session

    async def get(self, key: str) -> Optional[str]:
        return self._live().get(key)

    async def set(self, key: str, value: str) -> None:
        self._live()[key] = value

    async def remove(self, key: str) -> None:
        self._live().pop(key, None)

    def end_session(self) -> None:
        """Drop every value, as when the browser session closes."""
        self.session.invalidate()


class RedisSessionStore(SessionStore):
    """Session store on a Redis-compatible async client.

    Entries are written with ``SETEX`` so they expire with the session TTL.
    """

    def __init__(self, redis: Any, session_id: str, session_ttl: int = 3600):
        self._redis = redis
        self._session_id = session_id
        self._ttl = session_ttl

    def _redis_key(self, key: str) -> str:
        """Build Redis cache key."""
        return f"passvault:{self._session_id}:{key}"

    async def get(self, key: str) -> Optional[str]:
        value = await self._redis.get(self._redis_key(key))
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        return value

    async def set(self, key: str, value: str) -> None:
        await self._redis.setex(self._redis_key(key), self._ttl, value)

    async def remove(self, key: str) -> None:
        await self._redis.delete(self._redis_key(key))
