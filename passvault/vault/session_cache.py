"""
Session Key Cache — Keeps a derived key for the rest of the session.

The key's raw bytes are exported, base64-encoded and written to a
session-scoped store so the user is not asked for the master password again
until the session ends or they log out. There is no other expiry.
"""
import base64
import binascii
import logging
from typing import Optional

from .config import SESSION_KEY_PREFIX
from .crypto import VaultKey, export_raw_key, import_raw_key
from .exceptions import KeyReconstructionError
from .stores import SessionStore

logger = logging.getLogger("passvault.vault")


class SessionKeyCache:
    """Per-user derived-key cache over a :class:`SessionStore`."""

    def __init__(self, store: SessionStore, cipher_backend: Optional[str] = None):
        self._store = store
        self._cipher_backend = cipher_backend

    @staticmethod
    def _cache_key(user_id: str) -> str:
        return f"{SESSION_KEY_PREFIX}{user_id}"

    def _reconstruct(self, encoded: str) -> VaultKey:
        try:
            raw = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError, TypeError) as err:
            raise KeyReconstructionError(
                "Cached key is not valid base64"
            ) from err
        return import_raw_key(raw, self._cipher_backend)

    async def put(self, user_id: str, key: VaultKey) -> None:
        """Export ``key`` and store it for the current session."""
        encoded = base64.b64encode(export_raw_key(key)).decode("ascii")
        await self._store.set(self._cache_key(user_id), encoded)
        logger.debug("Cached vault key for user=%s", user_id)

    async def get(self, user_id: str) -> Optional[VaultKey]:
        """Return the cached key, or None on a miss.

        A cached value that cannot be rebuilt into a key counts as a miss.
        """
        encoded = await self._store.get(self._cache_key(user_id))
        if not encoded:
            return None
        try:
            return self._reconstruct(encoded)
        except KeyReconstructionError as err:
            logger.warning(
                "Failed to retrieve key from session for user=%s: %s",
                user_id, err,
            )
            return None

    async def clear(self, user_id: str) -> None:
        """Remove the cached key (logout)."""
        await self._store.remove(self._cache_key(user_id))
        logger.debug("Cleared cached vault key for user=%s", user_id)
