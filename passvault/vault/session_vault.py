"""
SessionVault — The vault of one signed-in user for one session.

Provides the public API used by the item screens:
- ``unlock(master_password)`` — reuse the session's cached key, or derive one
- ``seal(item)`` — encrypt an item's secret fields for the record store
- ``open(record)`` / ``load(records)`` — decrypt rows read from the store
- ``logout()`` — drop the key from memory and from the session cache

Security Note:
    Never log the master password, plaintext or ciphertext values. Only log
    user IDs, item IDs and counts. The derived key lives in process memory
    while the vault is unlocked (see threat model in ``__init__.py``).
"""
import logging
from typing import Any, Optional, Union
from collections.abc import Iterable, Mapping

from .config import VaultConfig, default_config
from .crypto import VaultKey
from .derivation import KeyDerivationService
from .exceptions import VaultLocked
from .items import (
    VaultItem,
    VaultRecord,
    VaultLoadResult,
    seal_item,
    open_record,
    load_items,
)
from .session_cache import SessionKeyCache
from .stores import SaltStore, SessionStore

logger = logging.getLogger("passvault.vault")


class SessionVault:
    """Vault bound to one user and one session.

    Unlock order: session key cache → master password derivation.
    """

    def __init__(
        self,
        user_id: str,
        salt_store: SaltStore,
        session_store: SessionStore,
        config: Optional[VaultConfig] = None,
    ):
        self._user_id = user_id
        self._config = config or default_config()
        self._kdf = KeyDerivationService(salt_store, self._config)
        self._cache = SessionKeyCache(
            session_store, cipher_backend=self._config.cipher_backend,
        )
        self._key: Optional[VaultKey] = None

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def locked(self) -> bool:
        return self._key is None

    def _require_key(self) -> VaultKey:
        if self._key is None:
            raise VaultLocked(f"Vault for user={self._user_id} is locked")
        return self._key

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def unlock(self, master_password: Optional[str] = None) -> bool:
        """Unlock the vault.

        The session cache is consulted first. On a miss the master password
        is required; without it this returns False so the caller can prompt.

        Args:
            master_password: Password entered by the user, if any.

        Returns:
            True if the vault is now unlocked.

        Raises:
            ValueError: If an empty master password is supplied.
        """
        if self._key is not None:
            return True
        cached = await self._cache.get(self._user_id)
        if cached is not None:
            self._key = cached
            logger.info("Vault unlocked from session for user=%s", self._user_id)
            return True
        if master_password is None:
            return False
        if not master_password:
            raise ValueError("Master password cannot be empty")
        key = await self._kdf.unlock(self._user_id, master_password)
        await self._cache.put(self._user_id, key)
        self._key = key
        logger.info("Vault unlocked for user=%s", self._user_id)
        return True

    async def seal(self, item: Union[VaultItem, Mapping[str, Any]]) -> dict[str, Any]:
        """Return the row payload for storing ``item``.

        Raises:
            VaultLocked: If the vault is locked.
        """
        key = self._require_key()
        if not isinstance(item, VaultItem):
            item = VaultItem.model_validate(item)
        return seal_item(item, key, owner_id=self._user_id)

    async def open(self, record: Union[VaultRecord, Mapping[str, Any]]) -> VaultItem:
        """Decrypt one stored row.

        Raises:
            VaultLocked: If the vault is locked.
            DecryptionError: If the row cannot be decrypted.
        """
        key = self._require_key()
        if not isinstance(record, VaultRecord):
            record = VaultRecord.model_validate(record)
        return open_record(record, key)

    async def load(
        self, records: Iterable[Union[VaultRecord, Mapping[str, Any]]]
    ) -> VaultLoadResult:
        """Decrypt every row read from the store; see :func:`load_items`."""
        key = self._require_key()
        result = await load_items(records, key)
        if result.failed:
            logger.warning(
                "Vault load for user=%s: %d item(s) could not be decrypted",
                self._user_id, len(result.failed),
            )
        return result

    async def logout(self) -> None:
        """Forget the key and remove it from the session cache."""
        self._key = None
        await self._cache.clear(self._user_id)
        logger.info("Vault locked for user=%s", self._user_id)
