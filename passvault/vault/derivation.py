"""
Key Derivation Service — Per-user salts and master-password unlock.

A user's salt is created lazily on the first unlock and is read back on
every unlock afterwards. It is never regenerated: a new salt would derive a
different key and strand every envelope written under the old one.

Security Note:
    The master password is only held for the duration of ``unlock()``.
    Never log it, the salt, or the derived key.
"""
import base64
import binascii
import logging
from typing import Optional

from .config import VaultConfig, SALT_KEY_PREFIX, default_config
from .crypto import SALT_SIZE, VaultKey, derive_key, generate_salt
from .stores import SaltStore

logger = logging.getLogger("passvault.vault")


class KeyDerivationService:
    """Turns a master password plus the user's salt into a VaultKey."""

    def __init__(self, salt_store: SaltStore, config: Optional[VaultConfig] = None):
        self._salts = salt_store
        self._config = config or default_config()

    @property
    def config(self) -> VaultConfig:
        return self._config

    @staticmethod
    def _salt_key(user_id: str) -> str:
        return f"{SALT_KEY_PREFIX}{user_id}"

    async def retrieve_salt(self, user_id: str) -> Optional[bytes]:
        """Return the stored salt for ``user_id``, or None if there is none.

        Raises:
            ValueError: If the stored value is not a base64 16-byte salt.
                It is reported rather than replaced.
        """
        stored = await self._salts.get(self._salt_key(user_id))
        if not stored:
            return None
        try:
            salt = base64.b64decode(stored, validate=True)
        except (binascii.Error, ValueError) as err:
            raise ValueError(
                f"Stored salt for user={user_id} is not valid base64"
            ) from err
        if len(salt) != SALT_SIZE:
            raise ValueError(
                f"Stored salt for user={user_id} has {len(salt)} bytes, "
                f"expected {SALT_SIZE}"
            )
        return salt

    async def store_salt(self, user_id: str, salt: bytes) -> None:
        """Persist ``salt`` for ``user_id``."""
        if len(salt) != SALT_SIZE:
            raise ValueError(f"salt must be exactly {SALT_SIZE} bytes")
        await self._salts.set(
            self._salt_key(user_id), base64.b64encode(salt).decode("ascii"),
        )

    async def get_or_create_salt(self, user_id: str) -> bytes:
        """Return the user's salt, creating and persisting it on first use.

        The new salt is stored before it is returned, so no key is ever
        derived from a salt that was not persisted.
        """
        salt = await self.retrieve_salt(user_id)
        if salt is not None:
            return salt
        salt = generate_salt()
        await self.store_salt(user_id, salt)
        logger.info("Created vault salt for user=%s", user_id)
        return salt

    def derive(self, master_password: str, salt: bytes) -> VaultKey:
        """Derive a key with this deployment's fixed parameters."""
        return derive_key(
            master_password,
            salt,
            iterations=self._config.kdf_iterations,
            kdf=self._config.kdf,
            cipher_backend=self._config.cipher_backend,
        )

    async def unlock(self, user_id: str, master_password: str) -> VaultKey:
        """Derive the vault key for ``user_id`` from ``master_password``.

        A wrong password still yields a key; it shows up later as every
        envelope failing to decrypt.
        """
        salt = await self.get_or_create_salt(user_id)
        key = self.derive(master_password, salt)
        logger.debug(
            "Derived vault key for user=%s (kdf=%s)", user_id, self._config.kdf,
        )
        return key
