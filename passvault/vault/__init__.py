"""Vault — Client-side encryption of vault item secrets.

Security Note (Threat Model):
    The derived key is held in process memory while a vault is unlocked and,
    base64-encoded, in the session store until the session ends or the user
    logs out. Anyone who can read either can decrypt the user's items.
    Item titles, usernames and URLs are stored unencrypted.
    There is no automatic key expiry beyond the session store's lifetime.
"""

from .exceptions import (
    VaultError,
    RandomSourceUnavailable,
    DecryptionError,
    MalformedEnvelope,
    KeyReconstructionError,
    VaultLocked,
)
from .config import VaultConfig, default_config
from .crypto import (
    VaultKey,
    derive_key,
    generate_salt,
    encrypt,
    decrypt,
    export_raw_key,
    import_raw_key,
)
from .derivation import KeyDerivationService
from .session_cache import SessionKeyCache
from .stores import (
    SaltStore,
    SessionStore,
    MemorySaltStore,
    FileSaltStore,
    MemorySessionStore,
    RedisSessionStore,
)
from .items import VaultItem, VaultRecord, VaultLoadResult, seal_item, open_record, load_items
from .session_vault import SessionVault

__all__ = [
    "VaultError",
    "RandomSourceUnavailable",
    "DecryptionError",
    "MalformedEnvelope",
    "KeyReconstructionError",
    "VaultLocked",
    "VaultConfig",
    "default_config",
    "VaultKey",
    "derive_key",
    "generate_salt",
    "encrypt",
    "decrypt",
    "export_raw_key",
    "import_raw_key",
    "KeyDerivationService",
    "SessionKeyCache",
    "SaltStore",
    "SessionStore",
    "MemorySaltStore",
    "FileSaltStore",
    "MemorySessionStore",
    "RedisSessionStore",
    "VaultItem",
    "VaultRecord",
    "VaultLoadResult",
    "seal_item",
    "open_record",
    "load_items",
    "SessionVault",
]
