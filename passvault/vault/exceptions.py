"""
Vault Exceptions.

Hierarchy::

    VaultError
    ├── RandomSourceUnavailable   fatal, cannot produce salts or nonces
    ├── DecryptionError           recoverable per item
    │   └── MalformedEnvelope
    ├── KeyReconstructionError    treated as a session-cache miss
    └── VaultLocked               no key held for this session
"""


class VaultError(Exception):
    """Base class for all vault errors."""


class RandomSourceUnavailable(VaultError):
    """The operating system CSPRNG could not be used."""


class DecryptionError(VaultError):
    """An envelope could not be authenticated and decrypted."""


class MalformedEnvelope(DecryptionError):
    """The envelope is not valid base64 or is too short to hold nonce and tag."""


class KeyReconstructionError(VaultError):
    """Raw key bytes could not be turned back into a usable key."""


class VaultLocked(VaultError):
    """A vault operation needs a key but the session has none."""
