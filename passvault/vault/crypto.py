"""
Vault Crypto Core — Key derivation, key handles, and field encryption.

- Key derivation: PBKDF2-HMAC-SHA256(master_password, salt 16B) → 32-byte key
  (or scrypt with fixed parameters when configured).
- Field encryption: AEAD(key, fresh 96-bit nonce) →
  base64([nonce 12B][encrypted_payload + tag 16B])

Security Note:
    Never log passwords, plaintext, ciphertext, salts or key bytes.
    Nonces are random 96-bit; collision probability negligible at
    human-paced write volumes.
"""
import base64
import hmac
import secrets
import logging
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt
from cryptography.hazmat.primitives.ciphers.aead import AESGCM, ChaCha20Poly1305

from .config import default_config
from .exceptions import (
    RandomSourceUnavailable,
    DecryptionError,
    MalformedEnvelope,
    KeyReconstructionError,
)

logger = logging.getLogger("passvault.vault")

SALT_SIZE = 16
NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16
KEY_LENGTH = 32  # AES-256

SCRYPT_N = 2 ** 14
SCRYPT_R = 8
SCRYPT_P = 1

KEY_USAGES = frozenset({"encrypt", "decrypt"})

_CIPHERS = {
    "aesgcm": AESGCM,
    "chacha20": ChaCha20Poly1305,
}

_DECRYPT_FAILED = (
    "Failed to decrypt data. Invalid encryption key or corrupted data."
)


# ---------------------------------------------------------------------------
# Randomness
# ---------------------------------------------------------------------------

def random_bytes(size: int) -> bytes:
    """Return ``size`` bytes from the operating system CSPRNG.

    Raises:
        RandomSourceUnavailable: If no secure random source can be used.
    """
    try:
        return secrets.token_bytes(size)
    except (NotImplementedError, OSError) as err:
        raise RandomSourceUnavailable(
            "Cryptographically secure random source is unavailable"
        ) from err


def generate_salt() -> bytes:
    """Generate a random 16-byte salt for key derivation."""
    return random_bytes(SALT_SIZE)


# ---------------------------------------------------------------------------
# Key handle
# ---------------------------------------------------------------------------

class VaultKey:
    """Opaque handle over a 256-bit symmetric key.

    The handle is restricted to encrypt/decrypt. It exposes no raw bytes,
    refuses to be pickled or copied, and never shows its material in
    ``repr()``. Use :func:`export_raw_key` to cross a storage boundary.
    """

    __slots__ = ("_material", "_algorithm")

    def __init__(self, material: bytes, algorithm: Optional[str] = None):
        if not isinstance(material, (bytes, bytearray)):
            raise TypeError("Key material must be bytes")
        if len(material) != KEY_LENGTH:
            raise ValueError(
                f"Key material must be exactly {KEY_LENGTH} bytes, "
                f"got {len(material)}"
            )
        algorithm = (algorithm or default_config().cipher_backend).lower()
        if algorithm not in _CIPHERS:
            raise ValueError(f"Unsupported cipher backend: {algorithm}")
        object.__setattr__(self, "_material", bytes(material))
        object.__setattr__(self, "_algorithm", algorithm)

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def usages(self) -> frozenset:
        return KEY_USAGES

    def _cipher(self, usage: str):
        """Build the AEAD primitive for one operation."""
        if usage not in KEY_USAGES:
            raise PermissionError(f"Key usage not permitted: {usage}")
        return _CIPHERS[self._algorithm](self._material)

    def __setattr__(self, name, value):
        raise AttributeError("VaultKey is immutable")

    def __reduce_ex__(self, protocol):
        raise TypeError("VaultKey cannot be serialized; use export_raw_key()")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VaultKey):
            return NotImplemented
        return (
            self._algorithm == other._algorithm
            and hmac.compare_digest(self._material, other._material)
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"<VaultKey algorithm={self._algorithm} usages=encrypt,decrypt>"


def export_raw_key(key: VaultKey) -> bytes:
    """Return the raw key bytes.

    This is the only way to read key material and exists for the
    session key cache.
    """
    if not isinstance(key, VaultKey):
        raise TypeError("export_raw_key() expects a VaultKey")
    return key._material


def import_raw_key(raw: bytes, algorithm: Optional[str] = None) -> VaultKey:
    """Rebuild a VaultKey from raw bytes produced by :func:`export_raw_key`.

    Raises:
        KeyReconstructionError: If ``raw`` is not a valid 32-byte key.
    """
    try:
        return VaultKey(raw, algorithm)
    except (TypeError, ValueError) as err:
        raise KeyReconstructionError(
            "Could not reconstruct vault key from raw bytes"
        ) from err


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def derive_key(
    master_password: str,
    salt: bytes,
    iterations: Optional[int] = None,
    kdf: Optional[str] = None,
    cipher_backend: Optional[str] = None,
) -> VaultKey:
    """Derive a 32-byte vault key from a master password.

    Args:
        master_password: User-entered password, encoded as UTF-8.
        salt: Per-user 16-byte salt.
        iterations: PBKDF2 rounds (ignored for scrypt).
        kdf: ``"pbkdf2"`` or ``"scrypt"``.
        cipher_backend: AEAD the key is bound to.

    Parameters left as None come from :func:`default_config`.

    Returns:
        VaultKey restricted to encrypt/decrypt.
    """
    if not isinstance(master_password, str):
        raise TypeError("master_password must be a str")
    if not isinstance(salt, (bytes, bytearray)) or len(salt) != SALT_SIZE:
        raise ValueError(f"salt must be exactly {SALT_SIZE} bytes")
    config = default_config()
    kdf = kdf or config.kdf
    iterations = iterations or config.kdf_iterations
    cipher_backend = cipher_backend or config.cipher_backend
    if kdf == "pbkdf2":
        func = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_LENGTH,
            salt=bytes(salt),
            iterations=iterations,
        )
    elif kdf == "scrypt":
        func = Scrypt(
            salt=bytes(salt),
            length=KEY_LENGTH,
            n=SCRYPT_N,
            r=SCRYPT_R,
            p=SCRYPT_P,
        )
    else:
        raise ValueError(f"Unsupported key derivation function: {kdf}")
    return VaultKey(func.derive(master_password.encode("utf-8")), cipher_backend)


# ---------------------------------------------------------------------------
# Field encryption
# ---------------------------------------------------------------------------

def encrypt(plaintext: str, key: VaultKey) -> str:
    """Encrypt one field into a self-contained envelope.

    Format: base64([nonce 12B][encrypted_payload + tag 16B])

    Args:
        plaintext: Text to encrypt (any Unicode, may be empty).
        key: Vault key.

    Returns:
        Envelope string.
    """
    if not isinstance(key, VaultKey):
        raise TypeError("encrypt() expects a VaultKey")
    if not isinstance(plaintext, str):
        raise TypeError("plaintext must be a str")
    cipher = key._cipher("encrypt")
    nonce = random_bytes(NONCE_SIZE)
    ct = cipher.encrypt(nonce, plaintext.encode("utf-8"), None)
    return base64.b64encode(nonce + ct).decode("ascii")


def _split_envelope(envelope: str) -> tuple[bytes, bytes]:
    """Decode an envelope into (nonce, ciphertext+tag)."""
    if not isinstance(envelope, (str, bytes)):
        raise MalformedEnvelope("Failed to decrypt data: malformed envelope")
    try:
        combined = base64.b64decode(envelope, validate=True)
    except ValueError as err:
        raise MalformedEnvelope(
            "Failed to decrypt data: malformed envelope"
        ) from err
    if len(combined) < NONCE_SIZE + TAG_SIZE:
        raise MalformedEnvelope("Failed to decrypt data: malformed envelope")
    return combined[:NONCE_SIZE], combined[NONCE_SIZE:]


def decrypt(envelope: str, key: VaultKey) -> str:
    """Decrypt an envelope produced by :func:`encrypt`.

    Raises:
        MalformedEnvelope: If the envelope cannot be decoded.
        DecryptionError: If the key is unusable or authentication fails.
    """
    nonce, ct = _split_envelope(envelope)
    if not isinstance(key, VaultKey):
        raise DecryptionError(_DECRYPT_FAILED)
    cipher = key._cipher("decrypt")
    try:
        plaintext = cipher.decrypt(nonce, ct, None)
    except InvalidTag as err:
        raise DecryptionError(_DECRYPT_FAILED) from err
    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as err:
        raise DecryptionError(_DECRYPT_FAILED) from err
