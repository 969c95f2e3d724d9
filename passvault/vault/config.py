"""
Vault Configuration — Fixed cryptographic parameters and validated settings.

Reads settings from environment variables:
    PASSVAULT_KDF = pbkdf2 | scrypt
    PASSVAULT_KDF_ITERATIONS = <integer, PBKDF2 rounds>
    PASSVAULT_CIPHER_BACKEND = aesgcm | chacha20
    PASSVAULT_SESSION_TTL = <seconds>

Security Note:
    These parameters are not recorded alongside salts or envelopes.
    Changing any of them for an existing deployment makes every previously
    derived key (and so every stored envelope) unrecoverable.
"""
import os
import logging
from functools import lru_cache

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("passvault.vault")

DEFAULT_KDF = "pbkdf2"
DEFAULT_KDF_ITERATIONS = 100_000
DEFAULT_CIPHER_BACKEND = "aesgcm"
DEFAULT_SESSION_TTL = 3600

SALT_KEY_PREFIX = "vault_salt_"
SESSION_KEY_PREFIX = "vault_key_"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as err:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from err


class VaultConfig(BaseModel):
    """Validated vault configuration."""

    kdf: str = Field(default=DEFAULT_KDF)
    kdf_iterations: int = Field(default=DEFAULT_KDF_ITERATIONS, ge=100_000)
    cipher_backend: str = Field(default=DEFAULT_CIPHER_BACKEND)
    session_ttl: int = Field(default=DEFAULT_SESSION_TTL, ge=60)

    model_config = {"frozen": True}

    @field_validator("kdf")
    @classmethod
    def validate_kdf(cls, v: str) -> str:
        """Validate key derivation function is supported."""
        v = v.lower()
        if v not in ("pbkdf2", "scrypt"):
            raise ValueError(f"Unsupported key derivation function: {v}")
        return v

    @field_validator("cipher_backend")
    @classmethod
    def validate_cipher(cls, v: str) -> str:
        """Validate cipher backend is supported."""
        v = v.lower()
        if v not in ("aesgcm", "chacha20"):
            raise ValueError(f"Unsupported cipher backend: {v}")
        return v

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """Create VaultConfig by loading values from environment.

        Returns:
            Populated VaultConfig instance.
        """
        config = cls(
            kdf=os.environ.get("PASSVAULT_KDF", DEFAULT_KDF),
            kdf_iterations=_env_int(
                "PASSVAULT_KDF_ITERATIONS", DEFAULT_KDF_ITERATIONS
            ),
            cipher_backend=os.environ.get(
                "PASSVAULT_CIPHER_BACKEND", DEFAULT_CIPHER_BACKEND
            ),
            session_ttl=_env_int("PASSVAULT_SESSION_TTL", DEFAULT_SESSION_TTL),
        )
        logger.debug(
            "Vault config loaded: kdf=%s iterations=%d cipher=%s session_ttl=%d",
            config.kdf, config.kdf_iterations,
            config.cipher_backend, config.session_ttl,
        )
        return config


@lru_cache(maxsize=1)
def default_config() -> VaultConfig:
    """Return the process-wide configuration, loaded from environment once.

    Every component that is not handed an explicit VaultConfig uses this
    one, so keys derived anywhere in the process share one parameter set.

    Raises:
        ValueError: If a PASSVAULT_* variable holds an unsupported value.
    """
    return VaultConfig.from_env()
