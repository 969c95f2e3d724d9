"""
Tests for VaultConfig.

Tests cover:
- Defaults
- Validation of KDF, cipher backend, iteration floor and session TTL
- Loading from environment variables
- The process-wide default configuration
"""
import pytest
from pydantic import ValidationError

from passvault.vault.config import VaultConfig, default_config


class TestVaultConfig:
    """Tests for VaultConfig validation."""

    def test_defaults(self):
        """Test the fixed default parameter set."""
        config = VaultConfig()
        assert config.kdf == "pbkdf2"
        assert config.kdf_iterations == 100_000
        assert config.cipher_backend == "aesgcm"
        assert config.session_ttl == 3600

    def test_unsupported_kdf(self):
        """Test unknown KDF names are rejected."""
        with pytest.raises(ValidationError):
            VaultConfig(kdf="md5")

    def test_unsupported_cipher(self):
        """Test unknown cipher backends are rejected."""
        with pytest.raises(ValidationError):
            VaultConfig(cipher_backend="des")

    def test_iteration_floor(self):
        """Test weak iteration counts are rejected."""
        with pytest.raises(ValidationError):
            VaultConfig(kdf_iterations=1000)

    def test_session_ttl_floor(self):
        """Test too-short session TTLs are rejected."""
        with pytest.raises(ValidationError):
            VaultConfig(session_ttl=10)

    def test_names_normalised(self):
        """Test names are case-insensitive."""
        config = VaultConfig(kdf="SCRYPT", cipher_backend="ChaCha20")
        assert config.kdf == "scrypt"
        assert config.cipher_backend == "chacha20"

    def test_frozen(self):
        """Test config cannot be changed after creation."""
        config = VaultConfig()
        with pytest.raises(ValidationError):
            config.kdf_iterations = 200_000


class TestVaultConfigFromEnv:
    """Tests for VaultConfig.from_env()."""

    def test_from_env(self, monkeypatch):
        """Test values are read from environment variables."""
        monkeypatch.setenv("PASSVAULT_KDF", "scrypt")
        monkeypatch.setenv("PASSVAULT_KDF_ITERATIONS", "250000")
        monkeypatch.setenv("PASSVAULT_CIPHER_BACKEND", "chacha20")
        monkeypatch.setenv("PASSVAULT_SESSION_TTL", "900")
        config = VaultConfig.from_env()
        assert config.kdf == "scrypt"
        assert config.kdf_iterations == 250_000
        assert config.cipher_backend == "chacha20"
        assert config.session_ttl == 900

    def test_from_env_defaults(self, monkeypatch):
        """Test defaults apply when variables are unset."""
        for name in (
            "PASSVAULT_KDF", "PASSVAULT_KDF_ITERATIONS",
            "PASSVAULT_CIPHER_BACKEND", "PASSVAULT_SESSION_TTL",
        ):
            monkeypatch.delenv(name, raising=False)
        assert VaultConfig.from_env() == VaultConfig()

    def test_from_env_bad_integer(self, monkeypatch):
        """Test non-numeric iteration counts are reported."""
        monkeypatch.setenv("PASSVAULT_KDF_ITERATIONS", "lots")
        with pytest.raises(ValueError, match="PASSVAULT_KDF_ITERATIONS"):
            VaultConfig.from_env()


class TestDefaultConfig:
    """Tests for default_config()."""

    def test_reads_environment(self, monkeypatch):
        """Test the default configuration comes from PASSVAULT_* variables."""
        monkeypatch.setenv("PASSVAULT_CIPHER_BACKEND", "ChaCha20")
        default_config.cache_clear()
        assert default_config().cipher_backend == "chacha20"

    def test_loaded_once(self, monkeypatch):
        """Test the same instance is returned until the cache is cleared."""
        first = default_config()
        monkeypatch.setenv("PASSVAULT_KDF", "scrypt")
        assert default_config() is first
        default_config.cache_clear()
        assert default_config().kdf == "scrypt"

    def test_bad_backend_raises(self, monkeypatch):
        """Test an unsupported backend is rejected, not replaced."""
        monkeypatch.setenv("PASSVAULT_CIPHER_BACKEND", "rot13")
        default_config.cache_clear()
        with pytest.raises(ValidationError):
            default_config()
