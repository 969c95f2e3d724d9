"""Shared fixtures for the passvault test suite."""
import pytest

from passvault.vault import (
    MemorySaltStore,
    MemorySessionStore,
    VaultConfig,
    derive_key,
)
from passvault.vault.config import default_config

FIXED_SALT = bytes.fromhex("000102030405060708090a0b0c0d0e0f")


class FakeRedis:
    """Async stand-in for a Redis client (setex/get/delete only)."""

    def __init__(self):
        self.values: dict[str, bytes] = {}
        self.ttls: dict[str, int] = {}

    async def setex(self, name, ttl, value):
        if isinstance(value, str):
            value = value.encode("utf-8")
        self.values[name] = value
        self.ttls[name] = ttl

    async def get(self, name):
        return self.values.get(name)

    async def delete(self, name):
        self.values.pop(name, None)
        self.ttls.pop(name, None)


@pytest.fixture(autouse=True)
def fresh_default_config():
    """Reload PASSVAULT_* settings for every test."""
    default_config.cache_clear()
    yield
    default_config.cache_clear()


@pytest.fixture
def salt_store():
    return MemorySaltStore()


@pytest.fixture
def session_store():
    return MemorySessionStore()


@pytest.fixture
def config():
    return VaultConfig()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture(scope="session")
def vault_key():
    """Key derived from "CorrectHorse" and a fixed salt."""
    return derive_key(
        "CorrectHorse", FIXED_SALT, kdf="pbkdf2", cipher_backend="aesgcm",
    )


@pytest.fixture
def fixed_salt():
    return FIXED_SALT
