"""
Tests for SessionKeyCache.

Tests cover:
- put/get/clear round-trip through memory and Redis session stores
- Namespaced, base64-encoded storage of exported key bytes
- Corrupt cached values treated as a miss
"""
import base64

import pytest

from passvault.vault.crypto import decrypt, encrypt, export_raw_key
from passvault.vault.session_cache import SessionKeyCache
from passvault.vault.stores import MemorySessionStore, RedisSessionStore


@pytest.fixture
def cache(session_store):
    return SessionKeyCache(session_store)


class TestSessionKeyCache:
    """Tests for put(), get() and clear()."""

    async def test_miss(self, cache):
        """Test nothing cached returns None."""
        assert await cache.get("u1") is None

    async def test_put_then_get(self, cache, vault_key):
        """Test a cached key decrypts data of the original."""
        envelope = encrypt("my-secret-pw", vault_key)
        await cache.put("u1", vault_key)
        restored = await cache.get("u1")
        assert restored == vault_key
        assert decrypt(envelope, restored) == "my-secret-pw"
        assert restored.usages == frozenset({"encrypt", "decrypt"})

    async def test_stored_as_base64(self, cache, session_store, vault_key):
        """Test the store holds base64 of the exported key bytes."""
        await cache.put("u1", vault_key)
        stored = await session_store.get("vault_key_u1")
        assert base64.b64decode(stored) == export_raw_key(vault_key)

    async def test_users_are_separate(self, cache, vault_key):
        """Test a key cached for one user is not returned for another."""
        await cache.put("u1", vault_key)
        assert await cache.get("u2") is None

    async def test_clear(self, cache, vault_key):
        """Test clear() removes the cached key."""
        await cache.put("u1", vault_key)
        await cache.clear("u1")
        assert await cache.get("u1") is None

    async def test_session_end_drops_key(self, session_store, vault_key):
        """Test ending the session forgets the key."""
        cache = SessionKeyCache(session_store)
        await cache.put("u1", vault_key)
        session_store.end_session()
        assert await cache.get("u1") is None

    @pytest.mark.parametrize("stored", [
        "%%% not base64 %%%",
        base64.b64encode(b"\x00" * 7).decode(),
    ])
    async def test_corrupt_value_is_a_miss(self, session_store, stored, caplog):
        """Test values that cannot be rebuilt count as nothing cached."""
        await session_store.set("vault_key_u1", stored)
        cache = SessionKeyCache(session_store)
        with caplog.at_level("WARNING", logger="passvault.vault"):
            assert await cache.get("u1") is None
        assert "u1" in caplog.text

    async def test_backend_restored(self, session_store):
        """Test the cache rebuilds keys for its configured backend."""
        from passvault.vault.crypto import derive_key
        chacha = derive_key("CorrectHorse", b"\x01" * 16, cipher_backend="chacha20")
        cache = SessionKeyCache(session_store, cipher_backend="chacha20")
        await cache.put("u1", chacha)
        restored = await cache.get("u1")
        assert restored.algorithm == "chacha20"
        assert decrypt(encrypt("x", chacha), restored) == "x"

    async def test_redis_store(self, fake_redis, vault_key):
        """Test the cache over a Redis session store."""
        cache = SessionKeyCache(RedisSessionStore(fake_redis, session_id="s1"))
        await cache.put("u1", vault_key)
        assert "passvault:s1:vault_key_u1" in fake_redis.values
        assert await cache.get("u1") == vault_key
        await cache.clear("u1")
        assert fake_redis.values == {}
